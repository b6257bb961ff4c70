"""
Initial schema: accounts, rides, bulletins, documents, maintenance,
risk assessments, notifications and support.

Revision ID: a1c3e5f70b21
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "a1c3e5f70b21"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(updated: bool = True):
    cols = [sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())]
    if updated:
        cols.append(sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()))
    return cols


def _owner_columns():
    return [
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("ride_id", sa.String(length=36), sa.ForeignKey("rides.id", ondelete="CASCADE"), nullable=False, index=True),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True, index=True),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true(), index=True),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.false(), index=True),
        *_timestamps(),
    )

    op.create_table(
        "profiles",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(length=36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
            index=True,
        ),
        sa.Column("company_name", sa.String(length=255), nullable=True),
        sa.Column("showmen_name", sa.String(length=255), nullable=True),
        sa.Column("controller_name", sa.String(length=255), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("subscription_status", sa.String(length=32), nullable=True, server_default="trial"),
        sa.Column("subscription_plan", sa.String(length=64), nullable=True),
        sa.Column("trial_started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("trial_ends_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("enable_document_versioning", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    op.create_table(
        "ride_categories",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False, unique=True, index=True),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(updated=False),
    )

    op.create_table(
        "rides",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column(
            "category_id",
            sa.String(length=36),
            sa.ForeignKey("ride_categories.id", ondelete="RESTRICT"),
            nullable=False,
            index=True,
        ),
        sa.Column("ride_name", sa.String(length=255), nullable=False),
        sa.Column("manufacturer", sa.String(length=255), nullable=True),
        sa.Column("serial_number", sa.String(length=128), nullable=True),
        sa.Column("year_manufactured", sa.Integer(), nullable=True),
        sa.Column("owner_name", sa.String(length=255), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_rides_user_name", "rides", ["user_id", "ride_name"])

    op.create_table(
        "technical_bulletins",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "category_id",
            sa.String(length=36),
            sa.ForeignKey("ride_categories.id", ondelete="RESTRICT"),
            nullable=False,
            index=True,
        ),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("bulletin_number", sa.String(length=128), nullable=True, unique=True),
        sa.Column(
            "priority",
            sa.Enum("high", "medium", "low", name="bulletin_priority_enum", native_enum=False),
            nullable=False,
            server_default="medium",
        ),
        sa.Column("issue_date", sa.Date(), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index("ix_technical_bulletins_issue_date", "technical_bulletins", ["issue_date"])

    op.create_table(
        "documents",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("ride_id", sa.String(length=36), sa.ForeignKey("rides.id", ondelete="CASCADE"), nullable=True, index=True),
        sa.Column("document_name", sa.String(length=255), nullable=False),
        sa.Column("document_type", sa.String(length=128), nullable=False),
        sa.Column("file_path", sa.String(length=1024), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("mime_type", sa.String(length=255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("expires_at", sa.Date(), nullable=True),
        sa.Column("is_global", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("version_number", sa.String(length=32), nullable=False, server_default="1.0"),
        sa.Column("version_notes", sa.Text(), nullable=True),
        sa.Column("is_latest_version", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "replaced_document_id",
            sa.String(length=36),
            sa.ForeignKey("documents.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), index=True),
    )
    op.create_index("ix_documents_user_expires", "documents", ["user_id", "expires_at"])
    op.create_index(
        "uq_documents_latest_per_ride",
        "documents",
        ["user_id", "ride_id", "document_name"],
        unique=True,
        postgresql_where=sa.text("is_latest_version AND ride_id IS NOT NULL"),
        sqlite_where=sa.text("is_latest_version = 1 AND ride_id IS NOT NULL"),
    )
    op.create_index(
        "uq_documents_latest_global",
        "documents",
        ["user_id", "document_name"],
        unique=True,
        postgresql_where=sa.text("is_latest_version AND ride_id IS NULL"),
        sqlite_where=sa.text("is_latest_version = 1 AND ride_id IS NULL"),
    )

    op.create_table(
        "maintenance_records",
        sa.Column("id", sa.String(length=36), primary_key=True),
        *_owner_columns(),
        sa.Column("maintenance_date", sa.Date(), nullable=False),
        sa.Column("maintenance_type", sa.String(length=128), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("performed_by", sa.String(length=255), nullable=True),
        sa.Column("cost", sa.Float(), nullable=True),
        sa.Column("parts_replaced", sa.Text(), nullable=True),
        sa.Column("next_maintenance_due", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("cost IS NULL OR cost >= 0", name="ck_maintenance_records_cost_nonneg"),
    )
    op.create_index("ix_maintenance_records_user_next_due", "maintenance_records", ["user_id", "next_maintenance_due"])

    op.create_table(
        "inspection_checks",
        sa.Column("id", sa.String(length=36), primary_key=True),
        *_owner_columns(),
        sa.Column("check_date", sa.Date(), nullable=False),
        sa.Column(
            "check_frequency",
            sa.Enum("daily", "weekly", "monthly", "yearly", name="check_frequency_enum", native_enum=False),
            nullable=False,
            server_default="daily",
        ),
        sa.Column("inspector_name", sa.String(length=255), nullable=False),
        sa.Column(
            "status",
            sa.Enum("pending", "completed", "overdue", name="check_status_enum", native_enum=False),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("weather_conditions", sa.String(length=255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index("ix_inspection_checks_user_date", "inspection_checks", ["user_id", "check_date"])

    op.create_table(
        "inspection_schedules",
        sa.Column("id", sa.String(length=36), primary_key=True),
        *_owner_columns(),
        sa.Column("inspection_name", sa.String(length=255), nullable=False),
        sa.Column("inspection_type", sa.String(length=128), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("advance_notice_days", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_notification_sent", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("advance_notice_days >= 0", name="ck_inspection_schedules_notice_nonneg"),
    )
    op.create_index("ix_inspection_schedules_user_due", "inspection_schedules", ["user_id", "due_date"])

    op.create_table(
        "ndt_schedules",
        sa.Column("id", sa.String(length=36), primary_key=True),
        *_owner_columns(),
        sa.Column("schedule_name", sa.String(length=255), nullable=False),
        sa.Column("component_description", sa.Text(), nullable=False),
        sa.Column("ndt_method", sa.String(length=64), nullable=False),
        sa.Column("frequency_months", sa.Integer(), nullable=False, server_default="12"),
        sa.Column("last_inspection_date", sa.Date(), nullable=True),
        sa.Column("next_inspection_due", sa.Date(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("frequency_months > 0", name="ck_ndt_schedules_frequency_pos"),
    )
    op.create_index("ix_ndt_schedules_user_due", "ndt_schedules", ["user_id", "next_inspection_due"])

    op.create_table(
        "risk_assessments",
        sa.Column("id", sa.String(length=36), primary_key=True),
        *_owner_columns(),
        sa.Column("assessment_date", sa.Date(), nullable=False),
        sa.Column("assessor_name", sa.String(length=255), nullable=False),
        sa.Column("overall_status", sa.String(length=32), nullable=False, server_default="draft"),
        sa.Column("review_date", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "risk_assessment_items",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "risk_assessment_id",
            sa.String(length=36),
            sa.ForeignKey("risk_assessments.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("hazard_description", sa.Text(), nullable=False),
        sa.Column("who_at_risk", sa.String(length=255), nullable=False),
        sa.Column("existing_controls", sa.Text(), nullable=True),
        sa.Column("additional_actions", sa.Text(), nullable=True),
        sa.Column("severity", sa.String(length=16), nullable=False),
        sa.Column("likelihood", sa.String(length=16), nullable=False),
        sa.Column("risk_level", sa.String(length=16), nullable=False),
        sa.Column("action_owner", sa.String(length=255), nullable=True),
        sa.Column("target_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="open"),
        sa.Column("sort_order", sa.Integer(), nullable=True),
        *_timestamps(updated=False),
    )

    op.create_table(
        "email_logs",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), index=True),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("recipient", sa.String(length=255), nullable=False),
        sa.Column("subject", sa.String(length=255), nullable=False),
        sa.Column("template_key", sa.String(length=128), nullable=False, index=True),
        sa.Column(
            "status",
            sa.Enum("QUEUED", "SENT", "FAILED", "SKIPPED_NO_PROVIDER", name="email_status_enum", native_enum=False),
            nullable=False,
            index=True,
        ),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("context_json", sa.JSON(), nullable=True),
        sa.Column("correlation_id", sa.String(length=64), nullable=True, index=True),
    )
    op.create_index("ix_email_logs_user_created", "email_logs", ["user_id", "created_at"])
    op.create_index("ix_email_logs_user_status", "email_logs", ["user_id", "status"])
    op.create_index("ix_email_logs_user_template", "email_logs", ["user_id", "template_key"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.String(length=16), nullable=False, server_default="info"),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("related_table", sa.String(length=64), nullable=True),
        sa.Column("related_id", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), index=True),
    )
    op.create_index("ix_notifications_user_created", "notifications", ["user_id", "created_at"])
    op.create_index("ix_notifications_user_read", "notifications", ["user_id", "is_read"])

    op.create_table(
        "support_messages",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("subject", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("priority", sa.String(length=16), nullable=False, server_default="normal"),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="open", index=True),
        sa.Column("admin_response", sa.Text(), nullable=True),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("responded_by", sa.String(length=36), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), index=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "feature_requests",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("feature_title", sa.String(length=255), nullable=False),
        sa.Column("feature_description", sa.Text(), nullable=False),
        sa.Column("use_case", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        *_timestamps(updated=False),
    )


def downgrade() -> None:
    for table in (
        "feature_requests",
        "support_messages",
        "notifications",
        "email_logs",
        "risk_assessment_items",
        "risk_assessments",
        "ndt_schedules",
        "inspection_schedules",
        "inspection_checks",
        "maintenance_records",
        "documents",
        "technical_bulletins",
        "rides",
        "ride_categories",
        "profiles",
        "users",
    ):
        op.drop_table(table)

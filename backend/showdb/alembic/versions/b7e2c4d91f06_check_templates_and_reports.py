"""
Check templates with per-item results, NDT reports and annual inspection
reports.

Revision ID: b7e2c4d91f06
Revises: a1c3e5f70b21
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "b7e2c4d91f06"
down_revision: Union[str, Sequence[str], None] = "a1c3e5f70b21"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at():
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())


def _updated_at():
    return sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())


def _owner_columns():
    return [
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("ride_id", sa.String(length=36), sa.ForeignKey("rides.id", ondelete="CASCADE"), nullable=False, index=True),
    ]


def upgrade() -> None:
    op.create_table(
        "check_templates",
        sa.Column("id", sa.String(length=36), primary_key=True),
        *_owner_columns(),
        sa.Column("template_name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "check_frequency",
            sa.Enum("daily", "weekly", "monthly", "yearly", name="check_frequency_enum", native_enum=False),
            nullable=False,
            server_default="daily",
        ),
        sa.Column("custom_interval_days", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint(
            "custom_interval_days IS NULL OR custom_interval_days > 0",
            name="ck_check_templates_interval_pos",
        ),
    )
    op.create_index("ix_check_templates_ride_frequency", "check_templates", ["ride_id", "check_frequency"])

    op.create_table(
        "check_template_items",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "template_id",
            sa.String(length=36),
            sa.ForeignKey("check_templates.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("check_item_text", sa.Text(), nullable=False),
        sa.Column("category", sa.String(length=128), nullable=True),
        sa.Column("is_required", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        _created_at(),
    )

    with op.batch_alter_table("inspection_checks") as batch:
        batch.add_column(sa.Column("template_id", sa.String(length=36), nullable=True))
        batch.add_column(sa.Column("environment_notes", sa.Text(), nullable=True))
        batch.add_column(sa.Column("compliance_officer", sa.String(length=255), nullable=True))
        batch.add_column(sa.Column("signature_data", sa.Text(), nullable=True))
        batch.create_foreign_key(
            "fk_inspection_checks_template_id",
            "check_templates",
            ["template_id"],
            ["id"],
            ondelete="SET NULL",
        )
        batch.create_index("ix_inspection_checks_template_id", ["template_id"])

    op.create_table(
        "check_results",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "check_id",
            sa.String(length=36),
            sa.ForeignKey("inspection_checks.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column(
            "template_item_id",
            sa.String(length=36),
            sa.ForeignKey("check_template_items.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("check_item_text", sa.Text(), nullable=False),
        sa.Column("category", sa.String(length=128), nullable=True),
        sa.Column("is_required", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_checked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("notes", sa.Text(), nullable=True),
        _created_at(),
    )

    op.create_table(
        "ndt_reports",
        sa.Column("id", sa.String(length=36), primary_key=True),
        *_owner_columns(),
        sa.Column(
            "ndt_schedule_id",
            sa.String(length=36),
            sa.ForeignKey("ndt_schedules.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("document_id", sa.String(length=36), sa.ForeignKey("documents.id", ondelete="SET NULL"), nullable=True),
        sa.Column("inspection_date", sa.Date(), nullable=False),
        sa.Column("inspector_name", sa.String(length=255), nullable=False),
        sa.Column("inspection_company", sa.String(length=255), nullable=True),
        sa.Column("ndt_method", sa.String(length=64), nullable=False),
        sa.Column("component_tested", sa.Text(), nullable=False),
        sa.Column("test_results", sa.Text(), nullable=False),
        sa.Column("defects_found", sa.Text(), nullable=True),
        sa.Column("recommendations", sa.Text(), nullable=True),
        sa.Column("certificate_number", sa.String(length=128), nullable=True),
        sa.Column("next_inspection_due", sa.Date(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_ndt_reports_schedule_date", "ndt_reports", ["ndt_schedule_id", "inspection_date"])

    op.create_table(
        "annual_inspection_reports",
        sa.Column("id", sa.String(length=36), primary_key=True),
        *_owner_columns(),
        sa.Column("document_id", sa.String(length=36), sa.ForeignKey("documents.id", ondelete="SET NULL"), nullable=True),
        sa.Column("inspection_year", sa.Integer(), nullable=False),
        sa.Column("inspection_date", sa.Date(), nullable=False),
        sa.Column("inspector_name", sa.String(length=255), nullable=False),
        sa.Column("inspection_company", sa.String(length=255), nullable=False),
        sa.Column("certificate_number", sa.String(length=128), nullable=True),
        sa.Column(
            "inspection_status",
            sa.Enum("pass", "fail", "conditional", name="annual_inspection_status_enum", native_enum=False),
            nullable=False,
            server_default="pass",
        ),
        sa.Column("conditions_notes", sa.Text(), nullable=True),
        sa.Column("recommendations", sa.Text(), nullable=True),
        sa.Column("next_inspection_due", sa.Date(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint("inspection_year >= 1900", name="ck_annual_inspection_reports_year"),
    )
    op.create_index(
        "ix_annual_inspection_reports_ride_year",
        "annual_inspection_reports",
        ["ride_id", "inspection_year"],
    )


def downgrade() -> None:
    op.drop_table("annual_inspection_reports")
    op.drop_table("ndt_reports")
    op.drop_table("check_results")

    with op.batch_alter_table("inspection_checks") as batch:
        batch.drop_index("ix_inspection_checks_template_id")
        batch.drop_constraint("fk_inspection_checks_template_id", type_="foreignkey")
        batch.drop_column("signature_data")
        batch.drop_column("compliance_officer")
        batch.drop_column("environment_notes")
        batch.drop_column("template_id")

    op.drop_table("check_template_items")
    op.drop_table("check_templates")

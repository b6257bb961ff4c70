# backend/showdb/apps/maintenance/models.py
#
# ORM models for ride upkeep:
# - MaintenanceRecord      : work done on a ride, optionally with the next due date.
# - CheckTemplate / Item   : per-ride checklists, one active per ride and frequency.
# - InspectionCheck        : a completed (or pending) daily/weekly/monthly check.
# - CheckResult            : one ticked/unticked line of a submitted check.
# - InspectionSchedule     : a dated inspection with an advance notice window.
# - NDTSchedule            : recurring non-destructive testing per component.
# - NDTReport              : the outcome of one NDT test against a schedule.
# - AnnualInspectionReport : the yearly independent inspection per ride.
#
# Every row belongs to one account (user_id) and one ride (ride_id); template
# items and check results hang off their parent row.

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum as SAEnum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from showdb.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _values(enum_cls):
    return [member.value for member in enum_cls]


class CheckStatusEnum(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    OVERDUE = "overdue"


class CheckFrequencyEnum(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class AnnualInspectionStatusEnum(str, enum.Enum):
    PASS = "pass"
    FAIL = "fail"
    CONDITIONAL = "conditional"


class MaintenanceRecord(Base):
    __tablename__ = "maintenance_records"
    __table_args__ = (
        Index("ix_maintenance_records_user_next_due", "user_id", "next_maintenance_due"),
        CheckConstraint("cost IS NULL OR cost >= 0", name="ck_maintenance_records_cost_nonneg"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    ride_id = Column(String(36), ForeignKey("rides.id", ondelete="CASCADE"), nullable=False, index=True)

    maintenance_date = Column(Date, nullable=False, default=date.today)
    maintenance_type = Column(String(128), nullable=False)
    description = Column(Text, nullable=False)
    performed_by = Column(String(255), nullable=True)
    cost = Column(Float, nullable=True)
    parts_replaced = Column(Text, nullable=True)
    next_maintenance_due = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)


class CheckTemplate(Base):
    __tablename__ = "check_templates"
    __table_args__ = (
        Index("ix_check_templates_ride_frequency", "ride_id", "check_frequency"),
        CheckConstraint(
            "custom_interval_days IS NULL OR custom_interval_days > 0",
            name="ck_check_templates_interval_pos",
        ),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    ride_id = Column(String(36), ForeignKey("rides.id", ondelete="CASCADE"), nullable=False, index=True)

    template_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    check_frequency = Column(
        SAEnum(CheckFrequencyEnum, name="check_frequency_enum", native_enum=False, values_callable=_values),
        nullable=False,
        default=CheckFrequencyEnum.DAILY,
    )
    custom_interval_days = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    is_archived = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    items = relationship(
        "CheckTemplateItem",
        back_populates="template",
        cascade="all, delete-orphan",
        order_by="CheckTemplateItem.sort_order",
        lazy="selectin",
    )


class CheckTemplateItem(Base):
    __tablename__ = "check_template_items"

    id = Column(String(36), primary_key=True, default=_uuid)
    template_id = Column(
        String(36),
        ForeignKey("check_templates.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    check_item_text = Column(Text, nullable=False)
    category = Column(String(128), nullable=True)
    is_required = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    template = relationship("CheckTemplate", back_populates="items")


class InspectionCheck(Base):
    __tablename__ = "inspection_checks"
    __table_args__ = (
        Index("ix_inspection_checks_user_date", "user_id", "check_date"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    ride_id = Column(String(36), ForeignKey("rides.id", ondelete="CASCADE"), nullable=False, index=True)
    template_id = Column(
        String(36),
        ForeignKey("check_templates.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    check_date = Column(Date, nullable=False, default=date.today)
    check_frequency = Column(
        SAEnum(CheckFrequencyEnum, name="check_frequency_enum", native_enum=False, values_callable=_values),
        nullable=False,
        default=CheckFrequencyEnum.DAILY,
    )
    inspector_name = Column(String(255), nullable=False)
    status = Column(
        SAEnum(CheckStatusEnum, name="check_status_enum", native_enum=False, values_callable=_values),
        nullable=False,
        default=CheckStatusEnum.PENDING,
    )
    weather_conditions = Column(String(255), nullable=True)
    environment_notes = Column(Text, nullable=True)
    compliance_officer = Column(String(255), nullable=True)
    signature_data = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    results = relationship(
        "CheckResult",
        back_populates="check",
        cascade="all, delete-orphan",
        order_by="CheckResult.sort_order",
        lazy="selectin",
    )


class CheckResult(Base):
    """
    One checklist line as it was answered.

    Item text, category and the required flag are copied from the template
    item at submission time, so editing or deleting the template later
    leaves past checks readable.
    """

    __tablename__ = "check_results"

    id = Column(String(36), primary_key=True, default=_uuid)
    check_id = Column(
        String(36),
        ForeignKey("inspection_checks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    template_item_id = Column(
        String(36),
        ForeignKey("check_template_items.id", ondelete="SET NULL"),
        nullable=True,
    )

    check_item_text = Column(Text, nullable=False)
    category = Column(String(128), nullable=True)
    is_required = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)
    is_checked = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    check = relationship("InspectionCheck", back_populates="results")


class InspectionSchedule(Base):
    __tablename__ = "inspection_schedules"
    __table_args__ = (
        Index("ix_inspection_schedules_user_due", "user_id", "due_date"),
        CheckConstraint("advance_notice_days >= 0", name="ck_inspection_schedules_notice_nonneg"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    ride_id = Column(String(36), ForeignKey("rides.id", ondelete="CASCADE"), nullable=False, index=True)

    inspection_name = Column(String(255), nullable=False)
    inspection_type = Column(String(128), nullable=False)
    due_date = Column(Date, nullable=False)
    advance_notice_days = Column(Integer, nullable=False, default=30)
    is_active = Column(Boolean, nullable=False, default=True)
    last_notification_sent = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)


class NDTSchedule(Base):
    __tablename__ = "ndt_schedules"
    __table_args__ = (
        Index("ix_ndt_schedules_user_due", "user_id", "next_inspection_due"),
        CheckConstraint("frequency_months > 0", name="ck_ndt_schedules_frequency_pos"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    ride_id = Column(String(36), ForeignKey("rides.id", ondelete="CASCADE"), nullable=False, index=True)

    schedule_name = Column(String(255), nullable=False)
    component_description = Column(Text, nullable=False)
    ndt_method = Column(String(64), nullable=False)
    frequency_months = Column(Integer, nullable=False, default=12)
    last_inspection_date = Column(Date, nullable=True)
    next_inspection_due = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)


class NDTReport(Base):
    __tablename__ = "ndt_reports"
    __table_args__ = (
        Index("ix_ndt_reports_schedule_date", "ndt_schedule_id", "inspection_date"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    ride_id = Column(String(36), ForeignKey("rides.id", ondelete="CASCADE"), nullable=False, index=True)
    ndt_schedule_id = Column(
        String(36),
        ForeignKey("ndt_schedules.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    document_id = Column(String(36), ForeignKey("documents.id", ondelete="SET NULL"), nullable=True)

    inspection_date = Column(Date, nullable=False)
    inspector_name = Column(String(255), nullable=False)
    inspection_company = Column(String(255), nullable=True)
    ndt_method = Column(String(64), nullable=False)
    component_tested = Column(Text, nullable=False)
    test_results = Column(Text, nullable=False)
    defects_found = Column(Text, nullable=True)
    recommendations = Column(Text, nullable=True)
    certificate_number = Column(String(128), nullable=True)
    next_inspection_due = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class AnnualInspectionReport(Base):
    __tablename__ = "annual_inspection_reports"
    __table_args__ = (
        Index("ix_annual_inspection_reports_ride_year", "ride_id", "inspection_year"),
        CheckConstraint("inspection_year >= 1900", name="ck_annual_inspection_reports_year"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    ride_id = Column(String(36), ForeignKey("rides.id", ondelete="CASCADE"), nullable=False, index=True)
    document_id = Column(String(36), ForeignKey("documents.id", ondelete="SET NULL"), nullable=True)

    inspection_year = Column(Integer, nullable=False)
    inspection_date = Column(Date, nullable=False)
    inspector_name = Column(String(255), nullable=False)
    inspection_company = Column(String(255), nullable=False)
    certificate_number = Column(String(128), nullable=True)
    inspection_status = Column(
        SAEnum(
            AnnualInspectionStatusEnum,
            name="annual_inspection_status_enum",
            native_enum=False,
            values_callable=_values,
        ),
        nullable=False,
        default=AnnualInspectionStatusEnum.PASS,
    )
    conditions_notes = Column(Text, nullable=True)
    recommendations = Column(Text, nullable=True)
    next_inspection_due = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

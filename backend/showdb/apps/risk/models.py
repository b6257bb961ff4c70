from __future__ import annotations

import enum
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from showdb.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RiskLevel(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AssessmentStatus(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    REVIEW_DUE = "review_due"
    ARCHIVED = "archived"


class RiskAssessment(Base):
    __tablename__ = "risk_assessments"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    ride_id = Column(String(36), ForeignKey("rides.id", ondelete="CASCADE"), nullable=False, index=True)

    assessment_date = Column(Date, nullable=False, default=date.today)
    assessor_name = Column(String(255), nullable=False)
    overall_status = Column(String(32), nullable=False, default=AssessmentStatus.DRAFT.value)
    review_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    items = relationship(
        "RiskAssessmentItem",
        back_populates="assessment",
        cascade="all, delete-orphan",
        order_by="RiskAssessmentItem.sort_order",
        lazy="selectin",
    )


class RiskAssessmentItem(Base):
    __tablename__ = "risk_assessment_items"

    id = Column(String(36), primary_key=True, default=_uuid)
    risk_assessment_id = Column(
        String(36),
        ForeignKey("risk_assessments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    hazard_description = Column(Text, nullable=False)
    who_at_risk = Column(String(255), nullable=False)
    existing_controls = Column(Text, nullable=True)
    additional_actions = Column(Text, nullable=True)
    severity = Column(String(16), nullable=False)
    likelihood = Column(String(16), nullable=False)
    risk_level = Column(String(16), nullable=False)
    action_owner = Column(String(255), nullable=True)
    target_date = Column(Date, nullable=True)
    status = Column(String(32), nullable=False, default="open")
    sort_order = Column(Integer, nullable=True, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    assessment = relationship("RiskAssessment", back_populates="items")

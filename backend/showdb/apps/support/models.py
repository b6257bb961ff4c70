# backend/showdb/apps/support/models.py
#
# Support inbox rows. Requests for new ride types and document types are
# mail-only; feature requests are also kept so admins can triage them.

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, String, Text

from showdb.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SupportPriority(str, enum.Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class SupportStatus(str, enum.Enum):
    OPEN = "open"
    RESPONDED = "responded"
    CLOSED = "closed"


class SupportMessage(Base):
    __tablename__ = "support_messages"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    subject = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    priority = Column(String(16), nullable=False, default=SupportPriority.NORMAL.value)
    status = Column(String(16), nullable=False, default=SupportStatus.OPEN.value, index=True)
    admin_response = Column(Text, nullable=True)
    responded_at = Column(DateTime(timezone=True), nullable=True)
    responded_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)


class FeatureRequest(Base):
    __tablename__ = "feature_requests"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    feature_title = Column(String(255), nullable=False)
    feature_description = Column(Text, nullable=False)
    use_case = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="pending")

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

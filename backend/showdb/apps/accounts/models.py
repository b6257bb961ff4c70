# backend/showdb/apps/accounts/models.py
"""
Account models.

- User    : identity mirrored from the authentication provider.
- Profile : company details, plan status and per-account toggles.

Login, signup and password handling live with the authentication
provider; this service only ever sees the user id carried in the token.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from showdb.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SubscriptionStatus(str, enum.Enum):
    """Flat plan status string stored on the profile."""
    TRIAL = "trial"
    BASIC = "basic"
    ADVANCED = "advanced"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True, index=True)
    is_admin = Column(Boolean, nullable=False, default=False, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    profile = relationship(
        "Profile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="joined",
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email}>"


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )

    company_name = Column(String(255), nullable=True)
    showmen_name = Column(String(255), nullable=True)
    controller_name = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)

    # Mirrored from the billing provider; see SubscriptionStatus for values.
    subscription_status = Column(String(32), nullable=True, default=SubscriptionStatus.TRIAL.value)
    subscription_plan = Column(String(64), nullable=True)
    trial_started_at = Column(DateTime(timezone=True), nullable=True)
    trial_ends_at = Column(DateTime(timezone=True), nullable=True)

    enable_document_versioning = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    user = relationship("User", back_populates="profile")

    def __repr__(self) -> str:
        return f"<Profile user_id={self.user_id} status={self.subscription_status}>"

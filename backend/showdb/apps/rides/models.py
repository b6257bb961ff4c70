# backend/showdb/apps/rides/models.py
#
# ORM models for the ride inventory:
# - RideCategory : admin-managed lookup shared by every account.
# - Ride         : a ride owned by one account, exactly one category.
#
# Deleting a ride removes everything scoped to it (documents, maintenance,
# checks, schedules, risk assessments): the child tables carry ON DELETE
# CASCADE FKs and services.delete_ride also removes them explicitly, since
# SQLite does not enforce FKs unless asked to.

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from showdb.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RideCategory(Base):
    __tablename__ = "ride_categories"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    rides = relationship("Ride", back_populates="category", lazy="select")

    def __repr__(self) -> str:
        return f"<RideCategory id={self.id} name={self.name}>"


class Ride(Base):
    __tablename__ = "rides"
    __table_args__ = (
        Index("ix_rides_user_name", "user_id", "ride_name"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(
        String(36),
        ForeignKey("ride_categories.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    ride_name = Column(String(255), nullable=False)
    manufacturer = Column(String(255), nullable=True)
    serial_number = Column(String(128), nullable=True)
    year_manufactured = Column(Integer, nullable=True)
    owner_name = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    category = relationship("RideCategory", back_populates="rides", lazy="joined")

    @property
    def category_name(self) -> str:
        return self.category.name if self.category is not None else ""

    def __repr__(self) -> str:
        return f"<Ride id={self.id} name={self.ride_name}>"

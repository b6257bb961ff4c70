# backend/showdb/apps/documents/models.py
#
# Compliance documents (certificates, insurance, manuals, reports).
#
# A document with ride_id NULL is global: it applies to every ride of the
# account. Documents are versioned by (user_id, ride_id, document_name):
# each upload of a new version inserts a row and the previous latest row
# is flipped to is_latest_version = false in the same transaction.
#
# The "one latest row per key" rule is enforced by two partial unique
# indexes. Two are needed because NULL ride_ids never collide inside a
# plain unique index.

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import relationship

from showdb.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


DEFAULT_VERSION = "1.0"


class Document(Base):
    __tablename__ = "documents"
    __table_args__ = (
        Index(
            "uq_documents_latest_per_ride",
            "user_id",
            "ride_id",
            "document_name",
            unique=True,
            postgresql_where=text("is_latest_version AND ride_id IS NOT NULL"),
            sqlite_where=text("is_latest_version = 1 AND ride_id IS NOT NULL"),
        ),
        Index(
            "uq_documents_latest_global",
            "user_id",
            "document_name",
            unique=True,
            postgresql_where=text("is_latest_version AND ride_id IS NULL"),
            sqlite_where=text("is_latest_version = 1 AND ride_id IS NULL"),
        ),
        Index("ix_documents_user_expires", "user_id", "expires_at"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    ride_id = Column(String(36), ForeignKey("rides.id", ondelete="CASCADE"), nullable=True, index=True)

    document_name = Column(String(255), nullable=False)
    document_type = Column(String(128), nullable=False)
    file_path = Column(String(1024), nullable=False)
    file_size = Column(Integer, nullable=True)
    mime_type = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    expires_at = Column(Date, nullable=True)
    is_global = Column(Boolean, nullable=False, default=False)

    version_number = Column(String(32), nullable=False, default=DEFAULT_VERSION)
    version_notes = Column(Text, nullable=True)
    is_latest_version = Column(Boolean, nullable=False, default=True)
    replaced_document_id = Column(
        String(36),
        ForeignKey("documents.id", ondelete="SET NULL"),
        nullable=True,
    )

    uploaded_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)

    ride = relationship("Ride", lazy="joined")

    @property
    def ride_name(self) -> str | None:
        return self.ride.ride_name if self.ride is not None else None

    def __repr__(self) -> str:
        return (
            f"<Document id={self.id} name={self.document_name} "
            f"version={self.version_number} latest={self.is_latest_version}>"
        )

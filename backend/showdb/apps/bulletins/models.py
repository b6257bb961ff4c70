from __future__ import annotations

import enum
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import Column, Date, DateTime, Enum as SAEnum, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from showdb.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BulletinPriority(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TechnicalBulletin(Base):
    """
    Manufacturer / industry bulletin shared by every account.

    There is no link table to rides: which rides a bulletin concerns is
    worked out by the matcher whenever bulletins are listed.
    """

    __tablename__ = "technical_bulletins"
    __table_args__ = (
        Index("ix_technical_bulletins_issue_date", "issue_date"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    category_id = Column(
        String(36),
        ForeignKey("ride_categories.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    title = Column(String(500), nullable=False)
    content = Column(Text, nullable=True)
    # Upsert key for the scraper.
    bulletin_number = Column(String(128), nullable=True, unique=True)
    priority = Column(
        SAEnum(
            BulletinPriority,
            name="bulletin_priority_enum",
            native_enum=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=BulletinPriority.MEDIUM,
    )
    issue_date = Column(Date, nullable=True, default=date.today)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    category = relationship("RideCategory", lazy="joined")

    @property
    def category_name(self) -> str | None:
        return self.category.name if self.category is not None else None

    def __repr__(self) -> str:
        return f"<TechnicalBulletin id={self.id} number={self.bulletin_number}>"

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .models import BulletinPriority


class TechnicalBulletinBase(BaseModel):
    category_id: str
    title: str = Field(..., min_length=1, max_length=500)
    content: Optional[str] = None
    bulletin_number: Optional[str] = Field(None, max_length=128)
    priority: BulletinPriority = BulletinPriority.MEDIUM
    issue_date: Optional[date] = None


class TechnicalBulletinCreate(TechnicalBulletinBase):
    pass


class TechnicalBulletinUpdate(BaseModel):
    category_id: Optional[str] = None
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    content: Optional[str] = None
    bulletin_number: Optional[str] = Field(None, max_length=128)
    priority: Optional[BulletinPriority] = None
    issue_date: Optional[date] = None


class TechnicalBulletinRead(TechnicalBulletinBase):
    id: str
    category_name: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ScrapedBulletin(BaseModel):
    """A bulletin parsed from a source page, before it is stored."""
    title: str
    content: str
    bulletin_number: str
    priority: BulletinPriority = BulletinPriority.MEDIUM
    source: str


class ScrapeResult(BaseModel):
    success: bool
    message: str
    bulletins: List[TechnicalBulletinRead] = []

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from .models import EmailStatus


class EmailLogRead(BaseModel):
    id: str
    user_id: Optional[str] = None
    created_at: datetime
    sent_at: Optional[datetime] = None
    recipient: str
    subject: str
    template_key: str
    status: EmailStatus
    error: Optional[str] = None
    context_json: Optional[dict] = None
    correlation_id: Optional[str] = None

    class Config:
        from_attributes = True
        validate_by_name = True


class NotificationRead(BaseModel):
    id: str
    user_id: str
    title: str
    message: str
    type: str
    is_read: bool
    related_table: Optional[str] = None
    related_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class MarkAllReadResult(BaseModel):
    updated: int


class ReminderRunRead(BaseModel):
    emails_sent: int
    emails_failed: int
    skipped: int
    total: int
    errors: List[dict] = []

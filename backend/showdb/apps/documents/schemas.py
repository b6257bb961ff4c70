from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field


ExpiryStatus = Literal["expired", "expiring", "upcoming", "valid", "none"]


class DocumentRead(BaseModel):
    id: str
    user_id: str
    ride_id: Optional[str] = None
    ride_name: Optional[str] = None
    document_name: str
    document_type: str
    file_path: str
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    notes: Optional[str] = None
    expires_at: Optional[date] = None
    is_global: bool
    version_number: str
    version_notes: Optional[str] = None
    is_latest_version: bool
    replaced_document_id: Optional[str] = None
    uploaded_at: datetime
    expiry_status: ExpiryStatus = "none"

    class Config:
        from_attributes = True


class DocumentUpdate(BaseModel):
    document_type: Optional[str] = Field(None, min_length=1, max_length=128)
    notes: Optional[str] = None
    expires_at: Optional[date] = None
    version_notes: Optional[str] = None


class SuggestedVersion(BaseModel):
    document_name: str
    ride_id: Optional[str] = None
    version_number: str


class SendDocumentsRequest(BaseModel):
    ride_id: str
    document_ids: List[str] = Field(..., min_length=1)
    recipient_email: EmailStr
    recipient_name: Optional[str] = Field(None, max_length=255)
    message: Optional[str] = None
    include_insurance: bool = False


class SendDocumentsResult(BaseModel):
    success: bool
    status: str
    documents: int

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from .models import SupportPriority, SupportStatus


class SupportMessageCreate(BaseModel):
    subject: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1, max_length=5000)
    priority: SupportPriority = SupportPriority.NORMAL


class SupportMessageRespond(BaseModel):
    admin_response: str = Field(..., min_length=1)
    status: SupportStatus = SupportStatus.RESPONDED


class SupportMessageRead(BaseModel):
    id: str
    user_id: str
    subject: str
    message: str
    priority: SupportPriority
    status: SupportStatus
    admin_response: Optional[str] = None
    responded_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class RideTypeRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: Literal["ride", "stall", "generator"]
    description: str = Field(..., min_length=1, max_length=2000)
    manufacturer: Optional[str] = Field(None, max_length=255)
    additional_info: Optional[str] = Field(None, max_length=2000)


class DocumentTypeRequest(BaseModel):
    document_type_name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    justification: Optional[str] = Field(None, max_length=2000)


class FeatureRequestCreate(BaseModel):
    feature_title: str = Field(..., min_length=1, max_length=200)
    feature_description: str = Field(..., min_length=10, max_length=2000)
    use_case: Optional[str] = Field(None, max_length=1000)


class FeatureRequestRead(BaseModel):
    id: str
    user_id: str
    feature_title: str
    feature_description: str
    use_case: Optional[str] = None
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class RequestSubmitted(BaseModel):
    success: bool
    message: str
    email_status: str

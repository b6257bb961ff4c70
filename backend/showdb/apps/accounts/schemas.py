from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr


class ProfileRead(BaseModel):
    user_id: str
    company_name: Optional[str] = None
    showmen_name: Optional[str] = None
    controller_name: Optional[str] = None
    address: Optional[str] = None
    subscription_status: Optional[str] = None
    subscription_plan: Optional[str] = None
    trial_started_at: Optional[datetime] = None
    trial_ends_at: Optional[datetime] = None
    enable_document_versioning: bool = False

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    """
    Fields the account holder may edit.

    Plan status is deliberately absent; it is written by billing.
    """
    company_name: Optional[str] = None
    showmen_name: Optional[str] = None
    controller_name: Optional[str] = None
    address: Optional[str] = None
    enable_document_versioning: Optional[bool] = None


class UserRead(BaseModel):
    id: str
    email: EmailStr
    full_name: Optional[str] = None
    is_active: bool
    is_admin: bool
    profile: Optional[ProfileRead] = None

    class Config:
        from_attributes = True

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Ride categories
# ---------------------------------------------------------------------------


class RideCategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None


class RideCategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None


class RideCategoryRead(BaseModel):
    id: str
    name: str
    description: Optional[str] = None

    class Config:
        from_attributes = True


# ---------------------------------------------------------------------------
# Rides
# ---------------------------------------------------------------------------


class RideBase(BaseModel):
    category_id: str
    ride_name: str = Field(..., min_length=1, max_length=255)
    manufacturer: Optional[str] = Field(None, max_length=255)
    serial_number: Optional[str] = Field(None, max_length=128)
    year_manufactured: Optional[int] = Field(None, ge=1800, le=2100)
    owner_name: Optional[str] = Field(None, max_length=255)


class RideCreate(RideBase):
    pass


class RideUpdate(BaseModel):
    category_id: Optional[str] = None
    ride_name: Optional[str] = Field(None, min_length=1, max_length=255)
    manufacturer: Optional[str] = Field(None, max_length=255)
    serial_number: Optional[str] = Field(None, max_length=128)
    year_manufactured: Optional[int] = Field(None, ge=1800, le=2100)
    owner_name: Optional[str] = Field(None, max_length=255)


class RideRead(RideBase):
    id: str
    user_id: str
    category: Optional[RideCategoryRead] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RideStats(BaseModel):
    ride_id: str
    documents: int = 0
    maintenance_records: int = 0
    inspection_checks: int = 0
    active_ndt_schedules: int = 0
    annual_inspection_reports: int = 0
    risk_assessments: int = 0

from __future__ import annotations

import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, Field

EventType = Literal["inspection", "maintenance", "document_expiry", "ndt", "inspection_schedule"]
EventStatus = Literal["pending", "completed", "overdue"]


class CalendarEvent(BaseModel):
    id: str
    title: str
    date: dt.date
    type: EventType
    status: EventStatus = "pending"
    ride_id: Optional[str] = Field(None, alias="rideId")
    ride_name: Optional[str] = Field(None, alias="rideName")

    class Config:
        validate_by_name = True
        populate_by_name = True

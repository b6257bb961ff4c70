# backend/showdb/apps/calendar/router.py

from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from showdb.apps.accounts import models as account_models
from showdb.database import get_read_db
from showdb.entitlements import ADVANCED_PLAN_STATUSES, require_plan

from . import schemas, services

router = APIRouter(prefix="/calendar", tags=["calendar"])


@router.get("/events", response_model=List[schemas.CalendarEvent])
def list_month_events(
    month: Optional[str] = Query(None, description="YYYY-MM; defaults to the current month"),
    type: Optional[str] = Query(None, description="Event type or 'all'"),
    day: Optional[date] = Query(None, description="Only events on this date"),
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(require_plan(*ADVANCED_PLAN_STATUSES)),
):
    try:
        first_day = services.parse_month(month) if month else date.today().replace(day=1)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    events = services.aggregate_month_events(db, current_user.id, first_day)
    events = services.filter_events(events, type)
    if day is not None:
        events = services.events_on(events, day)
    return events

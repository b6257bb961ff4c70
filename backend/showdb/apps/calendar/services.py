# backend/showdb/apps/calendar/services.py
#
# Month calendar aggregation.
#
# Five sources are read for the user and the month, each on its own date
# field:
#   inspection_checks.check_date             -> "inspection"
#   maintenance_records.next_maintenance_due -> "maintenance"
#   documents.expires_at                     -> "document_expiry"
#   ndt_schedules.next_inspection_due        -> "ndt"        (active only)
#   inspection_schedules.due_date            -> "inspection_schedule" (active only)
#
# Ride names for every referenced ride are fetched in a single query and
# backfilled afterwards. Events are not deduplicated or paginated.

from __future__ import annotations

import calendar
import logging
import re
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from showdb.apps.documents import models as document_models
from showdb.apps.maintenance import models as maintenance_models
from showdb.apps.rides import services as ride_services

from . import schemas

logger = logging.getLogger(__name__)

UNKNOWN_RIDE = "Unknown"
_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def parse_month(value: str) -> date:
    """'YYYY-MM' -> first day of that month. Raises ValueError otherwise."""
    match = _MONTH_RE.match((value or "").strip())
    if not match:
        raise ValueError("month must look like YYYY-MM")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError("month must look like YYYY-MM")
    return date(year, month, 1)


def month_range(month: date) -> Tuple[date, date]:
    first = month.replace(day=1)
    last = first.replace(day=calendar.monthrange(first.year, first.month)[1])
    return first, last


def _checks(db: Session, user_id: str, start: date, end: date):
    model = maintenance_models.InspectionCheck
    rows = (
        db.query(model)
        .filter(model.user_id == user_id, model.check_date >= start, model.check_date <= end)
        .all()
    )
    for row in rows:
        status = row.status.value if hasattr(row.status, "value") else row.status
        yield dict(
            id=row.id,
            label="Inspection",
            separator=" ",
            date=row.check_date,
            type="inspection",
            status=status,
            ride_id=row.ride_id,
        )


def _maintenance(db: Session, user_id: str, start: date, end: date):
    model = maintenance_models.MaintenanceRecord
    rows = (
        db.query(model)
        .filter(
            model.user_id == user_id,
            model.next_maintenance_due.isnot(None),
            model.next_maintenance_due >= start,
            model.next_maintenance_due <= end,
        )
        .all()
    )
    for row in rows:
        yield dict(
            id=row.id,
            label=row.maintenance_type,
            date=row.next_maintenance_due,
            type="maintenance",
            status="pending",
            ride_id=row.ride_id,
        )


def _document_expiries(db: Session, user_id: str, start: date, end: date):
    model = document_models.Document
    rows = (
        db.query(model)
        .filter(
            model.user_id == user_id,
            model.is_latest_version.is_(True),
            model.expires_at.isnot(None),
            model.expires_at >= start,
            model.expires_at <= end,
        )
        .all()
    )
    for row in rows:
        yield dict(
            id=row.id,
            label=f"{row.document_name} Expires",
            date=row.expires_at,
            type="document_expiry",
            status="pending",
            ride_id=row.ride_id,
        )


def _ndt(db: Session, user_id: str, start: date, end: date):
    model = maintenance_models.NDTSchedule
    rows = (
        db.query(model)
        .filter(
            model.user_id == user_id,
            model.is_active.is_(True),
            model.next_inspection_due.isnot(None),
            model.next_inspection_due >= start,
            model.next_inspection_due <= end,
        )
        .all()
    )
    for row in rows:
        yield dict(
            id=row.id,
            label=row.schedule_name,
            date=row.next_inspection_due,
            type="ndt",
            status="pending",
            ride_id=row.ride_id,
        )


def _inspection_schedules(db: Session, user_id: str, start: date, end: date, today: date):
    model = maintenance_models.InspectionSchedule
    rows = (
        db.query(model)
        .filter(
            model.user_id == user_id,
            model.is_active.is_(True),
            model.due_date >= start,
            model.due_date <= end,
        )
        .all()
    )
    for row in rows:
        yield dict(
            id=row.id,
            label=row.inspection_name,
            date=row.due_date,
            type="inspection_schedule",
            status="overdue" if row.due_date < today else "pending",
            ride_id=row.ride_id,
        )


def aggregate_month_events(
    db: Session,
    user_id: str,
    month: date,
    today: Optional[date] = None,
) -> List[schemas.CalendarEvent]:
    """
    All calendar events for the user in the month containing `month`,
    sorted ascending by date. Events on the same date keep source order.
    """
    today = today or date.today()
    start, end = month_range(month)

    raw = [
        *_checks(db, user_id, start, end),
        *_maintenance(db, user_id, start, end),
        *_document_expiries(db, user_id, start, end),
        *_ndt(db, user_id, start, end),
        *_inspection_schedules(db, user_id, start, end, today),
    ]

    names = ride_services.ride_names(db, (item["ride_id"] for item in raw))

    events: List[schemas.CalendarEvent] = []
    for item in raw:
        ride_id = item["ride_id"]
        if ride_id:
            ride_name = names.get(ride_id)
            title = f"{ride_name or UNKNOWN_RIDE}{item.get('separator', ' - ')}{item['label']}"
        else:
            ride_name = None
            title = item["label"]
        events.append(
            schemas.CalendarEvent(
                id=item["id"],
                title=title,
                date=item["date"],
                type=item["type"],
                status=item["status"],
                ride_id=ride_id,
                ride_name=ride_name,
            )
        )

    events.sort(key=lambda event: event.date.isoformat())
    logger.debug(
        "Calendar month aggregated",
        extra={"user_id": user_id, "month": start.isoformat(), "events": len(events)},
    )
    return events


def filter_events(events: List[schemas.CalendarEvent], event_type: Optional[str]) -> List[schemas.CalendarEvent]:
    if not event_type or event_type == "all":
        return list(events)
    return [event for event in events if event.type == event_type]


def events_on(events: List[schemas.CalendarEvent], day: date) -> List[schemas.CalendarEvent]:
    return [event for event in events if event.date == day]

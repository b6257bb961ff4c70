# backend/showdb/apps/notifications/reminders.py
#
# Scheduled reminder runs and the in-app system notifications.
#
# - Document expiry: documents expiring exactly N days from today (for each
#   configured N) are grouped per user and mailed once per user. Only
#   accounts on the basic plan get these; advanced plans have the calendar.
# - Inspection reminders: one mail per active schedule whose due date is
#   inside its advance notice window, at most once per day.
#
# Both runs use the caller's session and never commit.

from __future__ import annotations

import logging
import os
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from showdb.apps.accounts import models as account_models
from showdb.apps.documents import models as document_models
from showdb.apps.maintenance import models as maintenance_models
from showdb.apps.maintenance import services as maintenance_services
from showdb.apps.rides import services as ride_services

from . import models, service

logger = logging.getLogger(__name__)


def _parse_windows(raw: str) -> Tuple[int, ...]:
    days = []
    for part in (raw or "").split(","):
        part = part.strip()
        if part:
            days.append(int(part))
    return tuple(sorted(set(days), reverse=True))


DOCUMENT_EXPIRY_REMINDER_DAYS = _parse_windows(os.getenv("DOCUMENT_EXPIRY_REMINDER_DAYS", "30,7"))
EXPIRING_SOON_DAYS = 30


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ReminderRunResult:
    emails_sent: int = 0
    emails_failed: int = 0
    skipped: int = 0
    total: int = 0
    errors: List[dict] = field(default_factory=list)


def _users_with_profiles(db: Session, user_ids) -> Dict[str, account_models.User]:
    ids = list(user_ids)
    if not ids:
        return {}
    users = db.query(account_models.User).filter(account_models.User.id.in_(ids)).all()
    return {user.id: user for user in users}


# ---------------------------------------------------------------------------
# Document expiry
# ---------------------------------------------------------------------------


def send_document_expiry_reminders(
    db: Session,
    *,
    today: Optional[date] = None,
    windows: Optional[Tuple[int, ...]] = None,
) -> ReminderRunResult:
    today = today or date.today()
    windows = windows or DOCUMENT_EXPIRY_REMINDER_DAYS
    targets = {today + timedelta(days=days): days for days in windows}

    documents = (
        db.query(document_models.Document)
        .filter(
            document_models.Document.is_latest_version.is_(True),
            document_models.Document.expires_at.in_(list(targets)),
        )
        .order_by(document_models.Document.expires_at.asc())
        .all()
    )
    result = ReminderRunResult(total=len(documents))
    if not documents:
        logger.info("No expiring documents found", extra={"today": today.isoformat()})
        return result

    by_user: "OrderedDict[str, List[document_models.Document]]" = OrderedDict()
    for doc in documents:
        by_user.setdefault(doc.user_id, []).append(doc)

    users = _users_with_profiles(db, by_user)
    names = ride_services.ride_names(db, (doc.ride_id for doc in documents))

    for user_id, user_docs in by_user.items():
        user = users.get(user_id)
        profile = user.profile if user is not None else None
        if profile is None or profile.subscription_status != account_models.SubscriptionStatus.BASIC.value:
            result.skipped += 1
            continue
        if not user.email:
            result.emails_failed += 1
            result.errors.append({"user_id": user_id, "error": "User email not found"})
            continue

        context_windows = []
        for days in windows:
            due = today + timedelta(days=days)
            window_docs = [doc for doc in user_docs if doc.expires_at == due]
            if not window_docs:
                continue
            context_windows.append(
                {
                    "days": days,
                    "documents": [
                        {
                            "document_name": doc.document_name,
                            "document_type": doc.document_type,
                            "ride_name": names.get(doc.ride_id) if doc.ride_id else None,
                            "expires_at": doc.expires_at.isoformat(),
                        }
                        for doc in window_docs
                    ],
                }
            )

        log = service.send_email(
            "document_expiry_reminder",
            user.email,
            f"Document Expiry Reminder - {len(user_docs)} Document(s) Expiring Soon",
            {"company_name": profile.company_name, "windows": context_windows},
            correlation_id=f"doc-expiry:{today.isoformat()}",
            user_id=user_id,
            db=db,
        )
        if log.status == models.EmailStatus.FAILED:
            result.emails_failed += 1
            result.errors.append({"user_id": user_id, "error": log.error})
        elif log.status == models.EmailStatus.SENT:
            result.emails_sent += 1
        else:
            result.skipped += 1

    logger.info(
        "Document expiry reminders processed",
        extra={
            "emails_sent": result.emails_sent,
            "emails_failed": result.emails_failed,
            "total_documents": result.total,
        },
    )
    return result


# ---------------------------------------------------------------------------
# Inspection schedules
# ---------------------------------------------------------------------------


def _sent_today(schedule: maintenance_models.InspectionSchedule, today: date) -> bool:
    sent = schedule.last_notification_sent
    return sent is not None and sent.date() == today


def send_inspection_reminders(db: Session, *, today: Optional[date] = None) -> ReminderRunResult:
    today = today or date.today()
    schedules = (
        db.query(maintenance_models.InspectionSchedule)
        .filter(maintenance_models.InspectionSchedule.is_active.is_(True))
        .order_by(maintenance_models.InspectionSchedule.due_date.asc())
        .all()
    )
    due = [s for s in schedules if maintenance_services.is_due_soon(s, today) and not _sent_today(s, today)]
    result = ReminderRunResult(total=len(due))
    if not due:
        return result

    users = _users_with_profiles(db, {s.user_id for s in due})
    names = ride_services.ride_names(db, (s.ride_id for s in due))

    for schedule in due:
        user = users.get(schedule.user_id)
        if user is None or not user.email:
            result.emails_failed += 1
            result.errors.append({"schedule_id": schedule.id, "error": "User email not found"})
            continue

        ride_name = names.get(schedule.ride_id) or "Unknown Ride"
        profile = user.profile
        log = service.send_email(
            "inspection_reminder",
            user.email,
            f"Inspection Reminder: {schedule.inspection_name} - {ride_name}",
            {
                "company_name": profile.company_name if profile else None,
                "ride_name": ride_name,
                "inspection_type": schedule.inspection_type,
                "inspection_name": schedule.inspection_name,
                "due_date": schedule.due_date.isoformat(),
                "days_until_due": maintenance_services.days_until_due(schedule, today),
                "notes": schedule.notes,
            },
            correlation_id=f"inspection:{schedule.id}",
            user_id=schedule.user_id,
            db=db,
        )
        if log.status == models.EmailStatus.FAILED:
            result.emails_failed += 1
            result.errors.append({"schedule_id": schedule.id, "error": log.error})
            continue
        if log.status != models.EmailStatus.SENT:
            result.skipped += 1
            continue
        result.emails_sent += 1
        schedule.last_notification_sent = _utcnow()
        db.flush()

    logger.info(
        "Inspection reminders processed",
        extra={"emails_sent": result.emails_sent, "errors": len(result.errors)},
    )
    return result


# ---------------------------------------------------------------------------
# In-app system notifications
# ---------------------------------------------------------------------------


def generate_system_notifications(
    db: Session,
    user_id: str,
    today: Optional[date] = None,
) -> List[models.Notification]:
    """
    Create "overdue inspections" and "documents expiring soon" notifications
    for the user, at most once per title per day. Failures are logged and
    swallowed so the notification list still loads.
    """
    today = today or date.today()
    created: List[models.Notification] = []
    try:
        with db.begin_nested():
            overdue_checks = (
                db.query(maintenance_models.InspectionCheck)
                .filter(
                    maintenance_models.InspectionCheck.user_id == user_id,
                    maintenance_models.InspectionCheck.status == maintenance_models.CheckStatusEnum.PENDING,
                    maintenance_models.InspectionCheck.check_date < today,
                )
                .count()
            )
            overdue_schedules = (
                db.query(maintenance_models.InspectionSchedule)
                .filter(
                    maintenance_models.InspectionSchedule.user_id == user_id,
                    maintenance_models.InspectionSchedule.is_active.is_(True),
                    maintenance_models.InspectionSchedule.due_date < today,
                )
                .count()
            )
            overdue = overdue_checks + overdue_schedules
            if overdue:
                row = service.create_notification(
                    db,
                    user_id=user_id,
                    title="Overdue Inspections",
                    message=f"You have {overdue} overdue inspection(s) requiring immediate attention.",
                    type=models.NotificationType.WARNING.value,
                    dedupe_hours=24,
                )
                if row is not None:
                    created.append(row)

            expiring = (
                db.query(document_models.Document)
                .filter(
                    document_models.Document.user_id == user_id,
                    document_models.Document.is_latest_version.is_(True),
                    document_models.Document.expires_at.isnot(None),
                    document_models.Document.expires_at <= today + timedelta(days=EXPIRING_SOON_DAYS),
                )
                .count()
            )
            if expiring:
                row = service.create_notification(
                    db,
                    user_id=user_id,
                    title="Documents Expiring Soon",
                    message=(
                        f"{expiring} document(s) will expire within {EXPIRING_SOON_DAYS} days. "
                        "Please review and renew as needed."
                    ),
                    type=models.NotificationType.WARNING.value,
                    dedupe_hours=24,
                )
                if row is not None:
                    created.append(row)
    except Exception as exc:
        logger.warning(
            "Failed to generate system notifications",
            extra={"user_id": user_id, "error": str(exc)},
        )
        return []
    return created

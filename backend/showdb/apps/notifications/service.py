from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from showdb.database import WriteSessionLocal

from . import models, providers

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _dispatch(log: models.EmailLog, context: dict) -> Optional[Exception]:
    """
    Hand the mail to the configured provider and record the outcome on `log`.
    Returns the provider error, if any.
    """
    provider, configured = providers.get_email_provider()
    if not configured:
        log.status = models.EmailStatus.SKIPPED_NO_PROVIDER
        log.error = "No provider configured"
        return None
    try:
        provider.send(
            template_key=log.template_key,
            recipient=log.recipient,
            subject=log.subject,
            context=context,
            correlation_id=log.correlation_id,
        )
    except Exception as exc:
        log.status = models.EmailStatus.FAILED
        log.error = str(exc)
        logger.warning(
            "Email send failed",
            extra={"template_key": log.template_key, "email_log_id": log.id, "error": str(exc)},
        )
        return exc
    log.status = models.EmailStatus.SENT
    log.sent_at = _utcnow()
    return None


def send_email(
    template_key: str,
    recipient: str,
    subject: str,
    context: dict,
    correlation_id: Optional[str],
    critical: bool = False,
    *,
    user_id: Optional[str] = None,
    db: Optional[Session] = None,
) -> models.EmailLog:
    """
    Send one transactional email and keep its EmailLog row.

    The row is written as QUEUED first and ends as SENT, FAILED or
    SKIPPED_NO_PROVIDER. A provider failure only raises when `critical`.
    Without `db` a write session is opened and committed here; otherwise the
    caller owns the transaction.
    """
    owns_session = db is None
    db = db or WriteSessionLocal()
    context = context or {}
    try:
        log = models.EmailLog(
            user_id=user_id,
            recipient=recipient,
            subject=subject[:255],
            template_key=template_key,
            status=models.EmailStatus.QUEUED,
            context_json=context,
            correlation_id=correlation_id,
        )
        db.add(log)
        db.flush()

        error = _dispatch(log, context)
        db.flush()
        if owns_session:
            db.commit()
        if error is not None and critical:
            raise error
        return log
    finally:
        if owns_session:
            db.close()


# ---------------------------------------------------------------------------
# In-app notifications
# ---------------------------------------------------------------------------


def list_notifications(
    db: Session,
    *,
    user_id: str,
    unread_only: bool = False,
    limit: int = 50,
) -> List[models.Notification]:
    qs = db.query(models.Notification).filter(models.Notification.user_id == user_id)
    if unread_only:
        qs = qs.filter(models.Notification.is_read.is_(False))
    return qs.order_by(models.Notification.created_at.desc()).limit(limit).all()


def create_notification(
    db: Session,
    *,
    user_id: str,
    title: str,
    message: str,
    type: str = models.NotificationType.INFO.value,
    related_table: Optional[str] = None,
    related_id: Optional[str] = None,
    dedupe_hours: Optional[int] = None,
) -> Optional[models.Notification]:
    """
    Insert an in-app notification. With `dedupe_hours`, nothing is created
    when a notification with the same title exists in that window.
    """
    if dedupe_hours:
        since = _utcnow() - timedelta(hours=dedupe_hours)
        existing = (
            db.query(models.Notification.id)
            .filter(
                models.Notification.user_id == user_id,
                models.Notification.title == title,
                models.Notification.created_at >= since,
            )
            .first()
        )
        if existing is not None:
            return None
    notification = models.Notification(
        user_id=user_id,
        title=title,
        message=message,
        type=type,
        related_table=related_table,
        related_id=related_id,
    )
    db.add(notification)
    db.flush()
    return notification


def mark_read(db: Session, *, user_id: str, notification_id: str) -> Optional[models.Notification]:
    notification = db.get(models.Notification, notification_id)
    if notification is None or notification.user_id != user_id:
        return None
    notification.is_read = True
    db.flush()
    return notification


def mark_all_read(db: Session, *, user_id: str) -> int:
    count = (
        db.query(models.Notification)
        .filter(models.Notification.user_id == user_id, models.Notification.is_read.is_(False))
        .update({models.Notification.is_read: True}, synchronize_session=False)
    )
    db.flush()
    return int(count or 0)


def list_email_logs(
    db: Session,
    *,
    status: Optional[models.EmailStatus] = None,
    template_key: Optional[str] = None,
    recipient: Optional[str] = None,
    user_id: Optional[str] = None,
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
    limit: int = 200,
) -> List[models.EmailLog]:
    """Admin view of the mail audit trail, newest first."""
    filters = []
    if status is not None:
        filters.append(models.EmailLog.status == status)
    if template_key:
        filters.append(models.EmailLog.template_key == template_key)
    if recipient:
        filters.append(models.EmailLog.recipient.ilike(f"%{recipient.strip()}%"))
    if user_id:
        filters.append(models.EmailLog.user_id == user_id)
    if since is not None:
        filters.append(models.EmailLog.created_at >= since)
    if until is not None:
        filters.append(models.EmailLog.created_at <= until)
    return (
        db.query(models.EmailLog)
        .filter(*filters)
        .order_by(models.EmailLog.created_at.desc())
        .limit(limit)
        .all()
    )

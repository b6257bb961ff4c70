# backend/showdb/apps/support/services.py
#
# Support messages and requests. Every submission is mailed to the support
# inbox; the mail is best effort for stored rows (the row is kept even if
# the mail cannot be sent) and the outcome is always in email_logs.

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from showdb.apps.accounts import models as account_models
from showdb.apps.notifications import models as notification_models
from showdb.apps.notifications import service as notification_service
from showdb.apps.notifications.templates import ride_type_label

from . import models, schemas

logger = logging.getLogger(__name__)

SUPPORT_INBOX_EMAIL = os.getenv("SUPPORT_INBOX_EMAIL", "support@showmendocs.com")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _notify_inbox(
    db: Session,
    *,
    template_key: str,
    subject: str,
    context: dict,
    user: account_models.User,
    correlation_id: Optional[str] = None,
) -> Optional[notification_models.EmailLog]:
    """Mail the support inbox; failures are logged and never raised."""
    try:
        with db.begin_nested():
            return notification_service.send_email(
                template_key,
                SUPPORT_INBOX_EMAIL,
                subject,
                context,
                correlation_id=correlation_id,
                user_id=user.id,
                db=db,
            )
    except Exception as exc:
        logger.warning(
            "Support inbox notification failed",
            extra={"template_key": template_key, "user_id": user.id, "error": str(exc)},
        )
        return None


def email_status(log: Optional[notification_models.EmailLog]) -> str:
    if log is None:
        return notification_models.EmailStatus.FAILED.value
    return log.status.value


# ---------------------------------------------------------------------------
# Support messages
# ---------------------------------------------------------------------------


def create_message(
    db: Session,
    *,
    user: account_models.User,
    payload: schemas.SupportMessageCreate,
) -> models.SupportMessage:
    message = models.SupportMessage(
        user_id=user.id,
        subject=payload.subject.strip(),
        message=payload.message.strip(),
        priority=payload.priority.value,
    )
    db.add(message)
    db.flush()

    _notify_inbox(
        db,
        template_key="support_notification",
        subject=f"New Support Message: {message.subject}",
        context={
            "subject": message.subject,
            "priority": message.priority,
            "message": message.message,
            "user_email": user.email,
            "created_at": message.created_at.isoformat() if message.created_at else None,
        },
        user=user,
        correlation_id=f"support:{message.id}",
    )
    return message


def list_messages(db: Session, *, user_id: Optional[str] = None, status: Optional[str] = None) -> List[models.SupportMessage]:
    qs = db.query(models.SupportMessage)
    if user_id:
        qs = qs.filter(models.SupportMessage.user_id == user_id)
    if status:
        qs = qs.filter(models.SupportMessage.status == status)
    return qs.order_by(models.SupportMessage.created_at.desc()).all()


def get_message(db: Session, message_id: str) -> Optional[models.SupportMessage]:
    return db.get(models.SupportMessage, message_id)


def respond(
    db: Session,
    message: models.SupportMessage,
    *,
    admin: account_models.User,
    payload: schemas.SupportMessageRespond,
) -> models.SupportMessage:
    message.admin_response = payload.admin_response
    message.status = payload.status.value
    message.responded_at = _utcnow()
    message.responded_by = admin.id
    db.flush()
    return message


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


def _display_name(user: account_models.User) -> str:
    profile = user.profile
    if profile is not None:
        return profile.controller_name or profile.showmen_name or profile.company_name or user.email
    return user.full_name or user.email


def request_ride_type(
    db: Session,
    *,
    user: account_models.User,
    payload: schemas.RideTypeRequest,
) -> notification_models.EmailLog:
    label = ride_type_label(payload.type)
    context = {
        **payload.model_dump(),
        "user_email": user.email,
        "user_name": _display_name(user),
    }
    log = notification_service.send_email(
        "ride_type_request",
        SUPPORT_INBOX_EMAIL,
        f"New {label} Request: {payload.name}",
        context,
        correlation_id=None,
        critical=False,
        user_id=user.id,
        db=db,
    )
    if log.status == notification_models.EmailStatus.SENT:
        # Confirmation only after the inbox mail went out.
        _send_request_confirmation(db, user=user, context=context)
    return log


def _send_request_confirmation(db: Session, *, user: account_models.User, context: dict) -> None:
    try:
        with db.begin_nested():
            notification_service.send_email(
                "ride_type_request_confirmation",
                user.email,
                f"Request Confirmed: {context['name']}",
                context,
                correlation_id=None,
                user_id=user.id,
                db=db,
            )
    except Exception as exc:
        logger.warning(
            "Ride type request confirmation failed",
            extra={"user_id": user.id, "error": str(exc)},
        )


def request_document_type(
    db: Session,
    *,
    user: account_models.User,
    payload: schemas.DocumentTypeRequest,
) -> notification_models.EmailLog:
    return notification_service.send_email(
        "document_type_request",
        SUPPORT_INBOX_EMAIL,
        "New Document Type Request",
        {**payload.model_dump(), "user_email": user.email},
        correlation_id=None,
        critical=False,
        user_id=user.id,
        db=db,
    )


def create_feature_request(
    db: Session,
    *,
    user: account_models.User,
    payload: schemas.FeatureRequestCreate,
) -> models.FeatureRequest:
    request = models.FeatureRequest(
        user_id=user.id,
        feature_title=payload.feature_title.strip(),
        feature_description=payload.feature_description.strip(),
        use_case=(payload.use_case or "").strip() or None,
    )
    db.add(request)
    db.flush()
    _notify_inbox(
        db,
        template_key="feature_request",
        subject=f"New Feature Request: {request.feature_title}",
        context={
            "feature_title": request.feature_title,
            "feature_description": request.feature_description,
            "use_case": request.use_case,
            "user_email": user.email,
        },
        user=user,
        correlation_id=f"feature:{request.id}",
    )
    return request


def list_feature_requests(db: Session) -> List[models.FeatureRequest]:
    return db.query(models.FeatureRequest).order_by(models.FeatureRequest.created_at.desc()).all()

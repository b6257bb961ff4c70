# backend/showdb/apps/documents/services.py
#
# Read/update/delete helpers for compliance documents and the
# "send documents" email flow. Creation lives in versioning.py.

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from showdb.apps.accounts import services as account_services
from showdb.apps.notifications import models as notification_models
from showdb.apps.notifications import service as notification_service
from showdb.apps.rides import services as ride_services

from . import models, schemas, storage, versioning

logger = logging.getLogger(__name__)

EXPIRING_WITHIN_DAYS = 30
UPCOMING_WITHIN_DAYS = 90


def expiry_status(expires_at: Optional[date], today: Optional[date] = None) -> str:
    if expires_at is None:
        return "none"
    days = (expires_at - (today or date.today())).days
    if days < 0:
        return "expired"
    if days <= EXPIRING_WITHIN_DAYS:
        return "expiring"
    if days <= UPCOMING_WITHIN_DAYS:
        return "upcoming"
    return "valid"


def list_documents(
    db: Session,
    *,
    user_id: str,
    ride_id: Optional[str] = None,
    global_only: bool = False,
    include_history: bool = False,
) -> List[models.Document]:
    qs = db.query(models.Document).filter(models.Document.user_id == user_id)
    if global_only:
        qs = qs.filter(models.Document.ride_id.is_(None))
    elif ride_id:
        qs = qs.filter(models.Document.ride_id == ride_id)
    if not include_history:
        qs = qs.filter(models.Document.is_latest_version.is_(True))
    return qs.order_by(models.Document.uploaded_at.desc()).all()


def get_document(db: Session, *, user_id: str, document_id: str) -> Optional[models.Document]:
    document = db.get(models.Document, document_id)
    if document is None or document.user_id != user_id:
        return None
    return document


def update_document(
    db: Session,
    document: models.Document,
    payload: schemas.DocumentUpdate,
) -> models.Document:
    for field, value in payload.model_dump(exclude_unset=True).items():
        if field == "document_type" and value is None:
            continue
        setattr(document, field, value)
    db.flush()
    return document


def delete_document(db: Session, document: models.Document) -> Optional[models.Document]:
    """
    Delete one version. When it was the latest, the newest remaining version
    of the same document takes over. Returns the promoted row, if any.

    The stored file is not touched here; call storage.delete after commit.
    """
    was_latest = document.is_latest_version
    key = dict(user_id=document.user_id, document_name=document.document_name, ride_id=document.ride_id)

    (
        db.query(models.Document)
        .filter(models.Document.replaced_document_id == document.id)
        .update({models.Document.replaced_document_id: None}, synchronize_session=False)
    )
    db.delete(document)
    db.flush()

    if not was_latest:
        return None
    return versioning.promote_newest_remaining(db, **key)


# ---------------------------------------------------------------------------
# Send documents
# ---------------------------------------------------------------------------


def _attachment_name(ride_name: str, document: models.Document) -> str:
    extension = document.file_path.rsplit(".", 1)[-1] if "." in document.file_path else ""
    name = f"{ride_name}_{document.document_name}"
    return f"{name}.{extension}" if extension else name


def send_documents(
    db: Session,
    *,
    user_id: str,
    payload: schemas.SendDocumentsRequest,
) -> notification_models.EmailLog:
    """
    Email the selected documents of a ride (plus global insurance documents
    when asked) to an external recipient and record an in-app notification.
    """
    ride = ride_services.get_ride(db, user_id=user_id, ride_id=payload.ride_id)
    if ride is None:
        raise LookupError("Ride not found")

    documents = (
        db.query(models.Document)
        .filter(
            models.Document.user_id == user_id,
            models.Document.ride_id == ride.id,
            models.Document.id.in_(payload.document_ids),
        )
        .all()
    )
    if payload.include_insurance:
        documents += (
            db.query(models.Document)
            .filter(
                models.Document.user_id == user_id,
                models.Document.ride_id.is_(None),
                models.Document.is_latest_version.is_(True),
                models.Document.document_type.ilike("%insurance%"),
            )
            .all()
        )
    if not documents:
        raise ValueError("No documents selected")

    attachments = []
    for document in documents:
        try:
            path = storage.open_path(document.file_path)
        except (FileNotFoundError, storage.StorageError) as exc:
            logger.warning(
                "Document file missing; sending without it",
                extra={"document_id": document.id, "error": str(exc)},
            )
            continue
        attachments.append(
            {
                "filename": _attachment_name(ride.ride_name, document),
                "path": str(path),
                "content_type": document.mime_type or "application/octet-stream",
            }
        )

    profile = account_services.get_profile(db, user_id)
    sender_name = (profile and (profile.company_name or profile.controller_name)) or "Ride Operator"
    ride_info = ride.ride_name
    if ride.manufacturer:
        ride_info += f" ({ride.manufacturer})"
    if ride.serial_number:
        ride_info += f" - S/N: {ride.serial_number}"

    context = {
        "sender_name": sender_name,
        "recipient_name": payload.recipient_name or "Council/Authority",
        "message": payload.message or "",
        "ride_name": ride.ride_name,
        "manufacturer": ride.manufacturer,
        "serial_number": ride.serial_number,
        "year_manufactured": ride.year_manufactured,
        "company_name": profile.company_name if profile else None,
        "controller_name": profile.controller_name if profile else None,
        "documents": [
            {
                "document_name": doc.document_name,
                "document_type": doc.document_type,
                "expires_at": doc.expires_at.isoformat() if doc.expires_at else None,
            }
            for doc in documents
        ],
        "attachments": attachments,
    }
    log = notification_service.send_email(
        "send_documents",
        payload.recipient_email,
        f"Ride Documentation: {ride_info}",
        context,
        correlation_id=f"ride:{ride.id}",
        critical=False,
        user_id=user_id,
        db=db,
    )

    if log.status != notification_models.EmailStatus.SENT:
        return log

    db.add(
        notification_models.Notification(
            user_id=user_id,
            title="Documents Sent",
            message=f"Sent {len(attachments)} documents for {ride.ride_name} to {payload.recipient_email}",
            type="info",
            related_table="rides",
            related_id=ride.id,
        )
    )
    db.flush()
    return log

# backend/showdb/apps/support/router.py

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from showdb.apps.accounts import models as account_models
from showdb.apps.notifications import models as notification_models
from showdb.database import get_db
from showdb.security import get_current_active_user, require_admin

from . import schemas, services

router = APIRouter(prefix="/support", tags=["support"])


def _submitted(log, message: str) -> schemas.RequestSubmitted:
    return schemas.RequestSubmitted(
        success=log is not None and log.status == notification_models.EmailStatus.SENT,
        message=message,
        email_status=services.email_status(log),
    )


@router.post("/messages", response_model=schemas.SupportMessageRead, status_code=status.HTTP_201_CREATED)
def create_support_message(
    payload: schemas.SupportMessageCreate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    message = services.create_message(db, user=current_user, payload=payload)
    db.commit()
    db.refresh(message)
    return message


@router.get("/messages", response_model=List[schemas.SupportMessageRead])
def list_my_support_messages(
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return services.list_messages(db, user_id=current_user.id)


@router.get("/admin/messages", response_model=List[schemas.SupportMessageRead])
def list_all_support_messages(
    status_filter: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_admin),
):
    return services.list_messages(db, status=status_filter)


@router.post("/admin/messages/{message_id}/respond", response_model=schemas.SupportMessageRead)
def respond_to_support_message(
    message_id: str,
    payload: schemas.SupportMessageRespond,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_admin),
):
    message = services.get_message(db, message_id)
    if not message:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Support message not found")
    services.respond(db, message, admin=current_user, payload=payload)
    db.commit()
    db.refresh(message)
    return message


@router.post("/ride-type-requests", response_model=schemas.RequestSubmitted)
def submit_ride_type_request(
    payload: schemas.RideTypeRequest,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    log = services.request_ride_type(db, user=current_user, payload=payload)
    db.commit()
    return _submitted(log, "Request submitted successfully")


@router.post("/document-type-requests", response_model=schemas.RequestSubmitted)
def submit_document_type_request(
    payload: schemas.DocumentTypeRequest,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    log = services.request_document_type(db, user=current_user, payload=payload)
    db.commit()
    return _submitted(log, "Request submitted successfully")


@router.post(
    "/feature-requests",
    response_model=schemas.FeatureRequestRead,
    status_code=status.HTTP_201_CREATED,
)
def submit_feature_request(
    payload: schemas.FeatureRequestCreate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    request = services.create_feature_request(db, user=current_user, payload=payload)
    db.commit()
    db.refresh(request)
    return request


@router.get("/admin/feature-requests", response_model=List[schemas.FeatureRequestRead])
def list_feature_requests(
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_admin),
):
    return services.list_feature_requests(db)

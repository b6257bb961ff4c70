from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from showdb.apps.accounts import models as account_models
from showdb.database import get_db
from showdb.security import get_current_active_user, require_admin

from . import models, schemas, service
from .reminders import generate_system_notifications


router = APIRouter(tags=["notifications"])


@router.get("/email-logs", response_model=List[schemas.EmailLogRead])
def list_email_logs(
    status_filter: Optional[models.EmailStatus] = Query(None, alias="status"),
    template_key: Optional[str] = None,
    recipient: Optional[str] = None,
    user_id: Optional[str] = None,
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    limit: int = Query(200, ge=1, le=1000),
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_admin),
):
    return service.list_email_logs(
        db,
        status=status_filter,
        template_key=template_key,
        recipient=recipient,
        user_id=user_id,
        since=start,
        until=end,
        limit=limit,
    )


@router.get("/notifications", response_model=List[schemas.NotificationRead])
def list_notifications(
    unread_only: bool = False,
    refresh: bool = True,
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    if refresh:
        generate_system_notifications(db, current_user.id)
        db.commit()
    return service.list_notifications(db, user_id=current_user.id, unread_only=unread_only, limit=limit)


@router.post("/notifications/read-all", response_model=schemas.MarkAllReadResult)
def mark_all_notifications_read(
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    updated = service.mark_all_read(db, user_id=current_user.id)
    db.commit()
    return schemas.MarkAllReadResult(updated=updated)


@router.post("/notifications/{notification_id}/read", response_model=schemas.NotificationRead)
def mark_notification_read(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    notification = service.mark_read(db, user_id=current_user.id, notification_id=notification_id)
    if notification is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    db.commit()
    db.refresh(notification)
    return notification

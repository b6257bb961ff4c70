from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from showdb.apps.notifications import models as notification_models
from showdb.apps.notifications import service as notification_service

from . import models, schemas

logger = logging.getLogger(__name__)

WELCOME_SUBJECT = "Welcome to Showmen Docs!"


def get_profile(db: Session, user_id: str) -> Optional[models.Profile]:
    return (
        db.query(models.Profile)
        .filter(models.Profile.user_id == user_id)
        .first()
    )


def get_or_create_profile(db: Session, user_id: str) -> models.Profile:
    """
    Return the caller's profile, creating an empty trial profile on first use.
    """
    profile = get_profile(db, user_id)
    if profile is None:
        profile = models.Profile(
            user_id=user_id,
            subscription_status=models.SubscriptionStatus.TRIAL.value,
        )
        db.add(profile)
        db.flush()
    return profile


def update_profile(
    db: Session,
    profile: models.Profile,
    payload: schemas.ProfileUpdate,
) -> models.Profile:
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(profile, field, value)
    db.flush()
    return profile


def subscription_status(db: Session, user_id: str) -> Optional[str]:
    profile = get_profile(db, user_id)
    if profile is None:
        return None
    return profile.subscription_status


def versioning_enabled(db: Session, user_id: str) -> bool:
    profile = get_profile(db, user_id)
    return bool(profile and profile.enable_document_versioning)


def send_welcome_email(db: Session, user: models.User) -> Optional[notification_models.EmailLog]:
    """Best effort: a failed welcome mail never blocks the first sign-in."""
    try:
        with db.begin_nested():
            return notification_service.send_email(
                "welcome",
                user.email,
                WELCOME_SUBJECT,
                {"email": user.email},
                correlation_id=f"welcome:{user.id}",
                user_id=user.id,
                db=db,
            )
    except Exception as exc:
        logger.warning(
            "Welcome email failed",
            extra={"user_id": user.id, "error": str(exc)},
        )
        return None

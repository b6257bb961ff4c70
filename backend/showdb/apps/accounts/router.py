from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from showdb.database import get_db
from showdb.security import get_current_active_user

from . import models, schemas, services

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.get("/me", response_model=schemas.UserRead)
def read_me(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_active_user),
):
    if current_user.profile is None:
        services.get_or_create_profile(db, current_user.id)
        services.send_welcome_email(db, current_user)
        db.commit()
        db.refresh(current_user)
    return current_user


@router.patch("/me/profile", response_model=schemas.ProfileRead)
def update_my_profile(
    payload: schemas.ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_active_user),
):
    profile = services.get_or_create_profile(db, current_user.id)
    services.update_profile(db, profile, payload)
    db.commit()
    db.refresh(profile)
    return profile

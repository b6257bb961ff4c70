# backend/showdb/apps/rides/router.py

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from showdb.apps.accounts import models as account_models
from showdb.apps.documents import storage
from showdb.database import get_db, get_read_db
from showdb.security import get_current_active_user, require_admin

from . import models, schemas, services

router = APIRouter(prefix="/rides", tags=["rides"])
categories_router = APIRouter(prefix="/ride-categories", tags=["ride_categories"])


# ---------------------------------------------------------------------------
# Ride categories
# ---------------------------------------------------------------------------


def _get_category_or_404(db: Session, category_id: str) -> models.RideCategory:
    category = services.get_category(db, category_id)
    if not category:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ride category not found")
    return category


@categories_router.get("", response_model=List[schemas.RideCategoryRead])
def list_categories(
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return services.list_categories(db)


@categories_router.post("", response_model=schemas.RideCategoryRead, status_code=status.HTTP_201_CREATED)
def create_category(
    payload: schemas.RideCategoryCreate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_admin),
):
    try:
        category = services.create_category(db, payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    db.commit()
    db.refresh(category)
    return category


@categories_router.patch("/{category_id}", response_model=schemas.RideCategoryRead)
def update_category(
    category_id: str,
    payload: schemas.RideCategoryUpdate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_admin),
):
    category = _get_category_or_404(db, category_id)
    try:
        services.update_category(db, category, payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    db.commit()
    db.refresh(category)
    return category


@categories_router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_admin),
):
    category = _get_category_or_404(db, category_id)
    try:
        services.delete_category(db, category)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    db.commit()
    return None


# ---------------------------------------------------------------------------
# Rides
# ---------------------------------------------------------------------------


def _get_ride_or_404(db: Session, user_id: str, ride_id: str) -> models.Ride:
    ride = services.get_ride(db, user_id=user_id, ride_id=ride_id)
    if not ride:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ride not found")
    return ride


@router.get("", response_model=List[schemas.RideRead])
def list_rides(
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return services.list_rides(db, user_id=current_user.id)


@router.post("", response_model=schemas.RideRead, status_code=status.HTTP_201_CREATED)
def create_ride(
    payload: schemas.RideCreate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    try:
        ride = services.create_ride(db, user_id=current_user.id, payload=payload)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    db.commit()
    db.refresh(ride)
    return ride


@router.get("/{ride_id}", response_model=schemas.RideRead)
def get_ride(
    ride_id: str,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return _get_ride_or_404(db, current_user.id, ride_id)


@router.get("/{ride_id}/stats", response_model=schemas.RideStats)
def get_ride_stats(
    ride_id: str,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    ride = _get_ride_or_404(db, current_user.id, ride_id)
    return services.ride_stats(db, ride)


@router.patch("/{ride_id}", response_model=schemas.RideRead)
def update_ride(
    ride_id: str,
    payload: schemas.RideUpdate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    ride = _get_ride_or_404(db, current_user.id, ride_id)
    try:
        services.update_ride(db, ride, payload)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    db.commit()
    db.refresh(ride)
    return ride


@router.delete("/{ride_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_ride(
    ride_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    ride = _get_ride_or_404(db, current_user.id, ride_id)
    file_paths = services.delete_ride(db, ride)
    db.commit()
    for key in file_paths:
        storage.delete(key)
    return None

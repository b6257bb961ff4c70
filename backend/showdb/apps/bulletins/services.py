from __future__ import annotations

from typing import List, Optional

from sqlalchemy.orm import Session

from showdb.apps.rides import models as ride_models
from showdb.apps.rides import services as ride_services

from . import matcher, models, schemas


def _require_category(db: Session, category_id: str) -> None:
    if db.get(ride_models.RideCategory, category_id) is None:
        raise LookupError("Ride category not found")


def list_bulletins(db: Session) -> List[models.TechnicalBulletin]:
    return (
        db.query(models.TechnicalBulletin)
        .order_by(
            models.TechnicalBulletin.issue_date.desc(),
            models.TechnicalBulletin.created_at.desc(),
        )
        .all()
    )


def get_bulletin(db: Session, bulletin_id: str) -> Optional[models.TechnicalBulletin]:
    return db.get(models.TechnicalBulletin, bulletin_id)


def create_bulletin(db: Session, payload: schemas.TechnicalBulletinCreate) -> models.TechnicalBulletin:
    _require_category(db, payload.category_id)
    data = payload.model_dump(exclude_none=True)
    bulletin = models.TechnicalBulletin(**data)
    db.add(bulletin)
    db.flush()
    return bulletin


def update_bulletin(
    db: Session,
    bulletin: models.TechnicalBulletin,
    payload: schemas.TechnicalBulletinUpdate,
) -> models.TechnicalBulletin:
    data = payload.model_dump(exclude_unset=True)
    if data.get("category_id"):
        _require_category(db, data["category_id"])
    for field, value in data.items():
        if value is not None:
            setattr(bulletin, field, value)
    db.flush()
    return bulletin


def delete_bulletin(db: Session, bulletin: models.TechnicalBulletin) -> None:
    db.delete(bulletin)
    db.flush()


def relevant_bulletins_for_user(
    db: Session,
    *,
    user_id: str,
    ride_id: Optional[str] = None,
) -> List[models.TechnicalBulletin]:
    """
    Bulletins that concern the user's rides, recomputed on every call.

    With `ride_id` only that ride is considered; an unknown ride id
    raises LookupError rather than falling back to "all bulletins".
    """
    if ride_id:
        ride = ride_services.get_ride(db, user_id=user_id, ride_id=ride_id)
        if ride is None:
            raise LookupError("Ride not found")
        rides = [ride]
    else:
        rides = ride_services.list_rides(db, user_id=user_id)

    return list(matcher.filter_bulletins_for_rides(list_bulletins(db), rides))

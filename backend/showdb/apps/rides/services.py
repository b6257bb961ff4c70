# backend/showdb/apps/rides/services.py
#
# Service functions for the ride inventory.
#
# Responsibilities:
# - CRUD helpers for RideCategory (admin) and Ride (per account).
# - Cascading delete of everything scoped to a ride.
# - Per-ride counters shown on the ride list.

from __future__ import annotations

from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from showdb.apps.bulletins import models as bulletin_models
from showdb.apps.documents import models as document_models
from showdb.apps.maintenance import models as maintenance_models
from showdb.apps.risk import models as risk_models

from . import models, schemas


# ---------------------------------------------------------------------------
# Ride categories
# ---------------------------------------------------------------------------


def list_categories(db: Session) -> List[models.RideCategory]:
    stmt = select(models.RideCategory).order_by(models.RideCategory.name.asc())
    return list(db.execute(stmt).scalars().all())


def get_category(db: Session, category_id: str) -> Optional[models.RideCategory]:
    return db.get(models.RideCategory, category_id)


def _ensure_unique_category_name(db: Session, name: str, *, exclude_id: Optional[str] = None) -> None:
    stmt = select(models.RideCategory).where(func.lower(models.RideCategory.name) == name.strip().lower())
    if exclude_id:
        stmt = stmt.where(models.RideCategory.id != exclude_id)
    if db.execute(stmt).first() is not None:
        raise ValueError(f"Ride category '{name}' already exists")


def create_category(db: Session, payload: schemas.RideCategoryCreate) -> models.RideCategory:
    _ensure_unique_category_name(db, payload.name)
    category = models.RideCategory(name=payload.name.strip(), description=payload.description)
    db.add(category)
    db.flush()
    return category


def update_category(
    db: Session,
    category: models.RideCategory,
    payload: schemas.RideCategoryUpdate,
) -> models.RideCategory:
    data = payload.model_dump(exclude_unset=True)
    if data.get("name"):
        _ensure_unique_category_name(db, data["name"], exclude_id=category.id)
        category.name = data["name"].strip()
    if "description" in data:
        category.description = data["description"]
    db.flush()
    return category


def delete_category(db: Session, category: models.RideCategory) -> None:
    in_use = db.execute(
        select(func.count()).select_from(models.Ride).where(models.Ride.category_id == category.id)
    ).scalar_one()
    if in_use:
        raise ValueError("Ride category is still used by rides")
    bulletins = db.execute(
        select(func.count())
        .select_from(bulletin_models.TechnicalBulletin)
        .where(bulletin_models.TechnicalBulletin.category_id == category.id)
    ).scalar_one()
    if bulletins:
        raise ValueError("Ride category is still used by technical bulletins")
    db.delete(category)
    db.flush()


# ---------------------------------------------------------------------------
# Rides
# ---------------------------------------------------------------------------


def list_rides(db: Session, *, user_id: str) -> List[models.Ride]:
    stmt = (
        select(models.Ride)
        .where(models.Ride.user_id == user_id)
        .order_by(models.Ride.ride_name.asc())
    )
    return list(db.execute(stmt).unique().scalars().all())


def get_ride(db: Session, *, user_id: str, ride_id: str) -> Optional[models.Ride]:
    ride = db.get(models.Ride, ride_id)
    if ride is None or ride.user_id != user_id:
        return None
    return ride


def ride_names(db: Session, ride_ids) -> Dict[str, str]:
    """Map of ride id to ride name, fetched in one query."""
    ids = {ride_id for ride_id in ride_ids if ride_id}
    if not ids:
        return {}
    rows = db.execute(
        select(models.Ride.id, models.Ride.ride_name).where(models.Ride.id.in_(ids))
    ).all()
    return {row.id: row.ride_name for row in rows}


def create_ride(db: Session, *, user_id: str, payload: schemas.RideCreate) -> models.Ride:
    if get_category(db, payload.category_id) is None:
        raise LookupError("Ride category not found")
    ride = models.Ride(user_id=user_id, **payload.model_dump())
    db.add(ride)
    db.flush()
    return ride


def update_ride(db: Session, ride: models.Ride, payload: schemas.RideUpdate) -> models.Ride:
    data = payload.model_dump(exclude_unset=True)
    if data.get("category_id") and get_category(db, data["category_id"]) is None:
        raise LookupError("Ride category not found")
    for field, value in data.items():
        if field in {"category_id", "ride_name"} and value is None:
            continue
        setattr(ride, field, value)
    db.flush()
    return ride


def delete_ride(db: Session, ride: models.Ride) -> List[str]:
    """
    Delete a ride and every row scoped to it.

    Returns the storage paths of the removed documents so the caller can
    drop the files after commit.
    """
    documents = (
        db.query(document_models.Document)
        .filter(document_models.Document.ride_id == ride.id)
        .all()
    )
    file_paths = [doc.file_path for doc in documents]
    for doc in documents:
        db.delete(doc)

    for model in (
        maintenance_models.MaintenanceRecord,
        maintenance_models.InspectionSchedule,
        maintenance_models.NDTReport,
        maintenance_models.NDTSchedule,
        maintenance_models.AnnualInspectionReport,
    ):
        db.query(model).filter(model.ride_id == ride.id).delete(synchronize_session=False)

    # Rows with child collections go through the ORM so their children follow.
    for model in (
        maintenance_models.InspectionCheck,
        maintenance_models.CheckTemplate,
        risk_models.RiskAssessment,
    ):
        for row in db.query(model).filter(model.ride_id == ride.id):
            db.delete(row)

    db.delete(ride)
    db.flush()
    return file_paths


def ride_stats(db: Session, ride: models.Ride) -> schemas.RideStats:
    def _count(model, *conditions) -> int:
        stmt = select(func.count()).select_from(model).where(model.ride_id == ride.id, *conditions)
        return int(db.execute(stmt).scalar_one())

    return schemas.RideStats(
        ride_id=ride.id,
        documents=_count(document_models.Document, document_models.Document.is_latest_version.is_(True)),
        maintenance_records=_count(maintenance_models.MaintenanceRecord),
        inspection_checks=_count(maintenance_models.InspectionCheck),
        active_ndt_schedules=_count(maintenance_models.NDTSchedule, maintenance_models.NDTSchedule.is_active.is_(True)),
        annual_inspection_reports=_count(maintenance_models.AnnualInspectionReport),
        risk_assessments=_count(risk_models.RiskAssessment),
    )

# backend/showdb/apps/risk/services.py
#
# Risk assessments per ride and their hazard items.
#
# An item's risk level is looked up on a 5x5 likelihood/severity matrix
# when the caller does not pick one:
#   score 1-4 low, 5-12 medium, 15-25 high.

from __future__ import annotations

import enum
from typing import List, Optional

from sqlalchemy.orm import Session

from showdb.apps.rides import services as ride_services

from . import models, schemas

LIKELIHOOD_SCORES = {"rare": 1, "unlikely": 2, "possible": 3, "likely": 4, "certain": 5}
SEVERITY_SCORES = {"negligible": 1, "minor": 2, "moderate": 3, "major": 4, "catastrophic": 5}


def _plain(data: dict) -> dict:
    return {k: (v.value if isinstance(v, enum.Enum) else v) for k, v in data.items()}


def derive_risk_level(severity: str, likelihood: str) -> str:
    score = SEVERITY_SCORES.get(severity, 3) * LIKELIHOOD_SCORES.get(likelihood, 3)
    if score <= 4:
        return models.RiskLevel.LOW.value
    if score <= 12:
        return models.RiskLevel.MEDIUM.value
    return models.RiskLevel.HIGH.value


def list_assessments(db: Session, *, user_id: str, ride_id: Optional[str] = None) -> List[models.RiskAssessment]:
    qs = db.query(models.RiskAssessment).filter(models.RiskAssessment.user_id == user_id)
    if ride_id:
        qs = qs.filter(models.RiskAssessment.ride_id == ride_id)
    return qs.order_by(models.RiskAssessment.assessment_date.desc()).all()


def get_assessment(db: Session, *, user_id: str, assessment_id: str) -> Optional[models.RiskAssessment]:
    assessment = db.get(models.RiskAssessment, assessment_id)
    if assessment is None or assessment.user_id != user_id:
        return None
    return assessment


def _build_item(payload: schemas.RiskAssessmentItemCreate, sort_order: int) -> models.RiskAssessmentItem:
    data = _plain(payload.model_dump())
    if not data.get("risk_level"):
        data["risk_level"] = derive_risk_level(data["severity"], data["likelihood"])
    if data.get("sort_order") is None:
        data["sort_order"] = sort_order
    return models.RiskAssessmentItem(**data)


def create_assessment(
    db: Session,
    *,
    user_id: str,
    payload: schemas.RiskAssessmentCreate,
) -> models.RiskAssessment:
    if ride_services.get_ride(db, user_id=user_id, ride_id=payload.ride_id) is None:
        raise LookupError("Ride not found")
    data = _plain(payload.model_dump(exclude={"items"}))
    assessment = models.RiskAssessment(user_id=user_id, **data)
    assessment.items = [_build_item(item, index) for index, item in enumerate(payload.items)]
    db.add(assessment)
    db.flush()
    return assessment


def update_assessment(
    db: Session,
    assessment: models.RiskAssessment,
    payload: schemas.RiskAssessmentUpdate,
) -> models.RiskAssessment:
    for field, value in _plain(payload.model_dump(exclude_unset=True)).items():
        if value is None and field in {"assessment_date", "assessor_name", "overall_status"}:
            continue
        setattr(assessment, field, value)
    db.flush()
    return assessment


def delete_assessment(db: Session, assessment: models.RiskAssessment) -> None:
    db.delete(assessment)
    db.flush()


def add_item(
    db: Session,
    assessment: models.RiskAssessment,
    payload: schemas.RiskAssessmentItemCreate,
) -> models.RiskAssessmentItem:
    item = _build_item(payload, len(assessment.items))
    assessment.items.append(item)
    db.flush()
    return item


def get_item(
    assessment: models.RiskAssessment,
    item_id: str,
) -> Optional[models.RiskAssessmentItem]:
    return next((item for item in assessment.items if item.id == item_id), None)


def update_item(
    db: Session,
    item: models.RiskAssessmentItem,
    payload: schemas.RiskAssessmentItemUpdate,
) -> models.RiskAssessmentItem:
    data = _plain(payload.model_dump(exclude_unset=True))
    for field, value in data.items():
        if value is None and field in {"hazard_description", "who_at_risk", "severity", "likelihood", "risk_level", "status"}:
            continue
        setattr(item, field, value)
    if not data.get("risk_level") and ({"severity", "likelihood"} & data.keys()):
        item.risk_level = derive_risk_level(item.severity, item.likelihood)
    db.flush()
    return item


def delete_item(db: Session, assessment: models.RiskAssessment, item: models.RiskAssessmentItem) -> None:
    assessment.items.remove(item)
    db.flush()

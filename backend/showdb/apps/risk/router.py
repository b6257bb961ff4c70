# backend/showdb/apps/risk/router.py

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from showdb.apps.accounts import models as account_models
from showdb.database import get_db, get_read_db
from showdb.security import get_current_active_user

from . import models, schemas, services

router = APIRouter(prefix="/risk-assessments", tags=["risk_assessments"])


def _get_or_404(db: Session, user_id: str, assessment_id: str) -> models.RiskAssessment:
    assessment = services.get_assessment(db, user_id=user_id, assessment_id=assessment_id)
    if not assessment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Risk assessment not found")
    return assessment


@router.get("", response_model=List[schemas.RiskAssessmentRead])
def list_assessments(
    ride_id: Optional[str] = None,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return services.list_assessments(db, user_id=current_user.id, ride_id=ride_id)


@router.post("", response_model=schemas.RiskAssessmentRead, status_code=status.HTTP_201_CREATED)
def create_assessment(
    payload: schemas.RiskAssessmentCreate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    try:
        assessment = services.create_assessment(db, user_id=current_user.id, payload=payload)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    db.commit()
    db.refresh(assessment)
    return assessment


@router.get("/{assessment_id}", response_model=schemas.RiskAssessmentRead)
def get_assessment(
    assessment_id: str,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return _get_or_404(db, current_user.id, assessment_id)


@router.patch("/{assessment_id}", response_model=schemas.RiskAssessmentRead)
def update_assessment(
    assessment_id: str,
    payload: schemas.RiskAssessmentUpdate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    assessment = _get_or_404(db, current_user.id, assessment_id)
    services.update_assessment(db, assessment, payload)
    db.commit()
    db.refresh(assessment)
    return assessment


@router.delete("/{assessment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_assessment(
    assessment_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    assessment = _get_or_404(db, current_user.id, assessment_id)
    services.delete_assessment(db, assessment)
    db.commit()
    return None


@router.post(
    "/{assessment_id}/items",
    response_model=schemas.RiskAssessmentItemRead,
    status_code=status.HTTP_201_CREATED,
)
def add_item(
    assessment_id: str,
    payload: schemas.RiskAssessmentItemCreate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    assessment = _get_or_404(db, current_user.id, assessment_id)
    item = services.add_item(db, assessment, payload)
    db.commit()
    db.refresh(item)
    return item


@router.patch("/{assessment_id}/items/{item_id}", response_model=schemas.RiskAssessmentItemRead)
def update_item(
    assessment_id: str,
    item_id: str,
    payload: schemas.RiskAssessmentItemUpdate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    assessment = _get_or_404(db, current_user.id, assessment_id)
    item = services.get_item(assessment, item_id)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Risk assessment item not found")
    services.update_item(db, item, payload)
    db.commit()
    db.refresh(item)
    return item


@router.delete("/{assessment_id}/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(
    assessment_id: str,
    item_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    assessment = _get_or_404(db, current_user.id, assessment_id)
    item = services.get_item(assessment, item_id)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Risk assessment item not found")
    services.delete_item(db, assessment, item)
    db.commit()
    return None

# backend/showdb/apps/bulletins/router.py

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from showdb.apps.accounts import models as account_models
from showdb.database import get_db, get_read_db
from showdb.security import get_current_active_user, require_admin

from . import models, schemas, scraper, services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/technical-bulletins", tags=["technical_bulletins"])


def _get_or_404(db: Session, bulletin_id: str) -> models.TechnicalBulletin:
    bulletin = services.get_bulletin(db, bulletin_id)
    if not bulletin:
        raise HTTPException(status_code=404, detail="Technical bulletin not found")
    return bulletin


@router.get("", response_model=List[schemas.TechnicalBulletinRead])
def list_bulletins(
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return services.list_bulletins(db)


@router.get("/relevant", response_model=List[schemas.TechnicalBulletinRead])
def list_relevant_bulletins(
    ride_id: Optional[str] = None,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    try:
        return services.relevant_bulletins_for_user(db, user_id=current_user.id, ride_id=ride_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.get("/{bulletin_id}", response_model=schemas.TechnicalBulletinRead)
def get_bulletin(
    bulletin_id: str,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return _get_or_404(db, bulletin_id)


@router.post("", response_model=schemas.TechnicalBulletinRead, status_code=status.HTTP_201_CREATED)
def create_bulletin(
    payload: schemas.TechnicalBulletinCreate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_admin),
):
    try:
        bulletin = services.create_bulletin(db, payload)
    except LookupError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    db.commit()
    db.refresh(bulletin)
    return bulletin


@router.patch("/{bulletin_id}", response_model=schemas.TechnicalBulletinRead)
def update_bulletin(
    bulletin_id: str,
    payload: schemas.TechnicalBulletinUpdate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_admin),
):
    bulletin = _get_or_404(db, bulletin_id)
    try:
        services.update_bulletin(db, bulletin, payload)
    except LookupError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    db.commit()
    db.refresh(bulletin)
    return bulletin


@router.delete("/{bulletin_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_bulletin(
    bulletin_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_admin),
):
    bulletin = _get_or_404(db, bulletin_id)
    services.delete_bulletin(db, bulletin)
    db.commit()
    return None


@router.post("/scrape", response_model=schemas.ScrapeResult)
def scrape_bulletins(
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_admin),
):
    try:
        result = scraper.run_scrape(db)
    except LookupError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception as exc:
        db.rollback()
        logger.warning("Bulletin scrape failed", extra={"error": str(exc)})
        raise HTTPException(status_code=502, detail=f"Bulletin scrape failed: {exc}")
    db.commit()
    return result

# backend/showdb/apps/documents/router.py

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from showdb.apps.accounts import models as account_models
from showdb.apps.accounts import services as account_services
from showdb.apps.notifications import models as notification_models
from showdb.apps.rides import services as ride_services
from showdb.database import get_db, get_read_db
from showdb.security import get_current_active_user

from . import models, schemas, services, storage, versioning

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


def _to_read(document: models.Document) -> schemas.DocumentRead:
    read = schemas.DocumentRead.model_validate(document)
    return read.model_copy(update={"expiry_status": services.expiry_status(document.expires_at)})


def _get_or_404(db: Session, user_id: str, document_id: str) -> models.Document:
    document = services.get_document(db, user_id=user_id, document_id=document_id)
    if not document:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return document


def _check_ride(db: Session, user_id: str, ride_id: Optional[str]) -> None:
    if ride_id and ride_services.get_ride(db, user_id=user_id, ride_id=ride_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ride not found")


@router.get("", response_model=List[schemas.DocumentRead])
def list_documents(
    ride_id: Optional[str] = None,
    global_only: bool = False,
    include_history: bool = False,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    documents = services.list_documents(
        db,
        user_id=current_user.id,
        ride_id=ride_id,
        global_only=global_only,
        include_history=include_history,
    )
    return [_to_read(doc) for doc in documents]


@router.get("/versions", response_model=List[schemas.DocumentRead])
def list_document_versions(
    document_name: str,
    ride_id: Optional[str] = None,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    versions = versioning.list_versions(
        db,
        user_id=current_user.id,
        document_name=document_name,
        ride_id=ride_id,
    )
    return [_to_read(doc) for doc in versions]


@router.get("/suggested-version", response_model=schemas.SuggestedVersion)
def get_suggested_version(
    document_name: str,
    ride_id: Optional[str] = None,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    try:
        version_number = versioning.suggest_next_version(
            db,
            user_id=current_user.id,
            document_name=document_name,
            ride_id=ride_id,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return schemas.SuggestedVersion(document_name=document_name, ride_id=ride_id, version_number=version_number)


@router.post("", response_model=schemas.DocumentRead, status_code=status.HTTP_201_CREATED)
def upload_document(
    file: UploadFile = File(...),
    document_name: str = Form(...),
    document_type: str = Form(...),
    ride_id: Optional[str] = Form(None),
    notes: Optional[str] = Form(None),
    expires_at: Optional[date] = Form(None),
    use_version_control: Optional[bool] = Form(None),
    version_number: Optional[str] = Form(None),
    version_notes: Optional[str] = Form(None),
    replaced_document_id: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    document_name = document_name.strip()
    if not document_name or not document_type.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Document name and type are required")
    ride_id = ride_id or None
    _check_ride(db, current_user.id, ride_id)

    versioning_allowed = account_services.versioning_enabled(db, current_user.id)
    if use_version_control is None:
        use_version_control = versioning_allowed
    elif use_version_control and not versioning_allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Document version control is not enabled for this account.",
        )

    key = storage.build_storage_key(current_user.id, ride_id, file.filename or document_name)
    try:
        size = storage.save(key, file.file)
    except storage.UploadTooLarge as exc:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(exc))
    finally:
        file.file.close()

    try:
        document = versioning.create_document(
            db,
            user_id=current_user.id,
            ride_id=ride_id,
            document_name=document_name,
            document_type=document_type.strip(),
            file_path=key,
            file_size=size,
            mime_type=file.content_type,
            notes=notes,
            expires_at=expires_at,
            use_version_control=use_version_control,
            version_number=version_number,
            version_notes=version_notes,
            replaced_document_id=replaced_document_id,
        )
        db.commit()
    except LookupError as exc:
        db.rollback()
        storage.delete(key)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except ValueError as exc:
        db.rollback()
        storage.delete(key)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    except Exception:
        db.rollback()
        storage.delete(key)
        raise

    db.refresh(document)
    logger.info(
        "Document uploaded",
        extra={
            "document_id": document.id,
            "user_id": current_user.id,
            "version_number": document.version_number,
        },
    )
    return _to_read(document)


@router.post("/send", response_model=schemas.SendDocumentsResult)
def send_documents(
    payload: schemas.SendDocumentsRequest,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    try:
        log = services.send_documents(db, user_id=current_user.id, payload=payload)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    db.commit()
    return schemas.SendDocumentsResult(
        success=log.status == notification_models.EmailStatus.SENT,
        status=log.status.value,
        documents=len(log.context_json.get("attachments", [])) if log.context_json else 0,
    )


@router.get("/{document_id}", response_model=schemas.DocumentRead)
def get_document(
    document_id: str,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return _to_read(_get_or_404(db, current_user.id, document_id))


@router.get("/{document_id}/download", response_class=FileResponse)
def download_document(
    document_id: str,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    document = _get_or_404(db, current_user.id, document_id)
    try:
        path = storage.open_path(document.file_path)
    except (FileNotFoundError, storage.StorageError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document file not found")
    return FileResponse(
        path=str(path),
        media_type=document.mime_type or "application/octet-stream",
        filename=path.name.split("-", 1)[-1],
    )


@router.patch("/{document_id}", response_model=schemas.DocumentRead)
def update_document(
    document_id: str,
    payload: schemas.DocumentUpdate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    document = _get_or_404(db, current_user.id, document_id)
    services.update_document(db, document, payload)
    db.commit()
    db.refresh(document)
    return _to_read(document)


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_document(
    document_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    document = _get_or_404(db, current_user.id, document_id)
    key = document.file_path
    services.delete_document(db, document)
    db.commit()
    storage.delete(key)
    return None

# backend/showdb/apps/documents/versioning.py
#
# Document version control.
#
# A logical document is identified by (user_id, ride_id, document_name).
# Exactly one row per key carries is_latest_version = true. Creating a new
# version flips the previous latest row and inserts the new one inside the
# caller's transaction: the flip is flushed first so the partial unique
# index never sees two latest rows, and nothing is committed here.

from __future__ import annotations

from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from . import models


def next_version_number(current: Optional[str]) -> str:
    """
    Increment the minor component of a version string.

    "1.0" -> "1.1", "2.9" -> "2.10", "3" -> "3.1", None / "" -> "1.0".
    """
    value = (current or "").strip()
    if not value:
        return models.DEFAULT_VERSION

    major, sep, minor = value.rpartition(".")
    if not sep:
        return f"{value}.1"
    if not minor.isdigit():
        raise ValueError(f"Cannot increment version number {current!r}")
    return f"{major}.{int(minor) + 1}"


def _key_filter(query, *, user_id: str, document_name: str, ride_id: Optional[str]):
    query = query.filter(
        models.Document.user_id == user_id,
        models.Document.document_name == document_name,
    )
    if ride_id:
        return query.filter(models.Document.ride_id == ride_id)
    return query.filter(models.Document.ride_id.is_(None))


def list_versions(
    db: Session,
    *,
    user_id: str,
    document_name: str,
    ride_id: Optional[str],
) -> List[models.Document]:
    """All versions of a logical document, newest first."""
    query = _key_filter(db.query(models.Document), user_id=user_id, document_name=document_name, ride_id=ride_id)
    return query.order_by(models.Document.uploaded_at.desc(), models.Document.id.desc()).all()


def get_latest(
    db: Session,
    *,
    user_id: str,
    document_name: str,
    ride_id: Optional[str],
) -> Optional[models.Document]:
    query = _key_filter(db.query(models.Document), user_id=user_id, document_name=document_name, ride_id=ride_id)
    return query.filter(models.Document.is_latest_version.is_(True)).first()


def suggest_next_version(
    db: Session,
    *,
    user_id: str,
    document_name: str,
    ride_id: Optional[str],
) -> str:
    versions = list_versions(db, user_id=user_id, document_name=document_name, ride_id=ride_id)
    if not versions:
        return models.DEFAULT_VERSION
    return next_version_number(versions[0].version_number)


def create_document(
    db: Session,
    *,
    user_id: str,
    ride_id: Optional[str],
    document_name: str,
    document_type: str,
    file_path: str,
    file_size: Optional[int] = None,
    mime_type: Optional[str] = None,
    notes: Optional[str] = None,
    expires_at: Optional[date] = None,
    use_version_control: bool = False,
    version_number: Optional[str] = None,
    version_notes: Optional[str] = None,
    replaced_document_id: Optional[str] = None,
) -> models.Document:
    """
    Insert a document row, versioning it against existing rows when asked.

    With version control the row replaces `replaced_document_id` when given
    (it must be a version of the same logical document), otherwise the
    current latest version. Without version control a second latest row
    for the same key is refused.

    The caller commits; on rollback neither write survives.
    """
    latest = get_latest(db, user_id=user_id, document_name=document_name, ride_id=ride_id)
    previous: Optional[models.Document] = None

    if use_version_control:
        if replaced_document_id:
            previous = db.get(models.Document, replaced_document_id)
            if (
                previous is None
                or previous.user_id != user_id
                or previous.document_name != document_name
                or (previous.ride_id or None) != (ride_id or None)
            ):
                raise LookupError("Document to replace not found")
        else:
            previous = latest
        if not version_number:
            version_number = suggest_next_version(
                db, user_id=user_id, document_name=document_name, ride_id=ride_id
            )
    elif latest is not None:
        raise ValueError(
            f"A document named '{document_name}' already exists; enable version control to upload a new version"
        )

    # Whichever row is latest now stops being latest, even if the user
    # picked an older version to replace.
    for row in {id(r): r for r in (latest, previous) if r is not None}.values():
        if row.is_latest_version:
            row.is_latest_version = False
    db.flush()

    document = models.Document(
        user_id=user_id,
        ride_id=ride_id,
        document_name=document_name,
        document_type=document_type,
        file_path=file_path,
        file_size=file_size,
        mime_type=mime_type,
        notes=notes,
        expires_at=expires_at,
        is_global=ride_id is None,
        version_number=version_number or models.DEFAULT_VERSION,
        version_notes=version_notes,
        is_latest_version=True,
        replaced_document_id=previous.id if previous is not None else None,
    )
    db.add(document)
    db.flush()
    return document


def promote_newest_remaining(
    db: Session,
    *,
    user_id: str,
    document_name: str,
    ride_id: Optional[str],
) -> Optional[models.Document]:
    """After deleting the latest version, make the newest remaining one latest."""
    if get_latest(db, user_id=user_id, document_name=document_name, ride_id=ride_id) is not None:
        return None
    versions = list_versions(db, user_id=user_id, document_name=document_name, ride_id=ride_id)
    if not versions:
        return None
    versions[0].is_latest_version = True
    db.flush()
    return versions[0]

"""
Blob storage for uploaded documents.

A single bucket on the local filesystem, rooted at DOCUMENT_STORAGE_DIR.
Keys look like ``{user_id}/{ride_id or "global"}/{timestamp_ms}-{filename}``
and are what the `documents.file_path` column stores.
"""

from __future__ import annotations

import logging
import os
import re
import time
from pathlib import Path
from typing import BinaryIO, Optional

logger = logging.getLogger(__name__)

# You can override this per environment:
#   DOCUMENT_STORAGE_DIR=/var/lib/showdb/ride-documents
DOCUMENT_STORAGE_DIR = os.getenv("DOCUMENT_STORAGE_DIR", "uploads/ride-documents")
MAX_UPLOAD_BYTES = int(os.getenv("DOCUMENT_MAX_UPLOAD_BYTES", "0") or "0")

GLOBAL_FOLDER = "global"
_CHUNK_SIZE = 1024 * 1024
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._ -]+")


class StorageError(Exception):
    pass


class UploadTooLarge(StorageError):
    pass


def storage_root() -> Path:
    root = Path(DOCUMENT_STORAGE_DIR).resolve()
    root.mkdir(parents=True, exist_ok=True)
    return root


def _safe_filename(filename: str) -> str:
    name = Path(filename or "").name
    name = _UNSAFE_CHARS.sub("_", name).strip(" .")
    return name or "upload"


def build_storage_key(
    user_id: str,
    ride_id: Optional[str],
    filename: str,
    *,
    timestamp_ms: Optional[int] = None,
) -> str:
    stamp = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    folder = ride_id or GLOBAL_FOLDER
    return f"{user_id}/{folder}/{stamp}-{_safe_filename(filename)}"


def resolve_path(key: str) -> Path:
    root = storage_root()
    resolved = (root / key).resolve()
    if not str(resolved).startswith(str(root) + os.sep):
        raise StorageError("Invalid storage key")
    return resolved


def save(key: str, source: BinaryIO, *, max_bytes: Optional[int] = None) -> int:
    """
    Stream `source` into the bucket under `key`; returns bytes written.

    A partially written file is removed when the size cap is exceeded.
    """
    limit = MAX_UPLOAD_BYTES if max_bytes is None else max_bytes
    dest = resolve_path(key)
    dest.parent.mkdir(parents=True, exist_ok=True)

    total = 0
    try:
        with dest.open("wb") as out:
            while True:
                chunk = source.read(_CHUNK_SIZE)
                if not chunk:
                    break
                total += len(chunk)
                if limit and total > limit:
                    raise UploadTooLarge("Upload exceeds maximum file size.")
                out.write(chunk)
    except UploadTooLarge:
        dest.unlink(missing_ok=True)
        raise
    return total


def open_path(key: str) -> Path:
    path = resolve_path(key)
    if not path.is_file():
        raise FileNotFoundError(key)
    return path


def delete(key: Optional[str]) -> None:
    """Best-effort removal; a missing file is not an error."""
    if not key:
        return
    try:
        resolve_path(key).unlink(missing_ok=True)
    except Exception as exc:
        logger.warning("Failed to delete stored document", extra={"storage_key": key, "error": str(exc)})

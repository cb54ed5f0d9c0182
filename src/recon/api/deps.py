"""Shared FastAPI dependencies: API-key gate, upload checks, and service providers."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Iterator, Sequence

from fastapi import Header, UploadFile

from recon.address.models import RawDocument
from recon.exceptions import AuthenticationError, PermissionDeniedError, ValidationFailedError
from recon.settings import get_settings
from recon.social import ThreadHarvester
from recon.store import build_collection_store
from recon.store.collection_store import CollectionStore

logger = logging.getLogger(__name__)


def require_api_key(x_api_key: str | None = Header(None, alias="X-API-KEY")) -> None:
    """Reject the request unless it carries a configured API key.

    A no-op while ``api.require_auth`` is false.
    """
    api = get_settings().api
    if not api.require_auth:
        return
    if not x_api_key:
        raise AuthenticationError("Missing X-API-KEY header")
    if x_api_key not in api.api_keys:
        logger.warning("Rejected request with unknown API key")
        raise PermissionDeniedError("Invalid API key")


def get_store() -> CollectionStore:
    """Return the shared store for the configured database.

    One store, and so one engine and pool, is kept per database location.
    """
    storage = get_settings().storage
    return _store_for(storage.db_url or storage.sqlite_path)


@lru_cache(maxsize=4)
def _store_for(location: str) -> CollectionStore:
    return build_collection_store()


def get_thread_harvester() -> Iterator[ThreadHarvester]:
    harvester = ThreadHarvester()
    try:
        yield harvester
    finally:
        harvester.close()


def _extension(filename: str) -> str:
    _, dot, ext = filename.rpartition(".")
    return ext.lower() if dot else ""


def read_uploads(files: Sequence[UploadFile], *, max_files: int | None = None) -> list[RawDocument]:
    """Read uploaded files after checking the upload limits.

    The count and extension checks run before any body is read.

    Raises:
        ValidationFailedError: When more than *max_files* files are given, or
            naming every file with a disallowed extension or a size above
            ``extraction.max_file_size_mb``.
    """
    extraction = get_settings().extraction
    allowed = extraction.allowed_extensions
    max_bytes = extraction.max_file_size_bytes

    if max_files is not None and len(files) > max_files:
        raise ValidationFailedError(f"Maximum {max_files} files allowed per extraction")

    unsupported = [f.filename or "" for f in files if _extension(f.filename or "") not in allowed]
    if unsupported:
        raise ValidationFailedError(
            "Unsupported file type(s)",
            details=[
                {
                    "message": f"Unsupported file type(s). Allowed: {', '.join(allowed)}",
                    "files": unsupported,
                }
            ],
        )

    documents: list[RawDocument] = []
    oversized: list[str] = []
    for upload in files:
        data = upload.file.read()
        if len(data) > max_bytes:
            oversized.append(f"{upload.filename} ({len(data) / 1024 / 1024:.2f}MB)")
            continue
        documents.append(RawDocument(name=upload.filename or "upload", data=data))

    if oversized:
        raise ValidationFailedError(
            "File(s) too large",
            details=[
                {
                    "message": f"File(s) exceed maximum size of {extraction.max_file_size_mb}MB",
                    "files": oversized,
                }
            ],
        )
    return documents


def read_optional_upload(upload: UploadFile | None) -> RawDocument | None:
    """Validate and read a single optional upload; ``None`` passes through."""
    if upload is None:
        return None
    return read_uploads([upload])[0]

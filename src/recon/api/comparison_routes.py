"""Reconciliation endpoints and the comparison audit trail."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, File, Form, Path, Query, UploadFile

from recon.api.deps import get_store, read_optional_upload, require_api_key
from recon.reconcile import ComparisonService
from recon.store.collection_store import CollectionStore

comparison_router = APIRouter(tags=["comparisons"], dependencies=[Depends(require_api_key)])


@comparison_router.post("/compare")
def compare_files(
    minted: UploadFile | None = File(None),
    eligible: UploadFile | None = File(None),
    store: CollectionStore = Depends(get_store),
) -> dict[str, Any]:
    """Return eligible addresses that do not appear in the minted file."""
    result = ComparisonService(store).compare_files(
        read_optional_upload(minted),
        read_optional_upload(eligible),
    )
    return result.to_response()


@comparison_router.post("/compare-collection")
def compare_with_collection(
    collection_id: int = Form(..., alias="collectionId", ge=1),
    file: UploadFile | None = File(None),
    store: CollectionStore = Depends(get_store),
) -> dict[str, Any]:
    """Return eligible addresses that are not members of the collection."""
    result = ComparisonService(store).compare_with_collection(collection_id, read_optional_upload(file))
    return result.to_response()


@comparison_router.get("/comparisons")
def list_comparisons(
    limit: int = Query(50, ge=1, le=1000, description="Maximum audits to return."),
    store: CollectionStore = Depends(get_store),
) -> list[dict[str, Any]]:
    """Return recent comparison audits, newest first."""
    return [audit.to_response() for audit in ComparisonService(store).list_audits(limit=limit)]


@comparison_router.get("/comparisons/{comparison_id}")
def get_comparison(
    comparison_id: int = Path(..., ge=1),
    store: CollectionStore = Depends(get_store),
) -> dict[str, Any]:
    return ComparisonService(store).get_audit(comparison_id).to_response()

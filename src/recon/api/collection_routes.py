"""REST API routes for named address collections.

Collections are persistent address sets used as the minted side of a
comparison. Bulk adds and uploads are idempotent and report how many
addresses were added, skipped, or rejected.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, File, Path, UploadFile
from fastapi.responses import Response
from pydantic import Field

from recon.address.models import CamelModel
from recon.address.patterns import ADDRESS_RE
from recon.api.deps import get_store, read_optional_upload, require_api_key
from recon.collection import CollectionService
from recon.collection.export import content_disposition
from recon.store.collection_store import CollectionStore

logger = logging.getLogger(__name__)

collection_router = APIRouter(tags=["collections"], dependencies=[Depends(require_api_key)])


class CreateCollectionRequest(CamelModel):
    name: str = Field(..., max_length=255, description="Unique collection name.")
    description: str | None = Field(None, max_length=1000)


class AddAddressesRequest(CamelModel):
    addresses: list[str] = Field(..., min_length=1, description="Addresses to add.")


def _service(store: CollectionStore = Depends(get_store)) -> CollectionService:
    return CollectionService(store)


# ---------------------------------------------------------------------------
# Collections
# ---------------------------------------------------------------------------


@collection_router.get("/collections")
def list_collections(service: CollectionService = Depends(_service)) -> list[dict[str, Any]]:
    """Return every collection with its member count."""
    return [c.to_response() for c in service.list_all()]


@collection_router.get("/collections/{collection_id}")
def get_collection(
    collection_id: int = Path(..., ge=1),
    service: CollectionService = Depends(_service),
) -> dict[str, Any]:
    """Return a collection with its full membership."""
    return service.get(collection_id).to_response()


@collection_router.post("/collections", status_code=201)
def create_collection(
    req: CreateCollectionRequest,
    service: CollectionService = Depends(_service),
) -> dict[str, Any]:
    return service.create(req.name, req.description).to_response()


@collection_router.delete("/collections/{collection_id}", status_code=204)
def delete_collection(
    collection_id: int = Path(..., ge=1),
    service: CollectionService = Depends(_service),
) -> Response:
    service.delete(collection_id)
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Membership
# ---------------------------------------------------------------------------


@collection_router.post("/collections/{collection_id}/addresses")
def add_addresses(
    req: AddAddressesRequest,
    collection_id: int = Path(..., ge=1),
    service: CollectionService = Depends(_service),
) -> dict[str, Any]:
    """Add addresses; already-present members are counted as skipped."""
    return service.add_addresses(collection_id, req.addresses).to_response()


@collection_router.post("/collections/{collection_id}/upload")
def upload_file(
    collection_id: int = Path(..., ge=1),
    file: UploadFile | None = File(None),
    service: CollectionService = Depends(_service),
) -> dict[str, Any]:
    """Parse an address file and add its valid rows to the collection."""
    return service.upload_file(collection_id, read_optional_upload(file)).to_response()


@collection_router.delete("/collections/{collection_id}/addresses/{address}", status_code=204)
def remove_address(
    collection_id: int = Path(..., ge=1),
    address: str = Path(..., pattern=ADDRESS_RE.pattern, description="Member address."),
    service: CollectionService = Depends(_service),
) -> Response:
    service.remove_address(collection_id, address)
    return Response(status_code=204)


@collection_router.get("/collections/{collection_id}/download")
def download_collection(
    collection_id: int = Path(..., ge=1),
    service: CollectionService = Depends(_service),
) -> Response:
    """Download the membership as a newline-separated CSV attachment."""
    filename, body = service.export(collection_id)
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": content_disposition(filename)},
    )

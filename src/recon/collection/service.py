"""Collection façade: CRUD over named, persistent address sets.

Bulk adds are idempotent. Each request validates its inputs, inserts only
new members, and reports how many were added, skipped as already present,
or rejected as malformed, together with the resulting membership count.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterable

from pydantic import Field

from recon.address.models import CamelModel, RawDocument
from recon.address.parser import parse_file
from recon.address.patterns import is_valid_address
from recon.exceptions import CollectionNotFoundError, ValidationFailedError
from recon.store.collection_store import CollectionStore

logger = logging.getLogger(__name__)

INVALID_ADDRESS_PREVIEW = 10
INVALID_ADDRESS_ERROR = "Invalid EVM address format"


class CollectionSummary(CamelModel):
    id: int
    name: str
    description: str | None = None
    created_at: datetime | None = None
    address_count: int = 0

    def to_response(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class CollectionDetail(CollectionSummary):
    addresses: list[str] = Field(default_factory=list)


class InvalidAddress(CamelModel):
    address: str
    error: str


class AddAddressesReport(CamelModel):
    """Outcome of a bulk add.

    Attributes:
        added: Newly inserted members.
        skipped: Valid inputs that were already members.
        invalid: Inputs that failed the address grammar.
        total_in_collection: Membership count after the insert.
        invalid_addresses: The first few rejected inputs with reasons.
    """

    added: int
    skipped: int
    invalid: int
    total_in_collection: int
    invalid_addresses: list[InvalidAddress] = Field(default_factory=list)


class UploadReport(CamelModel):
    filename: str
    found: int
    added: int
    skipped: int
    invalid: int
    total_in_collection: int


class CollectionService:
    """Validate requests and delegate persistence to a ``CollectionStore``."""

    def __init__(self, store: CollectionStore) -> None:
        self.store = store

    # -- collections ---------------------------------------------------

    def create(self, name: str | None, description: str | None = None) -> CollectionSummary:
        """Create a collection.

        Raises:
            ValidationFailedError: If *name* is missing or blank.
            DuplicateCollectionError: If the trimmed name already exists.
        """
        clean_name = (name or "").strip()
        if not clean_name:
            raise ValidationFailedError("Collection name is required")
        clean_description = (description or "").strip() or None
        row = self.store.create_collection(name=clean_name, description=clean_description)
        return CollectionSummary(**row, address_count=0)

    def list_all(self) -> list[CollectionSummary]:
        return [CollectionSummary(**row) for row in self.store.list_collections()]

    def get(self, collection_id: int) -> CollectionDetail:
        row = self._require(collection_id)
        addresses = self.store.list_addresses(collection_id)
        return CollectionDetail(**row, addresses=addresses, address_count=len(addresses))

    def delete(self, collection_id: int) -> None:
        self._require(collection_id)
        self.store.delete_collection(collection_id)

    # -- membership ----------------------------------------------------

    def add_addresses(self, collection_id: int, raw_addresses: Iterable[Any]) -> AddAddressesReport:
        """Validate and idempotently insert *raw_addresses*.

        Non-string and blank entries are ignored. Entries failing the
        address grammar are reported and never inserted.
        """
        self._require(collection_id)

        valid: list[str] = []
        invalid: list[InvalidAddress] = []
        for raw in raw_addresses:
            if not isinstance(raw, str):
                continue
            candidate = raw.strip()
            if not candidate:
                continue
            if is_valid_address(candidate):
                valid.append(candidate.lower())
            else:
                invalid.append(InvalidAddress(address=candidate, error=INVALID_ADDRESS_ERROR))

        added = self.store.add_addresses(collection_id, valid)
        total = self.store.count_addresses(collection_id)
        logger.info(
            "Collection %s: %d added, %d skipped, %d invalid",
            collection_id,
            added,
            len(valid) - added,
            len(invalid),
        )
        return AddAddressesReport(
            added=added,
            skipped=len(valid) - added,
            invalid=len(invalid),
            total_in_collection=total,
            invalid_addresses=invalid[:INVALID_ADDRESS_PREVIEW],
        )

    def upload_file(self, collection_id: int, document: RawDocument | None) -> UploadReport:
        """Parse *document* with the row-level file parser and insert its addresses.

        Raises:
            CollectionNotFoundError: If the collection does not exist.
            ValidationFailedError: If no file was supplied.
        """
        self._require(collection_id)
        if document is None:
            raise ValidationFailedError("File is required")

        parsed = parse_file(document.name, document.data)
        addresses = [record.address for record in parsed.addresses]
        added = self.store.add_addresses(collection_id, addresses)
        total = self.store.count_addresses(collection_id)
        logger.info("Collection %s: uploaded %s, %d new of %d", collection_id, document.name, added, len(addresses))
        return UploadReport(
            filename=document.name,
            found=len(addresses),
            added=added,
            skipped=len(addresses) - added,
            invalid=parsed.invalid_count,
            total_in_collection=total,
        )

    def remove_address(self, collection_id: int, address: str) -> None:
        """Remove *address*; removing a non-member is a no-op."""
        self._require(collection_id)
        self.store.remove_address(collection_id, address.strip().lower())

    def export(self, collection_id: int) -> tuple[str, str]:
        """Return ``(filename, body)`` with one address per line."""
        row = self._require(collection_id)
        addresses = self.store.list_addresses(collection_id)
        return f"{row['name']}_minted_addresses.csv", "\n".join(addresses)

    def _require(self, collection_id: int) -> dict[str, Any]:
        row = self.store.get_collection(collection_id)
        if row is None:
            raise CollectionNotFoundError(collection_id)
        return row

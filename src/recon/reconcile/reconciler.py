"""Set reconciliation of eligible addresses against minted addresses.

``reconcile`` is a pure function: membership is decided on the lowercase
address, eligible order is preserved, and stats are derived from the
inputs rather than re-scanned.

``ComparisonService`` binds it to the file parser and the store. Every
successful comparison writes an audit row; there is no way to skip it.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterable, Sequence

from recon.address.models import (
    AddressRecord,
    CamelModel,
    ComparisonResult,
    ComparisonStats,
    RawDocument,
    ValidationIssue,
)
from recon.address.parser import parse_file
from recon.exceptions import (
    CollectionNotFoundError,
    ComparisonNotFoundError,
    ValidationFailedError,
)
from recon.store.collection_store import CollectionStore

logger = logging.getLogger(__name__)

MINTED = "minted"
ELIGIBLE = "eligible"


class ComparisonAudit(CamelModel):
    """A persisted comparison, as returned by the audit endpoints."""

    id: int
    created_at: datetime | None = None
    collection_id: int | None = None
    minted_file_name: str
    eligible_file_name: str
    total_eligible: int
    total_minted: int
    remaining: int
    invalid_addresses: int | None = None
    results: dict[str, Any]

    def to_response(self) -> dict[str, Any]:
        # Nullable columns stay in the payload so clients see a stable shape.
        return self.model_dump(mode="json", by_alias=True)


def reconcile(
    eligible: Sequence[AddressRecord],
    minted: Iterable[str],
    *,
    invalid_count: int = 0,
    validation_errors: Sequence[ValidationIssue] = (),
) -> ComparisonResult:
    """Return the eligible records whose address is absent from *minted*.

    Args:
        eligible: Parsed eligible records, already deduplicated.
        minted: Minted addresses in any case.
        invalid_count: Rows rejected while parsing either side.
        validation_errors: Issues to attach, already tagged with their source.
    """
    minted_set = {address.lower() for address in minted}
    not_minted = [record for record in eligible if record.address.lower() not in minted_set]

    stats = ComparisonStats(
        total_eligible=len(eligible),
        total_minted=len(minted_set),
        remaining=len(not_minted),
        invalid_addresses=invalid_count or None,
    )
    return ComparisonResult(
        not_minted=not_minted,
        stats=stats,
        validation_errors=list(validation_errors) or None,
    )


class ComparisonService:
    """Run reconciliations from uploaded files and record their audits.

    Args:
        store: Persistence for collections and the audit trail.
    """

    def __init__(self, store: CollectionStore) -> None:
        self.store = store

    def compare_files(self, minted: RawDocument | None, eligible: RawDocument | None) -> ComparisonResult:
        """Reconcile an eligible file against a minted file.

        Raises:
            ValidationFailedError: If either file is missing.
            ParseError: If either document is unreadable as a whole.
        """
        if minted is None or eligible is None:
            raise ValidationFailedError("Both files are required")

        minted_parsed = parse_file(minted.name, minted.data)
        eligible_parsed = parse_file(eligible.name, eligible.data)

        result = reconcile(
            eligible_parsed.addresses,
            (record.address for record in minted_parsed.addresses),
            invalid_count=minted_parsed.invalid_count + eligible_parsed.invalid_count,
            validation_errors=minted_parsed.tagged_errors(MINTED) + eligible_parsed.tagged_errors(ELIGIBLE),
        )
        self._record(result, minted_file_name=minted.name, eligible_file_name=eligible.name)
        return result

    def compare_with_collection(self, collection_id: int, eligible: RawDocument | None) -> ComparisonResult:
        """Reconcile an eligible file against a collection's full membership.

        Raises:
            ValidationFailedError: If the eligible file is missing.
            CollectionNotFoundError: If *collection_id* does not exist.
        """
        if eligible is None:
            raise ValidationFailedError("Eligible file is required")

        collection = self.store.get_collection(collection_id)
        if collection is None:
            raise CollectionNotFoundError(collection_id)

        minted = self.store.list_addresses(collection_id)
        eligible_parsed = parse_file(eligible.name, eligible.data)

        result = reconcile(
            eligible_parsed.addresses,
            minted,
            invalid_count=eligible_parsed.invalid_count,
            validation_errors=eligible_parsed.tagged_errors(ELIGIBLE),
        )
        self._record(
            result,
            minted_file_name=f"Collection: {collection['name']}",
            eligible_file_name=eligible.name,
            collection_id=collection_id,
        )
        return result

    def list_audits(self, *, limit: int = 50) -> list[ComparisonAudit]:
        return [ComparisonAudit(**row) for row in self.store.list_comparisons(limit=limit)]

    def get_audit(self, comparison_id: int) -> ComparisonAudit:
        row = self.store.get_comparison(comparison_id)
        if row is None:
            raise ComparisonNotFoundError(comparison_id)
        return ComparisonAudit(**row)

    def _record(
        self,
        result: ComparisonResult,
        *,
        minted_file_name: str,
        eligible_file_name: str,
        collection_id: int | None = None,
    ) -> int:
        stats = result.stats
        comparison_id = self.store.record_comparison(
            minted_file_name=minted_file_name,
            eligible_file_name=eligible_file_name,
            total_eligible=stats.total_eligible,
            total_minted=stats.total_minted,
            remaining=stats.remaining,
            invalid_addresses=stats.invalid_addresses,
            results=result.to_response(),
            collection_id=collection_id,
        )
        logger.debug("Comparison %s recorded", comparison_id)
        return comparison_id

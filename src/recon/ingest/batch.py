"""Batch address extraction over a set of uploaded files.

Files are processed one at a time. Each file goes through
:func:`recon.ingest.normalizer.normalize` and the ``AddressExtractor``
and produces a ``FileOutcome``; the aggregator inspects each outcome and
skips failed files after logging them, so one unreadable upload never
sinks the batch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Sequence

from recon.address.models import ExtractionResult, RawDocument
from recon.address.patterns import AddressExtractor
from recon.exceptions import ValidationFailedError
from recon.ingest.normalizer import normalize

logger = logging.getLogger(__name__)


@dataclass
class FileOutcome:
    """Result of processing one file: either addresses or an error.

    Attributes:
        filename: Name of the processed file.
        addresses: Unique addresses found in this file (empty on failure).
        text_length: Characters of normalized text; ``0`` means unreadable or empty.
        error: Failure description when processing raised.
    """

    filename: str
    addresses: list[str] = field(default_factory=list)
    text_length: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def was_read(self) -> bool:
        return self.ok and self.text_length > 0


@dataclass
class BatchSummary:
    """Aggregated result of a batch.

    Attributes:
        addresses: Union of all per-file addresses, first-seen order.
        files_processed: Files that were read successfully.
        files_with_addresses: Files that yielded at least one address.
        outcomes: Per-file outcomes, in input order.
    """

    addresses: list[str]
    files_processed: int
    files_with_addresses: int
    outcomes: list[FileOutcome]

    def display_name(self) -> str:
        if len(self.outcomes) == 1:
            return self.outcomes[0].filename
        return f"{len(self.outcomes)} files ({self.files_with_addresses} with addresses)"

    def to_result(self) -> ExtractionResult:
        return ExtractionResult(
            filename=self.display_name(),
            total_found=len(self.addresses),
            addresses=self.addresses,
            files_processed=self.files_processed,
            files_with_addresses=self.files_with_addresses,
        )


class BatchFileProcessor:
    """Run normalization + extraction across a bounded list of files.

    Args:
        max_files: Upper bound on files per batch; defaults to
            ``settings.extraction.max_files``.
        extractor: Address extractor to use.
        normalizer: ``(filename, bytes) -> text`` callable.
    """

    def __init__(
        self,
        *,
        max_files: int | None = None,
        extractor: AddressExtractor | None = None,
        normalizer: Callable[[str, bytes], str] = normalize,
    ) -> None:
        if max_files is None:
            from recon.settings import get_settings

            max_files = get_settings().extraction.max_files
        self.max_files = max_files
        self.extractor = extractor or AddressExtractor()
        self.normalizer = normalizer

    def process_one(self, document: RawDocument) -> FileOutcome:
        """Normalize and scan a single file, capturing any failure in the outcome."""
        try:
            text = self.normalizer(document.name, document.data)
            addresses = self.extractor.extract(text) if text else []
        except Exception as exc:
            return FileOutcome(filename=document.name, error=f"{type(exc).__name__}: {exc}")
        return FileOutcome(filename=document.name, addresses=addresses, text_length=len(text))

    def process(self, documents: Sequence[RawDocument]) -> BatchSummary:
        """Process *documents* sequentially and aggregate their addresses.

        Raises:
            ValidationFailedError: If no files, or more than ``max_files``, are given.
        """
        if not documents:
            raise ValidationFailedError("At least one file is required")
        if len(documents) > self.max_files:
            raise ValidationFailedError(f"Maximum {self.max_files} files allowed per extraction")

        seen: set[str] = set()
        addresses: list[str] = []
        outcomes: list[FileOutcome] = []
        files_processed = 0
        files_with_addresses = 0

        total = len(documents)
        for i, document in enumerate(documents, 1):
            outcome = self.process_one(document)
            outcomes.append(outcome)

            if not outcome.ok:
                logger.warning("[%d/%d] Skipping %s: %s", i, total, document.name, outcome.error)
                continue
            if not outcome.was_read:
                logger.info("[%d/%d] No text extracted from %s", i, total, document.name)
                continue

            files_processed += 1
            if outcome.addresses:
                files_with_addresses += 1
                for address in outcome.addresses:
                    if address not in seen:
                        seen.add(address)
                        addresses.append(address)
            logger.debug("[%d/%d] %s: %d address(es)", i, total, document.name, len(outcome.addresses))

        logger.info(
            "Batch complete: %d file(s), %d read, %d with addresses, %d unique address(es)",
            total,
            files_processed,
            files_with_addresses,
            len(addresses),
        )
        return BatchSummary(
            addresses=addresses,
            files_processed=files_processed,
            files_with_addresses=files_with_addresses,
            outcomes=outcomes,
        )

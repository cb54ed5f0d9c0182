"""Pydantic models for extraction, parsing, and reconciliation results.

``RawDocument`` — an uploaded file held in memory for one request.
``AddressRecord`` — one parsed address with optional leaderboard metadata.
``ValidationIssue`` — a non-fatal, row-level rejection collected during parsing.
``ComparisonResult`` — the outcome of reconciling an eligible set against a minted set.
``ExtractionResult`` — the response shape of file and thread extraction.

Models serialize with camelCase aliases (``notMinted``, ``totalEligible``)
because that is the wire format consumers already depend on.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_response(self) -> dict[str, Any]:
        """Serialize for an API response, omitting unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RawDocument:
    """An uploaded file: original name plus raw bytes.

    Attributes:
        name: Client-supplied filename; its extension drives format dispatch.
        data: File content.
    """

    name: str
    data: bytes


# ---------------------------------------------------------------------------
# Parsed rows
# ---------------------------------------------------------------------------


class AddressRecord(CamelModel):
    """A single address row produced by the file parser.

    Attributes:
        address: Lowercase canonical EVM address.
        username: Handle found next to the address (``@name``), if any.
        points: Leaderboard points (``1,234 pts``), if any.
        rank: Leaderboard rank (``#12``), if any.
    """

    address: str
    username: str | None = None
    points: float | None = None
    rank: int | None = None

    @field_validator("address")
    @classmethod
    def _lowercase(cls, v: str) -> str:
        return v.strip().lower()


class ValidationIssue(CamelModel):
    """A malformed entry rejected during parsing.

    Attributes:
        address: The raw value that failed validation.
        error: Why it was rejected.
        line: 1-based source line or spreadsheet row, when known.
        file: Source tag: a file name, or ``minted`` / ``eligible`` in comparisons.
    """

    address: str
    error: str
    line: int | None = None
    file: str | None = None


class ParseResult(BaseModel):
    """Output of :func:`recon.address.parser.parse_file`."""

    addresses: list[AddressRecord] = Field(default_factory=list)
    invalid_count: int = 0
    validation_errors: list[ValidationIssue] = Field(default_factory=list)

    def tagged_errors(self, source: str) -> list[ValidationIssue]:
        """Return copies of the validation errors attributed to *source*."""
        return [e.model_copy(update={"file": source}) for e in self.validation_errors]


# ---------------------------------------------------------------------------
# Reconciliation
# ---------------------------------------------------------------------------


class ComparisonStats(CamelModel):
    total_eligible: int
    total_minted: int
    remaining: int
    invalid_addresses: int | None = None


class ComparisonResult(CamelModel):
    """Addresses still owed a mint, with derived counts and row-level issues."""

    not_minted: list[AddressRecord] = Field(default_factory=list)
    stats: ComparisonStats
    validation_errors: list[ValidationIssue] | None = None


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


class ExtractionResult(CamelModel):
    """Response shape shared by file extraction and thread harvesting.

    Attributes:
        filename: Display label for the source(s).
        total_found: Number of unique addresses.
        addresses: Unique lowercase addresses in first-seen order.
        files_processed: Files read (or posts scanned, for threads).
        files_with_addresses: Files that yielded at least one address.
        tweet_text: Root post text, thread harvesting only.
    """

    filename: str
    total_found: int
    addresses: list[str]
    files_processed: int
    files_with_addresses: int
    tweet_text: str | None = None

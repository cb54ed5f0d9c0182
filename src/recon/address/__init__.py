"""EVM address handling — grammar, free-text extraction, file parsing, and result models.

* ``patterns`` — grammar validation and the noise-filtering ``AddressExtractor``.
* ``parser`` — per-row validating parser for address lists (text, JSON, spreadsheets, PDF).
* ``models`` — Pydantic models for parsed rows, comparison results, and extraction responses.
"""

from recon.address.models import (
    AddressRecord,
    ComparisonResult,
    ComparisonStats,
    ExtractionResult,
    ParseResult,
    RawDocument,
    ValidationIssue,
)
from recon.address.parser import parse_file
from recon.address.patterns import (
    BURN_ADDRESS,
    LEADING_ZERO_NIBBLE_THRESHOLD,
    AddressExtractor,
    extract_addresses,
    is_valid_address,
    validate_address_with_details,
)

__all__ = [
    "AddressExtractor",
    "AddressRecord",
    "BURN_ADDRESS",
    "ComparisonResult",
    "ComparisonStats",
    "ExtractionResult",
    "LEADING_ZERO_NIBBLE_THRESHOLD",
    "ParseResult",
    "RawDocument",
    "ValidationIssue",
    "extract_addresses",
    "is_valid_address",
    "parse_file",
    "validate_address_with_details",
]

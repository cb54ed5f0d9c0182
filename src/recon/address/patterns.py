"""EVM address grammar, validation, and free-text extraction.

Two entry points with deliberately different strictness:

* ``is_valid_address`` / ``validate_address_with_details`` check the
  grammar only and are used for explicit, user-supplied addresses.
* ``AddressExtractor.extract`` scans arbitrary text and additionally drops
  known noise (the burn address, zero-padded hex blobs).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

ADDRESS_PREFIX = "0x"
ADDRESS_HEX_LENGTH = 40
ADDRESS_LENGTH = len(ADDRESS_PREFIX) + ADDRESS_HEX_LENGTH

BURN_ADDRESS = "0x" + "0" * ADDRESS_HEX_LENGTH

# Candidates whose hex body starts with at least this many zero nibbles are
# treated as padded non-address data (ABI-encoded topics and the like).
# Domain-tuned value; see DESIGN.md before changing it.
LEADING_ZERO_NIBBLE_THRESHOLD = 30

# Exact-match grammar for a single address string.
ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")

# Scan grammar: no hex character may touch either end of the match.
ADDRESS_SCAN_RE = re.compile(r"(?<![a-fA-F0-9])0x[a-fA-F0-9]{40}(?![a-fA-F0-9])")

_HEX_BODY_RE = re.compile(r"^[a-fA-F0-9]{40}$")


# ---------------------------------------------------------------------------
# Grammar-only validation
# ---------------------------------------------------------------------------


def is_valid_address(address: str) -> bool:
    """Return ``True`` if *address* is ``0x`` followed by exactly 40 hex characters."""
    return bool(ADDRESS_RE.fullmatch(address))


def normalize_address(address: str) -> str:
    """Return the lowercase canonical form, adding a missing ``0x`` prefix."""
    if not address.startswith(ADDRESS_PREFIX):
        return ADDRESS_PREFIX + address.lower()
    return address.lower()


@dataclass
class AddressCheck:
    """Outcome of validating a single user-supplied address.

    Attributes:
        is_valid: Whether the address passed the grammar check.
        error: Human-readable reason when invalid.
        normalized: Lowercase canonical form when valid.
    """

    is_valid: bool
    error: str | None = None
    normalized: str | None = None


def validate_address_with_details(address: str) -> AddressCheck:
    """Validate *address* and explain why it fails, if it does."""
    if not address:
        return AddressCheck(False, error="Address is required")
    if not address.startswith(ADDRESS_PREFIX):
        return AddressCheck(False, error="Address must start with 0x")
    if len(address) != ADDRESS_LENGTH:
        return AddressCheck(False, error=f"Address must be {ADDRESS_LENGTH} characters (got {len(address)})")
    if not _HEX_BODY_RE.fullmatch(address[len(ADDRESS_PREFIX):]):
        return AddressCheck(False, error="Address contains invalid characters (must be hexadecimal)")
    return AddressCheck(True, normalized=normalize_address(address))


def leading_zero_nibbles(address: str) -> int:
    """Count the zero nibbles immediately after the ``0x`` prefix."""
    body = address[len(ADDRESS_PREFIX):]
    return len(body) - len(body.lstrip("0"))


# ---------------------------------------------------------------------------
# Free-text extraction
# ---------------------------------------------------------------------------


@dataclass
class AddressExtractor:
    """Scans text for EVM addresses, filtering noise and deduplicating.

    The extractor holds no state between calls; callers aggregate several
    texts into one ordered set by sharing *seen* and *results* with
    :meth:`extract_into`.

    Attributes:
        zero_nibble_threshold: Minimum leading zero nibbles that mark a
            candidate as padded data.
    """

    zero_nibble_threshold: int = LEADING_ZERO_NIBBLE_THRESHOLD

    def accepts(self, candidate: str) -> bool:
        """Return ``True`` if the lowercase *candidate* survives the noise filters."""
        if candidate == BURN_ADDRESS:
            return False
        return leading_zero_nibbles(candidate) < self.zero_nibble_threshold

    def extract(self, text: str) -> list[str]:
        """Return unique lowercase addresses in *text*, in first-seen order."""
        seen: set[str] = set()
        results: list[str] = []
        self.extract_into(text, seen, results)
        return results

    def extract_into(self, text: str, seen: set[str], results: list[str]) -> int:
        """Append addresses from *text* that are not already in *seen*.

        Returns:
            Number of distinct addresses found in *text* (including ones
            already present in *seen*).
        """
        found: set[str] = set()
        for m in ADDRESS_SCAN_RE.finditer(text):
            candidate = m.group(0).lower()
            if not self.accepts(candidate):
                continue
            found.add(candidate)
            if candidate not in seen:
                seen.add(candidate)
                results.append(candidate)
        return len(found)


def extract_addresses(text: str) -> list[str]:
    """Module-level shortcut for ``AddressExtractor().extract(text)``."""
    return AddressExtractor().extract(text)

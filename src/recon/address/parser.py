"""Row-level address file parser used by comparisons and collection uploads.

Unlike the free-text ``AddressExtractor``, this parser treats a file as a
list of intended addresses: every entry is validated individually, and
entries that look like an address but fail validation are reported as
``ValidationIssue`` rows instead of being silently dropped.

Supported layouts:

* **text / csv** (default) — each line starting with ``0x`` opens an entry;
  following non-empty lines belong to it. Leaderboard exports put
  ``@username``, ``1,234 pts`` and ``#rank`` on those lines.
* **json** — an array of address strings or objects.
* **xlsx / xls** — the first sheet, with a header row.
* **pdf** — the text layer, parsed like a text file.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from recon.address.models import AddressRecord, ParseResult, ValidationIssue
from recon.address.patterns import validate_address_with_details
from recon.exceptions import ParseError

logger = logging.getLogger(__name__)

_ENTRY_START_RE = re.compile(r"^0x[a-zA-Z0-9]+")
_USERNAME_RE = re.compile(r"@(\w+)")
_POINTS_RE = re.compile(r"([\d,]+)\s*pts")
_RANK_RE = re.compile(r"#(\d+)")

_ADDRESS_KEYS = ("address", "wallet", "walletAddress")
_USERNAME_KEYS = ("username", "user", "name")
_POINTS_KEYS = ("points", "score")
_RANK_KEYS = ("rank", "position")

_SHEET_ADDRESS_KEYS = ("address", "Address", "wallet", "Wallet", "walletAddress", "WalletAddress")
_SHEET_USERNAME_KEYS = ("username", "Username", "user", "User")
_SHEET_POINTS_KEYS = ("points", "Points", "score", "Score")
_SHEET_RANK_KEYS = ("rank", "Rank", "position", "Position")


class _Collector:
    """Accumulates unique records and issues while a file is parsed."""

    def __init__(self) -> None:
        self.records: list[AddressRecord] = []
        self.issues: list[ValidationIssue] = []
        self._seen: set[str] = set()

    def add(self, raw_address: str, *, line: int | None = None, **meta: Any) -> None:
        check = validate_address_with_details(raw_address.strip())
        if not check.is_valid or check.normalized is None:
            self.issues.append(
                ValidationIssue(address=raw_address or "unknown", error=check.error or "Invalid address", line=line)
            )
            return
        if check.normalized in self._seen:
            return
        self._seen.add(check.normalized)
        self.records.append(AddressRecord(address=check.normalized, **meta))

    def result(self) -> ParseResult:
        return ParseResult(
            addresses=self.records,
            invalid_count=len(self.issues),
            validation_errors=self.issues,
        )


def _first(mapping: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = mapping.get(key)
        if value:
            return value
    return None


def _as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(str(value).replace(",", ""))
    except ValueError:
        return None


def _as_int(value: Any) -> int | None:
    number = _as_float(value)
    return int(number) if number is not None else None


def _as_str(value: Any) -> str | None:
    return str(value) if value not in (None, "") else None


# ---------------------------------------------------------------------------
# Text / CSV
# ---------------------------------------------------------------------------


def _entry_metadata(entry_text: str) -> dict[str, Any]:
    username = _USERNAME_RE.search(entry_text)
    points = _POINTS_RE.search(entry_text)
    rank = _RANK_RE.search(entry_text)
    return {
        "username": username.group(1) if username else None,
        "points": _as_float(points.group(1)) if points else None,
        "rank": int(rank.group(1)) if rank else None,
    }


def parse_text(content: str) -> ParseResult:
    """Parse line-oriented text where each entry starts with an ``0x`` token."""
    collector = _Collector()
    entry: list[str] = []
    entry_line = 0

    def flush() -> None:
        if not entry:
            return
        token = _ENTRY_START_RE.match(entry[0])
        raw = token.group(0) if token else entry[0]
        collector.add(raw, line=entry_line + 1, **_entry_metadata("\n".join(entry)))

    for i, raw_line in enumerate(content.splitlines()):
        line = raw_line.strip()
        if _ENTRY_START_RE.match(line):
            flush()
            entry = [line]
            entry_line = i
        elif line and entry:
            entry.append(line)
    flush()
    return collector.result()


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------


def parse_json(content: str) -> ParseResult:
    """Parse a JSON array of address strings or address objects.

    Raises:
        ParseError: If *content* is not valid JSON.
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ParseError("Invalid JSON format") from exc

    collector = _Collector()
    items = data if isinstance(data, list) else [data]
    for item in items:
        if isinstance(item, str):
            collector.add(item)
        elif isinstance(item, dict):
            address = _first(item, _ADDRESS_KEYS)
            collector.add(
                address if isinstance(address, str) else "",
                username=_as_str(_first(item, _USERNAME_KEYS)),
                points=_as_float(_first(item, _POINTS_KEYS)),
                rank=_as_int(_first(item, _RANK_KEYS)),
            )
    return collector.result()


# ---------------------------------------------------------------------------
# Spreadsheets
# ---------------------------------------------------------------------------


def parse_spreadsheet(data: bytes) -> ParseResult:
    """Parse the first sheet of a workbook, using its first row as headers.

    Raises:
        ParseError: If the workbook cannot be opened.
    """
    from recon.ingest.workbook import read_sheets

    try:
        sheets = read_sheets(data, first_only=True)
    except Exception as exc:
        raise ParseError("Invalid Excel format") from exc

    collector = _Collector()
    rows = iter(sheets[0]) if sheets else iter(())
    header = next(rows, None)
    if header is None:
        return collector.result()
    columns = [str(h) if h is not None else f"__col{i}" for i, h in enumerate(header)]
    for i, values in enumerate(rows):
        row = {col: val for col, val in zip(columns, values) if val is not None}
        if not row:
            continue
        address = _first(row, _SHEET_ADDRESS_KEYS)
        if address is None:
            address = next(iter(row.values()))
        if not isinstance(address, str):
            continue
        collector.add(
            address,
            line=i + 2,
            username=_as_str(_first(row, _SHEET_USERNAME_KEYS)),
            points=_as_float(_first(row, _SHEET_POINTS_KEYS)),
            rank=_as_int(_first(row, _SHEET_RANK_KEYS)),
        )
    return collector.result()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def parse_file(filename: str, data: bytes) -> ParseResult:
    """Parse *data* according to *filename*'s extension.

    Returns:
        A ``ParseResult`` with unique lowercase records, the number of
        rejected entries, and one ``ValidationIssue`` per rejection.

    Raises:
        ParseError: When the whole document is unreadable (bad JSON or workbook).
    """
    ext = filename.lower().rpartition(".")[2]
    if ext == "json":
        result = parse_json(data.decode("utf-8", errors="replace"))
    elif ext in ("xlsx", "xls"):
        result = parse_spreadsheet(data)
    elif ext == "pdf":
        from recon.ingest.normalizer import normalize

        result = parse_text(normalize(filename, data))
    else:
        result = parse_text(data.decode("utf-8", errors="replace"))

    logger.debug(
        "Parsed %s: %d address(es), %d invalid",
        filename,
        len(result.addresses),
        result.invalid_count,
    )
    return result

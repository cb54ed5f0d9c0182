"""Write collection memberships to spreadsheet files."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Sequence
from urllib.parse import quote

logger = logging.getLogger(__name__)

HEADERS = ["address"]

# Path separators, characters Windows rejects, and control characters.
_UNSAFE_FILENAME_RE = re.compile(r'[\\/:*?"<>|\x00-\x1f\x7f]')
_NON_ASCII_RE = re.compile(r"[^\x20-\x7e]")


def safe_filename(name: str, *, fallback: str = "collection") -> str:
    """Return *name* usable as a single path component on any platform."""
    cleaned = _UNSAFE_FILENAME_RE.sub("_", name).strip(" .")
    return cleaned or fallback


def content_disposition(filename: str) -> str:
    """Build an ``attachment`` header value that survives non-ASCII names.

    Latin-1-only header encoders get an ASCII ``filename``; clients that
    understand RFC 6266 pick up the UTF-8 ``filename*`` form instead.
    """
    filename = safe_filename(filename)
    ascii_name = _NON_ASCII_RE.sub("_", filename)
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename, safe='')}"


def write_xlsx(addresses: Sequence[str], output_path: Path, *, sheet_name: str = "Addresses") -> Path:
    """Write *addresses* to an XLSX workbook with a single ``address`` column.

    The header matches what :func:`recon.address.parser.parse_spreadsheet`
    looks for, so an exported workbook can be uploaded back unchanged.

    Returns:
        The written path.
    """
    from openpyxl import Workbook
    from openpyxl.styles import Alignment, Font, PatternFill

    output_path.parent.mkdir(parents=True, exist_ok=True)

    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name  # type: ignore[union-attr]

    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
    for col_idx, header in enumerate(HEADERS, 1):
        cell = ws.cell(row=1, column=col_idx, value=header)  # type: ignore[union-attr]
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal="center")

    for row_idx, address in enumerate(addresses, 2):
        ws.cell(row=row_idx, column=1, value=address)  # type: ignore[union-attr]

    ws.column_dimensions["A"].width = 46  # type: ignore[union-attr]
    ws.freeze_panes = "A2"  # type: ignore[union-attr]

    wb.save(output_path)
    logger.info("Wrote %d address(es) to %s", len(addresses), output_path)
    return output_path

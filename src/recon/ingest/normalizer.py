"""Convert uploaded documents into plain text for address scanning.

Format selection is a closed mapping from file extension to a
``DocumentFormat`` member, and from each member to one reader function.
Unknown extensions fall back to ``DocumentFormat.TEXT``.

``normalize`` never raises: a document that cannot be decoded yields
``""`` and a log entry, so one bad file cannot abort a batch.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)

# Keys whose string values are harvested from JSON exports (chat logs,
# social dumps, CMS exports).
TEXT_FIELDS: tuple[str, ...] = ("text", "message", "content", "body", "description", "caption", "bio")

# Keys whose array values are recursed into.
CONTAINER_FIELDS: tuple[str, ...] = ("messages", "items", "data", "posts", "comments", "replies")

DEFAULT_MAX_DEPTH = 10


class DocumentFormat(str, Enum):
    """Supported document families."""

    PDF = "pdf"
    SPREADSHEET = "spreadsheet"
    JSON = "json"
    TEXT = "text"


_EXTENSION_FORMATS: dict[str, DocumentFormat] = {
    "pdf": DocumentFormat.PDF,
    "xlsx": DocumentFormat.SPREADSHEET,
    "xls": DocumentFormat.SPREADSHEET,
    "json": DocumentFormat.JSON,
}


def detect_format(filename: str) -> DocumentFormat:
    """Map *filename*'s extension to a ``DocumentFormat`` (default ``TEXT``)."""
    _, dot, ext = filename.rpartition(".")
    if not dot:
        return DocumentFormat.TEXT
    return _EXTENSION_FORMATS.get(ext.lower(), DocumentFormat.TEXT)


# ---------------------------------------------------------------------------
# Readers
# ---------------------------------------------------------------------------


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def pdf_to_text(data: bytes) -> str:
    """Extract the embedded text layer of every page."""
    from pypdf import PdfReader

    reader = PdfReader(io.BytesIO(data))
    pages = [page.extract_text() or "" for page in reader.pages]
    return "\n".join(pages)


def spreadsheet_to_text(data: bytes) -> str:
    """Render every sheet of an ``.xlsx`` or ``.xls`` workbook as CSV text, one block per sheet."""
    from recon.ingest.workbook import read_sheets

    blocks: list[str] = []
    for rows in read_sheets(data):
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        for row in rows:
            writer.writerow(["" if cell is None else cell for cell in row])
        blocks.append(buf.getvalue())
    return "\n".join(blocks)


def json_to_text(data: bytes, *, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """Harvest text-bearing fields from a JSON document.

    Falls back to the raw decoded text when the document is not valid JSON.
    """
    raw = _decode(data)
    try:
        document = json.loads(raw)
    except (json.JSONDecodeError, RecursionError):
        logger.debug("JSON document did not parse; scanning raw text instead")
        return raw
    return harvest_json_text(document, max_depth=max_depth)


def harvest_json_text(obj: Any, depth: int = 0, *, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """Collect text from *obj*, recursing through container fields up to *max_depth*."""
    if depth > max_depth:
        return ""
    if isinstance(obj, str):
        return obj

    parts: list[str] = []
    if isinstance(obj, list):
        for item in obj:
            parts.append(harvest_json_text(item, depth + 1, max_depth=max_depth))
    elif isinstance(obj, dict):
        for key in TEXT_FIELDS:
            value = obj.get(key)
            if not value:
                continue
            if isinstance(value, str):
                parts.append(value)
            elif isinstance(value, list):
                for part in value:
                    if isinstance(part, str):
                        parts.append(part)
                    elif isinstance(part, dict) and isinstance(part.get("text"), str):
                        parts.append(part["text"])
        for key in CONTAINER_FIELDS:
            value = obj.get(key)
            if isinstance(value, list):
                parts.append(harvest_json_text(value, depth + 1, max_depth=max_depth))
    return "\n".join(parts)


def plain_text(data: bytes) -> str:
    return _decode(data)


_READERS: dict[DocumentFormat, Callable[[bytes], str]] = {
    DocumentFormat.PDF: pdf_to_text,
    DocumentFormat.SPREADSHEET: spreadsheet_to_text,
    DocumentFormat.JSON: json_to_text,
    DocumentFormat.TEXT: plain_text,
}


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def normalize(filename: str, data: bytes, *, max_depth: int | None = None) -> str:
    """Convert *data* to text according to *filename*'s extension.

    Args:
        filename: Original filename, used only for format detection.
        data: Raw file bytes.
        max_depth: JSON recursion bound; defaults to
            ``settings.extraction.json_max_depth``.

    Returns:
        The extracted text, or ``""`` if the document could not be read.
    """
    fmt = detect_format(filename)
    try:
        if fmt is DocumentFormat.JSON:
            if max_depth is None:
                from recon.settings import get_settings

                max_depth = get_settings().extraction.json_max_depth
            return json_to_text(data, max_depth=max_depth)
        return _READERS[fmt](data)
    except Exception:
        logger.exception("Could not read %s as %s; treating it as empty", filename, fmt.value)
        return ""

"""Workbook row access for both spreadsheet families.

OOXML workbooks (``.xlsx``, a zip container) are read with openpyxl;
legacy BIFF workbooks (``.xls``) with xlrd. The container is detected
from the leading bytes, so a mislabelled extension still opens.
Empty cells come back as ``None`` from both readers.
"""

from __future__ import annotations

import io
from typing import Any

_ZIP_MAGIC = b"PK\x03\x04"

Row = tuple[Any, ...]


def is_ooxml(data: bytes) -> bool:
    return data[:4] == _ZIP_MAGIC


def _ooxml_sheets(data: bytes, first_only: bool) -> list[list[Row]]:
    from openpyxl import load_workbook

    workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    try:
        sheets = workbook.worksheets[:1] if first_only else workbook.worksheets
        return [list(sheet.iter_rows(values_only=True)) for sheet in sheets]
    finally:
        workbook.close()


def _biff_sheets(data: bytes, first_only: bool) -> list[list[Row]]:
    import xlrd

    book = xlrd.open_workbook(file_contents=data, on_demand=True)
    try:
        sheets = book.sheets()[:1] if first_only else book.sheets()
        return [
            [tuple(None if v == "" else v for v in sheet.row_values(r)) for r in range(sheet.nrows)]
            for sheet in sheets
        ]
    finally:
        book.release_resources()


def read_sheets(data: bytes, *, first_only: bool = False) -> list[list[Row]]:
    """Return the rows of every sheet (or only the first) as value tuples.

    Reader errors for an unreadable workbook propagate to the caller.
    """
    if is_ooxml(data):
        return _ooxml_sheets(data, first_only)
    return _biff_sheets(data, first_only)

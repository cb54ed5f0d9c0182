"""Unit tests for document-to-text normalization."""

from __future__ import annotations

import json

import pytest

from recon.address.patterns import BURN_ADDRESS, extract_addresses
from recon.ingest.normalizer import (
    DocumentFormat,
    detect_format,
    harvest_json_text,
    json_to_text,
    normalize,
)

ADDR_A = "0x" + "a" * 39 + "1"
ADDR_B = "0x" + "b" * 39 + "2"


class TestDetectFormat:
    @pytest.mark.parametrize(
        "filename, expected",
        [
            ("report.pdf", DocumentFormat.PDF),
            ("REPORT.PDF", DocumentFormat.PDF),
            ("book.xlsx", DocumentFormat.SPREADSHEET),
            ("legacy.xls", DocumentFormat.SPREADSHEET),
            ("dump.json", DocumentFormat.JSON),
            ("list.csv", DocumentFormat.TEXT),
            ("notes.txt", DocumentFormat.TEXT),
            ("no_extension", DocumentFormat.TEXT),
            ("weird.bin", DocumentFormat.TEXT),
        ],
    )
    def test_mapping(self, filename: str, expected: DocumentFormat) -> None:
        assert detect_format(filename) is expected


class TestJsonHarvesting:
    """Text fields are harvested; container fields are recursed into."""

    def test_text_fields(self) -> None:
        doc = {"text": "a", "message": "b", "caption": "c", "ignored": ADDR_A}
        text = harvest_json_text(doc)
        assert "a" in text and "b" in text and "c" in text
        assert ADDR_A not in text

    def test_nested_containers(self) -> None:
        doc = {"messages": [{"text": f"hi {ADDR_A}", "replies": [{"body": ADDR_B}]}]}
        assert extract_addresses(harvest_json_text(doc)) == [ADDR_A, ADDR_B]

    def test_telegram_style_text_arrays(self) -> None:
        doc = {"messages": [{"text": ["gm ", {"type": "link", "text": ADDR_A}]}]}
        assert ADDR_A in harvest_json_text(doc)

    def test_top_level_list_of_strings(self) -> None:
        assert ADDR_B in harvest_json_text(["x", ADDR_B])

    def test_depth_bound(self) -> None:
        doc: dict = {"text": ADDR_A}
        for _ in range(20):
            doc = {"items": [doc]}
        assert ADDR_A not in harvest_json_text(doc, max_depth=10)
        assert ADDR_A in harvest_json_text(doc, max_depth=50)

    def test_invalid_json_falls_back_to_raw_text(self) -> None:
        raw = f"not json but has {ADDR_A}".encode()
        assert ADDR_A in json_to_text(raw)


class TestSpreadsheets:
    def test_two_sheets_burn_addresses_excluded(self, make_workbook) -> None:
        data = make_workbook(
            {
                "First": [["address"], [ADDR_A], [BURN_ADDRESS]],
                "Second": [["wallet", "note"], [BURN_ADDRESS, "burn"], [ADDR_B, "ok"]],
            }
        )
        text = normalize("holders.xlsx", data)
        assert extract_addresses(text) == [ADDR_A, ADDR_B]

    def test_empty_cells_rendered(self, make_workbook) -> None:
        data = make_workbook({"S": [["a", None, "c"]]})
        assert normalize("s.xlsx", data).splitlines()[0] == "a,,c"

    def test_legacy_xls_every_sheet_read(self, make_xls) -> None:
        data = make_xls(
            {
                "First": [["address"], [ADDR_A]],
                "Second": [["wallet"], [BURN_ADDRESS], [ADDR_B]],
            }
        )
        text = normalize("holders.xls", data)
        assert extract_addresses(text) == [ADDR_A, ADDR_B]

    def test_legacy_xls_empty_cells_rendered(self, make_xls) -> None:
        data = make_xls({"S": [["a", None, "c"]]})
        assert normalize("s.xls", data).splitlines()[0] == "a,,c"


class TestNormalize:
    def test_plain_text(self) -> None:
        assert normalize("a.txt", f"x {ADDR_A}".encode()) == f"x {ADDR_A}"

    def test_invalid_utf8_replaced(self) -> None:
        text = normalize("a.csv", b"\xff\xfe" + ADDR_A.encode())
        assert ADDR_A in text

    def test_json_uses_configured_depth(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RECON_EXTRACTION__JSON_MAX_DEPTH", "1")
        doc = {"items": [{"items": [{"text": ADDR_A}]}]}
        assert ADDR_A not in normalize("d.json", json.dumps(doc).encode())

    def test_corrupt_pdf_returns_empty(self) -> None:
        assert normalize("broken.pdf", b"definitely not a pdf") == ""

    def test_corrupt_workbook_returns_empty(self) -> None:
        assert normalize("broken.xlsx", b"PK\x03\x04 not really") == ""

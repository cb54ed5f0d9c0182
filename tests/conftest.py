"""Recon test configuration — shared fixtures for unit and integration tests."""

from __future__ import annotations

import io
from pathlib import Path

import pytest


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Clear the settings and shared-store LRU caches between tests."""
    from recon.api.deps import _store_for
    from recon.settings.config import get_settings

    get_settings.cache_clear()
    _store_for.cache_clear()
    yield
    get_settings.cache_clear()
    _store_for.cache_clear()


@pytest.fixture(autouse=True)
def _isolated_database(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the default SQLite database at a per-test file."""
    db_path = tmp_path / "recon.db"
    monkeypatch.setenv("RECON_STORAGE__SQLITE_PATH", str(db_path))
    monkeypatch.delenv("RECON_STORAGE__DB_URL", raising=False)
    monkeypatch.delenv("RECON_ENV", raising=False)
    return db_path


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


@pytest.fixture()
def collection_store(tmp_path: Path):
    """Create a disposable ``CollectionStore`` backed by a temporary SQLite DB."""
    from recon.store.collection_store import CollectionStore

    return CollectionStore(db_path=tmp_path / "test_collections.db")


# ---------------------------------------------------------------------------
# Workbooks
# ---------------------------------------------------------------------------


def _build_workbook(sheets: dict[str, list[list[object]]]) -> bytes:
    from openpyxl import Workbook

    wb = Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(title=name)
        for row in rows:
            ws.append(row)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def _build_legacy_workbook(sheets: dict[str, list[list[object]]]) -> bytes:
    import xlwt

    wb = xlwt.Workbook()
    for name, rows in sheets.items():
        ws = wb.add_sheet(name)
        for r, row in enumerate(rows):
            for c, value in enumerate(row):
                if value is not None:
                    ws.write(r, c, value)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


@pytest.fixture()
def make_workbook():
    """Return a builder for in-memory XLSX workbooks: ``make_workbook({sheet_name: rows})``."""
    return _build_workbook


@pytest.fixture()
def make_xls():
    """Return a builder for in-memory legacy ``.xls`` workbooks, same call shape as ``make_workbook``."""
    return _build_legacy_workbook


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests that exercise the HTTP app end to end")
    config.addinivalue_line("markers", "slow: marks tests that take more than a few seconds")

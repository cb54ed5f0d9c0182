"""Unit tests for the shared API dependencies: upload limits and the store provider."""

from __future__ import annotations

import io

import pytest
from fastapi import UploadFile

from recon.api.deps import get_store, read_uploads
from recon.exceptions import ValidationFailedError

ADDR_A = "0x" + "a" * 39 + "1"


class _TrackedBody(io.BytesIO):
    """File body that records whether it was read."""

    def __init__(self, data: bytes) -> None:
        super().__init__(data)
        self.was_read = False

    def read(self, *args, **kwargs) -> bytes:
        self.was_read = True
        return super().read(*args, **kwargs)


def _upload(name: str, data: bytes = ADDR_A.encode()) -> tuple[UploadFile, _TrackedBody]:
    body = _TrackedBody(data)
    return UploadFile(file=body, filename=name), body


class TestReadUploads:
    def test_reads_allowed_files(self) -> None:
        upload, _ = _upload("list.TXT")
        documents = read_uploads([upload], max_files=1)
        assert [(d.name, d.data) for d in documents] == [("list.TXT", ADDR_A.encode())]

    def test_count_checked_before_any_body_is_read(self) -> None:
        pairs = [_upload(f"f{i}.txt") for i in range(3)]
        with pytest.raises(ValidationFailedError, match="Maximum 2 files allowed per extraction"):
            read_uploads([upload for upload, _ in pairs], max_files=2)
        assert not any(body.was_read for _, body in pairs)

    def test_extension_checked_before_any_body_is_read(self) -> None:
        good, good_body = _upload("ok.txt")
        bad, bad_body = _upload("tool.exe")
        with pytest.raises(ValidationFailedError) as exc_info:
            read_uploads([good, bad])
        assert exc_info.value.details[0]["files"] == ["tool.exe"]
        assert not good_body.was_read
        assert not bad_body.was_read

    def test_oversized_file_named(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RECON_EXTRACTION__MAX_FILE_SIZE_MB", "1")
        upload, _ = _upload("big.txt", b"x" * (1024 * 1024 + 1))
        with pytest.raises(ValidationFailedError, match="File\\(s\\) too large") as exc_info:
            read_uploads([upload])
        assert exc_info.value.details[0]["files"][0].startswith("big.txt (")


class TestGetStore:
    def test_store_shared_across_calls(self) -> None:
        assert get_store() is get_store()

    def test_new_store_when_database_changes(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        from recon.settings import get_settings

        first = get_store()
        monkeypatch.setenv("RECON_STORAGE__SQLITE_PATH", str(tmp_path / "other.db"))
        get_settings.cache_clear()
        second = get_store()
        assert second is not first
        assert (tmp_path / "other.db").exists()

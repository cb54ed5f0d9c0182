"""Unit tests for recon settings.

Covers default loading, env var overrides, the dev profile, path
resolution, and per-section defaults.
"""

from __future__ import annotations

import os


class TestSettings:
    """Core settings loading and override mechanics."""

    def test_default_settings_load(self):
        """Settings should load without any env overrides."""
        from recon.settings import get_settings

        s = get_settings()
        assert s.env == "local"
        assert s.debug is False
        assert s.log_level == "INFO"

    def test_get_settings_is_cached(self):
        from recon.settings import get_settings

        assert get_settings() is get_settings()

    def test_env_override(self, monkeypatch):
        """RECON_LOG_LEVEL should override the default."""
        monkeypatch.setenv("RECON_LOG_LEVEL", "WARNING")
        from recon.settings.config import Settings

        s = Settings()
        assert s.log_level == "WARNING"

    def test_nested_env_var_override_double_underscore(self, monkeypatch):
        """Double-underscore nested env vars should override section fields."""
        monkeypatch.setenv("RECON_THREAD__MAX_PAGES", "4")
        from recon.settings.config import Settings

        s = Settings()
        assert s.thread.max_pages == 4
        assert s.thread.page_size == 100

    def test_multiple_section_overrides(self, monkeypatch):
        """Multiple env overrides across sections should all apply."""
        monkeypatch.setenv("RECON_API__PORT", "9999")
        monkeypatch.setenv("RECON_EXTRACTION__MAX_FILES", "5")
        monkeypatch.setenv("RECON_SCREENER__MAX_BATCH_SIZE", "10")
        from recon.settings.config import Settings

        s = Settings()
        assert s.api.port == 9999
        assert s.extraction.max_files == 5
        assert s.screener.max_batch_size == 10

    def test_relative_sqlite_path_resolved_against_project_root(self, monkeypatch):
        monkeypatch.setenv("RECON_STORAGE__SQLITE_PATH", "data/other.db")
        from recon.settings.config import Settings

        s = Settings()
        assert os.path.isabs(s.storage.sqlite_path)
        assert s.storage.sqlite_path == str(s.project_root / "data" / "other.db")

    def test_absolute_sqlite_path_kept(self, _isolated_database):
        from recon.settings.config import Settings

        assert Settings().storage.sqlite_path == str(_isolated_database)


class TestDevProfile:
    """RECON_ENV=dev loads settings.dev.toml over the defaults."""

    def test_dev_profile(self, monkeypatch):
        monkeypatch.setenv("RECON_ENV", "dev")
        from recon.settings.config import Settings

        s = Settings()
        assert s.env == "dev"
        assert s.log_level == "DEBUG"
        assert s.api.require_auth is True
        assert s.storage.db_url.startswith("postgresql+pg8000://")

    def test_env_beats_profile(self, monkeypatch):
        monkeypatch.setenv("RECON_ENV", "dev")
        monkeypatch.setenv("RECON_API__REQUIRE_AUTH", "false")
        from recon.settings.config import Settings

        s = Settings()
        assert s.api.require_auth is False
        # Sibling keys from the profile survive a partial section override
        assert s.api.port == 8100

    def test_unknown_profile_falls_back_to_defaults(self, monkeypatch):
        monkeypatch.setenv("RECON_ENV", "nonexistent")
        from recon.settings.config import Settings

        s = Settings()
        assert s.env == "nonexistent"
        assert s.api.require_auth is False


class TestExtractionSettings:
    def test_defaults(self):
        from recon.settings.config import Settings

        s = Settings()
        assert s.extraction.max_files == 100
        assert s.extraction.max_file_size_mb == 50
        assert s.extraction.max_file_size_bytes == 50 * 1024 * 1024
        assert s.extraction.allowed_extensions == ["csv", "txt", "json", "xlsx", "xls", "pdf"]
        assert s.extraction.json_max_depth == 10

    def test_extensions_normalized(self, monkeypatch):
        monkeypatch.setenv("RECON_EXTRACTION__ALLOWED_EXTENSIONS", '[".CSV", "Txt"]')
        from recon.settings.config import Settings

        s = Settings()
        assert s.extraction.allowed_extensions == ["csv", "txt"]


class TestThreadSettings:
    def test_defaults(self):
        from recon.settings.config import Settings

        s = Settings()
        assert s.thread.api_base_url == "https://api.twitter.com/2"
        assert s.thread.bearer_token == ""
        assert s.thread.page_size == 100
        assert s.thread.max_pages == 10

    def test_bearer_token_override(self, monkeypatch):
        monkeypatch.setenv("RECON_THREAD__BEARER_TOKEN", "secret")
        from recon.settings.config import Settings

        assert Settings().thread.bearer_token == "secret"


class TestAPISettings:
    def test_defaults(self):
        from recon.settings.config import Settings

        s = Settings()
        assert s.api.port == 8100
        assert s.api.require_auth is False
        assert s.api.api_keys == []

    def test_api_keys_from_env(self, monkeypatch):
        monkeypatch.setenv("RECON_API__API_KEYS", '["k1", "k2"]')
        from recon.settings.config import Settings

        assert Settings().api.api_keys == ["k1", "k2"]

"""Configuration loader for recon using Pydantic settings.

Config precedence (highest wins):
  1. CLI flags (where applicable)
  2. Environment variables (RECON_* with __ for nesting)
  3. settings.local.toml
  4. settings.<env>.toml
  5. settings.default.toml
"""

from __future__ import annotations

import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

_THIS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = Path(os.getenv("RECON_PROJECT_ROOT", _THIS_DIR.parents[2]))
CONFIG_DIR = PROJECT_ROOT / "config"

ENV_VAR_NAME = "RECON_ENV"
DEFAULT_ENV = "local"


def _resolve_env() -> str:
    return (os.getenv(ENV_VAR_NAME) or DEFAULT_ENV).strip()


def _load_toml(path: Path) -> dict[str, Any]:
    if path.is_file():
        with open(path, "rb") as f:
            return tomllib.load(f)
    return {}


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class ExtractionSettings(BaseSettings):
    """Upload limits and document normalization bounds."""

    model_config = SettingsConfigDict(env_prefix="RECON_EXTRACTION__")

    max_files: int = 100
    max_file_size_mb: int = 50
    allowed_extensions: list[str] = ["csv", "txt", "json", "xlsx", "xls", "pdf"]
    json_max_depth: int = 10

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


class ThreadSettings(BaseSettings):
    """Social thread API (X / Twitter v2) configuration.

    ``max_pages`` is a hard contract: threads with more than
    ``max_pages * page_size`` replies are only partially harvested.
    """

    model_config = SettingsConfigDict(env_prefix="RECON_THREAD__")

    api_base_url: str = "https://api.twitter.com/2"
    bearer_token: str = ""
    page_size: int = Field(default=100, ge=10, le=100)
    max_pages: int = Field(default=10, ge=1)
    timeout_sec: float = 15.0


class StorageSettings(BaseSettings):
    """Persistence backend for collections and comparison audits."""

    model_config = SettingsConfigDict(env_prefix="RECON_STORAGE__")

    sqlite_path: str = "data/recon.db"
    db_url: str = ""
    echo: bool = False


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(env_prefix="RECON_API__")

    host: str = "0.0.0.0"
    port: int = 8100
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    require_auth: bool = False
    api_keys: list[str] = Field(default_factory=list)


class ScreenerSettings(BaseSettings):
    """Wallet screener settings."""

    model_config = SettingsConfigDict(env_prefix="RECON_SCREENER__")

    etherscan_api_key: str = ""
    max_batch_size: int = 50


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    """Root recon settings with nested sections."""

    model_config = SettingsConfigDict(
        env_prefix="RECON_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    env: str = Field(default_factory=_resolve_env)
    project_root: Path = Field(default=PROJECT_ROOT)
    debug: bool = False
    log_level: str = "INFO"

    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    thread: ThreadSettings = Field(default_factory=ThreadSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    api: APISettings = Field(default_factory=APISettings)
    screener: ScreenerSettings = Field(default_factory=ScreenerSettings)

    @model_validator(mode="before")
    @classmethod
    def _merge_toml_files(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Layer TOML config files before env var overrides."""
        defaults = _load_toml(CONFIG_DIR / "settings.default.toml")
        env_name = (values.get("env") or os.getenv(ENV_VAR_NAME) or DEFAULT_ENV).strip()
        env_overrides = _load_toml(CONFIG_DIR / f"settings.{env_name}.toml")
        local_overrides = _load_toml(CONFIG_DIR / "settings.local.toml")

        # Merge: defaults < env-specific < local < explicit values
        merged: dict[str, Any] = {}
        for layer in (defaults, env_overrides, local_overrides, values):
            for key, val in layer.items():
                if isinstance(val, dict) and isinstance(merged.get(key), dict):
                    merged[key] = {**merged[key], **val}
                else:
                    merged[key] = val
        return merged

    @model_validator(mode="after")
    def _resolve_paths(self) -> "Settings":
        """Normalize relative paths against project_root."""
        if not Path(self.storage.sqlite_path).is_absolute():
            self.storage.sqlite_path = str(self.project_root / self.storage.sqlite_path)
        self.extraction.allowed_extensions = [
            ext.lower().lstrip(".") for ext in self.extraction.allowed_extensions
        ]
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton settings instance (cached)."""
    return Settings()

"""Logging setup shared by the API app and the CLI.

On deployed environments (``RECON_ENV != local``) emits JSON-structured
logs compatible with Cloud Logging severity parsing::

    {"severity": "INFO", "message": "...", "logger": "..."}

Locally, uses a human-readable plain-text format.
"""

from __future__ import annotations

import json
import logging
import sys

_configured = False


class CloudFormatter(logging.Formatter):
    """JSON formatter emitting Cloud Logging-compatible entries."""

    _LEVEL_MAP = {
        "DEBUG": "DEBUG",
        "INFO": "INFO",
        "WARNING": "WARNING",
        "ERROR": "ERROR",
        "CRITICAL": "CRITICAL",
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as a JSON object with severity."""
        entry = {
            "severity": self._LEVEL_MAP.get(record.levelname, "DEFAULT"),
            "message": record.getMessage(),
            "logger": record.name,
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
        }
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(level: str | None = None, *, force: bool = False) -> None:
    """Configure root logging once per process.

    Args:
        level: Log level name; defaults to ``settings.log_level``.
        force: Reconfigure even if logging was already set up.
    """
    global _configured  # noqa: PLW0603
    if _configured and not force:
        return

    from recon.settings import get_settings

    settings = get_settings()
    log_level = (level or settings.log_level or "INFO").upper()

    if settings.env != "local":
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(CloudFormatter())
        logging.root.handlers.clear()
        logging.root.addHandler(handler)
        logging.root.setLevel(getattr(logging, log_level, logging.INFO))
    else:
        logging.basicConfig(
            level=getattr(logging, log_level, logging.INFO),
            format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
            stream=sys.stderr,
        )

    # Quieten noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("pypdf").setLevel(logging.ERROR)
    _configured = True

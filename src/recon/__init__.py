"""Address Extraction & Reconciliation engine — EVM address harvesting, collections, and mint reconciliation."""

from __future__ import annotations

try:
    from importlib.metadata import version

    __version__ = version("address-recon")
except Exception:
    __version__ = "0.0.0"

"""Wallet screener (placeholder risk profiles)."""

from recon.screener.screener import ScreenResult, ScreenerStatus, screen_batch, screener_status

__all__ = ["ScreenResult", "ScreenerStatus", "screen_batch", "screener_status"]

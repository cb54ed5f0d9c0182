"""Wallet screener endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import Field

from recon.address.models import CamelModel
from recon.api.deps import require_api_key
from recon.screener import screen_batch, screener_status

screener_router = APIRouter(
    prefix="/wallet-screener",
    tags=["wallet-screener"],
    dependencies=[Depends(require_api_key)],
)


class ScreenBatchRequest(CamelModel):
    addresses: list[str] = Field(..., description="Addresses to screen (1 to screener.max_batch_size).")
    chain_id: int = Field(1, ge=1, description="EVM chain id.")


@screener_router.post("/batch")
def screen_wallets(req: ScreenBatchRequest) -> list[dict[str, Any]]:
    """Return a risk profile per address."""
    return [r.to_response() for r in screen_batch(req.addresses, chain_id=req.chain_id)]


@screener_router.get("/status")
def get_status() -> dict[str, Any]:
    return screener_status().to_response()

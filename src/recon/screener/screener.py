"""Wallet screener contract.

This is a placeholder: every address gets the same zero-risk profile
labelled ``Placeholder``. The models pin the response shape (labels,
flags, metrics) that a real risk engine must keep.
"""

from __future__ import annotations

import logging
from typing import Literal, Sequence

from pydantic import Field

from recon.address.models import CamelModel
from recon.address.patterns import is_valid_address
from recon.exceptions import ValidationFailedError

logger = logging.getLogger(__name__)

PLACEHOLDER_DETAILS = "Screener implementation pending"

SUPPORTED_CHAINS: dict[int, str] = {
    1: "Ethereum",
    10: "Optimism",
    56: "BSC",
    137: "Polygon",
    8453: "Base",
    42161: "Arbitrum",
}


class WalletFlags(CamelModel):
    is_bot: bool = False
    is_sybil: bool = False
    is_contract: bool = False
    is_exchange: bool = False
    is_new_wallet: bool = False
    low_activity: bool = False
    high_frequency_trader: bool = False
    airdrop_farmer: bool = False


class WalletMetrics(CamelModel):
    tx_count: int = 0
    first_tx_date: str | None = None
    last_tx_date: str | None = None
    wallet_age_days: int = 0
    avg_tx_per_day: float = 0
    unique_contracts_interacted: int = 0
    total_gas_spent: str = "0"
    nft_collections_held: int = 0


class ScreenResult(CamelModel):
    """Risk profile for one wallet."""

    address: str
    risk_score: int = 0
    risk_level: Literal["low", "medium", "high"] = "low"
    labels: list[str] = Field(default_factory=list)
    flags: WalletFlags = Field(default_factory=WalletFlags)
    metrics: WalletMetrics = Field(default_factory=WalletMetrics)
    details: str = ""

    def to_response(self) -> dict:
        # firstTxDate / lastTxDate are part of the contract even when null.
        return self.model_dump(mode="json", by_alias=True)


class ChainInfo(CamelModel):
    id: int
    name: str


class ScreenerStatus(CamelModel):
    has_etherscan_api_key: bool
    supported_chains: list[ChainInfo]
    max_batch_size: int


def _max_batch_size() -> int:
    from recon.settings import get_settings

    return get_settings().screener.max_batch_size


def screen_batch(addresses: Sequence[str], chain_id: int = 1) -> list[ScreenResult]:
    """Screen *addresses* on *chain_id*.

    Raises:
        ValidationFailedError: If the batch is empty, too large, or holds a
            malformed address, or *chain_id* is not positive.
    """
    max_batch = _max_batch_size()
    if not addresses or len(addresses) > max_batch:
        raise ValidationFailedError(f"Addresses must be an array with 1-{max_batch} items")
    if chain_id < 1:
        raise ValidationFailedError("Chain ID must be a positive integer")
    bad = [a for a in addresses if not isinstance(a, str) or not is_valid_address(a)]
    if bad:
        raise ValidationFailedError(
            "Each address must be a valid Ethereum address",
            details=[{"message": "Each address must be a valid Ethereum address", "addresses": bad[:10]}],
        )

    logger.debug("Screening %d address(es) on chain %d", len(addresses), chain_id)
    return [
        ScreenResult(address=a.lower(), labels=["Placeholder"], details=PLACEHOLDER_DETAILS)
        for a in addresses
    ]


def screener_status() -> ScreenerStatus:
    from recon.settings import get_settings

    screener = get_settings().screener
    return ScreenerStatus(
        has_etherscan_api_key=bool(screener.etherscan_api_key),
        supported_chains=[ChainInfo(id=cid, name=name) for cid, name in SUPPORTED_CHAINS.items()],
        max_batch_size=screener.max_batch_size,
    )

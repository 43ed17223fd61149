"""Data models for the Pump.fun migrations feed."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel


class PumpfunMigrationToken(BaseModel):
    name: Any = None
    symbol: Any = None

    model_config = {"extra": "ignore"}


class PumpfunMigration(BaseModel):
    """One raw record from ``GET /migrations``.

    Everything is optional and loosely typed here: the feed mixes strings and
    numbers, and the normalizer decides what is missing or malformed.
    """

    contractAddress: Any = None
    token: PumpfunMigrationToken | None = None
    creator: Any = None
    migrationTime: Any = None
    initialLiquidity: Any = None
    feePercentage: Any = None
    holderCount: Any = None

    model_config = {"extra": "ignore"}


@dataclass(frozen=True)
class MigratedCoin:
    """A validated coin ready for filtering and storage."""

    contract_address: str
    name: str
    symbol: str
    creator_wallet: str
    migration_time: datetime  # UTC, tz-aware
    initial_liquidity: float = 0.0
    creator_fee: float = 0.0
    holders: int = 0

    @property
    def short_address(self) -> str:
        return self.contract_address[:12]

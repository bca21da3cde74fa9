"""Shared data models for the pool stats collector.

Records are frozen: each tick builds its own, serializes it and drops it.
Prices are floats because they are log output, not accounting values;
precision-sensitive arithmetic happens on integers before conversion.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class FlowStatus(str, Enum):
    """Outcome of one data-source flow within a tick."""

    WRITTEN = "written"
    SKIPPED = "skipped"
    FAILED = "failed"


def utc_timestamp_iso(seconds: float) -> str:
    """Render a unix timestamp as ISO-8601 UTC with milliseconds, e.g. 2024-01-01T00:00:00.000Z."""
    moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class PoolPriceRecord:
    """Spot price of an on-chain pool, read from its slot0 state."""

    HEADER = (
        "timestamp_iso",
        "pool",
        "token0",
        "token1",
        "dec0",
        "dec1",
        "price_token0_in_token1",
        "price_token1_in_token0",
    )

    timestamp_iso: str
    pool: str
    token0: str
    token1: str
    decimals0: int
    decimals1: int
    price_token0_in_token1: float
    price_token1_in_token0: float

    def to_row(self) -> list:
        return [
            self.timestamp_iso,
            self.pool,
            self.token0,
            self.token1,
            self.decimals0,
            self.decimals1,
            self.price_token0_in_token1,
            self.price_token1_in_token0,
        ]


@dataclass(frozen=True)
class PoolStatsRecord:
    """Trailing 24h volume and latest TVL of an indexed pool."""

    HEADER = ("timestamp_iso", "pool", "feeTier", "volume24hUSD", "tvlUSD")

    timestamp_iso: str
    pool: str
    fee_tier: str  # "" when the indexer has no record of the pool
    volume_24h_usd: float
    tvl_usd: float

    def to_row(self) -> list:
        return [
            self.timestamp_iso,
            self.pool,
            self.fee_tier,
            self.volume_24h_usd,
            self.tvl_usd,
        ]


@dataclass(frozen=True)
class HourlyBucket:
    """One poolHourData entry from the indexer. Never persisted."""

    period_start: int  # unix seconds
    volume_usd: float
    tvl_usd: float


@dataclass(frozen=True)
class TickResult:
    """Per-flow outcomes of a single scheduler tick."""

    timestamp_iso: str
    price: FlowStatus
    stats: FlowStatus

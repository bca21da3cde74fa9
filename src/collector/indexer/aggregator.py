"""Trailing 24h volume and TVL aggregation over indexer hourly buckets.

One query fetches both the pool entity and its poolHourDatas since
now - 24h. Buckets are atomic: no interpolation or partial-hour weighting,
so a young or lagging pool simply sums fewer buckets.
"""

import math
import time

from collector.config import SubgraphSettings
from collector.exceptions import QueryFailure
from collector.indexer.subgraph import SubgraphClient
from collector.logging import get_logger
from collector.models import HourlyBucket, PoolStatsRecord, utc_timestamp_iso

logger = get_logger(__name__)

WINDOW_SECONDS = 24 * 3600

POOL_24H_QUERY = """
query Pool24h($poolId: ID!, $start: Int!) {
  pool(id: $poolId) { id feeTier totalValueLockedUSD }
  poolHourDatas(
    where: { pool: $poolId, periodStartUnix_gte: $start }
    orderBy: periodStartUnix, orderDirection: asc
  ) { periodStartUnix volumeUSD tvlUSD }
}
"""


def _to_float(value: object) -> float:
    """Decode an indexer USD amount (often a string); absent or null becomes 0.

    Raises:
        ValueError: For unparseable, non-finite or negative amounts.
    """
    if value is None or value == "":
        return 0.0
    amount = float(value)
    if not math.isfinite(amount) or amount < 0:
        raise ValueError(f"USD amount must be finite and non-negative, got {value!r}")
    return amount


def parse_buckets(raw: list[dict] | None) -> list[HourlyBucket]:
    """Decode poolHourDatas rows, ordered by period start ascending."""
    buckets = [
        HourlyBucket(
            period_start=int(row.get("periodStartUnix") or 0),
            volume_usd=_to_float(row.get("volumeUSD")),
            tvl_usd=_to_float(row.get("tvlUSD")),
        )
        for row in raw or []
    ]
    return sorted(buckets, key=lambda b: b.period_start)


def aggregate_volume(buckets: list[HourlyBucket]) -> float:
    """Sum volumeUSD over all buckets. Empty input yields 0."""
    return sum(b.volume_usd for b in buckets)


def select_tvl(buckets: list[HourlyBucket], fallback: float = 0.0) -> float:
    """TVL of the most recent bucket, or the pool's current TVL when there are none."""
    if buckets:
        return buckets[-1].tvl_usd
    return fallback


class IndexerVolumeAggregator:
    """Builds PoolStatsRecords from the graph indexer.

    Optional source: when pool id, API key or subgraph id is missing,
    collect() returns None.

    Args:
        client: GraphQL client bound to the subgraph URL.
        settings: Subgraph settings (pool id, credentials).
    """

    def __init__(self, client: SubgraphClient, settings: SubgraphSettings) -> None:
        self._client = client
        self._settings = settings

    @property
    def enabled(self) -> bool:
        return self._settings.configured

    async def collect(self, now: float | None = None) -> PoolStatsRecord | None:
        """Query the indexer and aggregate the trailing 24h window ending at ``now``.

        Raises:
            QueryFailure: From the client, or when the reply cannot be decoded.
        """
        if not self.enabled:
            return None

        if now is None:
            now = time.time()
        start = int(now) - WINDOW_SECONDS
        pool_id = self._settings.pool_id

        data = await self._client.query(
            POOL_24H_QUERY, {"poolId": pool_id.lower(), "start": start}
        )

        pool = data.get("pool") or {}
        fee_tier = pool.get("feeTier")
        try:
            buckets = parse_buckets(data.get("poolHourDatas"))
            pool_tvl = _to_float(pool.get("totalValueLockedUSD"))
        except (TypeError, ValueError, AttributeError) as e:
            raise QueryFailure(f"Malformed indexer response for {pool_id}: {e}") from e

        record = PoolStatsRecord(
            timestamp_iso=utc_timestamp_iso(now),
            pool=pool_id,
            fee_tier="" if fee_tier is None else str(fee_tier),
            volume_24h_usd=aggregate_volume(buckets),
            tvl_usd=select_tvl(buckets, pool_tvl),
        )

        logger.debug(
            "indexer_window_aggregated",
            pool=pool_id,
            start=start,
            buckets=len(buckets),
            indexed=bool(pool),
        )
        return record

"""Per-source collection flows.

A flow reads one record from its source and appends it to its own CSV
file. Every per-tick error is caught and logged here, so a flow never
raises into the scheduler and one source failing never blocks the other.
"""

from abc import ABC, abstractmethod

from collector.chain.price_reader import OnChainPriceReader
from collector.exceptions import QueryFailure, ReadFailure, WriteFailure
from collector.indexer.aggregator import IndexerVolumeAggregator
from collector.logging import get_logger
from collector.models import FlowStatus, PoolPriceRecord, PoolStatsRecord, utc_timestamp_iso
from collector.storage.csv_appender import CSVAppender

logger = get_logger(__name__)


class CollectionFlow(ABC):
    """Read-then-append for one data source, with failure isolation."""

    source: str = ""
    source_failure: type[Exception] = Exception

    def __init__(self, appender: CSVAppender) -> None:
        self._appender = appender

    @abstractmethod
    async def collect(self, now: float) -> PoolPriceRecord | PoolStatsRecord | None:
        """Produce this tick's record, or None when the source is not configured."""
        ...

    @abstractmethod
    def log_collected(self, record) -> None:
        """Emit the success log line for a written record."""
        ...

    async def run(self, now: float) -> FlowStatus:
        """Collect and persist one record. Never raises (except cancellation)."""
        try:
            record = await self.collect(now)
            if record is None:
                logger.debug(f"{self.source}_flow_skipped", reason="not_configured")
                return FlowStatus.SKIPPED
            self._appender.append(record.to_row())
        except WriteFailure as e:
            logger.error(
                "csv_write_failed",
                source=self.source,
                path=e.path,
                error=str(e),
            )
            return FlowStatus.FAILED
        except self.source_failure as e:
            logger.warning(f"{self.source}_collect_failed", error=str(e))
            return FlowStatus.FAILED
        except Exception as e:
            logger.error(f"{self.source}_flow_error", error=str(e), exc_info=True)
            return FlowStatus.FAILED

        self.log_collected(record)
        return FlowStatus.WRITTEN


class PriceCollectionFlow(CollectionFlow):
    """On-chain slot0 price into the price CSV."""

    source = "price"
    source_failure = ReadFailure

    def __init__(self, reader: OnChainPriceReader, appender: CSVAppender) -> None:
        super().__init__(appender)
        self._reader = reader

    async def collect(self, now: float) -> PoolPriceRecord | None:
        return await self._reader.read(utc_timestamp_iso(now))

    def log_collected(self, record: PoolPriceRecord) -> None:
        logger.info(
            "pool_price_collected",
            pool=record.pool,
            price_token0_in_token1=record.price_token0_in_token1,
            price_token1_in_token0=record.price_token1_in_token0,
            dec0=record.decimals0,
            dec1=record.decimals1,
        )


class StatsCollectionFlow(CollectionFlow):
    """Indexer 24h volume and TVL into the stats CSV."""

    source = "stats"
    source_failure = QueryFailure

    def __init__(
        self, aggregator: IndexerVolumeAggregator, appender: CSVAppender
    ) -> None:
        super().__init__(appender)
        self._aggregator = aggregator

    async def collect(self, now: float) -> PoolStatsRecord | None:
        return await self._aggregator.collect(now)

    def log_collected(self, record: PoolStatsRecord) -> None:
        logger.info(
            "pool_stats_collected",
            pool=record.pool,
            volume_24h_usd=round(record.volume_24h_usd),
            tvl_usd=round(record.tvl_usd),
            fee_tier=record.fee_tier,
        )

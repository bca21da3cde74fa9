"""Entry point for the pool stats collector.

Wires all components together and runs the scheduler either once
(COLLECTOR_RUN_ONCE=true, for cron or CI schedules) or continuously.

Handles SIGINT/SIGTERM for graceful shutdown: no new ticks start, and an
in-flight tick is allowed to finish.

Component wiring order (in _build_components):
1. Web3PoolClient (node connection)
2. OnChainPriceReader
3. SubgraphClient (indexer connection)
4. IndexerVolumeAggregator
5. CSVAppenders (one per output file)
6. Collection flows
7. CollectorScheduler
"""

import asyncio
import signal
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from collector.chain.price_reader import OnChainPriceReader
from collector.chain.web3_client import Web3PoolClient
from collector.config import AppSettings, validate_settings
from collector.exceptions import ConfigError
from collector.flows import PriceCollectionFlow, StatsCollectionFlow
from collector.indexer.aggregator import IndexerVolumeAggregator
from collector.indexer.subgraph import SubgraphClient
from collector.logging import get_logger, setup_logging
from collector.models import PoolPriceRecord, PoolStatsRecord
from collector.scheduler import CollectorScheduler
from collector.storage.csv_appender import CSVAppender


def _build_components(settings: AppSettings) -> dict[str, Any]:
    """Build all collector components from settings.

    Args:
        settings: Application-wide settings, already validated.

    Returns:
        Dict mapping component names to instances.
    """
    logger = get_logger("collector.main")

    chain_client = Web3PoolClient(settings.chain)
    price_reader = OnChainPriceReader(chain_client, settings.chain)
    if not price_reader.enabled:
        logger.warning("price_source_not_configured", note="CHAIN_POOL_ADDRESS unset")

    subgraph_client = SubgraphClient(
        settings.subgraph.url, timeout=settings.subgraph.request_timeout
    )
    aggregator = IndexerVolumeAggregator(subgraph_client, settings.subgraph)
    if not aggregator.enabled:
        logger.warning(
            "stats_source_not_configured",
            note="THEGRAPH_POOL_ID, THEGRAPH_API_KEY and THEGRAPH_SUBGRAPH_ID are required",
        )

    data_dir = Path(settings.collector.data_dir)
    price_appender = CSVAppender(
        data_dir / settings.collector.price_file, PoolPriceRecord.HEADER
    )
    stats_appender = CSVAppender(
        data_dir / settings.collector.stats_file, PoolStatsRecord.HEADER
    )

    scheduler = CollectorScheduler(
        price_flow=PriceCollectionFlow(price_reader, price_appender),
        stats_flow=StatsCollectionFlow(aggregator, stats_appender),
        interval=settings.collector.interval_seconds,
    )

    return {
        "chain_client": chain_client,
        "price_reader": price_reader,
        "subgraph_client": subgraph_client,
        "aggregator": aggregator,
        "price_appender": price_appender,
        "stats_appender": stats_appender,
        "scheduler": scheduler,
    }


def _setup_signal_handlers(scheduler: CollectorScheduler) -> None:
    """Register SIGINT/SIGTERM to stop the scheduler gracefully.

    Must be called after the asyncio event loop is running.
    """
    logger = get_logger("collector.main")
    loop = asyncio.get_running_loop()

    def _graceful_handler() -> None:
        logger.info("graceful_shutdown_signal")
        asyncio.create_task(scheduler.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _graceful_handler)


async def run(settings: AppSettings | None = None) -> None:
    """Run the collector.

    Raises:
        ConfigError: If settings are malformed. Raised before any tick.
    """
    if settings is None:
        try:
            settings = AppSettings()
        except ValidationError as e:
            raise ConfigError(f"Invalid environment configuration: {e}") from e

    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("collector.main")

    validate_settings(settings)

    components = _build_components(settings)
    scheduler: CollectorScheduler = components["scheduler"]

    try:
        if settings.collector.run_once:
            await scheduler.run_once()
        else:
            _setup_signal_handlers(scheduler)
            logger.info(
                "starting_continuous",
                interval=settings.collector.interval_seconds,
                data_dir=settings.collector.data_dir,
            )
            await scheduler.start()
    finally:
        await components["chain_client"].close()
        logger.info("pool_stats_collector_stopped")


def main() -> None:
    """Synchronous entry point."""
    try:
        asyncio.run(run())
    except ConfigError as e:
        get_logger("collector.main").critical("invalid_configuration", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()

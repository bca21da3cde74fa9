"""Graph indexer access -- 24h volume and TVL from poolHourDatas."""

from collector.indexer.aggregator import (
    IndexerVolumeAggregator,
    aggregate_volume,
    parse_buckets,
    select_tvl,
)
from collector.indexer.subgraph import SubgraphClient

__all__ = [
    "IndexerVolumeAggregator",
    "SubgraphClient",
    "aggregate_volume",
    "parse_buckets",
    "select_tvl",
]

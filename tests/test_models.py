"""Tests for record serialization helpers."""

import dataclasses

import pytest

from collector.models import HourlyBucket, PoolPriceRecord, PoolStatsRecord, utc_timestamp_iso


class TestUtcTimestampIso:
    def test_epoch(self) -> None:
        assert utc_timestamp_iso(0) == "1970-01-01T00:00:00.000Z"

    def test_milliseconds_kept(self) -> None:
        assert utc_timestamp_iso(1_700_000_000.123) == "2023-11-14T22:13:20.123Z"


class TestRecords:
    def test_price_row_matches_header(self) -> None:
        record = PoolPriceRecord("t", "0xp", "0xa", "0xb", 18, 6, 3000.0, 1 / 3000.0)
        row = record.to_row()
        assert len(row) == len(PoolPriceRecord.HEADER)
        assert dict(zip(PoolPriceRecord.HEADER, row))["dec1"] == 6

    def test_stats_row_matches_header(self) -> None:
        record = PoolStatsRecord("t", "0xp", "500", 150.0, 11.0)
        assert dict(zip(PoolStatsRecord.HEADER, record.to_row())) == {
            "timestamp_iso": "t",
            "pool": "0xp",
            "feeTier": "500",
            "volume24hUSD": 150.0,
            "tvlUSD": 11.0,
        }

    def test_records_are_immutable(self) -> None:
        bucket = HourlyBucket(0, 1.0, 2.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            bucket.volume_usd = 5.0  # type: ignore[misc]

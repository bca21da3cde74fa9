"""Shared test fixtures for the pool stats collector."""

from pathlib import Path

import pytest

from collector.config import AppSettings, ChainSettings, CollectorSettings, SubgraphSettings

POOL_ADDRESS = "0x6c561B446416E1A00E8E93E221854d6eA4171372"
INDEXED_POOL_ID = "0xd0b53D9277642d899DF5C87A3966A349A798F224"


@pytest.fixture
def chain_settings() -> ChainSettings:
    """ChainSettings pointing at a configured pool, no decimals overrides."""
    return ChainSettings(
        rpc_url="http://localhost:8545",
        pool_address=POOL_ADDRESS,
        token0_decimals=None,
        token1_decimals=None,
    )


@pytest.fixture
def subgraph_settings() -> SubgraphSettings:
    """SubgraphSettings with dummy credentials."""
    return SubgraphSettings(
        api_key="test-api-key",  # type: ignore[arg-type]
        subgraph_id="testSubgraphId123",
        pool_id=INDEXED_POOL_ID,
    )


@pytest.fixture
def mock_settings(
    tmp_path: Path, chain_settings: ChainSettings, subgraph_settings: SubgraphSettings
) -> AppSettings:
    """Return AppSettings with test defaults writing into a temp data dir."""
    return AppSettings(
        log_level="DEBUG",
        chain=chain_settings,
        subgraph=subgraph_settings,
        collector=CollectorSettings(
            data_dir=str(tmp_path / "data"),
            interval_seconds=300.0,
            run_once=True,
        ),
    )

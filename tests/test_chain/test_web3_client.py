"""Tests for Web3PoolClient error wrapping and slot0 decoding.

Contract calls are replaced with mocks; no node is contacted.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from collector.chain.web3_client import Web3PoolClient
from collector.config import ChainSettings
from collector.exceptions import ReadFailure

Q96 = 2**96


def _contract_returning(**calls) -> MagicMock:
    """Mock contract whose functions.<name>().call() resolves to the given value."""
    contract = MagicMock()
    for name, value in calls.items():
        fn = getattr(contract.functions, name)
        if isinstance(value, Exception):
            fn.return_value.call = AsyncMock(side_effect=value)
        else:
            fn.return_value.call = AsyncMock(return_value=value)
    return contract


@pytest.fixture
def client(chain_settings: ChainSettings) -> Web3PoolClient:
    return Web3PoolClient(chain_settings)


class TestWeb3PoolClient:
    """Tests for the web3-backed chain client."""

    @pytest.mark.asyncio
    async def test_slot0_returns_first_field(
        self, client: Web3PoolClient, chain_settings: ChainSettings
    ) -> None:
        contract = _contract_returning(slot0=[Q96, -201000, 3, 100, 100, 0, True])
        with patch.object(client, "_contract", return_value=contract):
            value = await client.slot0_sqrt_price(chain_settings.pool_address)
        assert value == Q96

    @pytest.mark.asyncio
    async def test_empty_slot0_raises_read_failure(
        self, client: Web3PoolClient, chain_settings: ChainSettings
    ) -> None:
        contract = _contract_returning(slot0=[])
        with patch.object(client, "_contract", return_value=contract):
            with pytest.raises(ReadFailure, match="no data"):
                await client.slot0_sqrt_price(chain_settings.pool_address)

    @pytest.mark.asyncio
    async def test_call_error_wrapped_in_read_failure(
        self, client: Web3PoolClient, chain_settings: ChainSettings
    ) -> None:
        contract = _contract_returning(token0=ConnectionError("connection refused"))
        with patch.object(client, "_contract", return_value=contract):
            with pytest.raises(ReadFailure, match="connection refused") as exc_info:
                await client.token0(chain_settings.pool_address)
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    @pytest.mark.asyncio
    async def test_decimals_returns_int(self, client: Web3PoolClient) -> None:
        contract = _contract_returning(decimals=6)
        with patch.object(client, "_contract", return_value=contract):
            assert await client.decimals("0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913") == 6

    @pytest.mark.asyncio
    async def test_invalid_address_raises_read_failure(
        self, client: Web3PoolClient
    ) -> None:
        with pytest.raises(ReadFailure, match="token0"):
            await client.token0("not-an-address")

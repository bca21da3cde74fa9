"""Pool chain client implementation via web3.py async.

Wraps AsyncWeb3 over an HTTP JSON-RPC provider. Every node, transport,
address or ABI-decoding error is re-raised as ReadFailure so callers only
handle one exception type.
"""

from collections.abc import Callable

from web3 import AsyncWeb3

from collector.chain.abi import ERC20_ABI, POOL_ABI
from collector.chain.client import PoolChainClient
from collector.config import ChainSettings
from collector.exceptions import ReadFailure
from collector.logging import get_logger

logger = get_logger(__name__)


class Web3PoolClient(PoolChainClient):
    """Concrete pool client using AsyncWeb3 and eth_call."""

    def __init__(self, settings: ChainSettings) -> None:
        self._settings = settings
        self._w3 = AsyncWeb3(
            AsyncWeb3.AsyncHTTPProvider(
                settings.rpc_url,
                request_kwargs={"timeout": settings.request_timeout},
            )
        )

    @property
    def w3(self) -> AsyncWeb3:
        """Access the underlying AsyncWeb3 instance."""
        return self._w3

    def _contract(self, address: str, abi: list[dict]):
        return self._w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(address), abi=abi
        )

    async def _call(self, label: str, target: str, build: Callable):
        """Build and execute a contract view call, wrapping any error."""
        try:
            return await build().call()
        except Exception as e:
            raise ReadFailure(f"{label}() failed for {target}: {e}") from e

    async def slot0_sqrt_price(self, pool: str) -> int:
        """Return sqrtPriceX96, the first field of slot0()."""
        slot0 = await self._call(
            "slot0", pool, lambda: self._contract(pool, POOL_ABI).functions.slot0()
        )
        if not slot0:
            raise ReadFailure(f"slot0() returned no data for {pool}")
        return int(slot0[0])

    async def token0(self, pool: str) -> str:
        return await self._call(
            "token0", pool, lambda: self._contract(pool, POOL_ABI).functions.token0()
        )

    async def token1(self, pool: str) -> str:
        return await self._call(
            "token1", pool, lambda: self._contract(pool, POOL_ABI).functions.token1()
        )

    async def decimals(self, token: str) -> int:
        value = await self._call(
            "decimals",
            token,
            lambda: self._contract(token, ERC20_ABI).functions.decimals(),
        )
        return int(value)

    async def close(self) -> None:
        """Close the provider's HTTP session."""
        logger.debug("closing_chain_connection", rpc_url=self._settings.rpc_url)
        await self._w3.provider.disconnect()

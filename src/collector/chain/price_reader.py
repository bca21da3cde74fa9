"""On-chain spot price reader for a concentrated-liquidity pool.

Reads slot0().sqrtPriceX96 plus the pool's two token addresses, resolves
token decimals, and converts the Q64.96 square-root price into a
token0-in-token1 ratio and its reciprocal.

The raw value is a uint160, so its square needs up to 320 bits. All scaling
is done on Python ints and only the final division produces a float.
"""

import asyncio

from collector.chain.client import PoolChainClient
from collector.config import ChainSettings
from collector.exceptions import ReadFailure
from collector.logging import get_logger
from collector.models import PoolPriceRecord

logger = get_logger(__name__)

Q192 = 2**192
DEFAULT_DECIMALS = 18


async def _gather_or_cancel(*coros):
    """gather() that cancels and drains the remaining calls once one fails."""
    tasks = [asyncio.ensure_future(c) for c in coros]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def sqrt_price_x96_to_prices(
    sqrt_price_x96: int, decimals0: int, decimals1: int
) -> tuple[float, float]:
    """Convert a Q64.96 square-root price into human-readable prices.

    price0in1 = (sqrtPriceX96^2 / 2^192) * 10^(decimals0 - decimals1)

    Args:
        sqrt_price_x96: Raw slot0 sqrtPriceX96 value.
        decimals0: token0 decimals.
        decimals1: token1 decimals.

    Returns:
        (price of token0 in token1, price of token1 in token0). The second
        value is the reciprocal of the first, not an independent computation.

    Raises:
        ValueError: If sqrt_price_x96 is not positive (uninitialised pool).
    """
    if sqrt_price_x96 <= 0:
        raise ValueError(f"sqrtPriceX96 must be positive, got {sqrt_price_x96}")

    numerator = sqrt_price_x96 * sqrt_price_x96
    denominator = Q192
    shift = decimals0 - decimals1
    if shift >= 0:
        numerator *= 10**shift
    else:
        denominator *= 10**-shift

    # int / int is correctly rounded even when both exceed float range
    price0in1 = numerator / denominator
    if price0in1 == 0.0:
        raise ValueError(f"sqrtPriceX96 {sqrt_price_x96} underflows to a zero price")
    return price0in1, 1.0 / price0in1


class OnChainPriceReader:
    """Reads a pool's current price directly from a node.

    Optional source: when no pool address is configured (or it is the null
    address) read() returns None and nothing is logged as an error.

    Args:
        client: Chain client used for contract view calls.
        settings: Pool address and optional decimals overrides.
    """

    def __init__(self, client: PoolChainClient, settings: ChainSettings) -> None:
        self._client = client
        self._settings = settings

    @property
    def enabled(self) -> bool:
        return self._settings.pool_configured

    async def read(self, timestamp_iso: str) -> PoolPriceRecord | None:
        """Read the pool price for one tick.

        Returns:
            The price record, or None when the reader is not configured.

        Raises:
            ReadFailure: On node errors, malformed responses or a zero price.
        """
        if not self.enabled:
            return None

        pool = self._settings.pool_address.strip()
        sqrt_price_x96, token0, token1 = await _gather_or_cancel(
            self._client.slot0_sqrt_price(pool),
            self._client.token0(pool),
            self._client.token1(pool),
        )

        decimals0, decimals1 = await _gather_or_cancel(
            self._resolve_decimals(token0, self._settings.token0_decimals),
            self._resolve_decimals(token1, self._settings.token1_decimals),
        )

        try:
            price0in1, price1in0 = sqrt_price_x96_to_prices(
                sqrt_price_x96, decimals0, decimals1
            )
        except (ValueError, OverflowError) as e:
            raise ReadFailure(f"Unusable slot0 price for {pool}: {e}") from e

        return PoolPriceRecord(
            timestamp_iso=timestamp_iso,
            pool=pool,
            token0=token0,
            token1=token1,
            decimals0=decimals0,
            decimals1=decimals1,
            price_token0_in_token1=price0in1,
            price_token1_in_token0=price1in0,
        )

    async def _resolve_decimals(self, token: str, override: int | None) -> int:
        """Return the configured override, else on-chain decimals, else 18."""
        if override is not None:
            return override
        try:
            return await self._client.decimals(token)
        except ReadFailure as e:
            logger.warning(
                "token_decimals_fallback",
                token=token,
                fallback=DEFAULT_DECIMALS,
                error=str(e),
            )
            return DEFAULT_DECIMALS

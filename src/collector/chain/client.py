"""Abstract pool chain client interface.

The price reader depends only on this interface, keeping web3 details
isolated in the concrete implementation.
"""

from abc import ABC, abstractmethod


class PoolChainClient(ABC):
    """Abstract base class for read-only pool contract access."""

    @abstractmethod
    async def slot0_sqrt_price(self, pool: str) -> int:
        """Return sqrtPriceX96 from the pool's slot0 state."""
        ...

    @abstractmethod
    async def token0(self, pool: str) -> str:
        """Return the pool's token0 address."""
        ...

    @abstractmethod
    async def token1(self, pool: str) -> str:
        """Return the pool's token1 address."""
        ...

    @abstractmethod
    async def decimals(self, token: str) -> int:
        """Return an ERC-20 token's decimals()."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying node connection."""
        ...

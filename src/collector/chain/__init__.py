"""On-chain pool state access -- slot0 price reads via web3."""

from collector.chain.client import PoolChainClient
from collector.chain.price_reader import OnChainPriceReader, sqrt_price_x96_to_prices
from collector.chain.web3_client import Web3PoolClient

__all__ = [
    "OnChainPriceReader",
    "PoolChainClient",
    "Web3PoolClient",
    "sqrt_price_x96_to_prices",
]

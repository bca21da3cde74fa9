"""Periodic market-data collector for a concentrated-liquidity DEX pool."""

"""
Protocol integrations for Agent Trade

- raydium: Raydium v3 pool list API (market data for the pool cache)
"""

from .raydium import RaydiumAPI

__all__ = [
    "RaydiumAPI",
]

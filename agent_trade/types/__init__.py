"""
Type definitions for Agent Trade
"""

from .chains import ChainInfo, CHAIN_INFOS, get_chain_info, list_chains
from .pool import TokenInfo, PoolStats, PoolRecord, PoolPage
from .result import TransactionRequest, TransactionReceipt, TxStatus

__all__ = [
    # Chain registry
    "ChainInfo",
    "CHAIN_INFOS",
    "get_chain_info",
    "list_chains",
    # Pool records
    "TokenInfo",
    "PoolStats",
    "PoolRecord",
    "PoolPage",
    # Transactions
    "TransactionRequest",
    "TransactionReceipt",
    "TxStatus",
]

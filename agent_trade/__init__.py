"""
Agent Trade - On-chain asset operations and pool discovery for LLM agents

Provides:
- Asset operations on EVM chains (balances, transfers, approvals, V2 swaps)
  dispatched through a local-key or delegated-sponsor signer
- A deduplicated, persisted cache of Raydium pools refreshed in the background
- Agent tool wrappers with argument validation and safety caps
"""

from .client import AgentTradeClient
from .tools import AgentTools, TOOL_DESCRIPTIONS
from .types import (
    ChainInfo,
    get_chain_info,
    list_chains,
    PoolRecord,
    TokenInfo,
    PoolStats,
    TransactionRequest,
    TransactionReceipt,
)
from .errors import (
    AgentTradeError,
    TransportError,
    ParseError,
    PersistenceError,
    SignerError,
    ConfigurationError,
    StrategyResolutionError,
    ToolError,
    ErrorCode,
)
from .infra import (
    make_provider,
    SignerStrategy,
    TransactionSubmitter,
    submit,
    SqliteStore,
)
from .pools import PoolCache, accept, filter_pools
from .protocols.raydium import RaydiumAPI

__all__ = [
    # Client
    "AgentTradeClient",
    "AgentTools",
    "TOOL_DESCRIPTIONS",
    # Types
    "ChainInfo",
    "get_chain_info",
    "list_chains",
    "PoolRecord",
    "TokenInfo",
    "PoolStats",
    "TransactionRequest",
    "TransactionReceipt",
    # Errors
    "AgentTradeError",
    "TransportError",
    "ParseError",
    "PersistenceError",
    "SignerError",
    "ConfigurationError",
    "StrategyResolutionError",
    "ToolError",
    "ErrorCode",
    # Infrastructure
    "make_provider",
    "SignerStrategy",
    "TransactionSubmitter",
    "submit",
    "SqliteStore",
    # Pools
    "PoolCache",
    "accept",
    "filter_pools",
    "RaydiumAPI",
]

__version__ = "0.1.0"

"""
Error definitions for Agent Trade
"""

from .exceptions import (
    ErrorCode,
    AgentTradeError,
    TransportError,
    ParseError,
    PersistenceError,
    SignerError,
    ConfigurationError,
    StrategyResolutionError,
    ToolError,
)

__all__ = [
    "ErrorCode",
    "AgentTradeError",
    "TransportError",
    "ParseError",
    "PersistenceError",
    "SignerError",
    "ConfigurationError",
    "StrategyResolutionError",
    "ToolError",
]

"""
Exception definitions for Agent Trade
"""

from enum import Enum
from typing import Optional


class ErrorCode(Enum):
    """
    Unified error codes for agent trade operations

    1xxx - Transport errors (RPC, market data API)
    2xxx - Transaction errors
    3xxx - Market data errors
    4xxx - Persistence errors
    6xxx - Signer errors
    7xxx - Tool errors
    9xxx - Configuration errors
    """
    # Transport errors (recoverable)
    TRANSPORT_CONNECTION_FAILED = "1001"
    TRANSPORT_TIMEOUT = "1002"
    TRANSPORT_RATE_LIMITED = "1003"
    TRANSPORT_INVALID_RESPONSE = "1004"

    # Transaction errors
    TX_SEND_FAILED = "2002"
    TX_RECEIPT_TIMEOUT = "2003"

    # Market data errors
    PARSE_FAILED = "3001"

    # Persistence errors
    STORE_READ_FAILED = "4001"
    STORE_WRITE_FAILED = "4002"

    # Signer errors
    SIGNER_FAILED = "6002"

    # Tool errors
    TOOL_INVALID_ARGUMENT = "7001"
    TOOL_LIMIT_EXCEEDED = "7002"
    TOOL_FAILED = "7003"

    # Configuration errors
    CONFIG_INVALID = "9001"
    CONFIG_MISSING = "9002"
    STRATEGY_UNRESOLVED = "9003"


class AgentTradeError(Exception):
    """
    Base exception for all agent trade errors

    Attributes:
        message: Human-readable error message
        code: Error code for programmatic handling
        recoverable: Whether the error might succeed on retry
        original_error: The underlying exception if any
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        recoverable: bool = False,
        original_error: Optional[Exception] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.recoverable = recoverable
        self.original_error = original_error
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


class TransportError(AgentTradeError):
    """
    Network-level errors - typically recoverable

    Raised when:
    - Connection to an RPC node or the market data API fails
    - Request times out
    - Rate limit is hit
    - Invalid response received
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.TRANSPORT_CONNECTION_FAILED,
        original_error: Optional[Exception] = None,
        endpoint: Optional[str] = None,
        recoverable: bool = True,
    ):
        super().__init__(
            message,
            code,
            recoverable=recoverable,
            original_error=original_error,
            details={"endpoint": endpoint} if endpoint else None,
        )
        self.endpoint = endpoint

    @classmethod
    def connection_failed(cls, endpoint: str, error: Exception = None) -> "TransportError":
        return cls(
            f"Failed to connect to endpoint: {endpoint}",
            ErrorCode.TRANSPORT_CONNECTION_FAILED,
            original_error=error,
            endpoint=endpoint,
        )

    @classmethod
    def timeout(cls, endpoint: str, timeout_seconds: float, error: Exception = None) -> "TransportError":
        return cls(
            f"Request timed out after {timeout_seconds}s",
            ErrorCode.TRANSPORT_TIMEOUT,
            original_error=error,
            endpoint=endpoint,
        )

    @classmethod
    def rate_limited(cls, endpoint: str) -> "TransportError":
        return cls(
            "Rate limit exceeded",
            ErrorCode.TRANSPORT_RATE_LIMITED,
            endpoint=endpoint,
        )

    @classmethod
    def invalid_response(cls, endpoint: str, reason: str) -> "TransportError":
        return cls(
            f"Invalid response: {reason}",
            ErrorCode.TRANSPORT_INVALID_RESPONSE,
            endpoint=endpoint,
        )

    @classmethod
    def send_failed(
        cls,
        endpoint: Optional[str],
        error: Exception,
        code: ErrorCode = ErrorCode.TX_SEND_FAILED,
        recoverable: bool = False,
    ) -> "TransportError":
        return cls(
            f"Failed to send transaction: {error}",
            code,
            original_error=error,
            endpoint=endpoint,
            recoverable=recoverable,
        )

    @classmethod
    def receipt_timeout(cls, tx_hash: str, timeout_seconds: float, error: Exception = None) -> "TransportError":
        err = cls(
            f"Receipt for {tx_hash} not available after {timeout_seconds}s",
            ErrorCode.TX_RECEIPT_TIMEOUT,
            original_error=error,
        )
        err.details["tx_hash"] = tx_hash
        return err


class ParseError(AgentTradeError):
    """
    Market data could not be decoded - not recoverable for the same payload

    Raised when:
    - A pool record is missing a required field
    - A field has the wrong type
    """

    def __init__(
        self,
        message: str,
        record_id: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message,
            ErrorCode.PARSE_FAILED,
            recoverable=False,
            original_error=original_error,
            details={"record_id": record_id} if record_id else None,
        )
        self.record_id = record_id

    @classmethod
    def malformed_record(cls, record_id: Optional[str], reason: str, error: Exception = None) -> "ParseError":
        return cls(
            f"Malformed pool record {record_id or '<unknown>'}: {reason}",
            record_id=record_id,
            original_error=error,
        )


class PersistenceError(AgentTradeError):
    """
    Durable store errors - recoverable on the next write

    Raised when:
    - The store cannot be opened or read
    - A write fails
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.STORE_WRITE_FAILED,
        original_error: Optional[Exception] = None,
        key: Optional[str] = None,
    ):
        super().__init__(
            message,
            code,
            recoverable=True,
            original_error=original_error,
            details={"key": key} if key else None,
        )
        self.key = key

    @classmethod
    def read_failed(cls, key: str, error: Exception = None) -> "PersistenceError":
        return cls(
            f"Failed to read '{key}' from store: {error}",
            ErrorCode.STORE_READ_FAILED,
            original_error=error,
            key=key,
        )

    @classmethod
    def write_failed(cls, key: str, error: Exception = None) -> "PersistenceError":
        return cls(
            f"Failed to write '{key}' to store: {error}",
            ErrorCode.STORE_WRITE_FAILED,
            original_error=error,
            key=key,
        )


class SignerError(AgentTradeError):
    """
    Signing-related errors

    Raised when:
    - Signing operation fails
    - Sponsor relay rejects the request
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.SIGNER_FAILED,
        recoverable: bool = False,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message, code, recoverable=recoverable, original_error=original_error)

    @classmethod
    def failed(cls, reason: str, error: Exception = None) -> "SignerError":
        return cls(f"Signing failed: {reason}", ErrorCode.SIGNER_FAILED, original_error=error)


class ConfigurationError(AgentTradeError):
    """
    Configuration-related errors

    Raised when:
    - Required configuration is missing
    - Configuration values are invalid
    - A chain name is not in the registry
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_INVALID,
    ):
        super().__init__(message, code, recoverable=False)

    @classmethod
    def missing(cls, param: str) -> "ConfigurationError":
        return cls(f"Missing required configuration: {param}", ErrorCode.CONFIG_MISSING)

    @classmethod
    def invalid(cls, param: str, reason: str) -> "ConfigurationError":
        return cls(f"Invalid configuration '{param}': {reason}", ErrorCode.CONFIG_INVALID)


class StrategyResolutionError(ConfigurationError):
    """
    Signing strategy or its credentials cannot be resolved

    Raised when:
    - ACCOUNT_TYPE names an unknown strategy
    - The selected strategy's credential is absent
    """

    def __init__(self, message: str, strategy: Optional[str] = None):
        super().__init__(message, ErrorCode.STRATEGY_UNRESOLVED)
        self.strategy = strategy
        if strategy:
            self.details["strategy"] = strategy

    @classmethod
    def unknown(cls, name: str) -> "StrategyResolutionError":
        return cls(f"Unknown account type: {name!r}", strategy=name)

    @classmethod
    def missing_credential(cls, strategy: str, param: str) -> "StrategyResolutionError":
        return cls(
            f"Signing strategy {strategy} requires {param}",
            strategy=strategy,
        )


class ToolError(AgentTradeError):
    """
    Agent tool rejected its arguments or its operation failed

    Raised when:
    - An address or amount cannot be parsed
    - An amount exceeds the configured safety cap
    - The wrapped operation failed (cause kept in original_error)
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.TOOL_INVALID_ARGUMENT,
        tool: Optional[str] = None,
        recoverable: bool = False,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message,
            code,
            recoverable=recoverable,
            original_error=original_error,
            details={"tool": tool} if tool else None,
        )
        self.tool = tool

    @classmethod
    def from_error(cls, tool: str, error: "AgentTradeError") -> "ToolError":
        """Wrap an operation failure, keeping its code and cause"""
        return cls(
            f"{tool} error: {error}",
            error.code,
            tool=tool,
            recoverable=error.recoverable,
            original_error=error,
        )

    @classmethod
    def unexpected(cls, tool: str, error: Exception) -> "ToolError":
        """Wrap a failure that escaped classification"""
        return cls(
            f"{tool} error: {type(error).__name__}: {error}",
            ErrorCode.TOOL_FAILED,
            tool=tool,
            original_error=error,
        )

    @classmethod
    def invalid_argument(cls, tool: str, what: str) -> "ToolError":
        return cls(f"Invalid {what} format", tool=tool)

    @classmethod
    def limit_exceeded(cls, tool: str, amount, limit) -> "ToolError":
        return cls(
            f"amount = {amount} exceeds the safe value = {limit}",
            ErrorCode.TOOL_LIMIT_EXCEEDED,
            tool=tool,
        )

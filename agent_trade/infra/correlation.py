"""
Correlation IDs and error classification

Transaction submissions are tagged with a correlation id held in a context
variable so every log line of one submission can be traced. Foreign
exceptions from web3 or the HTTP stack are mapped onto error codes here.
"""

import logging
import uuid
import contextvars
from typing import Optional, Tuple

from ..errors import ErrorCode

logger = logging.getLogger(__name__)

# Context variable for correlation ID (task-local under asyncio)
_correlation_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    'correlation_id', default=None
)


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for transaction tracing."""
    return uuid.uuid4().hex[:12]


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from context."""
    return _correlation_id.get()


class CorrelationContext:
    """
    Context manager for correlation ID scoping.

    Usage:
        with CorrelationContext("transfer") as cid:
            log_with_correlation(logging.INFO, "Submitting", "transfer")
    """

    def __init__(self, prefix: Optional[str] = None):
        self.correlation_id = generate_correlation_id()
        if prefix:
            self.correlation_id = f"{prefix}_{self.correlation_id}"
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        self._token = _correlation_id.set(self.correlation_id)
        return self.correlation_id

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._token is not None:
            _correlation_id.reset(self._token)


def log_with_correlation(
    level: int,
    message: str,
    operation_name: str,
    log: Optional[logging.Logger] = None,
    **extra
):
    """
    Log message prefixed with the current correlation ID and operation name.

    Args:
        level: Logging level (logging.INFO, logging.WARNING, etc.)
        message: Log message
        operation_name: Name of the operation being executed
        log: Logger to emit on (defaults to this module's logger)
        **extra: Additional context fields
    """
    cid = get_correlation_id()

    parts = []
    if cid:
        parts.append(f"[{cid}]")
    parts.append(f"[{operation_name}]")
    parts.append(message)

    extra_context = {
        "correlation_id": cid,
        "operation": operation_name,
        **extra
    }

    (log or logger).log(level, " ".join(parts), extra=extra_context)


# Error keywords for classification
RECOVERABLE_KEYWORDS = [
    "timeout", "timed out", "connection", "network", "rate limit",
    "too many requests", "503", "502", "504",
    "temporarily unavailable", "service unavailable",
    "econnreset", "enotfound", "etimedout",
    "socket hang up", "request failed", "cannot connect", "nonce too low",
    "replacement transaction underpriced",
]


def classify_error(error: Exception) -> Tuple[bool, ErrorCode]:
    """
    Classify a foreign exception raised while talking to a node.

    Args:
        error: The exception to classify

    Returns:
        Tuple of (is_recoverable, error_code)
    """
    error_str = str(error).lower()
    if isinstance(error, (TimeoutError, ConnectionError)):
        error_str = f"{error_str} {type(error).__name__.lower()}"

    is_recoverable = any(keyword in error_str for keyword in RECOVERABLE_KEYWORDS)
    if not is_recoverable:
        return False, ErrorCode.TX_SEND_FAILED

    if "timeout" in error_str or "timed out" in error_str:
        return True, ErrorCode.TRANSPORT_TIMEOUT
    if "rate limit" in error_str or "too many requests" in error_str:
        return True, ErrorCode.TRANSPORT_RATE_LIMITED
    if any(kw in error_str for kw in ["connection", "connect to", "network", "socket"]):
        return True, ErrorCode.TRANSPORT_CONNECTION_FAILED
    return True, ErrorCode.TX_SEND_FAILED

"""
Test Errors Module

Tests for agent_trade.errors package.
"""

import sys
from pathlib import Path

import pytest

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from agent_trade.errors import (
    AgentTradeError,
    ConfigurationError,
    ErrorCode,
    ParseError,
    PersistenceError,
    SignerError,
    StrategyResolutionError,
    ToolError,
    TransportError,
)


def test_error_code_values():
    """Test ErrorCode enum ranges"""
    assert ErrorCode.TRANSPORT_CONNECTION_FAILED.value == "1001"
    assert ErrorCode.TX_SEND_FAILED.value == "2002"
    assert ErrorCode.PARSE_FAILED.value == "3001"
    assert ErrorCode.STORE_WRITE_FAILED.value == "4002"
    assert ErrorCode.STRATEGY_UNRESOLVED.value == "9003"


def test_base_error_str():
    """Test AgentTradeError formatting and retry flag"""
    err = AgentTradeError("boom", ErrorCode.CONFIG_INVALID, recoverable=True)
    assert str(err) == "[9001] boom"
    assert err.recoverable is True
    assert "AgentTradeError" in repr(err)
    assert err.details == {}


def test_transport_error_constructors():
    """Test TransportError classmethods"""
    err = TransportError.timeout("https://rpc.example", 30)
    assert err.code == ErrorCode.TRANSPORT_TIMEOUT
    assert err.recoverable is True
    assert err.details["endpoint"] == "https://rpc.example"

    err = TransportError.rate_limited("https://rpc.example")
    assert err.code == ErrorCode.TRANSPORT_RATE_LIMITED

    cause = ValueError("execution reverted")
    err = TransportError.send_failed("https://rpc.example", cause)
    assert err.code == ErrorCode.TX_SEND_FAILED
    assert err.recoverable is False
    assert err.original_error is cause

    err = TransportError.receipt_timeout("0xabc", 120)
    assert err.code == ErrorCode.TX_RECEIPT_TIMEOUT
    assert err.details["tx_hash"] == "0xabc"


def test_parse_error():
    """Test ParseError carries the record id"""
    err = ParseError.malformed_record("pool1", "missing field 'tvl'")
    assert err.code == ErrorCode.PARSE_FAILED
    assert err.record_id == "pool1"
    assert "pool1" in str(err)
    assert err.recoverable is False

    err = ParseError.malformed_record(None, "not an object")
    assert "<unknown>" in str(err)
    assert err.details == {}


def test_persistence_error():
    """Test PersistenceError read/write codes"""
    assert PersistenceError.read_failed("k").code == ErrorCode.STORE_READ_FAILED
    err = PersistenceError.write_failed("k", OSError("disk full"))
    assert err.code == ErrorCode.STORE_WRITE_FAILED
    assert err.key == "k"
    assert err.recoverable is True


def test_strategy_resolution_is_configuration_error():
    """Strategy failures are configuration errors with their own code"""
    err = StrategyResolutionError.unknown("MULTISIG")
    assert isinstance(err, ConfigurationError)
    assert err.code == ErrorCode.STRATEGY_UNRESOLVED
    assert err.details["strategy"] == "MULTISIG"

    err = StrategyResolutionError.missing_credential("LOCAL", "EVM_PRIVATE_KEY")
    assert "EVM_PRIVATE_KEY" in str(err)


def test_tool_error_messages():
    """Tool errors keep the agent-facing message formats"""
    err = ToolError.invalid_argument("eth_transfer", "to_address")
    assert err.message == "Invalid to_address format"
    assert err.tool == "eth_transfer"

    err = ToolError.limit_exceeded("eth_transfer", 11, 10)
    assert err.message == "amount = 11 exceeds the safe value = 10"
    assert err.code == ErrorCode.TOOL_LIMIT_EXCEEDED

    cause = TransportError.timeout("https://rpc.example", 30)
    err = ToolError.from_error("get_balance", cause)
    assert err.code == ErrorCode.TRANSPORT_TIMEOUT
    assert err.recoverable is True
    assert err.original_error is cause


@pytest.mark.parametrize("cls", [
    TransportError, ParseError, PersistenceError, SignerError, ConfigurationError, ToolError,
])
def test_error_inheritance(cls):
    """All errors derive from AgentTradeError"""
    assert issubclass(cls, AgentTradeError)

"""
Asset Module Unit Tests

Tests wallet, transfer and swap modules and the agent tools against a
mocked provider and a recording submitter.
"""

import json
import sys
from decimal import Decimal
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from conftest import MemoryStore, OTHER_ADDRESS, TEST_ADDRESS, make_record

from agent_trade import AgentTools, AgentTradeClient, PoolCache
from agent_trade.errors import ConfigurationError, ErrorCode, ToolError, TransportError
from agent_trade.modules import SwapModule, resolve_token
from agent_trade.modules.contracts import (
    ERC20_ABI,
    V2_ROUTER_ABI,
    apply_slippage,
    encode_call,
    from_raw_amount,
    read_chain,
    to_raw_amount,
)
from agent_trade.types import TransactionReceipt, get_chain_info

TX_HASH = "0x" + "22" * 32
USDC_ETH = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
USDT_ETH = "0xdAC17F958D2ee523a2206206994597C13D831ec7"
WETH_ETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
UNISWAP_V2_ROUTER = "0x7a250d5630B4cF539739dF2C5dAcb4c659F2488D"


class RecordingSubmitter:
    """Stands in for TransactionSubmitter; keeps what it was asked to send"""

    def __init__(self):
        self.requests = []
        self.closed = False

    def resolve_signer(self):
        return SimpleNamespace(address=TEST_ADDRESS)

    async def submit(self, request, provider):
        self.requests.append(request)
        return TransactionReceipt(transaction_hash=TX_HASH, success=True, block_number=1, gas_used=21000)

    async def close(self):
        self.closed = True


def connector_error() -> aiohttp.ClientConnectorError:
    key = SimpleNamespace(host="localhost", port=8545, ssl=True)
    return aiohttp.ClientConnectorError(key, OSError(111, "Connection refused"))


def mock_web3(decimals=6, balance=0, allowance=0, amounts_out=None, wei=0):
    web3 = MagicMock()
    web3.eth.get_balance = AsyncMock(return_value=wei)
    functions = web3.eth.contract.return_value.functions
    functions.decimals.return_value.call = AsyncMock(return_value=decimals)
    functions.balanceOf.return_value.call = AsyncMock(return_value=balance)
    functions.allowance.return_value.call = AsyncMock(return_value=allowance)
    functions.getAmountsOut.return_value.call = AsyncMock(return_value=amounts_out or [0, 0])
    return web3


@pytest.fixture
def submitter():
    return RecordingSubmitter()


def make_client(submitter, web3):
    created = []

    def factory(name):
        created.append(name)
        return web3

    client = AgentTradeClient(submitter=submitter, provider_factory=factory)
    client.created = created
    return client


class TestAmountHelpers:
    """Tests for unit scaling and slippage"""

    def test_to_raw_amount_rounds_down(self):
        assert to_raw_amount("1.5", 6) == 1_500_000
        assert to_raw_amount(Decimal("0.0000001"), 6) == 0
        assert to_raw_amount("1.9999999", 6) == 1_999_999

    def test_from_raw_amount(self):
        assert from_raw_amount(1_500_000, 6) == Decimal("1.5")

    def test_apply_slippage(self):
        assert apply_slippage(10_000, 50) == 9_950
        assert apply_slippage(10_000, 0) == 10_000

    def test_resolve_token(self):
        info = get_chain_info("ethereum")
        assert resolve_token(info, "usdc") == USDC_ETH
        assert resolve_token(info, USDC_ETH.lower()) == USDC_ETH
        with pytest.raises(ConfigurationError):
            resolve_token(info, "DOGE")


class TestClient:
    """Tests for AgentTradeClient wiring"""

    def test_provider_cached_per_chain(self, submitter):
        client = make_client(submitter, mock_web3())
        assert client.provider("eth") is client.provider("ethereum")
        assert client.created == ["ethereum"]

    def test_address_from_signer(self, submitter):
        assert make_client(submitter, mock_web3()).address == TEST_ADDRESS

    def test_unknown_chain(self, submitter):
        with pytest.raises(ConfigurationError):
            make_client(submitter, mock_web3()).provider("solana")

    @pytest.mark.asyncio
    async def test_close_releases_providers_and_submitter(self, submitter):
        web3 = mock_web3()
        web3.provider.disconnect = AsyncMock()
        async with make_client(submitter, web3) as client:
            client.provider("base")
        web3.provider.disconnect.assert_awaited_once()
        assert submitter.closed is True


class TestWalletModule:
    """Tests for read-only queries"""

    @pytest.mark.asyncio
    async def test_eth_balance(self, submitter):
        web3 = mock_web3(wei=1_500_000_000_000_000_000)
        client = make_client(submitter, web3)
        assert await client.wallet.eth_balance(chain="base") == Decimal("1.5")
        web3.eth.get_balance.assert_awaited_with(TEST_ADDRESS)

    @pytest.mark.asyncio
    async def test_token_balance(self, submitter):
        web3 = mock_web3(decimals=6, balance=2_500_000)
        client = make_client(submitter, web3)
        assert await client.wallet.token_balance("USDC", OTHER_ADDRESS) == Decimal("2.5")
        web3.eth.contract.assert_called_with(address=USDC_ETH, abi=ERC20_ABI)

    @pytest.mark.asyncio
    async def test_allowance(self, submitter):
        web3 = mock_web3(decimals=6, allowance=1_000_000)
        client = make_client(submitter, web3)
        assert await client.wallet.allowance(USDC_ETH, OTHER_ADDRESS) == Decimal(1)
        web3.eth.contract.return_value.functions.allowance.assert_called_with(TEST_ADDRESS, OTHER_ADDRESS)

    @pytest.mark.asyncio
    async def test_node_unreachable(self, submitter):
        web3 = mock_web3()
        web3.eth.contract.return_value.functions.balanceOf.return_value.call = AsyncMock(
            side_effect=connector_error()
        )
        client = make_client(submitter, web3)
        with pytest.raises(TransportError) as exc:
            await client.wallet.token_balance("USDC", OTHER_ADDRESS)
        assert exc.value.code == ErrorCode.TRANSPORT_CONNECTION_FAILED
        assert exc.value.recoverable is True
        assert isinstance(exc.value.original_error, aiohttp.ClientConnectorError)

    @pytest.mark.asyncio
    async def test_read_chain_unusable_result(self):
        async def decode_failure():
            raise ValueError("Could not decode contract function call")

        with pytest.raises(TransportError) as exc:
            await read_chain(decode_failure(), "decimals")
        assert exc.value.code == ErrorCode.TRANSPORT_INVALID_RESPONSE
        assert exc.value.recoverable is False
        assert "Failed to read decimals" in exc.value.message


class TestTransferModule:
    """Tests for transfers and approvals"""

    @pytest.mark.asyncio
    async def test_transfer_eth(self, submitter):
        client = make_client(submitter, mock_web3())
        receipt = await client.transfer.transfer_eth(OTHER_ADDRESS, "0.25", chain="arbitrum")

        assert receipt.transaction_hash == TX_HASH
        request = submitter.requests[0]
        assert request.to == OTHER_ADDRESS
        assert request.value == 250_000_000_000_000_000
        assert request.chain_id == 42161
        assert request.data is None

    @pytest.mark.asyncio
    async def test_transfer_erc20(self, submitter):
        client = make_client(submitter, mock_web3(decimals=6))
        await client.transfer.transfer_erc20(OTHER_ADDRESS, "25", "USDC")

        request = submitter.requests[0]
        assert request.to == USDC_ETH
        assert request.value == 0
        assert request.data == encode_call(ERC20_ABI, "transfer", [OTHER_ADDRESS, 25_000_000])
        assert request.data.startswith("0xa9059cbb")

    @pytest.mark.asyncio
    async def test_approve_scales_by_decimals(self, submitter):
        client = make_client(submitter, mock_web3(decimals=18))
        await client.transfer.approve(UNISWAP_V2_ROUTER, 2, "USDC")

        request = submitter.requests[0]
        assert request.data == encode_call(ERC20_ABI, "approve", [UNISWAP_V2_ROUTER, 2 * 10**18])


class TestSwapModule:
    """Tests for V2 router swaps"""

    @pytest.fixture(autouse=True)
    def _fixed_deadline(self, monkeypatch):
        monkeypatch.setattr(SwapModule, "_deadline", lambda self: 2_000_000_000)

    @pytest.mark.asyncio
    async def test_swap_eth_to_erc20(self, submitter):
        web3 = mock_web3(amounts_out=[10**17, 400_000_000])
        client = make_client(submitter, web3)
        await client.swap.swap_eth_to_erc20("USDC", "0.1", slippage_bps=100)

        path = [WETH_ETH, USDC_ETH]
        web3.eth.contract.return_value.functions.getAmountsOut.assert_called_with(10**17, path)

        request = submitter.requests[0]
        assert request.to == UNISWAP_V2_ROUTER
        assert request.value == 10**17
        assert request.data == encode_call(
            V2_ROUTER_ABI,
            "swapExactETHForTokens",
            [396_000_000, path, TEST_ADDRESS, 2_000_000_000],
        )

    @pytest.mark.asyncio
    async def test_swap_erc20_routes_via_wrapped_native(self, submitter):
        web3 = mock_web3(decimals=6, amounts_out=[100_000_000, 10**16, 99_000_000])
        client = make_client(submitter, web3)
        await client.swap.swap_erc20("USDC", "USDT", 100, slippage_bps=0)

        path = [USDC_ETH, WETH_ETH, USDT_ETH]
        request = submitter.requests[0]
        assert request.value == 0
        assert request.data == encode_call(
            V2_ROUTER_ABI,
            "swapExactTokensForTokens",
            [100_000_000, 99_000_000, path, TEST_ADDRESS, 2_000_000_000],
        )

    @pytest.mark.asyncio
    async def test_swap_erc20_direct_with_wrapped(self, submitter):
        web3 = mock_web3(decimals=18, amounts_out=[10**18, 3_000_000_000])
        client = make_client(submitter, web3)
        await client.swap.swap_erc20("WETH", "USDC", 1)
        web3.eth.contract.return_value.functions.getAmountsOut.assert_called_with(10**18, [WETH_ETH, USDC_ETH])

    @pytest.mark.asyncio
    async def test_same_token_rejected(self, submitter):
        client = make_client(submitter, mock_web3())
        with pytest.raises(ConfigurationError):
            await client.swap.swap_erc20("USDC", USDC_ETH, 1)
        assert submitter.requests == []

    @pytest.mark.asyncio
    async def test_slippage_out_of_range(self, submitter):
        client = make_client(submitter, mock_web3())
        with pytest.raises(ConfigurationError):
            await client.swap.swap_eth_to_erc20("USDC", "0.1", slippage_bps=10_000)

    @pytest.mark.asyncio
    async def test_quote_failure(self, submitter):
        web3 = mock_web3()
        web3.eth.contract.return_value.functions.getAmountsOut.return_value.call = AsyncMock(
            side_effect=TimeoutError("request timed out")
        )
        client = make_client(submitter, web3)
        with pytest.raises(TransportError) as exc:
            await client.swap.swap_eth_to_erc20("USDC", "0.1")
        assert exc.value.code == ErrorCode.TRANSPORT_TIMEOUT
        assert submitter.requests == []


class TestAgentTools:
    """Tests for tool argument validation and safety caps"""

    @pytest.mark.asyncio
    async def test_eth_transfer_returns_hash(self, submitter):
        tools = AgentTools(make_client(submitter, mock_web3()))
        assert await tools.eth_transfer("base", OTHER_ADDRESS.lower(), "0.5") == TX_HASH
        assert submitter.requests[0].to == OTHER_ADDRESS

    @pytest.mark.asyncio
    async def test_invalid_address(self, submitter):
        tools = AgentTools(make_client(submitter, mock_web3()))
        with pytest.raises(ToolError) as exc:
            await tools.eth_transfer("base", "0x1234", "0.5")
        assert exc.value.message == "Invalid to_address format"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["abc", "0", "-1", "NaN"])
    async def test_invalid_amount(self, submitter, amount):
        tools = AgentTools(make_client(submitter, mock_web3()))
        with pytest.raises(ToolError) as exc:
            await tools.eth_transfer("base", OTHER_ADDRESS, amount)
        assert exc.value.code == ErrorCode.TOOL_INVALID_ARGUMENT
        assert submitter.requests == []

    @pytest.mark.asyncio
    async def test_eth_cap(self, submitter):
        tools = AgentTools(make_client(submitter, mock_web3()))
        tools._max_eth = Decimal(10)
        with pytest.raises(ToolError) as exc:
            await tools.eth_transfer("base", OTHER_ADDRESS, "10.5")
        assert exc.value.message == "amount = 10.5 exceeds the safe value = 10"
        assert submitter.requests == []

    @pytest.mark.asyncio
    async def test_swap_cap(self, submitter):
        tools = AgentTools(make_client(submitter, mock_web3()))
        tools._max_swap = Decimal(100_000)
        with pytest.raises(ToolError) as exc:
            await tools.erc20_swap("ethereum", USDC_ETH, USDT_ETH, "100001")
        assert exc.value.code == ErrorCode.TOOL_LIMIT_EXCEEDED

    @pytest.mark.asyncio
    async def test_get_balance(self, submitter):
        tools = AgentTools(make_client(submitter, mock_web3(decimals=6, balance=1_230_000)))
        assert await tools.get_balance("ethereum", USDC_ETH, OTHER_ADDRESS) == "1.23"

    @pytest.mark.asyncio
    async def test_operation_error_wrapped(self, submitter):
        web3 = mock_web3()
        web3.eth.get_balance = AsyncMock(side_effect=TransportError.timeout("https://rpc", 30))
        tools = AgentTools(make_client(submitter, web3))
        with pytest.raises(ToolError) as exc:
            await tools.get_eth_balance("ethereum", OTHER_ADDRESS)
        assert exc.value.code == ErrorCode.TRANSPORT_TIMEOUT
        assert exc.value.recoverable is True

    @pytest.mark.asyncio
    async def test_unknown_chain_wrapped(self, submitter):
        tools = AgentTools(make_client(submitter, mock_web3()))
        with pytest.raises(ToolError) as exc:
            await tools.approve("solana", USDC_ETH, OTHER_ADDRESS, "1")
        assert exc.value.code == ErrorCode.CONFIG_INVALID

    @pytest.mark.asyncio
    async def test_node_connection_error_wrapped(self, submitter):
        web3 = mock_web3()
        web3.eth.get_balance = AsyncMock(side_effect=connector_error())
        tools = AgentTools(make_client(submitter, web3))
        with pytest.raises(ToolError) as exc:
            await tools.get_eth_balance("ethereum", OTHER_ADDRESS)
        assert exc.value.code == ErrorCode.TRANSPORT_CONNECTION_FAILED
        assert exc.value.tool == "get_eth_balance"

    @pytest.mark.asyncio
    async def test_unclassified_failure_wrapped(self, submitter):
        submitter.submit = AsyncMock(side_effect=RuntimeError("event loop is closed"))
        tools = AgentTools(make_client(submitter, mock_web3()))
        with pytest.raises(ToolError) as exc:
            await tools.eth_transfer("base", OTHER_ADDRESS, "0.5")
        assert exc.value.code == ErrorCode.TOOL_FAILED
        assert isinstance(exc.value.original_error, RuntimeError)

    @pytest.mark.asyncio
    async def test_query_pools(self, submitter, cache_config):
        cache = PoolCache(MemoryStore(), config=cache_config)
        await cache.merge([make_record(f"p{i}") for i in range(3)])
        tools = AgentTools(make_client(submitter, mock_web3()), pool_cache=cache)

        result = json.loads(await tools.query_pools("2", "2"))
        assert result["total"] == 3
        assert [pool["id"] for pool in result["pools"]] == ["p2"]

        with pytest.raises(ToolError):
            await tools.query_pools("0", "2")

    @pytest.mark.asyncio
    async def test_query_pools_without_cache(self, submitter):
        tools = AgentTools(make_client(submitter, mock_web3()))
        with pytest.raises(ToolError):
            await tools.query_pools()

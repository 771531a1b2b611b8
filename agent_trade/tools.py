"""
Agent tools

String-in, string-out wrappers around the asset modules and the pool cache,
shaped for registration with an LLM tool-calling framework. Every tool
validates its arguments, enforces the configured safety caps and either
returns a string or raises ToolError.
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Awaitable, Dict, Optional

from web3 import Web3

from .client import AgentTradeClient
from .config import config as global_config
from .errors import AgentTradeError, ErrorCode, ToolError
from .pools.cache import PoolCache

logger = logging.getLogger(__name__)

_CHAIN_PARAM = "The chain name, such as arbitrum"

TOOL_DESCRIPTIONS: Dict[str, Dict[str, Any]] = {
    "get_eth_balance": {
        "description": "Query ETH balance for an account",
        "parameters": {
            "chain": _CHAIN_PARAM,
            "account_address": "The address of the account to query balance for",
        },
    },
    "get_balance": {
        "description": "Query ERC20 token balance for an account",
        "parameters": {
            "chain": _CHAIN_PARAM,
            "token_address": "The address of the ERC20 token contract",
            "account_address": "The address of the account to query balance for",
        },
    },
    "check_allowance": {
        "description": "Check the current allowance for a spender",
        "parameters": {
            "chain": _CHAIN_PARAM,
            "token_address": "The address of the ERC20 token contract",
            "owner_address": "The address of the token owner",
            "spender_address": "The address of the spender",
        },
    },
    "eth_transfer": {
        "description": "Transfer ETH to a specific address",
        "parameters": {
            "chain": _CHAIN_PARAM,
            "to_address": "The receiving address",
            "amount": "The amount of ETH to transfer",
        },
    },
    "erc20_transfer": {
        "description": "Transfer ERC20 tokens to a specific address",
        "parameters": {
            "chain": _CHAIN_PARAM,
            "token_address": "The address of the ERC20 token contract",
            "to_address": "The receiving address",
            "amount": "The amount of tokens to transfer",
        },
    },
    "approve": {
        "description": "Approve an allowance for a spender",
        "parameters": {
            "chain": _CHAIN_PARAM,
            "token_address": "The address of the ERC20 token contract",
            "spender_address": "The address of the spender",
            "amount": "The amount of tokens to approve",
        },
    },
    "eth_swap_to_erc20": {
        "description": "Swap ETH for an ERC20 token on the chain's V2 router",
        "parameters": {
            "chain": _CHAIN_PARAM,
            "token_address": "The address of the ERC20 token to receive",
            "amount": "The amount of ETH to swap",
        },
    },
    "erc20_swap": {
        "description": "Swap ERC20 tokens on the chain's V2 router",
        "parameters": {
            "chain": _CHAIN_PARAM,
            "input_token": "The address of the token to sell",
            "output_token": "The address of the token to buy",
            "input_amount": "The amount of input tokens to swap",
        },
    },
    "query_pools": {
        "description": "List cached Raydium pools pairing SOL/USDC/USDT with a long-tail token",
        "parameters": {
            "page_num": "1-based page number",
            "page_size": "Number of pools per page",
        },
    },
}


def _address(tool: str, value: str, what: str) -> str:
    if not isinstance(value, str) or not Web3.is_address(value.strip()):
        raise ToolError.invalid_argument(tool, what)
    return Web3.to_checksum_address(value.strip())


def _amount(tool: str, value: Any, limit: Decimal, what: str = "amount") -> Decimal:
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ToolError.invalid_argument(tool, what)
    if not amount.is_finite() or amount <= 0:
        raise ToolError.invalid_argument(tool, what)
    if amount > limit:
        logger.warning(f"{tool}: amount {amount} exceeds the safe value {limit}")
        raise ToolError.limit_exceeded(tool, amount, limit)
    return amount


def _positive_int(tool: str, value: Any, what: str, minimum: int) -> int:
    try:
        number = int(str(value).strip())
    except ValueError:
        raise ToolError.invalid_argument(tool, what)
    if number < minimum:
        raise ToolError.invalid_argument(tool, what)
    return number


async def _call(tool: str, awaitable: Awaitable[Any]) -> Any:
    """Await an operation, surfacing every failure as ToolError"""
    try:
        return await awaitable
    except ToolError:
        raise
    except AgentTradeError as e:
        raise ToolError.from_error(tool, e)
    except Exception as e:
        logger.exception(f"{tool}: unclassified failure")
        raise ToolError.unexpected(tool, e)


class AgentTools:
    """
    Tool surface for an LLM agent

    Usage:
        tools = AgentTools(AgentTradeClient(), pool_cache=cache)
        tx_hash = await tools.eth_transfer("base", "0x...", "0.01")
    """

    def __init__(self, client: AgentTradeClient, pool_cache: Optional[PoolCache] = None):
        self._client = client
        self._pool_cache = pool_cache
        trading = global_config.trading
        self._max_eth = Decimal(str(trading.max_eth_amount))
        self._max_token = Decimal(str(trading.max_token_amount))
        self._max_swap = Decimal(str(trading.max_swap_amount))

    async def get_eth_balance(self, chain: str, account_address: str) -> str:
        account = _address("get_eth_balance", account_address, "account_address")
        balance = await _call("get_eth_balance", self._client.wallet.eth_balance(account, chain=chain))
        return str(balance)

    async def get_balance(self, chain: str, token_address: str, account_address: str) -> str:
        token = _address("get_balance", token_address, "token_address")
        account = _address("get_balance", account_address, "account_address")
        balance = await _call("get_balance", self._client.wallet.token_balance(token, account, chain=chain))
        return str(balance)

    async def check_allowance(
        self,
        chain: str,
        token_address: str,
        owner_address: str,
        spender_address: str,
    ) -> str:
        token = _address("check_allowance", token_address, "token_address")
        owner = _address("check_allowance", owner_address, "owner_address")
        spender = _address("check_allowance", spender_address, "spender_address")
        allowance = await _call(
            "check_allowance", self._client.wallet.allowance(token, spender, owner, chain=chain)
        )
        return str(allowance)

    async def eth_transfer(self, chain: str, to_address: str, amount: str) -> str:
        to = _address("eth_transfer", to_address, "to_address")
        value = _amount("eth_transfer", amount, self._max_eth)
        receipt = await _call("eth_transfer", self._client.transfer.transfer_eth(to, value, chain=chain))
        return receipt.transaction_hash

    async def erc20_transfer(self, chain: str, token_address: str, to_address: str, amount: str) -> str:
        token = _address("erc20_transfer", token_address, "token_address")
        to = _address("erc20_transfer", to_address, "to_address")
        value = _amount("erc20_transfer", amount, self._max_token)
        receipt = await _call(
            "erc20_transfer", self._client.transfer.transfer_erc20(to, value, token, chain=chain)
        )
        return receipt.transaction_hash

    async def approve(self, chain: str, token_address: str, spender_address: str, amount: str) -> str:
        token = _address("approve", token_address, "token_address")
        spender = _address("approve", spender_address, "spender_address")
        value = _amount("approve", amount, self._max_token)
        receipt = await _call("approve", self._client.transfer.approve(spender, value, token, chain=chain))
        return receipt.transaction_hash

    async def eth_swap_to_erc20(self, chain: str, token_address: str, amount: str) -> str:
        token = _address("eth_swap_to_erc20", token_address, "token_address")
        value = _amount("eth_swap_to_erc20", amount, self._max_eth)
        receipt = await _call(
            "eth_swap_to_erc20", self._client.swap.swap_eth_to_erc20(token, value, chain=chain)
        )
        return receipt.transaction_hash

    async def erc20_swap(self, chain: str, input_token: str, output_token: str, input_amount: str) -> str:
        token_in = _address("erc20_swap", input_token, "input_token address")
        token_out = _address("erc20_swap", output_token, "output_token address")
        value = _amount("erc20_swap", input_amount, self._max_swap, "input_amount")
        receipt = await _call(
            "erc20_swap", self._client.swap.swap_erc20(token_in, token_out, value, chain=chain)
        )
        return receipt.transaction_hash

    async def query_pools(self, page_num: str = "1", page_size: str = "10") -> str:
        if self._pool_cache is None:
            raise ToolError("Pool cache is not available", ErrorCode.TOOL_INVALID_ARGUMENT, tool="query_pools")
        page = _positive_int("query_pools", page_num, "page_num", 1)
        size = _positive_int("query_pools", page_size, "page_size", 0)
        records, total = await _call("query_pools", self._pool_cache.query(page, size))
        return json.dumps({
            "total": total,
            "page_num": page,
            "page_size": size,
            "pools": [record.to_dict() for record in records],
        })

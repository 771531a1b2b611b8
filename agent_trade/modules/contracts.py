"""
Contract ABIs and amount helpers shared by the asset modules

Calldata is encoded offline with a provider-less Web3 instance; reads go
through the chain's AsyncWeb3.
"""

from decimal import Decimal, ROUND_DOWN
from typing import Any, Awaitable, List, Union

from web3 import Web3

from ..errors import AgentTradeError, ErrorCode, TransportError
from ..infra.correlation import classify_error

ERC20_ABI = [
    {
        "constant": True,
        "inputs": [{"name": "_owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "balance", "type": "uint256"}],
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [],
        "name": "symbol",
        "outputs": [{"name": "", "type": "string"}],
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [
            {"name": "_owner", "type": "address"},
            {"name": "_spender", "type": "address"},
        ],
        "name": "allowance",
        "outputs": [{"name": "", "type": "uint256"}],
        "type": "function",
    },
    {
        "constant": False,
        "inputs": [
            {"name": "_to", "type": "address"},
            {"name": "_value", "type": "uint256"},
        ],
        "name": "transfer",
        "outputs": [{"name": "", "type": "bool"}],
        "type": "function",
    },
    {
        "constant": False,
        "inputs": [
            {"name": "_spender", "type": "address"},
            {"name": "_value", "type": "uint256"},
        ],
        "name": "approve",
        "outputs": [{"name": "", "type": "bool"}],
        "type": "function",
    },
]

# Uniswap V2 compatible router (also PancakeSwap V2)
V2_ROUTER_ABI = [
    {
        "inputs": [
            {"name": "amountIn", "type": "uint256"},
            {"name": "path", "type": "address[]"},
        ],
        "name": "getAmountsOut",
        "outputs": [{"name": "amounts", "type": "uint256[]"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "amountOutMin", "type": "uint256"},
            {"name": "path", "type": "address[]"},
            {"name": "to", "type": "address"},
            {"name": "deadline", "type": "uint256"},
        ],
        "name": "swapExactETHForTokens",
        "outputs": [{"name": "amounts", "type": "uint256[]"}],
        "stateMutability": "payable",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "amountIn", "type": "uint256"},
            {"name": "amountOutMin", "type": "uint256"},
            {"name": "path", "type": "address[]"},
            {"name": "to", "type": "address"},
            {"name": "deadline", "type": "uint256"},
        ],
        "name": "swapExactTokensForTokens",
        "outputs": [{"name": "amounts", "type": "uint256[]"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

_ENCODER = Web3()


def encode_call(abi: List[dict], fn_name: str, args: List[Any]) -> str:
    """Encode calldata for a contract function (0x-prefixed hex)"""
    contract = _ENCODER.eth.contract(abi=abi)
    return contract.encode_abi(fn_name, args=args)


def to_raw_amount(amount: Union[Decimal, int, float, str], decimals: int) -> int:
    """Scale a human amount to integer units, rounding down"""
    scaled = Decimal(str(amount)) * (Decimal(10) ** decimals)
    return int(scaled.to_integral_value(rounding=ROUND_DOWN))


def from_raw_amount(raw: int, decimals: int) -> Decimal:
    """Scale integer units to a human amount"""
    return Decimal(raw) / (Decimal(10) ** decimals)


def apply_slippage(expected: int, slippage_bps: int) -> int:
    """Minimum acceptable output for a slippage tolerance in basis points"""
    return expected * (10_000 - slippage_bps) // 10_000


async def read_chain(awaitable: Awaitable[Any], what: str) -> Any:
    """
    Await a node read, classifying foreign failures

    Raises:
        TransportError: Node unreachable, timed out or returned an unusable result
    """
    try:
        return await awaitable
    except AgentTradeError:
        raise
    except Exception as e:
        recoverable, code = classify_error(e)
        # Send failure codes do not apply to reads
        if code == ErrorCode.TX_SEND_FAILED:
            code = ErrorCode.TRANSPORT_CONNECTION_FAILED if recoverable else ErrorCode.TRANSPORT_INVALID_RESPONSE
        raise TransportError(f"Failed to read {what}: {e}", code, original_error=e, recoverable=recoverable)

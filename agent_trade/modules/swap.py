"""
Swap Module

Exact-input swaps through the chain's V2 router. The expected output is
quoted with getAmountsOut and reduced by the slippage tolerance to form
amountOutMin. Output is always sent to the signer's address.

ERC20 inputs must already be approved for the router.
"""

import logging
import time
from decimal import Decimal
from typing import List, Optional, Union, TYPE_CHECKING

from web3 import Web3

from ..config import config as global_config
from ..errors import ConfigurationError
from ..types.chains import ChainInfo, get_chain_info
from ..types.result import TransactionReceipt, TransactionRequest
from .contracts import V2_ROUTER_ABI, apply_slippage, encode_call, read_chain, to_raw_amount
from .wallet import resolve_token

if TYPE_CHECKING:
    from ..client import AgentTradeClient

logger = logging.getLogger(__name__)

Amount = Union[Decimal, int, float, str]


class SwapModule:
    """
    V2 router swaps

    Usage:
        receipt = await client.swap.swap_eth_to_erc20("USDC", Decimal("0.05"), chain="ethereum")
        receipt = await client.swap.swap_erc20("USDC", "USDT", 100, chain="arbitrum", slippage_bps=30)
    """

    def __init__(self, client: "AgentTradeClient"):
        self._client = client

    def _slippage(self, slippage_bps: Optional[int]) -> int:
        bps = slippage_bps if slippage_bps is not None else global_config.trading.default_slippage_bps
        if not 0 <= bps < 10_000:
            raise ConfigurationError.invalid("slippage_bps", f"{bps} not in [0, 10000)")
        return bps

    def _deadline(self) -> int:
        return int(time.time()) + global_config.evm.tx_deadline_seconds

    async def quote(self, chain: ChainInfo, amount_in: int, path: List[str]) -> int:
        """Expected output units for amount_in along path"""
        web3 = self._client.provider(chain.name)
        router = web3.eth.contract(address=Web3.to_checksum_address(chain.swap_router), abi=V2_ROUTER_ABI)
        amounts = await read_chain(router.functions.getAmountsOut(amount_in, path).call(), "swap quote")
        return int(amounts[-1])

    async def swap_eth_to_erc20(
        self,
        token: str,
        amount: Amount,
        chain: str = "ethereum",
        slippage_bps: Optional[int] = None,
    ) -> TransactionReceipt:
        """
        Swap native currency for a token

        Args:
            token: Output token symbol or address
            amount: Input amount in ether units
            chain: Registered chain name
            slippage_bps: Tolerance in basis points (default DEFAULT_SLIPPAGE_BPS)
        """
        info = get_chain_info(chain)
        bps = self._slippage(slippage_bps)
        path = [Web3.to_checksum_address(info.wrapped_native), resolve_token(info, token)]
        amount_in = Web3.to_wei(Decimal(str(amount)), "ether")

        expected = await self.quote(info, amount_in, path)
        amount_out_min = apply_slippage(expected, bps)

        data = encode_call(
            V2_ROUTER_ABI,
            "swapExactETHForTokens",
            [amount_out_min, path, Web3.to_checksum_address(self._client.address), self._deadline()],
        )
        request = TransactionRequest(
            to=Web3.to_checksum_address(info.swap_router),
            value=amount_in,
            data=data,
            chain_id=info.chain_id,
        )
        logger.info(
            f"swap {amount} {info.native_symbol} -> {token} on {info.name}: "
            f"expected={expected} min={amount_out_min} ({bps} bps)"
        )
        return await self._client.submit(request, info.name)

    async def swap_erc20(
        self,
        input_token: str,
        output_token: str,
        amount: Amount,
        chain: str = "ethereum",
        slippage_bps: Optional[int] = None,
    ) -> TransactionReceipt:
        """
        Swap one ERC20 for another

        Routed through the wrapped native token unless one side already is it.
        The amount is in input-token units, scaled by its on-chain decimals.
        """
        info = get_chain_info(chain)
        bps = self._slippage(slippage_bps)
        token_in = resolve_token(info, input_token)
        token_out = resolve_token(info, output_token)
        if token_in == token_out:
            raise ConfigurationError.invalid("output_token", "input and output tokens are the same")

        wrapped = Web3.to_checksum_address(info.wrapped_native)
        if wrapped in (token_in, token_out):
            path = [token_in, token_out]
        else:
            path = [token_in, wrapped, token_out]

        decimals = await self._client.wallet.token_decimals(token_in, info.name)
        amount_in = to_raw_amount(amount, decimals)

        expected = await self.quote(info, amount_in, path)
        amount_out_min = apply_slippage(expected, bps)

        data = encode_call(
            V2_ROUTER_ABI,
            "swapExactTokensForTokens",
            [amount_in, amount_out_min, path, Web3.to_checksum_address(self._client.address), self._deadline()],
        )
        request = TransactionRequest(
            to=Web3.to_checksum_address(info.swap_router),
            data=data,
            chain_id=info.chain_id,
        )
        logger.info(
            f"swap {amount} {input_token} -> {output_token} on {info.name}: "
            f"expected={expected} min={amount_out_min} ({bps} bps)"
        )
        return await self._client.submit(request, info.name)

"""
Transfer Module

Native and ERC20 transfers plus ERC20 approvals. Each operation builds one
TransactionRequest and hands it to the client's submitter; nothing here
retries or waits beyond the submitter's receipt wait.
"""

import logging
from decimal import Decimal
from typing import Union, TYPE_CHECKING

from web3 import Web3

from ..types.chains import get_chain_info
from ..types.result import TransactionReceipt, TransactionRequest
from .contracts import ERC20_ABI, encode_call, to_raw_amount
from .wallet import resolve_token

if TYPE_CHECKING:
    from ..client import AgentTradeClient

logger = logging.getLogger(__name__)

Amount = Union[Decimal, int, float, str]


class TransferModule:
    """
    Transfers and approvals

    Usage:
        receipt = await client.transfer.transfer_eth("0x...", Decimal("0.1"), chain="base")
        receipt = await client.transfer.transfer_erc20("0x...", 25, "USDC", chain="ethereum")
    """

    def __init__(self, client: "AgentTradeClient"):
        self._client = client

    async def transfer_eth(self, to: str, amount: Amount, chain: str = "ethereum") -> TransactionReceipt:
        """
        Send native currency

        Args:
            to: Recipient address
            amount: Amount in ether units
            chain: Registered chain name
        """
        info = get_chain_info(chain)
        request = TransactionRequest(
            to=Web3.to_checksum_address(to),
            value=Web3.to_wei(Decimal(str(amount)), "ether"),
            chain_id=info.chain_id,
        )
        logger.info(f"transfer_eth {amount} {info.native_symbol} -> {to} on {info.name}")
        return await self._client.submit(request, info.name)

    async def transfer_erc20(
        self,
        to: str,
        amount: Amount,
        token: str,
        chain: str = "ethereum",
    ) -> TransactionReceipt:
        """
        Send an ERC20 token

        The amount is in token units and scaled by the token's on-chain
        decimals before encoding `transfer(to, amount)`.
        """
        info = get_chain_info(chain)
        token_address = resolve_token(info, token)
        decimals = await self._client.wallet.token_decimals(token_address, info.name)
        raw_amount = to_raw_amount(amount, decimals)

        request = TransactionRequest(
            to=token_address,
            data=encode_call(ERC20_ABI, "transfer", [Web3.to_checksum_address(to), raw_amount]),
            chain_id=info.chain_id,
        )
        logger.info(f"transfer_erc20 {amount} {token} ({raw_amount} raw) -> {to} on {info.name}")
        return await self._client.submit(request, info.name)

    async def approve(
        self,
        spender: str,
        amount: Amount,
        token: str,
        chain: str = "ethereum",
    ) -> TransactionReceipt:
        """
        Approve spender for an ERC20 amount

        The amount is in token units and scaled by decimals, same as
        `transfer_erc20`.
        """
        info = get_chain_info(chain)
        token_address = resolve_token(info, token)
        decimals = await self._client.wallet.token_decimals(token_address, info.name)
        raw_amount = to_raw_amount(amount, decimals)

        request = TransactionRequest(
            to=token_address,
            data=encode_call(ERC20_ABI, "approve", [Web3.to_checksum_address(spender), raw_amount]),
            chain_id=info.chain_id,
        )
        logger.info(f"approve {amount} {token} for {spender} on {info.name}")
        return await self._client.submit(request, info.name)

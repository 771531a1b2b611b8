"""
AgentTradeClient - Unified entry point for on-chain asset operations

Provides a high-level interface over the chain registry, provider factory
and transaction submitter through functional modules (wallet, transfer,
swap).
"""

from __future__ import annotations

from typing import Callable, Dict, Optional, TYPE_CHECKING

from web3 import AsyncWeb3

from .infra.provider import make_provider
from .infra.submitter import TransactionSubmitter
from .types.chains import get_chain_info
from .types.result import TransactionReceipt, TransactionRequest

if TYPE_CHECKING:
    from .modules.wallet import WalletModule
    from .modules.transfer import TransferModule
    from .modules.swap import SwapModule


class AgentTradeClient:
    """
    Unified asset operations client

    Provides access to operations through functional modules:
    - wallet: Balance, decimals and allowance queries
    - transfer: Native and ERC20 transfers, approvals
    - swap: V2 router swaps

    Usage:
        client = AgentTradeClient()

        balance = await client.wallet.eth_balance(chain="base")
        receipt = await client.transfer.transfer_eth("0x...", "0.01", chain="base")
        receipt = await client.swap.swap_eth_to_erc20("USDC", "0.05", chain="ethereum")
    """

    def __init__(
        self,
        submitter: Optional[TransactionSubmitter] = None,
        provider_factory: Callable[[str], AsyncWeb3] = make_provider,
    ):
        """
        Initialize AgentTradeClient

        Args:
            submitter: Transaction submitter (defaults to the configured strategy)
            provider_factory: Builds an AsyncWeb3 for a chain name
        """
        self._submitter = submitter or TransactionSubmitter()
        self._provider_factory = provider_factory
        self._providers: Dict[str, AsyncWeb3] = {}
        self._address: Optional[str] = None

        # Lazy-loaded modules
        self._wallet: Optional["WalletModule"] = None
        self._transfer: Optional["TransferModule"] = None
        self._swap: Optional["SwapModule"] = None

    @property
    def submitter(self) -> TransactionSubmitter:
        """Access to transaction submitter"""
        return self._submitter

    @property
    def address(self) -> str:
        """Signer's address (resolves the signer on first access)"""
        if self._address is None:
            self._address = self._submitter.resolve_signer().address
        return self._address

    def provider(self, chain: str) -> AsyncWeb3:
        """AsyncWeb3 for a chain, created once per client"""
        name = get_chain_info(chain).name
        if name not in self._providers:
            self._providers[name] = self._provider_factory(name)
        return self._providers[name]

    async def submit(self, request: TransactionRequest, chain: str) -> TransactionReceipt:
        """Submit a request on a chain and wait for its receipt"""
        return await self._submitter.submit(request, self.provider(chain))

    @property
    def wallet(self) -> "WalletModule":
        """
        Wallet module for balance queries

        Provides:
        - eth_balance(address, chain)
        - token_balance(token, owner, chain)
        - token_decimals(token, chain)
        - allowance(token, spender, owner, chain)
        """
        if self._wallet is None:
            from .modules.wallet import WalletModule
            self._wallet = WalletModule(self)
        return self._wallet

    @property
    def transfer(self) -> "TransferModule":
        """
        Transfer module

        Provides:
        - transfer_eth(to, amount, chain)
        - transfer_erc20(to, amount, token, chain)
        - approve(spender, amount, token, chain)
        """
        if self._transfer is None:
            from .modules.transfer import TransferModule
            self._transfer = TransferModule(self)
        return self._transfer

    @property
    def swap(self) -> "SwapModule":
        """
        Swap module

        Provides:
        - swap_eth_to_erc20(token, amount, chain, slippage_bps)
        - swap_erc20(input_token, output_token, amount, chain, slippage_bps)
        """
        if self._swap is None:
            from .modules.swap import SwapModule
            self._swap = SwapModule(self)
        return self._swap

    async def close(self):
        """Release provider sessions and the signer's connections"""
        for web3 in self._providers.values():
            disconnect = getattr(web3.provider, "disconnect", None)
            if disconnect is not None:
                await disconnect()
        self._providers.clear()
        await self._submitter.close()

    async def __aenter__(self) -> "AgentTradeClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def __repr__(self) -> str:
        return f"AgentTradeClient(chains={list(self._providers)})"

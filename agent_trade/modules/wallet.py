"""
Wallet Module

Read-only balance and token queries on registered EVM chains.
Tokens may be given as a registered symbol (e.g. "USDC") or an address.
"""

import logging
from decimal import Decimal
from typing import Optional, TYPE_CHECKING

from web3 import Web3

from ..errors import ConfigurationError
from ..types.chains import ChainInfo, get_chain_info
from .contracts import ERC20_ABI, from_raw_amount, read_chain

if TYPE_CHECKING:
    from ..client import AgentTradeClient

logger = logging.getLogger(__name__)


def resolve_token(chain: ChainInfo, token: str) -> str:
    """
    Resolve a token symbol or address to a checksummed address

    Raises:
        ConfigurationError: Unknown symbol or malformed address
    """
    if Web3.is_address(token):
        return Web3.to_checksum_address(token)
    address = chain.token_address(token)
    if address is None:
        raise ConfigurationError.invalid(
            "token", f"Unknown token {token!r} on {chain.name}"
        )
    return Web3.to_checksum_address(address)


class WalletModule:
    """
    Balance queries

    Usage:
        client = AgentTradeClient()

        eth = await client.wallet.eth_balance("0x...", chain="ethereum")
        usdc = await client.wallet.token_balance("USDC", chain="ethereum")
        allowed = await client.wallet.allowance("USDC", spender, chain="base")
    """

    def __init__(self, client: "AgentTradeClient"):
        self._client = client

    def _owner(self, owner: Optional[str]) -> str:
        return Web3.to_checksum_address(owner or self._client.address)

    def _erc20(self, chain: ChainInfo, token: str):
        web3 = self._client.provider(chain.name)
        return web3.eth.contract(address=resolve_token(chain, token), abi=ERC20_ABI)

    async def eth_balance(self, address: Optional[str] = None, chain: str = "ethereum") -> Decimal:
        """
        Native balance in ether units

        Args:
            address: Account to query (defaults to the signer's address)
            chain: Registered chain name
        """
        info = get_chain_info(chain)
        web3 = self._client.provider(info.name)
        wei = await read_chain(web3.eth.get_balance(self._owner(address)), f"balance on {info.name}")
        return from_raw_amount(wei, 18)

    async def token_decimals(self, token: str, chain: str = "ethereum") -> int:
        """ERC20 decimals read on-chain"""
        info = get_chain_info(chain)
        contract = self._erc20(info, token)
        return int(await read_chain(contract.functions.decimals().call(), f"decimals of {token}"))

    async def token_balance(
        self,
        token: str,
        owner: Optional[str] = None,
        chain: str = "ethereum",
    ) -> Decimal:
        """
        ERC20 balance scaled by the token's decimals

        Args:
            token: Symbol or address
            owner: Account to query (defaults to the signer's address)
            chain: Registered chain name
        """
        info = get_chain_info(chain)
        contract = self._erc20(info, token)
        raw = await read_chain(contract.functions.balanceOf(self._owner(owner)).call(), f"balance of {token}")
        decimals = await read_chain(contract.functions.decimals().call(), f"decimals of {token}")
        return from_raw_amount(raw, decimals)

    async def allowance(
        self,
        token: str,
        spender: str,
        owner: Optional[str] = None,
        chain: str = "ethereum",
    ) -> Decimal:
        """ERC20 allowance granted by owner to spender, scaled by decimals"""
        info = get_chain_info(chain)
        contract = self._erc20(info, token)
        raw = await read_chain(
            contract.functions.allowance(self._owner(owner), Web3.to_checksum_address(spender)).call(),
            f"allowance of {token}",
        )
        decimals = await read_chain(contract.functions.decimals().call(), f"decimals of {token}")
        return from_raw_amount(raw, decimals)

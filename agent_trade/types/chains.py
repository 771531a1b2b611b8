"""
EVM chain registry

Static table of supported chains: chain id, RPC endpoint, well-known token
addresses and the V2-style swap router used by the swap module.
RPC endpoints can be overridden per chain with <NAME>_RPC_URL.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..errors import ConfigurationError


@dataclass(frozen=True)
class ChainInfo:
    """
    Static description of an EVM chain

    Attributes:
        name: Canonical lowercase chain name
        chain_id: EIP-155 chain id
        provider_url: HTTP RPC endpoint
        tokens: Ordered symbol -> checksummed address
        swap_router: Uniswap V2 compatible router address
        wrapped_native_symbol: Symbol of the wrapped native token in `tokens`
    """
    name: str
    chain_id: int
    provider_url: str
    tokens: Dict[str, str] = field(default_factory=dict)
    swap_router: str = ""
    wrapped_native_symbol: str = "WETH"
    native_symbol: str = "ETH"

    @property
    def wrapped_native(self) -> str:
        """Address of the wrapped native token"""
        try:
            return self.tokens[self.wrapped_native_symbol]
        except KeyError:
            raise ConfigurationError.invalid(
                "chain", f"{self.wrapped_native_symbol} token not found on {self.name}"
            )

    def token_address(self, symbol: str) -> Optional[str]:
        """Look up a token address by symbol (case-insensitive)"""
        symbol_upper = symbol.upper()
        for sym, address in self.tokens.items():
            if sym.upper() == symbol_upper:
                return address
        return None


def _rpc_url(name: str, default: str) -> str:
    return os.getenv(f"{name.upper()}_RPC_URL", default)


_ETHEREUM_TOKENS = {
    "WETH": "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
    "USDC": "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
    "USDT": "0xdAC17F958D2ee523a2206206994597C13D831ec7",
    "DAI": "0x6B175474E89094C44Da98b954EedeAC495271d0F",
}

_UNISWAP_V2_ROUTER = "0x7a250d5630B4cF539739dF2C5dAcb4c659F2488D"


def _build_registry() -> Dict[str, ChainInfo]:
    chains = [
        ChainInfo(
            name="ethereum",
            chain_id=1,
            provider_url=_rpc_url("ethereum", "https://eth.llamarpc.com"),
            tokens=dict(_ETHEREUM_TOKENS),
            swap_router=_UNISWAP_V2_ROUTER,
        ),
        ChainInfo(
            name="arbitrum",
            chain_id=42161,
            provider_url=_rpc_url("arbitrum", "https://arb1.arbitrum.io/rpc"),
            tokens={
                "WETH": "0x82aF49447D8a07e3bd95BD0d56f35241523fBab1",
                "USDC": "0xaf88d065e77c8cC2239327C5EDb3A432268e5831",
                "USDT": "0xFd086bC7CD5C481DCC9C85ebE478A1C0b69FCbb9",
            },
            swap_router="0x4752ba5DBc23f44D87826276BF6Fd6b1C372aD24",
        ),
        ChainInfo(
            name="base",
            chain_id=8453,
            provider_url=_rpc_url("base", "https://mainnet.base.org"),
            tokens={
                "WETH": "0x4200000000000000000000000000000000000006",
                "USDC": "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
            },
            swap_router="0x4752ba5DBc23f44D87826276BF6Fd6b1C372aD24",
        ),
        ChainInfo(
            name="optimism",
            chain_id=10,
            provider_url=_rpc_url("optimism", "https://mainnet.optimism.io"),
            tokens={
                "WETH": "0x4200000000000000000000000000000000000006",
                "USDC": "0x0b2C639c533813f4Aa9D7837cAf62653d097Ff85",
                "USDT": "0x94b008aA00579c1307B0EF2c499aD98a8ce58e58",
            },
            swap_router="0x4A7b5Da61326A6379179b40d00F57E5bbDC962c2",
        ),
        ChainInfo(
            name="bsc",
            chain_id=56,
            provider_url=_rpc_url("bsc", "https://bsc-dataseed.binance.org"),
            tokens={
                "WBNB": "0xbb4CdB9CBd36B01bD1cBaEBF2De08d9173bc095c",
                "USDC": "0x8AC76a51cc950d9822D68b83fE1Ad97B32Cd580d",
                "USDT": "0x55d398326f99059fF775485246999027B3197955",
            },
            # PancakeSwap V2 router
            swap_router="0x10ED43C718714eb63d5aA57B78B54704E256024E",
            wrapped_native_symbol="WBNB",
            native_symbol="BNB",
        ),
        # Local fork (anvil/hardhat) of Ethereum mainnet
        ChainInfo(
            name="localhost",
            chain_id=31337,
            provider_url=_rpc_url("localhost", "http://localhost:8545"),
            tokens=dict(_ETHEREUM_TOKENS),
            swap_router=_UNISWAP_V2_ROUTER,
        ),
    ]
    return {chain.name: chain for chain in chains}


CHAIN_INFOS: Dict[str, ChainInfo] = _build_registry()

_ALIASES = {
    "eth": "ethereum",
    "mainnet": "ethereum",
    "arb": "arbitrum",
    "op": "optimism",
    "bnb": "bsc",
    "anvil": "localhost",
    "local": "localhost",
}


def get_chain_info(name: str) -> ChainInfo:
    """
    Look up a chain by name (case-insensitive, aliases allowed)

    Raises:
        ConfigurationError: If the chain is not in the registry
    """
    key = (name or "").strip().lower()
    key = _ALIASES.get(key, key)
    info = CHAIN_INFOS.get(key)
    if info is None:
        raise ConfigurationError.invalid(
            "chain", f"Unknown chain: {name}. Supported: {', '.join(list_chains())}"
        )
    return info


def list_chains() -> List[str]:
    """Canonical names of all registered chains"""
    return list(CHAIN_INFOS.keys())

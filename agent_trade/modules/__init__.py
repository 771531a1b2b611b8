"""
Functional modules for AgentTradeClient

Provides high-level operations:
- WalletModule: Native and ERC20 balance, decimals and allowance queries
- TransferModule: Native and ERC20 transfers, approvals
- SwapModule: V2 router swaps
"""

from .wallet import WalletModule, resolve_token
from .transfer import TransferModule
from .swap import SwapModule

__all__ = [
    "WalletModule",
    "TransferModule",
    "SwapModule",
    "resolve_token",
]

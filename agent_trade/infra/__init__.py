"""
Infrastructure layer for Agent Trade

Provides:
- make_provider: AsyncWeb3 factory for registered chains
- EVMSigner: signing strategies (local key, delegated sponsor)
- TransactionSubmitter: sign, send and await receipts
- SqliteStore: durable key-value store for the pool cache
"""

from .provider import make_provider
from .evm_signer import (
    SignerStrategy,
    EVMSigner,
    LocalKeySigner,
    SponsoredSigner,
    get_signer_strategy,
    reset_signer_strategy,
    create_signer,
)
from .submitter import TransactionSubmitter, submit
from .store import DurableStore, SqliteStore
from .correlation import CorrelationContext, get_correlation_id, classify_error

__all__ = [
    "make_provider",
    "SignerStrategy",
    "EVMSigner",
    "LocalKeySigner",
    "SponsoredSigner",
    "get_signer_strategy",
    "reset_signer_strategy",
    "create_signer",
    "TransactionSubmitter",
    "submit",
    "DurableStore",
    "SqliteStore",
    "CorrelationContext",
    "get_correlation_id",
    "classify_error",
]

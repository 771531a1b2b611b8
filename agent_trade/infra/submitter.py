"""
Transaction submitter

Resolves the signer for the configured strategy, broadcasts the request and
waits for its receipt. Every failure surfaces as a classified error:

- TransportError: node/relay unreachable, send rejected, receipt timeout
- SignerError: the transaction could not be signed
- StrategyResolutionError: strategy unknown or credential absent

A reverted transaction is not an error; it yields a receipt with
success=False. The submitter never retries.
"""

from __future__ import annotations

import logging
from typing import Optional

from web3 import AsyncWeb3
from web3.exceptions import TimeExhausted

from ..config import config as global_config
from ..errors import AgentTradeError, TransportError
from ..types.result import TransactionReceipt, TransactionRequest
from .correlation import CorrelationContext, classify_error, log_with_correlation
from .evm_signer import EVMSigner, SignerStrategy, create_signer

logger = logging.getLogger(__name__)


def _endpoint(provider: AsyncWeb3) -> Optional[str]:
    uri = getattr(getattr(provider, "provider", None), "endpoint_uri", None)
    return str(uri) if isinstance(uri, str) else None


class TransactionSubmitter:
    """
    Sign, send and confirm transactions

    Usage:
        submitter = TransactionSubmitter()
        receipt = await submitter.submit(request, make_provider("ethereum"))

        # Pinned signer (tests, scripts)
        submitter = TransactionSubmitter(signer=LocalKeySigner.from_private_key(key))
    """

    def __init__(
        self,
        signer: Optional[EVMSigner] = None,
        strategy: Optional[SignerStrategy] = None,
        receipt_timeout: Optional[float] = None,
    ):
        self._signer = signer
        self._strategy = strategy
        self._receipt_timeout = (
            receipt_timeout if receipt_timeout is not None else global_config.tx.receipt_timeout
        )

    def resolve_signer(self) -> EVMSigner:
        """Return the pinned signer, building it for the strategy on first use"""
        if self._signer is None:
            self._signer = create_signer(self._strategy)
        return self._signer

    async def close(self):
        """Release the signer's connections (sponsor relay session)"""
        if self._signer is not None:
            await self._signer.close()

    async def __aenter__(self) -> "TransactionSubmitter":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def submit(self, request: TransactionRequest, provider: AsyncWeb3) -> TransactionReceipt:
        """
        Submit a transaction and wait for its receipt

        Args:
            request: Transaction intent
            provider: AsyncWeb3 bound to the target chain

        Returns:
            TransactionReceipt (success=False when the transaction reverted)

        Raises:
            TransportError, SignerError, StrategyResolutionError
        """
        with CorrelationContext("tx"):
            signer = self.resolve_signer()
            endpoint = _endpoint(provider)
            log_with_correlation(
                logging.INFO,
                f"Submitting to={request.to} value={request.value} via {signer.strategy.name}",
                "submit",
                log=logger,
            )

            try:
                tx_hash = await signer.send(provider, request)
            except AgentTradeError:
                raise
            except Exception as e:
                recoverable, code = classify_error(e)
                log_with_correlation(logging.ERROR, f"Send failed: {e}", "submit", log=logger)
                raise TransportError.send_failed(endpoint, e, code=code, recoverable=recoverable)

            log_with_correlation(logging.INFO, f"Sent {tx_hash}, awaiting receipt", "submit", log=logger)

            try:
                raw_receipt = await provider.eth.wait_for_transaction_receipt(
                    tx_hash, timeout=self._receipt_timeout
                )
            except TimeExhausted as e:
                log_with_correlation(logging.WARNING, f"Receipt timeout for {tx_hash}", "submit", log=logger)
                raise TransportError.receipt_timeout(tx_hash, self._receipt_timeout, e)
            except Exception as e:
                recoverable, code = classify_error(e)
                err = TransportError(
                    f"Failed to fetch receipt for {tx_hash}: {e}",
                    code,
                    original_error=e,
                    endpoint=endpoint,
                    recoverable=recoverable,
                )
                err.details["tx_hash"] = tx_hash
                raise err

            receipt = TransactionReceipt.from_web3(raw_receipt)
            log_with_correlation(
                logging.INFO if receipt.success else logging.WARNING,
                f"{receipt.status.value}: {receipt.transaction_hash} block={receipt.block_number} gas={receipt.gas_used}",
                "submit",
                log=logger,
            )
            return receipt


async def submit(
    request: TransactionRequest,
    provider: AsyncWeb3,
    strategy: Optional[SignerStrategy] = None,
) -> TransactionReceipt:
    """Submit with a signer built for the process (or given) strategy"""
    async with TransactionSubmitter(strategy=strategy) as submitter:
        return await submitter.submit(request, provider)

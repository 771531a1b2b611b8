"""
EVM transaction signers using web3.py

Two signing strategies are supported, selected by ACCOUNT_TYPE:
- LOCAL: a locally held private key signs and broadcasts the transaction
- EIP7702: the delegating account authorizes the call and a gas sponsor
  relays it (sponsor pays gas)

The strategy is resolved once, at first use, and cached for the process.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import httpx
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3, Web3

from ..config import config as global_config
from ..errors import (
    SignerError,
    StrategyResolutionError,
    TransportError,
)
from ..types.result import TransactionRequest

logger = logging.getLogger(__name__)


class SignerStrategy(Enum):
    """Closed set of signing strategies"""
    LOCAL = "LOCAL"
    DELEGATED_SPONSOR = "EIP7702"

    @classmethod
    def from_string(cls, value: str) -> "SignerStrategy":
        """Convert ACCOUNT_TYPE value to a strategy (case-insensitive)"""
        value_upper = (value or "").strip().upper()
        if value_upper in ("LOCAL", "EOA"):
            return cls.LOCAL
        elif value_upper in ("EIP7702", "EIP-7702", "DELEGATED", "SPONSOR", "DELEGATED_SPONSOR"):
            return cls.DELEGATED_SPONSOR
        else:
            raise StrategyResolutionError.unknown(value)


def _load_account(private_key: str, strategy: SignerStrategy) -> LocalAccount:
    if not private_key:
        raise StrategyResolutionError.missing_credential(strategy.value, "EVM_PRIVATE_KEY")

    # Ensure 0x prefix
    if not private_key.startswith("0x"):
        private_key = "0x" + private_key

    try:
        return Account.from_key(private_key)
    except (ValueError, TypeError) as e:
        raise StrategyResolutionError(
            f"EVM_PRIVATE_KEY is not a valid private key: {e}",
            strategy=strategy.value,
        )


class EVMSigner(ABC):
    """
    Signing strategy interface

    `send` turns a TransactionRequest into a broadcast transaction and
    returns its hash; the submitter then waits for the receipt.
    """

    strategy: SignerStrategy

    def __init__(self, account: LocalAccount):
        self._account = account

    @property
    def address(self) -> str:
        """Get wallet address (checksummed)"""
        return self._account.address

    def sign_message(self, message: bytes) -> bytes:
        """
        Sign a raw message (EIP-191)

        Args:
            message: Message bytes to sign

        Returns:
            Signature bytes
        """
        signable = encode_defunct(message)
        signed = self._account.sign_message(signable)
        return signed.signature

    @abstractmethod
    async def send(self, web3: AsyncWeb3, request: TransactionRequest) -> str:
        """
        Sign and broadcast a transaction

        Returns:
            Transaction hash (0x-prefixed hex)
        """

    async def close(self):
        """Release any connections held by the signer"""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(address={self.address})"


class LocalKeySigner(EVMSigner):
    """
    Local EVM signer

    Fills nonce, chain id, gas and fees from the node, signs with the local
    key and sends the raw transaction.

    Usage:
        signer = LocalKeySigner.from_private_key("0x...")
        tx_hash = await signer.send(web3, request)
    """

    strategy = SignerStrategy.LOCAL

    def sign_transaction(self, tx_dict: Dict[str, Any]) -> Tuple[bytes, str]:
        """
        Sign a transaction

        Args:
            tx_dict: Transaction dictionary with to, data, value, gas, fees, nonce, chainId

        Returns:
            (raw_tx_bytes, tx_hash_hex)

        Raises:
            SignerError: If the transaction cannot be signed
        """
        try:
            signed = self._account.sign_transaction(tx_dict)
        except Exception as e:
            raise SignerError.failed(str(e), e)
        return signed.raw_transaction, Web3.to_hex(signed.hash)

    async def _add_gas_price(self, web3: AsyncWeb3, tx: Dict[str, Any]):
        """Add EIP-1559 fees when the chain reports a base fee, legacy gasPrice otherwise"""
        latest_block = await web3.eth.get_block("latest")
        base_fee = latest_block.get("baseFeePerGas")
        if base_fee:
            max_priority_fee = Web3.to_wei(global_config.tx.priority_fee_gwei, "gwei")
            tx["maxFeePerGas"] = int(base_fee * 2) + max_priority_fee
            tx["maxPriorityFeePerGas"] = max_priority_fee
            tx.pop("gasPrice", None)
        else:
            tx.pop("maxFeePerGas", None)
            tx.pop("maxPriorityFeePerGas", None)
            tx["gasPrice"] = await web3.eth.gas_price

    async def send(self, web3: AsyncWeb3, request: TransactionRequest) -> str:
        tx = request.to_tx_dict(sender=self.address)

        if "chainId" not in tx:
            tx["chainId"] = await web3.eth.chain_id
        tx["nonce"] = await web3.eth.get_transaction_count(self.address, "pending")

        if "gas" not in tx:
            estimate = await web3.eth.estimate_gas(tx)
            tx["gas"] = int(estimate * global_config.tx.gas_limit_multiplier)

        await self._add_gas_price(web3, tx)

        raw_tx, tx_hash = self.sign_transaction(tx)
        logger.debug(f"Signed tx {tx_hash} nonce={tx['nonce']} chain={tx['chainId']}")

        sent = await web3.eth.send_raw_transaction(raw_tx)
        return Web3.to_hex(sent)

    @classmethod
    def from_private_key(cls, private_key: str) -> "LocalKeySigner":
        """
        Create signer from private key

        Args:
            private_key: Hex-encoded private key (with or without 0x prefix)

        Raises:
            StrategyResolutionError: Key missing or malformed
        """
        return cls(_load_account(private_key, cls.strategy))

    @classmethod
    def from_config(cls) -> "LocalKeySigner":
        """Create signer from EVM_PRIVATE_KEY"""
        return cls.from_private_key(global_config.signer.private_key)


class SponsoredSigner(EVMSigner):
    """
    Delegated account signer with a gas sponsor

    The delegating account signs an authorization over (chainId, to, value,
    data); the sponsor relay submits the call on its behalf via JSON-RPC and
    returns the transaction hash.

    Usage:
        signer = SponsoredSigner.from_config()
        tx_hash = await signer.send(web3, request)
    """

    strategy = SignerStrategy.DELEGATED_SPONSOR

    def __init__(
        self,
        account: LocalAccount,
        relay_url: str,
        rpc_method: str = "relay_sendTransaction",
        api_key: Optional[str] = None,
        timeout: float = 20.0,
    ):
        super().__init__(account)
        if not relay_url:
            raise StrategyResolutionError.missing_credential(self.strategy.value, "SPONSOR_RELAY_URL")
        self._relay_url = relay_url
        self._rpc_method = rpc_method
        self._api_key = api_key
        self._timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def relay_url(self) -> str:
        return self._relay_url

    def authorization_digest(self, chain_id: int, request: TransactionRequest) -> bytes:
        """Digest the delegating account signs to authorize one call"""
        data = Web3.to_bytes(hexstr=request.data or "0x")
        return Web3.solidity_keccak(
            ["uint256", "address", "address", "uint256", "bytes"],
            [chain_id, self.address, Web3.to_checksum_address(request.to), int(request.value), data],
        )

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            headers = {"Content-Type": "application/json"}
            if self._api_key:
                headers["Authorization"] = f"Bearer {self._api_key}"
            self._client = httpx.AsyncClient(timeout=self._timeout, headers=headers)
        return self._client

    async def _rpc_call(self, method: str, params: list) -> Any:
        client = self._get_client()
        try:
            response = await client.post(
                self._relay_url,
                json={"jsonrpc": "2.0", "id": 1, "method": method, "params": params},
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException as e:
            raise TransportError.timeout(self._relay_url, self._timeout, e)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 429:
                raise TransportError.rate_limited(self._relay_url)
            raise TransportError(
                f"Sponsor relay HTTP error {e.response.status_code}",
                original_error=e,
                endpoint=self._relay_url,
            )
        except httpx.RequestError as e:
            raise TransportError.connection_failed(self._relay_url, e)
        except ValueError as e:
            raise TransportError.invalid_response(self._relay_url, f"non-JSON body: {e}")

        if "error" in payload:
            error = payload["error"]
            message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            raise SignerError.failed(f"sponsor relay rejected request: {message}")
        return payload.get("result")

    async def send(self, web3: AsyncWeb3, request: TransactionRequest) -> str:
        chain_id = request.chain_id if request.chain_id is not None else await web3.eth.chain_id
        try:
            signature = self.sign_message(self.authorization_digest(chain_id, request))
        except Exception as e:
            raise SignerError.failed(str(e), e)

        params = [{
            "from": self.address,
            "to": Web3.to_checksum_address(request.to),
            "value": hex(int(request.value)),
            "data": request.data or "0x",
            "chainId": hex(chain_id),
            "signature": Web3.to_hex(signature),
        }]
        result = await self._rpc_call(self._rpc_method, params)

        if isinstance(result, dict):
            result = result.get("transactionHash") or result.get("txHash") or result.get("hash")
        if not isinstance(result, str) or not result.startswith("0x"):
            raise TransportError.invalid_response(self._relay_url, "relay returned no transaction hash")
        return result

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @classmethod
    def from_config(cls) -> "SponsoredSigner":
        """Create signer from EVM_PRIVATE_KEY and SPONSOR_* settings"""
        sponsor = global_config.sponsor
        if not sponsor.relay_url:
            raise StrategyResolutionError.missing_credential(cls.strategy.value, "SPONSOR_RELAY_URL")
        account = _load_account(global_config.signer.private_key, cls.strategy)
        return cls(
            account,
            relay_url=sponsor.relay_url,
            rpc_method=sponsor.rpc_method,
            api_key=sponsor.api_key,
            timeout=sponsor.timeout,
        )


# Resolved once per process
_strategy: Optional[SignerStrategy] = None
_strategy_lock = threading.Lock()


def get_signer_strategy() -> SignerStrategy:
    """
    Resolve the signing strategy from ACCOUNT_TYPE, caching the result

    Raises:
        StrategyResolutionError: ACCOUNT_TYPE names an unknown strategy
    """
    global _strategy
    if _strategy is None:
        with _strategy_lock:
            if _strategy is None:
                _strategy = SignerStrategy.from_string(global_config.signer.account_type)
                logger.info(f"Signing strategy resolved: {_strategy.name}")
    return _strategy


def reset_signer_strategy() -> None:
    """Forget the cached strategy (config reloads and tests)"""
    global _strategy
    with _strategy_lock:
        _strategy = None


def create_signer(strategy: Optional[SignerStrategy] = None) -> EVMSigner:
    """
    Create the signer for a strategy from configuration

    Args:
        strategy: Strategy to use (defaults to the cached process strategy)

    Raises:
        StrategyResolutionError: Strategy unknown or its credential absent
    """
    strategy = strategy or get_signer_strategy()
    if strategy == SignerStrategy.LOCAL:
        return LocalKeySigner.from_config()
    return SponsoredSigner.from_config()

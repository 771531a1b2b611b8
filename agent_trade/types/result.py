"""
Transaction request and receipt type definitions
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from web3 import Web3


class TxStatus(Enum):
    """Final on-chain transaction status"""
    SUCCESS = "success"
    REVERTED = "reverted"


@dataclass
class TransactionRequest:
    """
    Unsigned transaction intent

    Built fresh per submission. Fields the signer fills in (nonce, fees,
    chain id, gas) are left out unless the caller pins them.

    Attributes:
        to: Destination address
        value: Native amount in wei
        data: Optional calldata (hex string)
        chain_id: Optional chain id; read from the provider when absent
        gas: Optional gas limit; estimated when absent
    """
    to: str
    value: int = 0
    data: Optional[str] = None
    chain_id: Optional[int] = None
    gas: Optional[int] = None

    def to_tx_dict(self, sender: Optional[str] = None) -> Dict[str, Any]:
        """Convert to a web3 transaction dict"""
        tx: Dict[str, Any] = {
            "to": Web3.to_checksum_address(self.to),
            "value": int(self.value),
        }
        if self.data:
            tx["data"] = self.data
        if self.chain_id is not None:
            tx["chainId"] = self.chain_id
        if self.gas is not None:
            tx["gas"] = self.gas
        if sender is not None:
            tx["from"] = Web3.to_checksum_address(sender)
        return tx


@dataclass(frozen=True)
class TransactionReceipt:
    """
    Mined transaction receipt

    A reverted transaction still yields a receipt, with success=False.
    """
    transaction_hash: str
    success: bool
    block_number: int
    gas_used: int
    effective_gas_price: int = 0

    @property
    def status(self) -> TxStatus:
        return TxStatus.SUCCESS if self.success else TxStatus.REVERTED

    @classmethod
    def from_web3(cls, receipt: Mapping[str, Any]) -> "TransactionReceipt":
        """Build from a web3 receipt (AttributeDict or plain dict)"""
        tx_hash = receipt["transactionHash"]
        if not isinstance(tx_hash, str):
            tx_hash = Web3.to_hex(tx_hash)
        return cls(
            transaction_hash=tx_hash,
            success=receipt["status"] == 1,
            block_number=receipt["blockNumber"],
            gas_used=receipt["gasUsed"],
            effective_gas_price=receipt.get("effectiveGasPrice", 0),
        )

    def __str__(self) -> str:
        return f"TransactionReceipt({self.status.value}, {self.transaction_hash[:18]}..., block={self.block_number})"

"""
Transaction execution models and types.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class TransactionStatus(str, Enum):
    """Transaction lifecycle status."""
    SUBMITTED = "submitted"      # Hash known, no receipt observed yet
    PENDING = "pending"          # Receipt wait timed out
    CONFIRMED = "confirmed"      # Receipt with status 1
    FAILED = "failed"            # Receipt with status 0


@dataclass(frozen=True)
class Call:
    """A single call executed by the smart account."""
    to: str
    data: str = "0x"
    value: int = 0                              # Wei to send

    def to_dict(self) -> Dict[str, Any]:
        return {"to": self.to, "data": self.data, "value": hex(self.value)}


def _parse_quantity(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, int):
        return value
    text = str(value)
    return int(text, 16) if text.startswith("0x") else int(text)


@dataclass
class TransactionReceipt:
    transaction_hash: str
    success: bool
    block_number: Optional[int] = None
    gas_used: Optional[int] = None

    @property
    def status(self) -> TransactionStatus:
        return TransactionStatus.CONFIRMED if self.success else TransactionStatus.FAILED

    @classmethod
    def from_rpc(cls, data: Dict[str, Any]) -> "TransactionReceipt":
        status = _parse_quantity(data.get("status"))
        return cls(
            transaction_hash=data.get("transactionHash", ""),
            success=status == 1,
            block_number=_parse_quantity(data.get("blockNumber")),
            gas_used=_parse_quantity(data.get("gasUsed")),
        )


@dataclass
class SubmissionResult:
    """Outcome of submitting a call (or batch) through the smart account."""
    transaction_hash: Optional[str]
    status: TransactionStatus = TransactionStatus.SUBMITTED
    block_number: Optional[int] = None
    gas_used: Optional[int] = None
    user_op_hash: Optional[str] = None

    @property
    def confirmed(self) -> bool:
        return self.status == TransactionStatus.CONFIRMED

    @classmethod
    def from_receipt(cls, receipt: TransactionReceipt, user_op_hash: Optional[str] = None) -> "SubmissionResult":
        return cls(
            transaction_hash=receipt.transaction_hash,
            status=receipt.status,
            block_number=receipt.block_number,
            gas_used=receipt.gas_used,
            user_op_hash=user_op_hash,
        )

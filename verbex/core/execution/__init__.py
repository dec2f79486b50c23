"""Execution primitives: calls, user operations and receipt tracking."""

from .models import Call, SubmissionResult, TransactionReceipt, TransactionStatus
from .tx_builder import MAX_UINT256, TransactionBuilder
from .userop import UserOperation, UserOpGasEstimate, UserOpReceipt

__all__ = [
    "Call",
    "SubmissionResult",
    "TransactionReceipt",
    "TransactionStatus",
    "MAX_UINT256",
    "TransactionBuilder",
    "UserOperation",
    "UserOpGasEstimate",
    "UserOpReceipt",
]

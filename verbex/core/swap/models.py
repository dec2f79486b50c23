"""Typed models used by the swap subsystem."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..execution.models import Call, TransactionStatus


class SwapStage(str, Enum):
    QUOTE_REQUESTED = "quote_requested"
    QUOTE_RECEIVED = "quote_received"
    ALLOWANCE_CHECKED = "allowance_checked"
    APPROVAL_SUBMITTED = "approval_submitted"
    APPROVAL_CONFIRMED = "approval_confirmed"
    APPROVAL_PENDING = "approval_pending"
    SWAP_SUBMITTED = "swap_submitted"
    SWAP_CONFIRMED = "swap_confirmed"
    SWAP_PENDING = "swap_pending"


@dataclass(frozen=True)
class SwapQuoteRequest:
    """Single-chain quote request; ``amount`` is in the input token's smallest units."""

    chain_id: int
    token_in: str
    token_out: str
    amount: int
    recipient: str
    slippage: str = "auto"
    affiliate_fee_percent: str = "0"

    def to_params(self) -> Dict[str, str]:
        return {
            "chainId": str(self.chain_id),
            "tokenIn": self.token_in,
            "tokenOut": self.token_out,
            "tokenInAmount": str(self.amount),
            "tokenOutRecipient": self.recipient,
            "slippage": self.slippage,
            "affiliateFeePercent": self.affiliate_fee_percent,
        }


@dataclass
class SwapQuote:
    """Executable quote. Never cached: each swap requests a fresh one."""

    token_in: str
    token_out: str
    amount_in: int
    tx: Call
    spender: Optional[str] = None
    estimated_output: Optional[int] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def approval_target(self) -> str:
        return self.spender or self.tx.to


@dataclass(frozen=True)
class SwapRequest:
    token_in: str
    token_out: str
    amount: str
    slippage: Optional[str] = None
    wait: bool = True
    approve_max: bool = False


@dataclass
class SwapOutcome:
    """Where a swap ended up, plus the hashes observed on the way."""

    amount: str
    stage: SwapStage
    stages: List[SwapStage] = field(default_factory=list)
    quote: Optional[SwapQuote] = None
    approval_amount: Optional[int] = None
    approval_hash: Optional[str] = None
    swap_hash: Optional[str] = None
    swap_status: Optional[TransactionStatus] = None

    @property
    def approved(self) -> bool:
        return SwapStage.APPROVAL_SUBMITTED in self.stages

"""
Swap orchestration: quote, conditional approval, swap submission, receipt wait.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from ...config import settings
from ...providers.rpc import ChainClient
from ..abi import erc20
from ..amounts import parse_amount
from ..chains import is_native_token
from ..errors import SubmissionFailure
from ..execution.models import TransactionStatus
from ..execution.session import SmartAccountSession
from ..execution.tx_builder import MAX_UINT256, TransactionBuilder
from .models import SwapOutcome, SwapQuote, SwapQuoteRequest, SwapRequest, SwapStage


logger = logging.getLogger(__name__)


class QuoteProvider(Protocol):
    async def get_swap_quote(self, request: SwapQuoteRequest) -> SwapQuote: ...


class SwapOrchestrator:
    """
    Runs one swap for a smart account.

    Stages: quote requested -> quote received -> (allowance checked ->
    approval submitted -> approval confirmed)? -> swap submitted ->
    swap confirmed | swap pending. Native input skips the allowance branch.
    """

    def __init__(
        self,
        chain_client: ChainClient,
        session: SmartAccountSession,
        quote_provider: QuoteProvider,
        *,
        default_slippage: Optional[str] = None,
        affiliate_fee_percent: Optional[str] = None,
    ) -> None:
        self.chain_client = chain_client
        self.session = session
        self.quote_provider = quote_provider
        self.default_slippage = default_slippage or settings.swap_default_slippage
        self.affiliate_fee_percent = affiliate_fee_percent or settings.swap_affiliate_fee_percent

    def _advance(self, outcome: SwapOutcome, stage: SwapStage, **details: object) -> None:
        outcome.stage = stage
        outcome.stages.append(stage)
        extra = " ".join(f"{key}={value}" for key, value in details.items() if value is not None)
        logger.info(f"swap stage={stage.value} account={self.session.account_address} {extra}".rstrip())

    async def _input_decimals(self, token_in: str) -> int:
        if is_native_token(token_in):
            return self.session.chain.native_decimals
        (decimals,) = await self.chain_client.read_contract(token_in, erc20("decimals"))
        return int(decimals)

    async def execute(self, request: SwapRequest) -> SwapOutcome:
        native_in = is_native_token(request.token_in)
        amount = parse_amount(request.amount, await self._input_decimals(request.token_in))

        outcome = SwapOutcome(amount=request.amount, stage=SwapStage.QUOTE_REQUESTED)
        self._advance(outcome, SwapStage.QUOTE_REQUESTED, token_in=request.token_in, token_out=request.token_out)
        quote = await self.quote_provider.get_swap_quote(
            SwapQuoteRequest(
                chain_id=self.session.chain.chain_id,
                token_in=request.token_in,
                token_out=request.token_out,
                amount=amount,
                recipient=self.session.account_address,
                slippage=request.slippage or self.default_slippage,
                affiliate_fee_percent=self.affiliate_fee_percent,
            )
        )
        outcome.quote = quote
        self._advance(outcome, SwapStage.QUOTE_RECEIVED, to=quote.tx.to, estimated_output=quote.estimated_output)

        if not native_in:
            spender = quote.approval_target
            (allowance,) = await self.chain_client.read_contract(
                request.token_in,
                erc20("allowance"),
                [self.session.account_address, spender],
            )
            self._advance(outcome, SwapStage.ALLOWANCE_CHECKED, allowance=allowance, needed=amount)

            if allowance < amount:
                approval_amount = MAX_UINT256 if request.approve_max else amount
                approve_call = TransactionBuilder.build_erc20_approve(request.token_in, spender, approval_amount)
                outcome.approval_amount = approval_amount

                approval = await self.session.send_transaction(approve_call)
                self._advance(outcome, SwapStage.APPROVAL_SUBMITTED, spender=spender)
                outcome.approval_hash = await approval.wait_for_tx_hash()
                if request.wait:
                    result = await approval.wait()
                    outcome.approval_hash = result.transaction_hash or outcome.approval_hash
                    if result.status == TransactionStatus.PENDING:
                        self._advance(outcome, SwapStage.APPROVAL_PENDING, tx=outcome.approval_hash)
                        return outcome
                    if result.status == TransactionStatus.FAILED:
                        raise SubmissionFailure(
                            f"Token approval reverted (transaction {result.transaction_hash}); swap not submitted"
                        )
                    self._advance(outcome, SwapStage.APPROVAL_CONFIRMED, tx=result.transaction_hash)

        handle = await self.session.send_transaction(quote.tx)
        self._advance(outcome, SwapStage.SWAP_SUBMITTED)

        if request.wait:
            result = await handle.wait()
            outcome.swap_hash = result.transaction_hash or handle.transaction_hash
            outcome.swap_status = result.status
            stage = SwapStage.SWAP_CONFIRMED if result.confirmed else SwapStage.SWAP_PENDING
            self._advance(outcome, stage, tx=outcome.swap_hash, status=result.status.value)
        else:
            outcome.swap_hash = await handle.wait_for_tx_hash()
            outcome.swap_status = TransactionStatus.SUBMITTED
        return outcome

"""Token swaps through the DLN aggregator."""

from ..agent.arguments import SmartSwapArgs
from ..agent.context import ToolContext
from ..execution.models import TransactionStatus
from ..swap.models import SwapOutcome, SwapRequest, SwapStage
from ..swap.orchestrator import SwapOrchestrator
from .common import hash_or_pending, resolve_token


def _swap_tail(outcome: SwapOutcome) -> str:
    if outcome.stage == SwapStage.SWAP_CONFIRMED:
        return "Swap completed and confirmed!"
    if outcome.swap_status == TransactionStatus.FAILED:
        return "Swap submitted but not confirmed (transaction reverted)."
    return "Swap submitted."


def render_outcome(outcome: SwapOutcome) -> str:
    if outcome.stage == SwapStage.APPROVAL_PENDING:
        return (
            "Token approval submitted but not yet confirmed; swap not submitted.\n"
            f"Approval Transaction Hash: {hash_or_pending(outcome.approval_hash)}"
        )

    lines = [
        "Swap order submitted successfully!",
        f"Input: {outcome.amount}",
        f"Transaction Hash: {hash_or_pending(outcome.swap_hash)}",
    ]
    if outcome.approval_hash and outcome.approval_hash != outcome.swap_hash:
        lines.append(f"Approval Transaction Hash: {outcome.approval_hash}")
    lines.append(_swap_tail(outcome))
    return "\n".join(lines)


async def smart_swap(args: SmartSwapArgs, ctx: ToolContext) -> str:
    """Quote, approve when the allowance is short, then swap.

    Explicit token addresses win over symbols.
    """
    token_in = resolve_token(ctx, args.token_in or args.token_in_symbol or "")
    token_out = resolve_token(ctx, args.token_out or args.token_out_symbol or "")

    orchestrator = SwapOrchestrator(ctx.chain_client, ctx.session, ctx.quote_provider)
    outcome = await orchestrator.execute(
        SwapRequest(
            token_in=token_in,
            token_out=token_out,
            amount=args.amount,
            slippage=args.slippage,
            wait=args.wait,
            approve_max=args.approve_max,
        )
    )
    return render_outcome(outcome)

"""Native and ERC-20 transfers."""

import logging

from ..agent.arguments import SmartTransferArgs
from ..agent.context import ToolContext
from ..amounts import parse_amount
from ..chains import is_native_token
from ..execution.tx_builder import TransactionBuilder
from .common import hash_or_pending, is_native_reference, resolve_token, token_decimals


logger = logging.getLogger(__name__)


async def smart_transfer(args: SmartTransferArgs, ctx: ToolContext) -> str:
    """Transfer the native asset or an ERC-20; waits for the transaction hash only."""
    if is_native_reference(ctx, args.token_address):
        token = None
    else:
        token = resolve_token(ctx, args.token_address or "")
        if is_native_token(token):
            token = None

    if token is None:
        value = parse_amount(args.amount, ctx.chain.native_decimals)
        call = TransactionBuilder.build_native_transfer(args.destination, value)
    else:
        amount = parse_amount(args.amount, await token_decimals(ctx, token))
        call = TransactionBuilder.build_erc20_transfer(token, args.destination, amount)

    handle = await ctx.session.send_transaction(call)
    transaction_hash = await handle.wait_for_tx_hash()
    logger.info(f"Transfer of {args.amount} {token or ctx.chain.native_symbol} submitted: {hash_or_pending(transaction_hash)}")

    if token is None:
        return (
            f"Successfully transferred {args.amount} {ctx.chain.native_symbol}.\n"
            f"Transaction submitted! Transaction Hash: {hash_or_pending(transaction_hash)}"
        )
    return (
        f"Successfully transferred {args.amount} tokens from contract {token} to {args.destination}.\n"
        f"Transaction submitted! Transaction Hash: {hash_or_pending(transaction_hash)}"
    )

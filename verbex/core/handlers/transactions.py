"""Raw and batched call submission."""

from ..agent.arguments import BatchTransactionsArgs, SendTransactionArgs
from ..agent.context import ToolContext
from ..amounts import format_units
from ..execution.tx_builder import TransactionBuilder
from .common import hash_or_pending


async def send_transaction(args: SendTransactionArgs, ctx: ToolContext) -> str:
    call = TransactionBuilder.build_raw(args.to, args.data, args.value)
    handle = await ctx.session.send_transaction(call)
    transaction_hash = await handle.wait_for_tx_hash()
    return (
        "Transaction submitted successfully!\n"
        f"To: {call.to}\n"
        f"Value: {format_units(call.value, ctx.chain.native_decimals)} {ctx.chain.native_symbol}\n"
        f"Transaction Hash: {hash_or_pending(transaction_hash)}\n"
        "Use 'get_transaction_status' to check confirmation."
    )


async def batch_transactions(args: BatchTransactionsArgs, ctx: ToolContext) -> str:
    """All calls go into one user operation; every call is validated before submission."""
    calls = [TransactionBuilder.build_raw(item.to, item.data, item.value) for item in args.transactions]
    handle = await ctx.session.send_transaction(calls)
    transaction_hash = await handle.wait_for_tx_hash()
    return (
        "Batch transaction submitted successfully!\n"
        f"Number of transactions: {len(calls)}\n"
        f"Transaction Hash: {hash_or_pending(transaction_hash)}"
    )

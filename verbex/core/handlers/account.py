"""Account and transaction-status tools."""

from ..agent.arguments import GetAddressArgs, GetTransactionStatusArgs
from ..agent.context import ToolContext
from ..errors import ValidationError


async def get_address(args: GetAddressArgs, ctx: ToolContext) -> str:
    return f"Smart Account: {ctx.account_address}\nNetwork: {ctx.chain.name}"


async def get_transaction_status(args: GetTransactionStatusArgs, ctx: ToolContext) -> str:
    """Single receipt lookup; no polling."""
    tx_hash = args.transaction_hash.strip()
    if not tx_hash.startswith("0x") or len(tx_hash) != 66:
        raise ValidationError(f"Invalid transaction hash: {args.transaction_hash}", fields=["transactionHash"])

    receipt = await ctx.chain_client.get_transaction_receipt(tx_hash)
    if receipt is None:
        return "Transaction is still pending."
    if receipt.success:
        return (
            "Transaction confirmed!\n"
            f"Block Number: {receipt.block_number}\n"
            f"Gas Used: {receipt.gas_used}\n"
            f"Transaction Hash: {tx_hash}"
        )
    return f"Transaction failed!\nTransaction Hash: {tx_hash}"

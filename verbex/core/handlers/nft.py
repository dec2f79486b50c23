"""ERC-721 mint and transfer."""

from ..agent.arguments import MintNftArgs, TransferNftArgs
from ..agent.context import ToolContext
from ..amounts import parse_int
from ..errors import ValidationError
from ..execution.tx_builder import TransactionBuilder
from .common import hash_or_pending


def _token_id(value) -> int:
    token_id = parse_int(value, field="tokenId")
    if token_id < 0:
        raise ValidationError("tokenId must not be negative", fields=["tokenId"])
    return token_id


async def mint_nft(args: MintNftArgs, ctx: ToolContext) -> str:
    recipient = args.to or ctx.account_address
    token_id = _token_id(args.token_id)
    call = TransactionBuilder.build_nft_mint(args.contract_address, recipient, token_id)
    handle = await ctx.session.send_transaction(call)
    transaction_hash = await handle.wait_for_tx_hash()
    return (
        "NFT minted successfully!\n"
        f"Contract: {call.to}\n"
        f"To: {recipient}\n"
        f"Token ID: {token_id}\n"
        f"Transaction Hash: {hash_or_pending(transaction_hash)}"
    )


async def transfer_nft(args: TransferNftArgs, ctx: ToolContext) -> str:
    owner = args.from_address or ctx.account_address
    token_id = _token_id(args.token_id)
    call = TransactionBuilder.build_nft_transfer(args.contract_address, owner, args.to, token_id)
    handle = await ctx.session.send_transaction(call)
    transaction_hash = await handle.wait_for_tx_hash()
    return (
        "NFT transferred successfully!\n"
        f"Contract: {call.to}\n"
        f"From: {owner}\n"
        f"To: {args.to}\n"
        f"Token ID: {token_id}\n"
        f"Transaction Hash: {hash_or_pending(transaction_hash)}"
    )

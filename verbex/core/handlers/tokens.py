"""ERC-20 metadata and approval tools."""

import asyncio
import logging

from ..abi import erc20
from ..agent.arguments import ApproveTokenArgs, GetTokenDetailsArgs
from ..agent.context import ToolContext
from ..amounts import format_units, parse_units
from ..chains import is_native_token
from ..errors import ValidationError
from ..execution.tx_builder import MAX_UINT256, TransactionBuilder
from .common import hash_or_pending, resolve_token, token_decimals


logger = logging.getLogger(__name__)


async def get_token_details(args: GetTokenDetailsArgs, ctx: ToolContext) -> str:
    token = resolve_token(ctx, args.token_address)
    if is_native_token(token):
        raise ValidationError(f"{args.token_address} is the native asset, not an ERC-20 token", fields=["tokenAddress"])

    name, symbol, decimals, total_supply = await asyncio.gather(
        ctx.chain_client.read_contract(token, erc20("name")),
        ctx.chain_client.read_contract(token, erc20("symbol")),
        ctx.chain_client.read_contract(token, erc20("decimals")),
        ctx.chain_client.read_contract(token, erc20("totalSupply")),
    )
    return (
        "Token Details:\n"
        f"Name: {name[0]}\n"
        f"Symbol: {symbol[0]}\n"
        f"Decimals: {decimals[0]}\n"
        f"Total Supply: {format_units(int(total_supply[0]), int(decimals[0]))}\n"
        f"Address: {token}\n"
        f"Chain ID: {ctx.chain.chain_id}"
    )


async def approve_token(args: ApproveTokenArgs, ctx: ToolContext) -> str:
    """Submit ``approve(spender, amount)``; waits for the transaction hash only."""
    token = resolve_token(ctx, args.token_address)
    if is_native_token(token):
        raise ValidationError("The native asset cannot be approved", fields=["tokenAddress"])

    if args.approve_max:
        amount = MAX_UINT256
    else:
        amount = parse_units(args.amount or "", await token_decimals(ctx, token))
        if amount < 0:
            raise ValidationError("Approval amount must not be negative", fields=["amount"])

    call = TransactionBuilder.build_erc20_approve(token, args.spender, amount)
    handle = await ctx.session.send_transaction(call)
    transaction_hash = await handle.wait_for_tx_hash()
    logger.info(f"Approval of {token} for {args.spender} submitted: {hash_or_pending(transaction_hash)}")

    return (
        "Token approval submitted successfully!\n"
        f"Token: {token}\n"
        f"Spender: {args.spender}\n"
        f"Amount: {'MAX' if args.approve_max else args.amount}\n"
        f"Transaction Hash: {hash_or_pending(transaction_hash)}"
    )
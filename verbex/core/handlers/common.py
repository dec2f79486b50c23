"""Helpers shared by the tool handlers."""

from typing import Optional

from ..abi import erc20
from ..agent.context import ToolContext
from ..chains import is_native_token


def hash_or_pending(transaction_hash: Optional[str]) -> str:
    return transaction_hash or "pending"


def is_native_reference(ctx: ToolContext, reference: Optional[str]) -> bool:
    """Omitted, ``eth``, the chain's native symbol and the sentinels mean the native asset."""
    candidate = (reference or "").strip()
    if not candidate:
        return True
    if candidate.lower() == "eth" or candidate.upper() == ctx.chain.native_symbol:
        return True
    return is_native_token(candidate)


def resolve_token(ctx: ToolContext, reference: str) -> str:
    return ctx.token_resolver.resolve_reference(ctx.chain.chain_id, reference)


async def token_decimals(ctx: ToolContext, token_address: str) -> int:
    (decimals,) = await ctx.chain_client.read_contract(token_address, erc20("decimals"))
    return int(decimals)

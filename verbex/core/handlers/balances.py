"""Balance aggregation across the native asset and ERC-20 tokens."""

import asyncio
import logging
from typing import List, Optional

from ..abi import erc20
from ..agent.arguments import GetBalanceArgs
from ..agent.context import ToolContext
from ..amounts import format_fixed
from ..chains import is_native_token
from ..errors import VerbexError


logger = logging.getLogger(__name__)

DISPLAY_PLACES = 6


async def _token_line(ctx: ToolContext, token_address: str) -> Optional[str]:
    """``SYMBOL: amount`` for a token, or ``None`` if it is empty or unreadable."""
    try:
        decimals, symbol, balance = await asyncio.gather(
            ctx.chain_client.read_contract(token_address, erc20("decimals")),
            ctx.chain_client.read_contract(token_address, erc20("symbol")),
            ctx.chain_client.read_contract(token_address, erc20("balanceOf"), [ctx.account_address]),
        )
    except VerbexError as exc:
        logger.warning(f"Skipping balance for {token_address}: {exc}")
        return None

    raw = int(balance[0])
    if raw == 0:
        return None
    return f"{symbol[0]}: {format_fixed(raw, int(decimals[0]), DISPLAY_PLACES)}"


async def get_balance(args: GetBalanceArgs, ctx: ToolContext) -> str:
    """
    Native balance first, then each requested token (deduplicated, native
    sentinels skipped). Tokens that fail to read or hold nothing are omitted.
    """
    chain = ctx.chain
    token_addresses: List[str] = list(args.token_addresses or [])
    unknown: List[str] = []
    if args.token_symbols:
        resolved, unknown = ctx.token_resolver.resolve_symbols(chain.chain_id, args.token_symbols)
        token_addresses.extend(resolved)

    lines: List[str] = []
    try:
        native = await ctx.chain_client.get_native_balance(ctx.account_address)
        lines.append(f"{chain.native_symbol}: {format_fixed(native, chain.native_decimals, DISPLAY_PLACES)}")
    except VerbexError as exc:
        logger.warning(f"Native balance read failed on {chain.name}: {exc}")

    unique: List[str] = []
    seen = set()
    for address in token_addresses:
        key = str(address).strip().lower()
        if not key or key in seen or is_native_token(key):
            continue
        seen.add(key)
        unique.append(str(address).strip())

    for line in await asyncio.gather(*(_token_line(ctx, address) for address in unique)):
        if line:
            lines.append(line)

    output = [f"Smart Account: {ctx.account_address}"]
    if lines:
        output.append("Balances:" if token_addresses else "All Token Balances:")
        output.extend(lines)
    else:
        output.append("No balances found for the requested tokens")
    if unknown:
        output.append(f"Unknown token symbols on {chain.name}: {', '.join(unknown)}")
    return "\n".join(output)

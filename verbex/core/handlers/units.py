"""Pure unit and hex conversion tools. None of them need an execution context."""

import json
from typing import Optional

from .. import amounts
from ..agent.arguments import FormatUnitsArgs, FromHexArgs, ParseUnitsArgs, ToHexArgs
from ..agent.context import ToolContext


async def format_units(args: FormatUnitsArgs, ctx: Optional[ToolContext] = None) -> str:
    value = amounts.parse_int(args.value)
    return f"Formatted Value: {amounts.format_units(value, args.decimals)}"


async def parse_units(args: ParseUnitsArgs, ctx: Optional[ToolContext] = None) -> str:
    return f"Parsed Value (Wei): {amounts.parse_units(args.value, args.decimals)}"


async def to_hex(args: ToHexArgs, ctx: Optional[ToolContext] = None) -> str:
    return f"Hex: {amounts.to_hex(args.value)}"


async def from_hex(args: FromHexArgs, ctx: Optional[ToolContext] = None) -> str:
    decoded = amounts.from_hex(args.hex, args.to)
    if isinstance(decoded, str):
        rendered = decoded
    elif isinstance(decoded, (bool, list)):
        rendered = json.dumps(decoded)
    else:
        rendered = str(decoded)
    return f"Decoded Value: {rendered}"

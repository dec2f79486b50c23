"""Generic contract read and calldata encoding."""

from typing import Optional

from ..abi import find_function, parse_abi, parse_args_string, stringify_result
from ..agent.arguments import EncodeFunctionDataArgs, ReadContractArgs
from ..agent.context import ToolContext


async def read_contract(args: ReadContractArgs, ctx: ToolContext) -> str:
    call_args = parse_args_string(args.args_string)
    function = find_function(parse_abi(args.abi_string), args.function_name, len(call_args))
    values = await ctx.chain_client.read_contract(args.contract_address, function, call_args)
    return f"Result: {stringify_result(values)}"


async def encode_function_data(args: EncodeFunctionDataArgs, ctx: Optional[ToolContext] = None) -> str:
    """Pure encoding; never touches the network."""
    call_args = parse_args_string(args.args_string)
    function = find_function(parse_abi(args.abi_string), args.function_name, len(call_args))
    return f"Encoded Data: {function.encode_call(call_args)}"

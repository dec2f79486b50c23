#!/usr/bin/env python3
"""Simple CLI for listing and dispatching Verbex tools locally"""

import argparse
import asyncio
import json
import os
import sys

from verbex.config import settings
from verbex.core.agent import ExecutionContext, ServiceFactory, ToolDispatcher
from verbex.core.agent.catalog import build_default_registry
from verbex.core.errors import InvalidContextError
from verbex.logging_config import setup_logging


def print_tools(as_json: bool = False) -> None:
    """Print every registered tool"""
    registry = build_default_registry()

    if as_json:
        print(json.dumps(registry.to_openai_tools(), indent=2))
        return

    print(f"\n🧰 {len(registry)} tools")
    print("=" * 50)
    for tool in registry.values():
        marker = " " if tool.requires_context else "*"
        print(f"{marker} {tool.name:<24} {tool.definition.description.split('. ')[0]}")
    print("\n* no execution context needed")


async def cli_dispatch(name: str, raw_args: str, network: str, account: str) -> int:
    """Dispatch one tool call and print its result"""
    try:
        tool_args = json.loads(raw_args) if raw_args else {}
    except json.JSONDecodeError as exc:
        print(f"❌ --args is not valid JSON: {exc}")
        return 2
    if not isinstance(tool_args, dict):
        print("❌ --args must be a JSON object")
        return 2

    context = ExecutionContext(
        signing_key=os.getenv("VERBEX_SIGNING_KEY"),
        network=network,
        smart_account_address=account,
    )
    services = ServiceFactory()
    dispatcher = ToolDispatcher(build_default_registry(), services)
    try:
        print(await dispatcher.dispatch(name, tool_args, context))
    except InvalidContextError as exc:
        print(f"❌ {exc}")
        if exc.missing:
            print(f"   Missing or invalid: {', '.join(exc.missing)} (the signing key is read from VERBEX_SIGNING_KEY)")
        return 1
    finally:
        await services.aclose()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Verbex CLI")
    parser.add_argument("--log-level", help="Override the configured log level")
    subparsers = parser.add_subparsers(dest="command")

    tools_parser = subparsers.add_parser("tools", help="List registered tools")
    tools_parser.add_argument("--json", action="store_true", help="Print OpenAI-format tool definitions")

    dispatch_parser = subparsers.add_parser("dispatch", help="Run a single tool call")
    dispatch_parser.add_argument("name", help="Tool name, e.g. get_balance")
    dispatch_parser.add_argument("--args", default="{}", help="Tool arguments as a JSON object")
    dispatch_parser.add_argument("--network", default=settings.default_network, help="Network name or chain ID")
    dispatch_parser.add_argument("--account", default=None, help="Smart account address")

    return parser


async def main() -> int:
    parser = build_parser()
    args = parser.parse_args()
    setup_logging(args.log_level)

    if not args.command:
        parser.print_help()
        return 0

    if args.command == "tools":
        print_tools(args.json)
        return 0

    return await cli_dispatch(args.name, args.args, args.network, args.account)


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))

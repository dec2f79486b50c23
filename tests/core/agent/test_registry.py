"""
Tests for the tool registry and the default catalog's schemas.
"""

import pytest

from verbex.core.agent.arguments import ARGUMENT_MODELS, GetAddressArgs
from verbex.core.agent.catalog import build_default_registry
from verbex.core.agent.tools import ToolRegistryBuilder
from verbex.core.errors import DuplicateToolError, UnknownToolError


EXPECTED_TOOLS = {
    "get_address",
    "get_balance",
    "get_transaction_status",
    "get_token_details",
    "approve_token",
    "read_contract",
    "encode_function_data",
    "send_transaction",
    "batch_transactions",
    "smart_transfer",
    "smart_swap",
    "mint_nft",
    "transfer_nft",
    "format_units",
    "parse_units",
    "to_hex",
    "from_hex",
}


async def noop(args, ctx):
    return "ok"


@pytest.fixture(scope="module")
def registry():
    return build_default_registry()


def test_default_registry_has_every_tool(registry):
    assert set(registry) == EXPECTED_TOOLS
    assert set(ARGUMENT_MODELS) == EXPECTED_TOOLS


def test_registry_is_read_only(registry):
    with pytest.raises(TypeError):
        registry._tools["extra"] = registry["get_address"]


def test_duplicate_names_are_rejected():
    builder = ToolRegistryBuilder().register("get_address", "Address", GetAddressArgs, noop)

    with pytest.raises(DuplicateToolError):
        builder.register("get_address", "Again", GetAddressArgs, noop)


def test_require_unknown_tool(registry):
    assert registry.get_tool("nonexistent_tool") is None
    with pytest.raises(UnknownToolError, match="Unknown tool nonexistent_tool"):
        registry.require("nonexistent_tool")


def test_openai_format(registry):
    tools = {tool["function"]["name"]: tool for tool in registry.to_openai_tools()}

    approve = tools["approve_token"]
    assert approve["type"] == "function"
    schema = approve["function"]["parameters"]
    assert schema["type"] == "object"
    assert set(schema["properties"]) == {"tokenAddress", "spender", "amount", "approveMax"}
    assert schema["required"] == ["tokenAddress", "spender"]
    assert schema["properties"]["approveMax"]["type"] == "boolean"


def test_anthropic_format(registry):
    tools = {tool["name"]: tool for tool in registry.to_anthropic_tools()}

    balance = tools["get_balance"]["input_schema"]
    assert balance["required"] == []
    assert balance["properties"]["tokenSymbols"] == {
        "type": "array",
        "description": balance["properties"]["tokenSymbols"]["description"],
        "items": {"type": "string"},
    }

    batch = tools["batch_transactions"]["input_schema"]["properties"]["transactions"]
    assert batch["items"]["required"] == ["to"]

    from_hex = tools["from_hex"]["input_schema"]["properties"]["to"]
    assert from_hex["enum"] == ["string", "number", "bigint", "boolean", "bytes"]
    assert from_hex["default"] == "string"


def test_descriptions_are_present(registry):
    for definition in registry.get_definitions():
        assert definition.description
        assert "tool" not in definition.input_schema()["properties"]


def test_pure_tools_need_no_context(registry):
    pure = {name for name, tool in registry.items() if not tool.requires_context}

    assert pure == {"encode_function_data", "format_units", "parse_units", "to_hex", "from_hex"}

"""
Tests for balance aggregation.
"""

import pytest

from verbex.core.agent.arguments import GetBalanceArgs
from verbex.core.errors import OnChainReadFailure
from verbex.core.handlers.balances import get_balance
from tests.conftest import AVAX_USDC, AVAX_WETH


async def native_balance_unavailable(address):
    raise OnChainReadFailure("rpc down")


@pytest.mark.asyncio
async def test_usdc_line_uses_token_decimals(tool_context, chain_client):
    chain_client.native_balance = 2 * 10**18
    chain_client.add_token(AVAX_USDC, "USDC", 6, balance=1_500_000)

    output = await get_balance(GetBalanceArgs(tokenSymbols=["USDC"]), tool_context)

    lines = output.splitlines()
    assert "Balances:" in lines
    assert lines.index("AVAX: 2.000000") < lines.index("USDC: 1.500000")


@pytest.mark.asyncio
async def test_native_only_without_tokens(tool_context, chain_client):
    chain_client.native_balance = 123_456_789_000_000_000

    output = await get_balance(GetBalanceArgs(), tool_context)

    assert "All Token Balances:" in output
    assert "AVAX: 0.123456" in output


@pytest.mark.asyncio
async def test_malformed_and_failing_tokens_are_omitted(tool_context, chain_client):
    chain_client.add_token(AVAX_USDC, "USDC", 6, balance=5_000_000)
    chain_client.add_token(AVAX_WETH, "WETH", 18, balance=10**18)
    chain_client.failing.add(AVAX_WETH.lower())

    output = await get_balance(
        GetBalanceArgs(tokenAddresses=["not-an-address", "0x1234", AVAX_WETH, AVAX_USDC]),
        tool_context,
    )

    assert "USDC: 5.000000" in output
    assert "WETH" not in output


@pytest.mark.asyncio
async def test_zero_balances_duplicates_and_native_sentinels(tool_context, chain_client):
    chain_client.add_token(AVAX_USDC, "USDC", 6, balance=0)
    chain_client.add_token(AVAX_WETH, "WETH", 18, balance=10**17)

    output = await get_balance(
        GetBalanceArgs(
            tokenAddresses=[AVAX_WETH, AVAX_WETH.lower(), "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE", AVAX_USDC],
        ),
        tool_context,
    )

    assert output.count("WETH: 0.100000") == 1
    assert "USDC" not in output
    assert "AVAX: 0.000000" in output
    balance_reads = [read for read in chain_client.reads if read[1] == "balanceOf"]
    assert len(balance_reads) == 2


@pytest.mark.asyncio
async def test_native_failure_is_skipped(tool_context, chain_client):
    chain_client.get_native_balance = native_balance_unavailable
    chain_client.add_token(AVAX_USDC, "USDC", 6, balance=1)

    output = await get_balance(GetBalanceArgs(tokenSymbols=["USDC"]), tool_context)

    assert "AVAX" not in output
    assert "USDC: 0.000001" in output


@pytest.mark.asyncio
async def test_nothing_found(tool_context, chain_client):
    chain_client.get_native_balance = native_balance_unavailable

    output = await get_balance(GetBalanceArgs(tokenSymbols=["USDC", "PEPE"]), tool_context)

    assert "No balances found for the requested tokens" in output
    assert "Unknown token symbols on avalanche: PEPE" in output


@pytest.mark.asyncio
async def test_only_unknown_symbols_lists_all_balances(tool_context, chain_client):
    chain_client.native_balance = 10**18

    output = await get_balance(GetBalanceArgs(tokenSymbols=["PEPE"]), tool_context)

    lines = output.splitlines()
    assert "All Token Balances:" in lines
    assert "Balances:" not in lines
    assert "Unknown token symbols on avalanche: PEPE" in lines

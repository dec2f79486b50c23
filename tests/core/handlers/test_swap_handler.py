"""
Tests for the smart_swap tool's token resolution and result messages.
"""

import pytest

from verbex.core.agent.arguments import SmartSwapArgs
from verbex.core.execution.models import Call, TransactionStatus
from verbex.core.execution.tx_builder import MAX_UINT256
from verbex.core.handlers.swap import smart_swap
from verbex.core.swap.orchestrator import SwapOrchestrator
from tests.conftest import AVAX_USDC, AVAX_WETH, FakeQuoteProvider


@pytest.mark.asyncio
async def test_swap_with_sufficient_allowance_submits_once(tool_context, chain_client, session, monkeypatch):
    quotes = FakeQuoteProvider(tx=Call(to="0xAAA", data="0xdeadbeef", value=0))
    monkeypatch.setattr(tool_context, "_quote_provider", quotes)
    chain_client.add_token(AVAX_USDC, "USDC", 6, allowance=MAX_UINT256)

    output = await smart_swap(SmartSwapArgs(tokenInSymbol="USDC", tokenOutSymbol="WETH", amount="100"), tool_context)

    assert session.submissions == [Call(to="0xAAA", data="0xdeadbeef", value=0)]
    assert output.startswith("Swap order submitted successfully!")
    assert "Input: 100" in output
    assert "Transaction Hash: 0x" + f"{1:064x}" in output
    assert output.endswith("Swap completed and confirmed!")


@pytest.mark.asyncio
async def test_explicit_addresses_win_over_symbols(tool_context, chain_client, quote_provider):
    chain_client.add_token(AVAX_WETH, "WETH", 18, allowance=MAX_UINT256)

    await smart_swap(
        SmartSwapArgs(tokenIn=AVAX_WETH, tokenInSymbol="USDC", tokenOutSymbol="USDC", amount="1"),
        tool_context,
    )

    request = quote_provider.requests[0]
    assert request.token_in.lower() == AVAX_WETH.lower()
    assert request.token_out == AVAX_USDC
    assert request.amount == 10**18


@pytest.mark.asyncio
async def test_swap_reports_approval_hash(tool_context, chain_client):
    chain_client.add_token(AVAX_USDC, "USDC", 6, allowance=0)

    output = await smart_swap(SmartSwapArgs(tokenIn=AVAX_USDC, tokenOutSymbol="WETH", amount="5"), tool_context)

    assert "Approval Transaction Hash: 0x" + f"{1:064x}" in output
    assert "Transaction Hash: 0x" + f"{2:064x}" in output


@pytest.mark.asyncio
async def test_unconfirmed_swap_message(tool_context, chain_client, session):
    session.statuses = [TransactionStatus.PENDING]
    chain_client.add_token(AVAX_USDC, "USDC", 6, allowance=MAX_UINT256)

    output = await smart_swap(SmartSwapArgs(tokenIn=AVAX_USDC, tokenOutSymbol="WETH", amount="5"), tool_context)

    assert output.endswith("Swap submitted.")


@pytest.mark.asyncio
async def test_reverted_swap_message(tool_context, chain_client, session):
    session.statuses = [TransactionStatus.FAILED]
    chain_client.add_token(AVAX_USDC, "USDC", 6, allowance=MAX_UINT256)

    output = await smart_swap(SmartSwapArgs(tokenIn=AVAX_USDC, tokenOutSymbol="WETH", amount="5"), tool_context)

    assert output.endswith("Swap submitted but not confirmed (transaction reverted).")


@pytest.mark.asyncio
async def test_pending_approval_message(tool_context, chain_client, session):
    session.statuses = [TransactionStatus.PENDING]
    chain_client.add_token(AVAX_USDC, "USDC", 6, allowance=0)

    output = await smart_swap(SmartSwapArgs(tokenIn=AVAX_USDC, tokenOutSymbol="WETH", amount="5"), tool_context)

    assert output.startswith("Token approval submitted but not yet confirmed; swap not submitted.")
    assert len(session.submissions) == 1


def test_orchestrator_defaults_come_from_settings(chain_client, session, quote_provider):
    orchestrator = SwapOrchestrator(chain_client, session, quote_provider)

    assert orchestrator.default_slippage == "auto"
    assert orchestrator.affiliate_fee_percent == "0"


@pytest.mark.asyncio
async def test_not_waiting_reports_separate_approval(tool_context, chain_client, session):
    chain_client.add_token(AVAX_USDC, "USDC", 6, allowance=0)

    output = await smart_swap(
        SmartSwapArgs(tokenIn=AVAX_USDC, tokenOutSymbol="WETH", amount="5", wait=False),
        tool_context,
    )

    assert len(session.submissions) == 2
    assert "Transaction Hash: 0x" + f"{2:064x}" in output
    assert "Approval Transaction Hash: 0x" + f"{1:064x}" in output
    assert output.endswith("Swap submitted.")

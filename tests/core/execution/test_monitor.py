"""
Tests for bounded receipt polling.
"""

import pytest

from verbex.core.chains import CHAIN_METADATA
from verbex.core.errors import ConfirmationTimeout
from verbex.core.execution.models import TransactionReceipt, TransactionStatus
from verbex.core.execution.monitor import poll_until, wait_for_receipt
from verbex.providers.rpc import RpcError


class FlakyReceiptClient:
    chain = CHAIN_METADATA[8453]

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = 0

    async def get_transaction_receipt(self, tx_hash):
        self.calls += 1
        response = self.responses.pop(0) if self.responses else None
        if isinstance(response, Exception):
            raise response
        return response


@pytest.mark.asyncio
async def test_poll_until_times_out_with_reference():
    async def never():
        return None

    with pytest.raises(ConfirmationTimeout) as exc_info:
        await poll_until(never, timeout=0.03, interval=0.01, description="receipt of 0xabc", reference="0xabc")

    assert exc_info.value.reference == "0xabc"
    assert "waiting for receipt of 0xabc" in str(exc_info.value)


@pytest.mark.asyncio
async def test_poll_until_propagates_non_transient_errors():
    async def broken():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await poll_until(broken, timeout=1, interval=0.01, description="anything")


@pytest.mark.asyncio
async def test_wait_for_receipt_retries_rpc_errors():
    receipt = TransactionReceipt(transaction_hash="0xabc", success=True, block_number=7, gas_used=21000)
    client = FlakyReceiptClient([None, RpcError({"code": -32000, "message": "header not found"}), receipt])

    result = await wait_for_receipt(client, "0xabc", timeout=2, interval=0.01)

    assert result.status == TransactionStatus.CONFIRMED
    assert client.calls == 3


def test_receipt_from_rpc():
    receipt = TransactionReceipt.from_rpc(
        {"transactionHash": "0xabc", "status": "0x0", "blockNumber": "0x10", "gasUsed": "0x5208"}
    )

    assert receipt.status == TransactionStatus.FAILED
    assert receipt.block_number == 16
    assert receipt.gas_used == 21000

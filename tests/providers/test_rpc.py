"""
Tests for the JSON-RPC chain client using httpx.MockTransport.
"""

import json

import httpx
import pytest

from verbex.core.abi import erc20, parse_signature
from verbex.core.chains import CHAIN_METADATA
from verbex.core.errors import OnChainReadFailure, ValidationError
from verbex.providers.rpc import JsonRpcChainClient, RpcError


TOKEN = "0xB97EF9Ef8734C71904D8002F8b6Bc66Dd9c48a6E"
HOLDER = "0x1111111111111111111111111111111111111111"


def word(value: int) -> str:
    return value.to_bytes(32, "big").hex()


def make_client(results):
    """``results`` maps method name to a JSON-RPC result, an error dict or a callable."""
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        seen.append(body)
        outcome = results[body["method"]]
        if callable(outcome):
            outcome = outcome(body["params"])
        if isinstance(outcome, dict) and "error" in outcome:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], **outcome})
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": outcome})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return JsonRpcChainClient(CHAIN_METADATA[43114], "https://rpc.test", client=client), seen


@pytest.mark.asyncio
async def test_read_contract_encodes_and_decodes():
    chain_client, seen = make_client({"eth_call": "0x" + word(1_500_000)})

    (balance,) = await chain_client.read_contract(TOKEN, erc20("balanceOf"), [HOLDER])

    assert balance == 1_500_000
    call = seen[0]["params"][0]
    assert call["to"] == TOKEN
    assert call["data"].startswith("0x70a08231")


@pytest.mark.asyncio
async def test_read_contract_revert_is_an_on_chain_read_failure():
    chain_client, _ = make_client({"eth_call": {"error": {"code": 3, "message": "execution reverted"}}})

    with pytest.raises(OnChainReadFailure, match="decimals\\(\\) failed .*execution reverted"):
        await chain_client.read_contract(TOKEN, erc20("decimals"))


@pytest.mark.asyncio
async def test_read_contract_without_code_is_reported():
    chain_client, _ = make_client({"eth_call": "0x"})

    with pytest.raises(OnChainReadFailure, match="is it a contract on avalanche"):
        await chain_client.read_contract(TOKEN, erc20("symbol"))


@pytest.mark.asyncio
async def test_read_contract_rejects_bad_address():
    chain_client, seen = make_client({})

    with pytest.raises(ValidationError):
        await chain_client.read_contract("0x1234", erc20("symbol"))
    assert seen == []


@pytest.mark.asyncio
async def test_read_contract_multiple_outputs():
    fn = parse_signature("function reserves() view returns (uint112, uint112)")
    chain_client, _ = make_client({"eth_call": "0x" + word(5) + word(9)})

    assert await chain_client.read_contract(TOKEN, fn) == (5, 9)


@pytest.mark.asyncio
async def test_native_balance_and_receipt():
    chain_client, _ = make_client({
        "eth_getBalance": hex(10**18),
        "eth_getTransactionReceipt": lambda params: None if params[0] == "0xpending" else {
            "transactionHash": params[0],
            "status": "0x1",
            "blockNumber": "0x2",
            "gasUsed": "0x5208",
        },
    })

    assert await chain_client.get_native_balance(HOLDER) == 10**18
    assert await chain_client.get_transaction_receipt("0xpending") is None
    receipt = await chain_client.get_transaction_receipt("0xdone")
    assert receipt.success
    assert receipt.gas_used == 21000


@pytest.mark.asyncio
async def test_fee_data_falls_back_when_priority_fee_unsupported():
    chain_client, _ = make_client({
        "eth_gasPrice": hex(25_000_000_000),
        "eth_maxPriorityFeePerGas": {"error": {"code": -32601, "message": "method not found"}},
    })

    max_fee, priority_fee = await chain_client.get_fee_data()

    assert priority_fee == 1_500_000_000
    assert max_fee == 26_500_000_000


@pytest.mark.asyncio
async def test_transport_errors_become_rpc_errors():
    def handler(request):
        raise httpx.ConnectError("connection refused")

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    chain_client = JsonRpcChainClient(CHAIN_METADATA[43114], "https://rpc.test", client=client)

    with pytest.raises(RpcError, match="eth_getBalance request to avalanche RPC failed"):
        await chain_client.get_native_balance(HOLDER)
    assert (await chain_client.health_check())["status"] == "error"

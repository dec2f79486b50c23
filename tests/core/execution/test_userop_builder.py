"""
Tests for ERC-4337 UserOperation calldata builders.
"""

import pytest
from eth_abi import decode as abi_decode

from verbex.core.execution.models import Call
from verbex.core.execution.userop import UserOperation, UserOpGasEstimate
from verbex.core.execution.userop_builder import (
    build_account_call_data,
    build_entrypoint_get_nonce_call,
    build_execute_batch_call_data,
    build_execute_call_data,
    get_execute_batch_selector,
    get_execute_selector,
)


TARGET = "0x1111111111111111111111111111111111111111"
OTHER = "0x2222222222222222222222222222222222222222"
ENTRY_POINT = "0x5FF137D4b0FDCD49DcA30c7CF57E578a026d2789"


def test_build_execute_call_data_encodes_execute() -> None:
    selector = get_execute_selector("execute(address,uint256,bytes)")
    call_data = build_execute_call_data(
        to_address=TARGET,
        value_wei=1,
        data="0x1234",
        signature="execute(address,uint256,bytes)",
    )

    assert call_data.startswith(selector)
    # 4-byte selector + 3 words (address, value, offset) + bytes length + data padded
    assert len(call_data) == len(selector) + 64 * 4 + 64
    assert call_data.endswith("1234" + "0" * 60)


def test_build_execute_call_data_rejects_bad_input() -> None:
    with pytest.raises(ValueError, match="non-negative"):
        build_execute_call_data(TARGET, -1, "0x")
    with pytest.raises(ValueError, match="even-length"):
        build_execute_call_data(TARGET, 0, "0x123")


def test_build_execute_batch_call_data_keeps_call_order() -> None:
    calls = [Call(to=TARGET, data="0xaa"), Call(to=OTHER, data="0xbbcc", value=5)]
    call_data = build_execute_batch_call_data(calls)

    assert call_data.startswith(get_execute_batch_selector())
    targets, values, payloads = abi_decode(["address[]", "uint256[]", "bytes[]"], bytes.fromhex(call_data[10:]))
    assert [t.lower() for t in targets] == [TARGET, OTHER]
    assert list(values) == [0, 5]
    assert list(payloads) == [b"\xaa", b"\xbb\xcc"]


def test_build_account_call_data_picks_execute_for_single_call() -> None:
    single = build_account_call_data([Call(to=TARGET, value=7)])
    batch = build_account_call_data([Call(to=TARGET), Call(to=OTHER)])

    assert single.startswith(get_execute_selector())
    assert batch.startswith(get_execute_batch_selector())


def test_get_nonce_call() -> None:
    call_data = build_entrypoint_get_nonce_call(TARGET)

    assert call_data.startswith("0x35567e1a")
    sender, key = abi_decode(["address", "uint192"], bytes.fromhex(call_data[10:]))
    assert sender.lower() == TARGET
    assert key == 0


def test_user_operation_rpc_dict_and_gas() -> None:
    op = UserOperation(sender=TARGET, nonce=3, call_data="0x1234", max_fee_per_gas=100)
    op = op.with_gas(UserOpGasEstimate.from_rpc({
        "callGasLimit": "0x100",
        "verificationGas": "0x200",
        "preVerificationGas": "0x300",
    }))

    payload = op.to_rpc_dict()
    assert payload["nonce"] == "0x3"
    assert payload["callGasLimit"] == "0x100"
    assert payload["verificationGasLimit"] == "0x200"
    assert payload["preVerificationGas"] == "0x300"
    assert payload["maxFeePerGas"] == "0x64"
    assert payload["initCode"] == "0x"


def test_user_operation_hash_binds_entry_point_and_chain() -> None:
    op = UserOperation(sender=TARGET, nonce=0, call_data="0x")

    assert len(op.hash(ENTRY_POINT, 43114)) == 32
    assert op.hash(ENTRY_POINT, 43114) != op.hash(ENTRY_POINT, 8453)
    op.signature = "0x1234"
    assert op.hash(ENTRY_POINT, 43114) == UserOperation(sender=TARGET, nonce=0, call_data="0x").hash(ENTRY_POINT, 43114)

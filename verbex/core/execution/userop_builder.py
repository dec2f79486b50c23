"""
UserOperation calldata builders.
"""

from __future__ import annotations

from typing import Optional, Sequence

from eth_abi import encode as abi_encode
from eth_utils import keccak, to_checksum_address

from ...config import settings
from .models import Call


def _strip_0x(value: str) -> str:
    return value[2:] if value.startswith("0x") else value


def _to_bytes(data: str) -> bytes:
    hex_data = _strip_0x(data or "0x")
    if len(hex_data) % 2 != 0:
        raise ValueError("Byte data must have an even-length hex string")
    return bytes.fromhex(hex_data)


def _selector_from_signature(signature: str) -> str:
    selector = keccak(text=signature)[:4].hex()
    return f"0x{selector}"


def get_execute_selector(signature: Optional[str] = None) -> str:
    return _selector_from_signature(signature or settings.smart_account_execute_signature)


def get_execute_batch_selector(signature: Optional[str] = None) -> str:
    return _selector_from_signature(signature or settings.smart_account_execute_batch_signature)


def build_execute_call_data(
    to_address: str,
    value_wei: int,
    data: str,
    *,
    signature: Optional[str] = None,
) -> str:
    """
    Build calldata for execute(address,uint256,bytes).
    """
    if value_wei < 0:
        raise ValueError("Value must be non-negative")
    selector = get_execute_selector(signature)
    encoded = abi_encode(
        ["address", "uint256", "bytes"],
        [to_checksum_address(to_address), value_wei, _to_bytes(data)],
    )
    return selector + encoded.hex()


def build_execute_batch_call_data(
    calls: Sequence[Call],
    *,
    signature: Optional[str] = None,
) -> str:
    """
    Build calldata for executeBatch(address[],uint256[],bytes[]).
    """
    if not calls:
        raise ValueError("executeBatch requires at least one call")
    if any(call.value < 0 for call in calls):
        raise ValueError("Value must be non-negative")
    selector = get_execute_batch_selector(signature)
    encoded = abi_encode(
        ["address[]", "uint256[]", "bytes[]"],
        [
            [to_checksum_address(call.to) for call in calls],
            [call.value for call in calls],
            [_to_bytes(call.data) for call in calls],
        ],
    )
    return selector + encoded.hex()


def build_account_call_data(calls: Sequence[Call]) -> str:
    """Single calls use execute; anything more goes through executeBatch."""
    if len(calls) == 1:
        call = calls[0]
        return build_execute_call_data(call.to, call.value, call.data)
    return build_execute_batch_call_data(calls)


def build_entrypoint_get_nonce_call(sender: str, key: int = 0) -> str:
    """
    Build calldata for EntryPoint.getNonce(address,uint192).
    """
    selector = _selector_from_signature("getNonce(address,uint192)")
    return selector + abi_encode(["address", "uint192"], [to_checksum_address(sender), key]).hex()

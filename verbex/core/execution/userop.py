"""
ERC-4337 (EntryPoint v0.6) UserOperation models and helpers.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from eth_abi import encode as abi_encode
from eth_utils import keccak, to_checksum_address


def _to_hex(value: int) -> str:
    return hex(value)


def _to_bytes(data: str) -> bytes:
    return bytes.fromhex(data[2:] if data.startswith("0x") else data)


def _parse_hex(value: Optional[Any]) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, int):
        return value
    return int(value, 16)


@dataclass
class UserOperation:
    """
    ERC-4337 UserOperation payload.

    Values should be supplied in raw units (wei / gas units) and are encoded
    as hex for RPC calls.
    """
    sender: str
    nonce: int
    call_data: str
    init_code: str = "0x"
    call_gas_limit: int = 0
    verification_gas_limit: int = 0
    pre_verification_gas: int = 0
    max_fee_per_gas: int = 0
    max_priority_fee_per_gas: int = 0
    paymaster_and_data: str = "0x"
    signature: str = "0x"

    def to_rpc_dict(self) -> Dict[str, Any]:
        return {
            "sender": self.sender,
            "nonce": _to_hex(self.nonce),
            "initCode": self.init_code,
            "callData": self.call_data,
            "callGasLimit": _to_hex(self.call_gas_limit),
            "verificationGasLimit": _to_hex(self.verification_gas_limit),
            "preVerificationGas": _to_hex(self.pre_verification_gas),
            "maxFeePerGas": _to_hex(self.max_fee_per_gas),
            "maxPriorityFeePerGas": _to_hex(self.max_priority_fee_per_gas),
            "paymasterAndData": self.paymaster_and_data,
            "signature": self.signature,
        }

    def with_gas(self, estimate: "UserOpGasEstimate") -> "UserOperation":
        return replace(
            self,
            call_gas_limit=estimate.call_gas_limit or self.call_gas_limit,
            verification_gas_limit=estimate.verification_gas_limit or self.verification_gas_limit,
            pre_verification_gas=estimate.pre_verification_gas or self.pre_verification_gas,
        )

    def pack(self) -> bytes:
        """ABI-encode every field except the signature, hashing the dynamic ones."""
        return abi_encode(
            ["address", "uint256", "bytes32", "bytes32", "uint256", "uint256", "uint256", "uint256", "uint256", "bytes32"],
            [
                to_checksum_address(self.sender),
                self.nonce,
                keccak(_to_bytes(self.init_code)),
                keccak(_to_bytes(self.call_data)),
                self.call_gas_limit,
                self.verification_gas_limit,
                self.pre_verification_gas,
                self.max_fee_per_gas,
                self.max_priority_fee_per_gas,
                keccak(_to_bytes(self.paymaster_and_data)),
            ],
        )

    def hash(self, entry_point: str, chain_id: int) -> bytes:
        """The userOpHash the EntryPoint computes and the owner signs."""
        return keccak(
            abi_encode(
                ["bytes32", "address", "uint256"],
                [keccak(self.pack()), to_checksum_address(entry_point), chain_id],
            )
        )


@dataclass
class UserOpGasEstimate:
    call_gas_limit: int
    verification_gas_limit: int
    pre_verification_gas: int
    paymaster_verification_gas_limit: Optional[int] = None
    paymaster_post_op_gas_limit: Optional[int] = None

    @classmethod
    def from_rpc(cls, data: Dict[str, Any]) -> "UserOpGasEstimate":
        return cls(
            call_gas_limit=_parse_hex(data.get("callGasLimit")) or 0,
            verification_gas_limit=_parse_hex(
                data.get("verificationGasLimit") or data.get("verificationGas")
            ) or 0,
            pre_verification_gas=_parse_hex(data.get("preVerificationGas")) or 0,
            paymaster_verification_gas_limit=_parse_hex(data.get("paymasterVerificationGasLimit")),
            paymaster_post_op_gas_limit=_parse_hex(data.get("paymasterPostOpGasLimit")),
        )


@dataclass
class UserOpReceipt:
    user_op_hash: str
    success: bool
    transaction_hash: Optional[str] = None
    block_number: Optional[int] = None
    gas_used: Optional[int] = None

    @classmethod
    def from_rpc(cls, user_op_hash: str, data: Dict[str, Any]) -> "UserOpReceipt":
        """Parse ``eth_getUserOperationReceipt``; the top-level ``success`` wins over the tx status."""
        receipt = data.get("receipt") or {}
        success = data.get("success")
        if success is None:
            success = receipt.get("status") == "0x1"
        return cls(
            user_op_hash=user_op_hash,
            success=bool(success),
            transaction_hash=receipt.get("transactionHash"),
            block_number=_parse_hex(receipt.get("blockNumber") or None),
            gas_used=_parse_hex(receipt.get("gasUsed") or None),
        )

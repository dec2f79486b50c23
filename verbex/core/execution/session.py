"""
Smart account session: turns calls into signed, sponsored ERC-4337 user
operations and tracks them until they land on chain.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence, Union

import httpx
from eth_abi import encode as abi_encode
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_utils import is_address, to_checksum_address

from ...config import settings
from ...providers.bundler import BundlerError, BundlerProvider
from ...providers.paymaster import PaymasterError, PaymasterProvider
from ...providers.rpc import ChainClient, RpcError
from ..chains import ChainConfig
from ..errors import ConfirmationTimeout, SubmissionFailure, ValidationError
from .models import Call, SubmissionResult, TransactionStatus
from .monitor import poll_until
from .nonce_manager import NonceManager
from .userop import UserOperation, UserOpReceipt
from .userop_builder import build_account_call_data, build_entrypoint_get_nonce_call


logger = logging.getLogger(__name__)

# Well-formed ECDSA signature used only while estimating gas.
DUMMY_ECDSA_SIGNATURE = bytes.fromhex(
    "73c3ac716c487ca34bb858247b5ccf1dc354fbaabdd089af3b2ac8e78ba85a49"
    "59a2d76250325bd67c11771c31fccda87c33ceec17cc0de912690521bb95ffcb1b"
)

class TransactionHandle(Protocol):
    """What handlers get back from a submission."""

    transaction_hash: Optional[str]

    async def wait_for_tx_hash(self, timeout: Optional[float] = None) -> Optional[str]: ...

    async def wait(self, timeout: Optional[float] = None) -> SubmissionResult: ...


class SmartAccountSession(Protocol):
    """Submits calls on behalf of one smart account on one chain."""

    chain: ChainConfig
    account_address: str

    async def send_transaction(self, calls: Union[Call, Sequence[Call]]) -> TransactionHandle: ...


class UserOperationHandle:
    """Tracks a user operation through the bundler."""

    def __init__(
        self,
        user_op_hash: str,
        bundler: BundlerProvider,
        *,
        tx_hash_timeout: Optional[float] = None,
        receipt_timeout: Optional[float] = None,
        poll_interval: Optional[float] = None,
    ) -> None:
        self.user_op_hash = user_op_hash
        self.transaction_hash: Optional[str] = None
        self._bundler = bundler
        self._tx_hash_timeout = tx_hash_timeout or settings.tx_hash_timeout_seconds
        self._receipt_timeout = receipt_timeout or settings.receipt_timeout_seconds
        self._poll_interval = poll_interval or settings.receipt_poll_interval_seconds
        self._receipt: Optional[UserOpReceipt] = None

    async def _receipt_within(self, timeout: float) -> UserOpReceipt:
        if self._receipt is None:
            self._receipt = await poll_until(
                lambda: self._bundler.get_user_operation_receipt(self.user_op_hash),
                timeout=timeout,
                interval=self._poll_interval,
                description=f"user operation {self.user_op_hash}",
                reference=self.user_op_hash,
                transient=(httpx.HTTPError, BundlerError),
            )
            self.transaction_hash = self._receipt.transaction_hash
        return self._receipt

    async def wait_for_tx_hash(self, timeout: Optional[float] = None) -> Optional[str]:
        """Wait until the bundler has included the operation; ``None`` on timeout."""
        try:
            await self._receipt_within(timeout or self._tx_hash_timeout)
        except ConfirmationTimeout:
            logger.info(f"User operation {self.user_op_hash} not yet included")
            return None
        return self.transaction_hash

    async def wait(self, timeout: Optional[float] = None) -> SubmissionResult:
        """Wait for the operation's outcome; reports ``pending`` on timeout."""
        try:
            receipt = await self._receipt_within(timeout or self._receipt_timeout)
        except ConfirmationTimeout:
            return SubmissionResult(
                transaction_hash=self.transaction_hash,
                status=TransactionStatus.PENDING,
                user_op_hash=self.user_op_hash,
            )
        return SubmissionResult(
            transaction_hash=receipt.transaction_hash,
            status=TransactionStatus.CONFIRMED if receipt.success else TransactionStatus.FAILED,
            block_number=receipt.block_number,
            gas_used=receipt.gas_used,
            user_op_hash=self.user_op_hash,
        )


class Erc4337SmartAccountSession:
    """
    :class:`SmartAccountSession` for ERC-4337 (EntryPoint v0.6) smart accounts.

    Submission for one ``(chain_id, account)`` pair is serialized through a
    shared :class:`NonceManager`, so concurrent dispatches never build two
    operations with the same EntryPoint nonce, even before the first lands.
    Without a configured paymaster the operation is sent unsponsored.
    """

    def __init__(
        self,
        signing_key: str,
        chain: ChainConfig,
        account_address: str,
        chain_client: ChainClient,
        bundler: BundlerProvider,
        paymaster: Optional[PaymasterProvider] = None,
        *,
        entry_point: Optional[str] = None,
        validation_module: Optional[str] = None,
        nonce_manager: Optional[NonceManager] = None,
    ) -> None:
        if not is_address(account_address):
            raise ValidationError(f"Invalid smart account address: {account_address}", fields=["account"])
        try:
            self._owner = Account.from_key(signing_key)
        except (ValueError, TypeError) as exc:
            raise ValidationError("Signing key is not a valid private key") from exc

        self.chain = chain
        self.account_address = to_checksum_address(account_address)
        self.chain_client = chain_client
        self.bundler = bundler
        self.paymaster = paymaster
        self.entry_point = to_checksum_address(entry_point or settings.erc4337_entrypoint_address)
        module = settings.smart_account_validation_module if validation_module is None else validation_module
        self.validation_module = to_checksum_address(module) if module else None
        self.nonce_manager = nonce_manager or NonceManager()

    def __repr__(self) -> str:
        return (
            f"Erc4337SmartAccountSession(chain={self.chain.name!r}, "
            f"account={self.account_address!r}, owner={self.owner_address!r})"
        )

    @property
    def owner_address(self) -> str:
        return self._owner.address

    async def send_transaction(self, calls: Union[Call, Sequence[Call]]) -> UserOperationHandle:
        batch = [calls] if isinstance(calls, Call) else list(calls)
        if not batch:
            raise ValidationError("At least one call is required", fields=["transactions"])
        try:
            call_data = build_account_call_data(batch)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

        try:
            async with self.nonce_manager.reserve(self.chain.chain_id, self.account_address, self.get_nonce) as nonce:
                user_op_hash = await self._submit(call_data, nonce)
        except BundlerError as exc:
            if exc.nonce_rejected:
                # Earlier operations were dropped; resync from the EntryPoint next time.
                self.nonce_manager.forget(self.chain.chain_id, self.account_address)
            logger.error(f"User operation submission failed for {self.account_address}: {exc}")
            raise SubmissionFailure(str(exc)) from exc
        except (PaymasterError, RpcError, httpx.HTTPError) as exc:
            logger.error(f"User operation submission failed for {self.account_address}: {exc}")
            raise SubmissionFailure(str(exc)) from exc

        logger.info(
            f"User operation {user_op_hash} submitted on {self.chain.name} "
            f"({len(batch)} call{'s' if len(batch) != 1 else ''})"
        )
        return UserOperationHandle(user_op_hash, self.bundler)

    async def get_nonce(self) -> int:
        result = await self.chain_client.call(
            self.entry_point,
            build_entrypoint_get_nonce_call(self.account_address),
        )
        return int(result, 16) if result not in ("0x", "") else 0

    async def _submit(self, call_data: str, nonce: int) -> str:
        max_fee, priority_fee = await self.chain_client.get_fee_data()
        user_op = UserOperation(
            sender=self.account_address,
            nonce=nonce,
            call_data=call_data,
            max_fee_per_gas=max_fee,
            max_priority_fee_per_gas=priority_fee,
            signature=self._wrap_signature(DUMMY_ECDSA_SIGNATURE),
        )

        if self.paymaster is not None and await self.paymaster.ready():
            sponsorship = await self.paymaster.sponsor_user_operation(user_op, self.entry_point)
            sponsorship.apply(user_op)
            if not sponsorship.call_gas_limit:
                estimate = await self.bundler.estimate_user_operation_gas(user_op, self.entry_point)
                user_op = user_op.with_gas(estimate)
        else:
            logger.warning(f"No paymaster configured for {self.chain.name}; sending unsponsored user operation")
            estimate = await self.bundler.estimate_user_operation_gas(user_op, self.entry_point)
            user_op = user_op.with_gas(estimate)

        user_op.signature = self.sign(user_op)
        return await self.bundler.send_user_operation(user_op, self.entry_point)

    def sign(self, user_op: UserOperation) -> str:
        """EIP-191 signature over the userOpHash, wrapped for the validation module."""
        op_hash = user_op.hash(self.entry_point, self.chain.chain_id)
        signed = self._owner.sign_message(encode_defunct(primitive=op_hash))
        return self._wrap_signature(bytes(signed.signature))

    def _wrap_signature(self, signature: bytes) -> str:
        if self.validation_module:
            return "0x" + abi_encode(["bytes", "address"], [signature, self.validation_module]).hex()
        return "0x" + signature.hex()

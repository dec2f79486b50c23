"""
EVM JSON-RPC chain client.

Every on-chain read the tools perform goes through :class:`ChainClient`, so
handlers can be exercised against an in-memory fake.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol, Sequence, Tuple

import httpx
from eth_utils import is_address, to_checksum_address

from .base import Provider
from ..config import settings
from ..core.abi import AbiFunction
from ..core.chains import ChainConfig
from ..core.errors import OnChainReadFailure, ValidationError
from ..core.execution.models import TransactionReceipt


logger = logging.getLogger(__name__)

DEFAULT_PRIORITY_FEE_WEI = 1_500_000_000


class RpcError(OnChainReadFailure):
    """JSON-RPC error returned by a node, or the request to it failing."""

    def __init__(self, error: Any):
        if isinstance(error, dict):
            message = error.get("message") or str(error)
            self.code = error.get("code")
            self.data = error.get("data")
        else:
            message = str(error)
            self.code = None
            self.data = None
        super().__init__(message)


class ChainClient(Protocol):
    """Read access to one EVM chain."""

    chain: ChainConfig

    async def get_native_balance(self, address: str) -> int: ...

    async def call(self, to: str, data: str) -> str: ...

    async def read_contract(
        self,
        address: str,
        function: AbiFunction,
        args: Sequence[Any] = (),
    ) -> Tuple[Any, ...]: ...

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[TransactionReceipt]: ...

    async def get_fee_data(self) -> Tuple[int, int]: ...


class JsonRpcChainClient(Provider):
    """:class:`ChainClient` backed by a node's JSON-RPC endpoint over httpx."""

    name = "rpc"

    def __init__(
        self,
        chain: ChainConfig,
        rpc_url: Optional[str] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout_s: Optional[int] = None,
    ) -> None:
        self.chain = chain
        self.rpc_url = rpc_url or settings.rpc_url_for(chain.name)
        self.timeout_s = timeout_s or settings.request_timeout_seconds
        self._client = client
        self._request_id = 0

    @property
    def chain_id(self) -> int:
        return self.chain.chain_id

    async def ready(self) -> bool:
        return bool(self.rpc_url)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "disabled", "reason": f"No RPC URL for {self.chain.name}"}

        try:
            result = await self._rpc_call("eth_chainId", [])
            return {"status": "healthy", "chainId": int(result, 16)}
        except RpcError as exc:
            return {"status": "error", "reason": str(exc)}

    async def get_native_balance(self, address: str) -> int:
        result = await self._rpc_call("eth_getBalance", [address, "latest"])
        return int(result, 16)

    async def call(self, to: str, data: str) -> str:
        return await self._rpc_call("eth_call", [{"to": to, "data": data}, "latest"]) or "0x"

    async def read_contract(
        self,
        address: str,
        function: AbiFunction,
        args: Sequence[Any] = (),
    ) -> Tuple[Any, ...]:
        """Call a view function and decode its return values.

        Reverts, transport failures and empty return data all surface as
        :class:`OnChainReadFailure`.
        """
        if not is_address(address):
            raise ValidationError(f"Invalid contract address: {address}", fields=["address"])
        target = to_checksum_address(address)
        calldata = function.encode_call(args)

        try:
            result = await self.call(target, calldata)
        except RpcError as exc:
            raise OnChainReadFailure(f"{function.name}() failed on {target}: {exc}") from exc

        if function.outputs and result in ("0x", ""):
            raise OnChainReadFailure(
                f"{function.name}() returned no data at {target}; is it a contract on {self.chain.name}?"
            )
        try:
            return function.decode_output(result)
        except ValidationError as exc:
            raise OnChainReadFailure(str(exc)) from exc

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[TransactionReceipt]:
        result = await self._rpc_call("eth_getTransactionReceipt", [tx_hash])
        if not result:
            return None
        return TransactionReceipt.from_rpc(result)

    async def get_fee_data(self) -> Tuple[int, int]:
        """Return ``(max_fee_per_gas, max_priority_fee_per_gas)`` in wei."""
        gas_price = int(await self._rpc_call("eth_gasPrice", []), 16)
        try:
            priority_fee = int(await self._rpc_call("eth_maxPriorityFeePerGas", []), 16)
        except RpcError as exc:
            logger.debug(f"eth_maxPriorityFeePerGas unsupported on {self.chain.name}: {exc}")
            priority_fee = min(DEFAULT_PRIORITY_FEE_WEI, gas_price)
        return gas_price + priority_fee, priority_fee

    async def _rpc_call(self, method: str, params: list[Any]) -> Any:
        if not self.rpc_url:
            raise RpcError(f"No RPC URL configured for {self.chain.name}")
        if not self._client or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout_s)

        self._request_id += 1
        try:
            response = await self._client.post(
                self.rpc_url,
                json={"jsonrpc": "2.0", "id": self._request_id, "method": method, "params": params},
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise RpcError(f"{method} request to {self.chain.name} RPC failed: {exc}") from exc
        if "error" in payload:
            raise RpcError(payload["error"])
        return payload.get("result")

    async def aclose(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

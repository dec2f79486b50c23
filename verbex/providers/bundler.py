"""
ERC-4337 bundler JSON-RPC client (EntryPoint v0.6 user operations).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from .base import Provider
from ..config import settings
from ..core.execution.userop import UserOperation, UserOpGasEstimate, UserOpReceipt


_ENTRY_POINT_CODE = re.compile(r"\bAA\d\d\b")

# EntryPoint rejected the operation's nonce.
INVALID_NONCE_CODE = "AA25"


class BundlerError(Exception):
    """JSON-RPC error from a bundler, with the EntryPoint ``AAxx`` code when present."""

    def __init__(self, error: Any):
        if isinstance(error, dict):
            message = str(error.get("message") or error)
            self.code = error.get("code")
            self.data = error.get("data")
        else:
            message = str(error)
            self.code = None
            self.data = None
        super().__init__(message)
        match = _ENTRY_POINT_CODE.search(message)
        self.entry_point_code: Optional[str] = match.group(0) if match else None

    @property
    def nonce_rejected(self) -> bool:
        return self.entry_point_code == INVALID_NONCE_CODE


@dataclass
class BundlerConfig:
    rpc_url: str


class BundlerProvider(Provider):
    name = "bundler"
    timeout_s = 20

    def __init__(
        self,
        config: Optional[BundlerConfig] = None,
        *,
        chain_id: Optional[int] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if config is None:
            if chain_id is None:
                raise ValueError("Either a bundler config or a chain_id is required")
            config = BundlerConfig(rpc_url=settings.bundler_url_for(chain_id))
        self._config = config
        self._client = client
        self._request_id = 0

    @property
    def rpc_url(self) -> str:
        return self._config.rpc_url

    async def ready(self) -> bool:
        return bool(self._config.rpc_url)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "disabled", "reason": "Bundler not configured"}

        try:
            result = await self._rpc_call("eth_chainId", [])
            return {"status": "healthy", "chainId": int(result, 16)}
        except (BundlerError, httpx.HTTPError) as exc:
            return {"status": "error", "reason": str(exc)}

    async def send_user_operation(self, user_op: UserOperation, entry_point: str) -> str:
        """Submit a signed operation; returns the userOpHash."""
        result = await self._rpc_call("eth_sendUserOperation", [user_op.to_rpc_dict(), entry_point])
        if not isinstance(result, str):
            raise BundlerError("Invalid bundler response for eth_sendUserOperation")
        return result

    async def estimate_user_operation_gas(self, user_op: UserOperation, entry_point: str) -> UserOpGasEstimate:
        result = await self._rpc_call("eth_estimateUserOperationGas", [user_op.to_rpc_dict(), entry_point])
        if not isinstance(result, dict):
            raise BundlerError("Invalid bundler response for eth_estimateUserOperationGas")
        return UserOpGasEstimate.from_rpc(result)

    async def get_user_operation_receipt(self, user_op_hash: str) -> Optional[UserOpReceipt]:
        """``None`` until the operation has been included in a bundle."""
        result = await self._rpc_call("eth_getUserOperationReceipt", [user_op_hash])
        if not result:
            return None
        return UserOpReceipt.from_rpc(user_op_hash, result)

    async def _rpc_call(self, method: str, params: list[Any]) -> Any:
        if not self._config.rpc_url:
            raise BundlerError("Bundler provider is not configured")
        if not self._client or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout_s)

        self._request_id += 1
        response = await self._client.post(
            self._config.rpc_url,
            json={"jsonrpc": "2.0", "id": self._request_id, "method": method, "params": params},
        )
        response.raise_for_status()
        payload = response.json()
        if "error" in payload:
            raise BundlerError(payload["error"])
        return payload.get("result")

    async def aclose(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

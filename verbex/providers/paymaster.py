"""
ERC-4337 Paymaster Provider (gas sponsorship).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from .base import Provider
from ..config import settings
from ..core.execution.userop import UserOperation


class PaymasterError(Exception):
    """Paymaster provider error."""
    pass


@dataclass
class PaymasterConfig:
    rpc_url: str
    rpc_method: str = "pm_sponsorUserOperation"


@dataclass
class PaymasterSponsorship:
    paymaster_and_data: str
    call_gas_limit: Optional[int] = None
    verification_gas_limit: Optional[int] = None
    pre_verification_gas: Optional[int] = None

    def apply(self, user_op: UserOperation) -> UserOperation:
        user_op.paymaster_and_data = self.paymaster_and_data
        if self.call_gas_limit:
            user_op.call_gas_limit = self.call_gas_limit
        if self.verification_gas_limit:
            user_op.verification_gas_limit = self.verification_gas_limit
        if self.pre_verification_gas:
            user_op.pre_verification_gas = self.pre_verification_gas
        return user_op


def _parse_gas(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, int):
        return value
    text = str(value)
    return int(text, 16) if text.startswith("0x") else int(text)


class PaymasterProvider(Provider):
    name = "paymaster"
    timeout_s = 20

    def __init__(
        self,
        config: Optional[PaymasterConfig] = None,
        *,
        chain_id: Optional[int] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if config is None:
            if chain_id is None:
                raise ValueError("Either a paymaster config or a chain_id is required")
            config = PaymasterConfig(
                rpc_url=settings.paymaster_url_for(chain_id),
                rpc_method=settings.paymaster_rpc_method,
            )
        self._config = config
        self._client = client

    async def ready(self) -> bool:
        return bool(self._config.rpc_url)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "disabled", "reason": "Paymaster not configured"}

        try:
            result = await self._rpc_call("eth_chainId", [])
            return {"status": "healthy", "chainId": result}
        except (PaymasterError, httpx.HTTPError) as exc:
            return {"status": "error", "reason": str(exc)}

    async def sponsor_user_operation(
        self,
        user_op: UserOperation,
        entry_point: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> PaymasterSponsorship:
        """Ask the paymaster to sponsor ``user_op``.

        The sponsored mode context is sent as the second parameter, the way
        0xGasless/Biconomy paymasters expect it.
        """
        if not await self.ready():
            raise PaymasterError("Paymaster provider is not configured")

        sponsor_context = context or {"mode": "SPONSORED", "calculateGasLimits": True}
        result = await self._rpc_call(
            self._config.rpc_method,
            [user_op.to_rpc_dict(), sponsor_context],
        )
        if isinstance(result, dict):
            paymaster_and_data = result.get("paymasterAndData") or result.get("paymaster_and_data")
            if paymaster_and_data:
                return PaymasterSponsorship(
                    paymaster_and_data=paymaster_and_data,
                    call_gas_limit=_parse_gas(result.get("callGasLimit")),
                    verification_gas_limit=_parse_gas(result.get("verificationGasLimit")),
                    pre_verification_gas=_parse_gas(result.get("preVerificationGas")),
                )
        if isinstance(result, str) and result.startswith("0x"):
            return PaymasterSponsorship(paymaster_and_data=result)
        raise PaymasterError("Invalid paymaster response")

    async def _rpc_call(self, method: str, params: list[Any]) -> Any:
        if not self._client or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout_s)

        response = await self._client.post(
            self._config.rpc_url,
            json={"jsonrpc": "2.0", "id": 1, "method": method, "params": params},
        )
        response.raise_for_status()
        payload = response.json()
        if "error" in payload:
            error = payload["error"]
            raise PaymasterError(error.get("message", error) if isinstance(error, dict) else error)
        return payload.get("result")

    async def aclose(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

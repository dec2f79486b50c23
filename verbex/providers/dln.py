"""Async client for deBridge DLN's single-chain swap transaction API."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .base import Provider
from ..config import settings
from ..core.errors import QuoteFailure
from ..core.execution.models import Call
from ..core.swap.models import SwapQuote, SwapQuoteRequest


logger = logging.getLogger(__name__)


def _parse_int(value: Any, default: int = 0) -> int:
    if value in (None, ""):
        return default
    if isinstance(value, int):
        return value
    text = str(value)
    return int(text, 16) if text.startswith("0x") else int(text)


class DlnProvider(Provider):
    """Thin wrapper around ``GET /chain/transaction``. Failures are not retried."""

    name = "dln"

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout_s: Optional[int] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = (base_url or settings.dln_base_url).rstrip("/")
        self.timeout_s = timeout_s or settings.request_timeout_seconds
        self._client = client

    async def ready(self) -> bool:
        return bool(self.base_url)

    async def health_check(self) -> Dict[str, Any]:
        return {"status": "healthy" if await self.ready() else "disabled", "base_url": self.base_url}

    async def get_swap_quote(self, request: SwapQuoteRequest) -> SwapQuote:
        payload = await self._request("/chain/transaction", request.to_params())

        if payload.get("errorMessage") or payload.get("errorId"):
            raise QuoteFailure(str(payload.get("errorMessage") or payload.get("errorId")))

        tx = payload.get("tx")
        if not isinstance(tx, dict) or not tx.get("to"):
            raise QuoteFailure("Swap quote response did not include a transaction")

        token_out = ((payload.get("estimation") or {}).get("tokenOut")) or {}
        try:
            call = Call(to=tx["to"], data=tx.get("data") or "0x", value=_parse_int(tx.get("value")))
            estimated_output = _parse_int(token_out.get("amount")) if token_out.get("amount") else None
        except ValueError as exc:
            raise QuoteFailure(f"Malformed swap quote: {exc}") from exc

        return SwapQuote(
            token_in=request.token_in,
            token_out=request.token_out,
            amount_in=request.amount,
            tx=call,
            spender=tx.get("allowanceTarget"),
            estimated_output=estimated_output,
            raw=payload,
        )

    async def _request(self, path: str, params: Dict[str, str]) -> Dict[str, Any]:
        if not self._client or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout_s)

        logger.debug(f"DLN request {path} params={params}")
        try:
            response = await self._client.get(f"{self.base_url}{path}", params=params)
        except httpx.RequestError as exc:
            raise QuoteFailure(f"Swap quote request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.status_code >= 400:
            detail = ""
            if isinstance(payload, dict):
                detail = payload.get("errorMessage") or payload.get("message") or ""
            detail = detail or response.text[:200] or response.reason_phrase
            raise QuoteFailure(f"Swap quote failed ({response.status_code}): {detail}", status_code=response.status_code)

        if not isinstance(payload, dict):
            raise QuoteFailure("Swap quote response was not a JSON object", status_code=response.status_code)
        return payload

    async def aclose(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

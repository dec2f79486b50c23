"""
Bounded polling for receipts.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

import httpx

from ...config import settings
from ...providers.rpc import ChainClient, RpcError
from ..errors import ConfirmationTimeout
from .models import TransactionReceipt


logger = logging.getLogger(__name__)

T = TypeVar("T")


async def poll_until(
    fetch: Callable[[], Awaitable[Optional[T]]],
    *,
    timeout: float,
    interval: float,
    description: str,
    reference: Optional[str] = None,
    transient: Tuple[Type[BaseException], ...] = (httpx.HTTPError,),
) -> T:
    """Call ``fetch`` until it returns something other than ``None``.

    Exceptions listed in ``transient`` are logged and the poll continues.
    Raises :class:`ConfirmationTimeout` once ``timeout`` seconds have passed.
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout

    while True:
        try:
            result = await fetch()
        except transient as exc:
            logger.warning(f"Error polling {description}: {exc}")
            result = None

        if result is not None:
            return result

        remaining = deadline - loop.time()
        if remaining <= 0:
            raise ConfirmationTimeout(
                f"Timed out after {timeout:g}s waiting for {description}",
                reference=reference,
            )
        await asyncio.sleep(min(interval, remaining))


async def wait_for_receipt(
    client: ChainClient,
    tx_hash: str,
    *,
    timeout: Optional[float] = None,
    interval: Optional[float] = None,
) -> TransactionReceipt:
    """Poll ``eth_getTransactionReceipt`` until the transaction is mined."""
    receipt = await poll_until(
        lambda: client.get_transaction_receipt(tx_hash),
        timeout=timeout if timeout is not None else settings.receipt_timeout_seconds,
        interval=interval if interval is not None else settings.receipt_poll_interval_seconds,
        description=f"receipt of {tx_hash}",
        reference=tx_hash,
        transient=(httpx.HTTPError, RpcError),
    )
    logger.info(
        f"Transaction {tx_hash} mined in block {receipt.block_number} "
        f"(status={receipt.status.value})"
    )
    return receipt

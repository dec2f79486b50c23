"""
Nonce management for concurrent user operation submission.

The EntryPoint's ``getNonce`` only counts operations that have landed on
chain, so two submissions for one account made before the first is
included would otherwise reuse the same nonce.
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import AsyncIterator, Awaitable, Callable, Dict, Optional, Tuple


@dataclass
class NonceState:
    """Tracks nonce state for one smart account on one chain."""
    account: str
    chain_id: int
    confirmed_nonce: int = 0                    # Last value read from the EntryPoint
    pending_nonce: int = 0                      # Next available for use
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)
    last_updated: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class NonceManager:
    """
    Hands out EntryPoint nonces for smart accounts.

    A nonce is reserved under the account's lock and only committed once the
    bundler accepts the operation; a rejected submission leaves the pending
    nonce where it was.
    """

    def __init__(self) -> None:
        self._states: Dict[Tuple[int, str], NonceState] = {}

    def _get_key(self, chain_id: int, account: str) -> Tuple[int, str]:
        return chain_id, account.lower()

    def get_state(self, chain_id: int, account: str) -> Optional[NonceState]:
        return self._states.get(self._get_key(chain_id, account))

    def _state(self, chain_id: int, account: str) -> NonceState:
        key = self._get_key(chain_id, account)
        if key not in self._states:
            self._states[key] = NonceState(account=key[1], chain_id=chain_id)
        return self._states[key]

    @asynccontextmanager
    async def reserve(
        self,
        chain_id: int,
        account: str,
        fetch_on_chain_nonce: Callable[[], Awaitable[int]],
    ) -> AsyncIterator[int]:
        """
        Hold the account's submission lock and yield the next nonce.

        The nonce is ``max(on-chain nonce, last submitted + 1)``. It is
        committed when the block exits cleanly and released if it raises.
        """
        state = self._state(chain_id, account)
        async with state.lock:
            on_chain_nonce = await fetch_on_chain_nonce()
            state.confirmed_nonce = on_chain_nonce
            state.last_updated = datetime.now(timezone.utc)
            nonce = max(on_chain_nonce, state.pending_nonce)

            yield nonce

            state.pending_nonce = nonce + 1

    def forget(self, chain_id: int, account: str) -> None:
        """Drop tracked state so the next reservation starts from the on-chain nonce."""
        self._states.pop(self._get_key(chain_id, account), None)

    def clear(self) -> None:
        self._states.clear()

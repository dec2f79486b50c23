"""
Per-call execution context and the services tool handlers run against.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from eth_utils import is_address, to_checksum_address

from ...providers.bundler import BundlerProvider
from ...providers.dln import DlnProvider
from ...providers.paymaster import PaymasterProvider
from ...providers.rpc import ChainClient, JsonRpcChainClient
from ..chains import ChainConfig, resolve_network
from ..errors import InvalidContextError, UnsupportedNetworkError
from ..execution.nonce_manager import NonceManager
from ..execution.session import Erc4337SmartAccountSession, SmartAccountSession
from ..swap.orchestrator import QuoteProvider
from ..tokens import TokenResolver, get_token_resolver


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionContext:
    """Caller-supplied identity for one dispatch. Never persisted."""

    signing_key: Optional[str] = field(default=None, repr=False)
    network: Optional[str] = None
    smart_account_address: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ExecutionContext":
        """Accept both the chat server's camelCase keys and snake_case ones."""
        return cls(
            signing_key=data.get("userPrivateKey") or data.get("privateKey") or data.get("signing_key"),
            network=data.get("network"),
            smart_account_address=data.get("smartAccountAddress") or data.get("smart_account_address"),
        )

    def missing_fields(self) -> List[str]:
        missing = []
        if not self.signing_key:
            missing.append("signing_key")
        if not self.network:
            missing.append("network")
        if not self.smart_account_address:
            missing.append("smart_account_address")
        return missing

    def validate(self) -> ChainConfig:
        """Check every field is present and well-formed; return the chain."""
        missing = self.missing_fields()
        if missing:
            raise InvalidContextError(
                f"Execution context is missing: {', '.join(missing)}",
                missing=missing,
            )
        try:
            chain = resolve_network(self.network)
        except UnsupportedNetworkError as exc:
            raise InvalidContextError(str(exc), missing=["network"]) from exc
        if not is_address(self.smart_account_address):
            raise InvalidContextError(
                f"Invalid smart account address: {self.smart_account_address}",
                missing=["smart_account_address"],
            )
        return chain


class ToolContext:
    """What a handler needs: the chain, the account and lazily built clients."""

    def __init__(
        self,
        chain: ChainConfig,
        account_address: str,
        *,
        chain_client: ChainClient,
        token_resolver: TokenResolver,
        session: Optional[SmartAccountSession] = None,
        session_factory: Optional[Callable[[], SmartAccountSession]] = None,
        quote_provider: Optional[QuoteProvider] = None,
    ) -> None:
        self.chain = chain
        self.account_address = to_checksum_address(account_address)
        self.chain_client = chain_client
        self.token_resolver = token_resolver
        self._session = session
        self._session_factory = session_factory
        self._quote_provider = quote_provider

    @property
    def session(self) -> SmartAccountSession:
        if self._session is None:
            if self._session_factory is None:
                raise InvalidContextError("No smart account session is available", missing=["signing_key"])
            self._session = self._session_factory()
        return self._session

    @property
    def quote_provider(self) -> QuoteProvider:
        if self._quote_provider is None:
            raise InvalidContextError("No swap quote provider is configured")
        return self._quote_provider


class ServiceFactory:
    """
    Owns the long-lived clients (one set per chain) and the nonce tracking
    shared by every session it builds. Builds a :class:`ToolContext` per dispatch.
    """

    def __init__(
        self,
        *,
        token_resolver: Optional[TokenResolver] = None,
        quote_provider: Optional[QuoteProvider] = None,
    ) -> None:
        self.token_resolver = token_resolver or get_token_resolver()
        self._quote_provider = quote_provider
        self._chain_clients: Dict[int, JsonRpcChainClient] = {}
        self._account_providers: Dict[int, Tuple[BundlerProvider, PaymasterProvider]] = {}
        self.nonce_manager = NonceManager()

    @property
    def quote_provider(self) -> QuoteProvider:
        if self._quote_provider is None:
            self._quote_provider = DlnProvider()
        return self._quote_provider

    def chain_client(self, chain: ChainConfig) -> JsonRpcChainClient:
        if chain.chain_id not in self._chain_clients:
            self._chain_clients[chain.chain_id] = JsonRpcChainClient(chain)
        return self._chain_clients[chain.chain_id]

    def account_providers(self, chain: ChainConfig) -> Tuple[BundlerProvider, PaymasterProvider]:
        if chain.chain_id not in self._account_providers:
            self._account_providers[chain.chain_id] = (
                BundlerProvider(chain_id=chain.chain_id),
                PaymasterProvider(chain_id=chain.chain_id),
            )
        return self._account_providers[chain.chain_id]

    def session(self, execution: ExecutionContext, chain: ChainConfig) -> Erc4337SmartAccountSession:
        bundler, paymaster = self.account_providers(chain)
        return Erc4337SmartAccountSession(
            signing_key=execution.signing_key or "",
            chain=chain,
            account_address=execution.smart_account_address or "",
            chain_client=self.chain_client(chain),
            bundler=bundler,
            paymaster=paymaster,
            nonce_manager=self.nonce_manager,
        )

    def tool_context(self, execution: ExecutionContext, chain: ChainConfig) -> ToolContext:
        return ToolContext(
            chain=chain,
            account_address=execution.smart_account_address or "",
            chain_client=self.chain_client(chain),
            token_resolver=self.token_resolver,
            session_factory=lambda: self.session(execution, chain),
            quote_provider=self.quote_provider,
        )

    async def aclose(self) -> None:
        for client in self._chain_clients.values():
            await client.aclose()
        for bundler, paymaster in self._account_providers.values():
            await bundler.aclose()
            await paymaster.aclose()
        self.nonce_manager.clear()
        if isinstance(self._quote_provider, DlnProvider):
            await self._quote_provider.aclose()

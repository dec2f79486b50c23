"""Static token registry and symbol resolution.

The registry is keyed by chain ID -> symbol -> address. Configuration may add
or replace entries (``Settings.token_registry_overrides``); nothing is fetched
at runtime.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from eth_utils import is_address, to_checksum_address

from ..config import settings
from .chains import CHAIN_METADATA, NATIVE_PLACEHOLDER
from .errors import ValidationError

TOKEN_REGISTRY: Dict[int, Dict[str, str]] = {
    43114: {  # Avalanche C-Chain
        'AVAX': NATIVE_PLACEHOLDER,
        'WAVAX': '0xB31f66AA3C1e785363F0875A1B74E27b85FD66c7',
        'USDC': '0xB97EF9Ef8734C71904D8002F8b6Bc66Dd9c48a6E',
        'USDC.E': '0xA7D7079b0FEaD91F3e65f86E8915Cb59c1a4C664',
        'USDT': '0x9702230A8Ea53601f5cd2dc00fDBc13d4dF4A8c7',
        'WETH': '0x49D5c2BdFfac6CE2BFdB6640F4F80f226bc10bAB',
    },
    8453: {  # Base
        'ETH': NATIVE_PLACEHOLDER,
        'WETH': '0x4200000000000000000000000000000000000006',
        'USDC': '0x833589fCD6EDB6E08f4c7C32D4f71b54bdA02913',
        'USDT': '0xfde4C96c8593536E31F229EA8f37b2ADa2699bb2',
        'DAI': '0x50c5725949A6F0c72E6C4a641F24049A917DB0Cb',
    },
    43113: {  # Avalanche Fuji
        'AVAX': NATIVE_PLACEHOLDER,
        'WAVAX': '0xd00ae08403B9bbb9124bB305C09058E32C39A48c',
        'USDC': '0x5425890298aed601595a70AB815c96711a31Bc65',
    },
}


class TokenResolver:
    """Resolves token symbols to contract addresses for a chain."""

    def __init__(
        self,
        registry: Optional[Mapping[int, Mapping[str, str]]] = None,
        overrides: Optional[Mapping[int, Mapping[str, str]]] = None,
    ) -> None:
        merged: Dict[int, Dict[str, str]] = {}
        for source in (registry if registry is not None else TOKEN_REGISTRY, overrides or {}):
            for chain_id, entries in source.items():
                bucket = merged.setdefault(int(chain_id), {})
                for symbol, address in entries.items():
                    bucket[symbol.strip().upper()] = address
        self._registry = merged

    def symbols(self, chain_id: int) -> List[str]:
        return sorted(self._registry.get(chain_id, {}))

    def resolve_symbol(self, chain_id: int, symbol: str) -> Optional[str]:
        return self._registry.get(chain_id, {}).get(symbol.strip().upper())

    def resolve_symbols(self, chain_id: int, symbols: Iterable[str]) -> Tuple[List[str], List[str]]:
        """Return ``(addresses, unknown_symbols)`` preserving request order."""

        resolved: List[str] = []
        unknown: List[str] = []
        for symbol in symbols:
            address = self.resolve_symbol(chain_id, symbol)
            if address:
                resolved.append(address)
            else:
                unknown.append(symbol)
        return resolved, unknown

    def resolve_reference(self, chain_id: int, reference: str) -> str:
        """Resolve an address-or-symbol token reference to an address."""

        candidate = (reference or '').strip()
        if is_address(candidate):
            return to_checksum_address(candidate)
        address = self.resolve_symbol(chain_id, candidate) if candidate else None
        if address:
            return address
        chain = CHAIN_METADATA.get(chain_id)
        network = chain.name if chain else str(chain_id)
        known = ', '.join(self.symbols(chain_id)) or 'none'
        raise ValidationError(
            f"Unknown token '{reference}' on {network} (known symbols: {known})",
            fields=['token'],
        )


_token_resolver: Optional[TokenResolver] = None


def get_token_resolver() -> TokenResolver:
    global _token_resolver
    if _token_resolver is None:
        _token_resolver = TokenResolver(overrides=settings.token_registry_overrides)
    return _token_resolver


__all__ = [
    'TOKEN_REGISTRY',
    'TokenResolver',
    'get_token_resolver',
]

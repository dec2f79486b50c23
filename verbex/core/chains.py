"""Network metadata for the EVM chains smart accounts can run on."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .errors import UnsupportedNetworkError

# Aggregators and wallets use either placeholder for the native asset.
NATIVE_PLACEHOLDER = '0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee'
ZERO_ADDRESS = '0x0000000000000000000000000000000000000000'
NATIVE_SENTINELS = frozenset({NATIVE_PLACEHOLDER, ZERO_ADDRESS})


@dataclass(frozen=True)
class ChainConfig:
    chain_id: int
    name: str
    display_name: str
    native_symbol: str
    aliases: Tuple[str, ...] = ()
    native_decimals: int = 18
    explorer_url: Optional[str] = None
    is_testnet: bool = False


CHAIN_METADATA: Dict[int, ChainConfig] = {
    43114: ChainConfig(
        chain_id=43114,
        name='avalanche',
        display_name='Avalanche C-Chain',
        native_symbol='AVAX',
        aliases=('avax', 'avalanche c-chain', 'c-chain'),
        explorer_url='https://snowtrace.io',
    ),
    43113: ChainConfig(
        chain_id=43113,
        name='avalanche-fuji',
        display_name='Avalanche Fuji',
        native_symbol='AVAX',
        aliases=('fuji', 'avalanche fuji', 'avalanche_fuji'),
        explorer_url='https://testnet.snowtrace.io',
        is_testnet=True,
    ),
    8453: ChainConfig(
        chain_id=8453,
        name='base',
        display_name='Base',
        native_symbol='ETH',
        aliases=('base mainnet',),
        explorer_url='https://basescan.org',
    ),
}

CHAIN_ALIAS_TO_ID: Dict[str, int] = {}
for _chain_id, _chain in CHAIN_METADATA.items():
    CHAIN_ALIAS_TO_ID[_chain.name] = _chain_id
    CHAIN_ALIAS_TO_ID[str(_chain_id)] = _chain_id
    for _alias in _chain.aliases:
        CHAIN_ALIAS_TO_ID[_alias] = _chain_id


def resolve_network(network: Optional[str]) -> ChainConfig:
    """Map a network name, alias or numeric chain ID to its metadata."""

    key = str(network or '').strip().lower()
    chain_id = CHAIN_ALIAS_TO_ID.get(key)
    if chain_id is None:
        supported = ', '.join(chain.name for chain in CHAIN_METADATA.values())
        raise UnsupportedNetworkError(
            f"Unsupported network '{network}'. Supported networks: {supported}",
            fields=['network'],
        )
    return CHAIN_METADATA[chain_id]


def is_native_token(reference: Optional[str]) -> bool:
    """Return ``True`` for the native-asset placeholder addresses."""

    return bool(reference) and reference.strip().lower() in NATIVE_SENTINELS


__all__ = [
    'NATIVE_PLACEHOLDER',
    'ZERO_ADDRESS',
    'NATIVE_SENTINELS',
    'ChainConfig',
    'CHAIN_METADATA',
    'CHAIN_ALIAS_TO_ID',
    'resolve_network',
    'is_native_token',
]

"""
Token Registry

Five read-only lookup indexes built from one catalog snapshot:

- by symbol        (key: uppercased symbol, catalog key and IBC base denom)
- by ERC20 address (key: lowercased address)
- by CW20 address  (key: lowercased address)
- by IBC hash      (key: uppercased hash)
- by name          (key: lowercased display name)

Each index is built by its own pass over the catalog. When two entries
normalize to the same key the later one in iteration order wins.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional

from .models import TokenMeta

logger = logging.getLogger(__name__)

TokenIndex = Mapping[str, TokenMeta]


def _insert(index: Dict[str, TokenMeta], key: str, token: TokenMeta, index_name: str) -> None:
    existing = index.get(key)
    if existing is not None and existing is not token:
        logger.debug(
            "Token index collision on %s[%s]: %s replaced by %s",
            index_name, key, existing.symbol, token.symbol,
        )
    index[key] = token


def _freeze(index: Dict[str, TokenMeta]) -> TokenIndex:
    return MappingProxyType(index)


def _symbol_keys(catalog_key: str, token: TokenMeta) -> Iterable[str]:
    keys = [catalog_key, token.symbol, token.base_denom]
    seen = set()
    for key in keys:
        if not key:
            continue
        normalized = key.upper()
        if normalized not in seen:
            seen.add(normalized)
            yield normalized


def map_by_symbol(catalog: Mapping[str, TokenMeta]) -> TokenIndex:
    index: Dict[str, TokenMeta] = {}
    for catalog_key, token in catalog.items():
        for key in _symbol_keys(catalog_key, token):
            _insert(index, key, token, "symbol")
    return _freeze(index)


def map_by_erc20_address(catalog: Mapping[str, TokenMeta]) -> TokenIndex:
    index: Dict[str, TokenMeta] = {}
    for token in catalog.values():
        if token.erc20_address:
            _insert(index, token.erc20_address.lower(), token, "erc20")
    return _freeze(index)


def map_by_cw20_address(catalog: Mapping[str, TokenMeta]) -> TokenIndex:
    index: Dict[str, TokenMeta] = {}
    for token in catalog.values():
        if token.cw20_address:
            _insert(index, token.cw20_address.lower(), token, "cw20")
    return _freeze(index)


def map_by_hash(catalog: Mapping[str, TokenMeta]) -> TokenIndex:
    index: Dict[str, TokenMeta] = {}
    for token in catalog.values():
        if token.ibc_hash:
            _insert(index, token.ibc_hash.upper(), token, "hash")
    return _freeze(index)


def map_by_name(catalog: Mapping[str, TokenMeta]) -> TokenIndex:
    index: Dict[str, TokenMeta] = {}
    for token in catalog.values():
        if token.name:
            _insert(index, token.name.lower(), token, "name")
    return _freeze(index)


class TokenRegistry:
    """
    Immutable set of token indexes derived from a ``symbol -> TokenMeta`` catalog.

    Rebuilding means constructing a new registry; none of the indexes can be
    mutated after construction.
    """

    def __init__(self, catalog: Mapping[str, TokenMeta]):
        snapshot = dict(catalog)
        self._size = len(snapshot)

        self._by_symbol = map_by_symbol(snapshot)
        self._by_erc20_address = map_by_erc20_address(snapshot)
        self._by_cw20_address = map_by_cw20_address(snapshot)
        self._by_hash = map_by_hash(snapshot)
        self._by_name = map_by_name(snapshot)

        logger.debug(
            "Token registry built: %d catalog entries, %d symbols, %d erc20, %d cw20, %d hashes, %d names",
            len(snapshot),
            len(self._by_symbol),
            len(self._by_erc20_address),
            len(self._by_cw20_address),
            len(self._by_hash),
            len(self._by_name),
        )

    @property
    def by_symbol(self) -> TokenIndex:
        return self._by_symbol

    @property
    def by_erc20_address(self) -> TokenIndex:
        return self._by_erc20_address

    @property
    def by_cw20_address(self) -> TokenIndex:
        return self._by_cw20_address

    @property
    def by_hash(self) -> TokenIndex:
        return self._by_hash

    @property
    def by_name(self) -> TokenIndex:
        return self._by_name

    def __len__(self) -> int:
        return self._size


def first_hit(index: TokenIndex, candidates: Iterable[Optional[str]]) -> Optional[TokenMeta]:
    """Return the token for the first candidate key present in ``index``."""
    for key in candidates:
        if not key:
            continue
        token = index.get(key)
        if token is not None:
            return token
    return None

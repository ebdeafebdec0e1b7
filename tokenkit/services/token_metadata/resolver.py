"""
Token Resolver

Stateless lookups over a TokenRegistry. Every lookup is total: it returns
the token or None and never raises. Each lookup tries an ordered list of
candidate keys (the input as given, then its canonical-case form) and the
first hit wins.
"""

from __future__ import annotations

from typing import List, Optional

from .models import TokenMeta
from .registry import TokenRegistry, first_hit


ERC20_ADDRESS_PREFIX = "0x"


def symbol_candidates(symbol: str) -> List[str]:
    return [symbol, symbol.upper()]


def hash_candidates(ibc_hash: str) -> List[str]:
    return [ibc_hash, ibc_hash.upper()]


def name_candidates(name: str) -> List[str]:
    return [name, name.lower()]


def address_candidates(address: str) -> List[str]:
    return [address.lower()]


def is_erc20_address(address: str) -> bool:
    """``0x``-prefixed addresses are ERC20; everything else is treated as CW20."""
    return address.startswith(ERC20_ADDRESS_PREFIX)


class TokenResolver:
    """
    Lookup API over a TokenRegistry.

    The registry is read-only, so a single resolver can be shared across any
    number of concurrent enrichment calls.
    """

    def __init__(self, registry: TokenRegistry):
        self._registry = registry

    @property
    def registry(self) -> TokenRegistry:
        return self._registry

    def by_symbol(self, symbol: str) -> Optional[TokenMeta]:
        """
        Symbol can be the token's main symbol, the base denom of an IBC
        token, or a variant symbol of a bridged version (e.g. USDCet).
        """
        if not symbol:
            return None
        return first_hit(self._registry.by_symbol, symbol_candidates(symbol))

    def by_address(self, address: str) -> Optional[TokenMeta]:
        if not address:
            return None
        if is_erc20_address(address):
            return self.by_erc20_address(address)
        return self.by_cw20_address(address)

    def by_erc20_address(self, address: str) -> Optional[TokenMeta]:
        if not address:
            return None
        return first_hit(self._registry.by_erc20_address, address_candidates(address))

    def by_cw20_address(self, address: str) -> Optional[TokenMeta]:
        if not address:
            return None
        return first_hit(self._registry.by_cw20_address, address_candidates(address))

    def by_hash(self, ibc_hash: str) -> Optional[TokenMeta]:
        if not ibc_hash:
            return None
        return first_hit(self._registry.by_hash, hash_candidates(ibc_hash))

    def by_name(self, name: str) -> Optional[TokenMeta]:
        if not name:
            return None
        return first_hit(self._registry.by_name, name_candidates(name))

    def get_coin_gecko_id_from_symbol(self, symbol: str) -> str:
        """CoinGecko id of the token with this symbol, or "" when unknown."""
        if not symbol:
            return ""
        token = self._registry.by_symbol.get(symbol.upper())
        if token is None:
            return ""
        return token.coin_gecko_id or ""

"""
In-process denom lookup backed by a TokenResolver.

Maps the chain's denom formats onto the resolver's identifier kinds:

    peggy0x<erc20>               -> ERC20 address
    ibc/<HASH>                   -> IBC hash
    factory/<creator>/<subdenom> -> address (CW20 adapter) or symbol
    0x<erc20> / inj1<cw20>       -> address
    anything else                -> symbol, then display name
"""

from __future__ import annotations

from typing import Optional

from ..config import settings
from ..services.token_metadata.models import TokenMeta
from ..services.token_metadata.resolver import TokenResolver, is_erc20_address
from .base import DenomLookupClient

PEGGY_PREFIX = "peggy"
IBC_PREFIX = "ibc/"
FACTORY_PREFIX = "factory/"


class RegistryDenomClient(DenomLookupClient):
    """Resolves denoms against the local token registry; never raises."""

    name = "registry"

    def __init__(self, resolver: TokenResolver, cw20_address_prefix: Optional[str] = None):
        self._resolver = resolver
        self._cw20_prefix = (cw20_address_prefix or settings.cw20_address_prefix).lower()

    async def resolve(self, identifier: str) -> Optional[TokenMeta]:
        return self.resolve_sync(identifier)

    def resolve_sync(self, identifier: str) -> Optional[TokenMeta]:
        denom = (identifier or "").strip()
        if not denom:
            return None

        lowered = denom.lower()

        if lowered.startswith(PEGGY_PREFIX + "0x"):
            return self._resolver.by_erc20_address(denom[len(PEGGY_PREFIX):])

        if lowered.startswith(IBC_PREFIX):
            return self._resolver.by_hash(denom[len(IBC_PREFIX):])

        if lowered.startswith(FACTORY_PREFIX):
            return self._resolve_factory(denom)

        if self._looks_like_address(denom):
            return self._resolver.by_address(denom)

        return self._resolver.by_symbol(denom) or self._resolver.by_name(denom)

    def _resolve_factory(self, denom: str) -> Optional[TokenMeta]:
        subdenom = denom.rsplit("/", 1)[-1]
        if self._looks_like_address(subdenom):
            token = self._resolver.by_address(subdenom)
            if token is not None:
                return token
        return self._resolver.by_symbol(subdenom)

    def _looks_like_address(self, value: str) -> bool:
        return is_erc20_address(value.lower()) or value.lower().startswith(self._cw20_prefix)

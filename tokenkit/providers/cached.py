from __future__ import annotations

import logging
from typing import Optional

from ..cache import TTLCache
from ..config import settings
from ..services.token_metadata.models import TokenMeta
from .base import DenomLookupClient

logger = logging.getLogger(__name__)

_MISSING = object()


class CachedDenomClient(DenomLookupClient):
    """
    TTL cache in front of another lookup client.

    Both hits and misses are cached. Errors raised by the wrapped client
    propagate and leave the cache untouched.
    """

    name = "cached"

    def __init__(
        self,
        inner: DenomLookupClient,
        cache: Optional[TTLCache] = None,
        ttl_seconds: Optional[int] = None,
    ):
        self._inner = inner
        self._cache = cache or TTLCache(
            default_ttl=ttl_seconds if ttl_seconds is not None else settings.cache_ttl_seconds,
            max_size=settings.max_cache_size,
        )
        self._ttl = ttl_seconds

    async def resolve(self, identifier: str) -> Optional[TokenMeta]:
        key = f"denom:{identifier}"
        cached = await self._cache.get(key, _MISSING)
        if cached is not _MISSING:
            return cached

        token = await self._inner.resolve(identifier)
        await self._cache.set(key, token, ttl=self._ttl)
        if token is None:
            logger.debug("Denom %s not resolved by %s", identifier, self._inner.name)
        return token

    async def clear(self) -> None:
        await self._cache.clear()

"""
Token catalog sources.

A catalog is a JSON object mapping a symbol to a token dict in the
camelCase shape of TokenMeta, e.g.::

    {"INJ": {"symbol": "INJ", "name": "Injective", "decimals": 18, ...}}

It can be read from a local file or downloaded from a token list URL.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import httpx
from pydantic import ValidationError

from ..config import settings
from ..services.token_metadata.models import TokenMeta

logger = logging.getLogger(__name__)


class CatalogLoadError(Exception):
    """The token catalog could not be fetched, decoded or validated."""


def build_catalog(raw: Mapping[str, Any]) -> Dict[str, TokenMeta]:
    """Validate a raw ``symbol -> token dict`` mapping into TokenMeta values."""
    if not isinstance(raw, Mapping):
        raise CatalogLoadError(f"Token catalog must be a JSON object, got {type(raw).__name__}")

    catalog: Dict[str, TokenMeta] = {}
    for symbol, data in raw.items():
        if isinstance(data, TokenMeta):
            catalog[symbol] = data
            continue
        try:
            catalog[symbol] = TokenMeta.model_validate(data)
        except ValidationError as e:
            raise CatalogLoadError(f"Invalid token entry {symbol!r}: {e}") from e
    return catalog


def load_catalog_file(path: Union[str, Path]) -> Dict[str, TokenMeta]:
    """Read a catalog from a JSON file."""
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Failed to read token catalog from %s", path, exc_info=e)
        raise CatalogLoadError(f"Cannot read token catalog {path}: {e}") from e
    return build_catalog(raw)


class TokenListSource:
    """
    Downloads the token catalog from a token list URL.

    The HTTP client is created lazily and reused until :meth:`close`.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._url = url or settings.token_list_url
        self._timeout = timeout_s or settings.request_timeout_seconds
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def close(self):
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch_catalog(self) -> Dict[str, TokenMeta]:
        if not self._url:
            raise CatalogLoadError("No token list URL configured")

        client = await self._get_client()

        try:
            response = await client.get(self._url)
            response.raise_for_status()
            raw = response.json()
        except httpx.HTTPError as e:
            logger.warning("Token list download failed: %s", self._url, exc_info=e)
            raise CatalogLoadError(f"Token list download failed: {e}") from e
        except json.JSONDecodeError as e:
            logger.warning("Token list is not valid JSON: %s", self._url)
            raise CatalogLoadError(f"Token list is not valid JSON: {e}") from e

        catalog = build_catalog(raw)
        logger.info("Loaded %d tokens from %s", len(catalog), self._url)
        return catalog

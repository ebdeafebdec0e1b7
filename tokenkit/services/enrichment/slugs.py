"""
Market slug derivation.

Spot markets prefer a token-derived slug (``atom-usdt``) and fall back to
the ticker with only the first ``/`` and first space replaced. Derivative
and binary options slugs always come from the ticker with every ``/`` and
every space replaced.
"""

from __future__ import annotations

from typing import Optional

from ..token_metadata.models import TokenMeta


def spot_market_slug(
    ticker: str,
    base_token: Optional[TokenMeta] = None,
    quote_token: Optional[TokenMeta] = None,
) -> str:
    if base_token is not None and quote_token is not None:
        return f"{base_token.symbol.lower()}-{quote_token.symbol.lower()}"

    return ticker.replace("/", "-", 1).replace(" ", "-", 1).lower()


def ticker_slug(ticker: str) -> str:
    """Slug for derivative and binary options markets."""
    return ticker.replace("/", "-").replace(" ", "-").lower()


def derivative_base_symbol(slug: str) -> str:
    """First hyphen-separated segment of a ticker slug (``btc-usdt-perp`` -> ``btc``)."""
    return slug.split("-", 1)[0]


def binary_options_base_symbol(ticker: str, quote_token: Optional[TokenMeta] = None) -> str:
    """
    Base side of a binary options ticker.

    With a resolved quote token its symbol is removed from the ticker,
    otherwise the first ``/`` is. Leftover separators at the edges are trimmed.
    """
    if quote_token is not None and quote_token.symbol:
        remainder = ticker.replace(quote_token.symbol, "", 1)
    else:
        remainder = ticker.replace("/", "", 1)

    return remainder.strip().strip("/-").strip()

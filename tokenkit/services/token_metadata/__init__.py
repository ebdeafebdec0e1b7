"""
Token Metadata

Catalog model, lookup indexes and the resolver built on top of them.
"""

from .models import TokenMeta
from .registry import TokenRegistry
from .resolver import TokenResolver

__all__ = [
    "TokenMeta",
    "TokenRegistry",
    "TokenResolver",
]

from .base import DenomLookupClient, DenomLookupError
from .cached import CachedDenomClient
from .registry_denom import RegistryDenomClient
from .token_list import CatalogLoadError, TokenListSource, build_catalog, load_catalog_file

__all__ = [
    "DenomLookupClient",
    "DenomLookupError",
    "CachedDenomClient",
    "RegistryDenomClient",
    "CatalogLoadError",
    "TokenListSource",
    "build_catalog",
    "load_catalog_file",
]

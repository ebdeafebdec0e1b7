from abc import ABC, abstractmethod
from typing import Optional

from ..services.token_metadata.models import TokenMeta


class DenomLookupError(Exception):
    """Raised by a lookup client when the lookup itself could not be performed
    (transport, RPC or upstream failure). "Not found" is never an error."""


class DenomLookupClient(ABC):
    """Resolves a denom, symbol or contract address to token metadata"""

    name: str = "denom_lookup"

    @abstractmethod
    async def resolve(self, identifier: str) -> Optional[TokenMeta]:
        """Return the token for ``identifier`` or None when it is unknown.

        Implementations raise DenomLookupError on transport failure.
        """
        pass

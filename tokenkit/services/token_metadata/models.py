"""
Token Metadata Models

Canonical token record shared by the registry, the resolver and every
enriched record.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TokenMeta(BaseModel):
    """One token of the catalog. Immutable once loaded."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    symbol: str = Field(..., description="Display symbol (e.g. INJ, USDT)")
    name: str = Field("", description="Display name")
    decimals: int = Field(..., ge=0, description="Token decimal places")
    logo: str = Field("", description="Logo URI")
    icon: str = Field("", description="Icon URI")
    coin_gecko_id: str = Field("", alias="coinGeckoId", description="CoinGecko coin id")

    # Chain identifiers
    erc20_address: Optional[str] = Field(None, alias="erc20Address", description="ERC20 contract address")
    cw20_address: Optional[str] = Field(None, alias="cw20Address", description="CW20 contract address")
    ibc_hash: Optional[str] = Field(None, alias="ibcHash", description="IBC denom trace hash")
    base_denom: Optional[str] = Field(None, alias="baseDenom", description="IBC base denom alias")
    denom: Optional[str] = Field(None, description="Chain denom, when known")

    def to_dict(self) -> dict:
        """Serialize with the catalog's camelCase keys."""
        return self.model_dump(by_alias=True, exclude_none=True)

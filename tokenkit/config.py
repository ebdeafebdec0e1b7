from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    log_level: str = Field(default="INFO", description="Logging level")

    # Native asset
    native_symbol: str = Field(default="INJ", description="Symbol of the chain's native token")
    native_denom: str = Field(default="inj", description="Bank denom of the chain's native token")
    inbound_transfer_prefix: str = Field(
        default="transfer",
        description="Denom prefix of IBC transfer paths that carry the native token back in",
    )

    # Synthetic tokens (binary options base side)
    placeholder_logo: str = Field(default="injective-v3.svg", description="Logo/icon for synthetic tokens")
    placeholder_decimals: int = Field(default=18, ge=0, description="Decimals for synthetic tokens")

    # Address formats
    cw20_address_prefix: str = Field(
        default="inj1",
        description="Bech32 prefix identifying CW20 contract addresses inside denoms",
    )

    # Token list source
    token_list_url: str = Field(default="", description="URL of a JSON token catalog (symbol -> token)")
    request_timeout_seconds: int = Field(default=15, description="HTTP timeout for catalog downloads")

    # Lookup cache
    cache_ttl_seconds: int = Field(default=300, description="Cache TTL in seconds")
    max_cache_size: int = Field(default=1000, description="Maximum cache size")

    # Fan-out
    max_concurrent_lookups: int = Field(
        default=0,
        ge=0,
        description="Max in-flight denom lookups per batch (0 = unbounded)",
    )

    @property
    def has_token_list_url(self) -> bool:
        return bool(self.token_list_url)


# Global settings instance
settings = Settings()

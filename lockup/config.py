"""Runtime configuration for the lockup service, read from LOCKUP_* environment variables."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import Variant

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LOCKUP_", env_file=".env", case_sensitive=False)

    variant: Variant = Variant.PRIMARY

    # Accounts
    owner_address: str = "0xowner"
    treasury_address: str = "0xtreasury"
    funding_asset_address: str = "0xusdt"
    reward_pool_address: str = "lockup:reward-pool"

    # Token metadata
    token_name: str = "Lockup Token"
    token_symbol: str = "LCK"
    token_decimals: int = 18
    funding_symbol: str = "USDT"

    # Sale
    min_contribution: int = 100
    token_price: int = 1
    total_supply_cap: int = 1_000_000_000
    reward_reserve: int = 100_000_000
    sale_active: bool = True

    # API
    cors_origins: list[str] = ["*"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("treasury_address", "funding_asset_address", "owner_address", mode="before")
    @classmethod
    def strip_address(cls, v):
        return v.strip() if isinstance(v, str) else v


@lru_cache
def get_settings() -> Settings:
    return Settings()

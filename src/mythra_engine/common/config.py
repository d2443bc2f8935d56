"""Mythra-Engine configuration via pydantic-settings."""

import warnings
from decimal import Decimal
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

_INSECURE_DEFAULTS = {
    "api_key": "insecure-admin-key-change-me",
}


class MythraSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="MYTHRA_")

    environment: str = "development"

    # Database
    db_url: str = "sqlite+aiosqlite:///./data/mythra.db"

    # API
    api_title: str = "Mythra-Engine"
    api_version: str = "0.1.0"
    api_key: str = "insecure-admin-key-change-me"
    host: str = "0.0.0.0"
    port: int = 8080
    api_prefix: str = ""
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8000"]
    log_level: str = "INFO"

    # Payouts
    roi_decimal_places: int = 6  # lamport-scale ledger precision
    default_investor_share_percent: Decimal = Decimal("20")
    platform_fee_percent: Decimal = Decimal("5")

    # Lifecycle policy
    allow_voting_without_investors: bool = False

    # Ledger gateway; empty url selects the in-process simulated ledger
    ledger_url: str = ""
    ledger_token: str = ""
    ledger_timeout: float = 30.0

    def validate_for_production(self) -> None:
        """Raise if insecure defaults are used in non-development environments."""
        insecure_fields = [
            field
            for field, default in _INSECURE_DEFAULTS.items()
            if getattr(self, field) == default
        ]

        if self.environment != "development" and insecure_fields:
            env_vars = ", ".join(f"MYTHRA_{f.upper()}" for f in insecure_fields)
            raise RuntimeError(
                f"Insecure default values detected in '{self.environment}' environment. "
                f"Set these environment variables to secure values: {env_vars}."
            )

        if insecure_fields:
            warnings.warn(
                "Using insecure default admin key - set MYTHRA_API_KEY for production",
                UserWarning,
                stacklevel=2,
            )


@lru_cache
def get_settings() -> MythraSettings:
    settings = MythraSettings()
    settings.validate_for_production()
    return settings

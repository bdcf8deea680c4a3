"""Credentials and endpoints for the external flight and schedule APIs."""

from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from flight_finder_core.errors import ConfigurationError


class AmadeusSettings(BaseSettings):
    """Amadeus Self-Service API settings (``AMADEUS_*`` environment variables)."""

    model_config = SettingsConfigDict(
        env_prefix="AMADEUS_", env_file=".env", extra="ignore"
    )

    client_id: str = ""
    client_secret: str = ""
    base_url: str = "https://test.api.amadeus.com"
    timeout: float = 30.0
    currency: str = "EUR"

    @field_validator("base_url")
    @classmethod
    def _with_scheme(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if value and not value.startswith(("http://", "https://")):
            value = f"https://{value}"
        return value

    def require(self) -> None:
        """Raise :class:`ConfigurationError` unless credentials are present."""
        missing = [
            f"AMADEUS_{name.upper()}"
            for name in ("client_id", "client_secret", "base_url")
            if not getattr(self, name)
        ]
        if missing:
            raise ConfigurationError(missing)


class SchipholSettings(BaseSettings):
    """Schiphol Public Flight API settings (``SCHIPHOL_*`` environment variables)."""

    model_config = SettingsConfigDict(
        env_prefix="SCHIPHOL_", env_file=".env", extra="ignore"
    )

    app_id: str = ""
    app_key: str = ""
    base_url: str = "https://api.schiphol.nl"
    resource_version: str = "v4"
    page_size: int = 20
    timeout: float = 30.0

    def require(self) -> None:
        missing = [
            f"SCHIPHOL_{name.upper()}"
            for name in ("app_id", "app_key")
            if not getattr(self, name)
        ]
        if missing:
            raise ConfigurationError(missing)

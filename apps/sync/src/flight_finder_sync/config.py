"""Pipeline configuration via environment variables."""

from __future__ import annotations

from datetime import timedelta

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# EU, EEA, UK, Switzerland and the Balkans / eastern neighbours served from AMS.
EUROPEAN_COUNTRY_CODES: tuple[str, ...] = (
    "AL", "AT", "BA", "BE", "BG", "CH", "CY", "CZ", "DE", "DK", "EE", "ES",
    "FI", "FO", "FR", "GB", "GI", "GR", "HR", "HU", "IE", "IS", "IT", "LT",
    "LU", "LV", "MD", "ME", "MK", "MT", "NL", "NO", "PL", "PT", "RO", "RS",
    "SE", "SI", "SK", "TR", "XK",
)  # fmt: skip


class SyncSettings(BaseSettings):
    """Settings loaded from ``SYNC_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SYNC_", env_file=".env", extra="ignore"
    )

    origin: str = "AMS"

    # Price refresh
    batch_size: int = Field(default=10, ge=1, le=100)
    week_offsets: str = "0-3"
    min_carriers: int = 2
    staleness_hours: float = 24.0
    adults: int = 1

    # Delays (seconds)
    search_delay: float = 3.0
    destination_delay: float = 1.0
    rate_limit_pause: float = 10.0
    page_delay: float = 0.5
    enrichment_delay: float = 0.5

    # Destination discovery (ISO weekday numbers, Monday=0)
    discovery_weekdays: list[int] = Field(default_factory=lambda: [3, 4, 5])
    page_ceiling: int = 50
    region_country_codes: list[str] = Field(
        default_factory=lambda: list(EUROPEAN_COUNTRY_CODES)
    )

    # Datastore
    database_url: str = "postgresql+asyncpg://localhost:5432/flight_finder"

    # Celery
    celery_broker_url: str = "redis://localhost:6379/1"
    celery_result_backend: str = "redis://localhost:6379/2"

    @field_validator("origin")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def staleness(self) -> timedelta:
        return timedelta(hours=self.staleness_hours)


settings = SyncSettings()

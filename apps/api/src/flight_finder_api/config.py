"""API configuration via environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

from flight_finder_core.errors import ConfigurationError


class ApiSettings(BaseSettings):
    """Application settings loaded from environment / .env file."""

    database_url: str = "postgresql+asyncpg://localhost:5432/flight_finder"
    redis_url: str = "redis://localhost:6379/0"
    cors_origins: list[str] = ["http://localhost:5173"]

    # Tokens are issued by the external identity service and only verified here.
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    jwt_audience: str = "authenticated"
    service_role: str = "service_role"

    # Fernet key for traveler contact columns
    booking_encryption_key: str = ""

    # Cache TTLs in seconds
    cached_prices_ttl: int = 300  # 5 min
    airports_cache_ttl: int = 3600  # 1 hour
    status_cache_ttl: int = 60

    # Celery
    celery_broker_url: str = "redis://localhost:6379/1"
    celery_result_backend: str = "redis://localhost:6379/2"

    # Booking
    sandbox_error_signatures: list[str] = ["38189", "Internal error"]
    booking_remark: str = "BOOKING FROM WEEKEND FLIGHT FINDER"
    company_name: str = "WEEKEND FLIGHT FINDER"

    # Live search
    popular_destinations: list[str] = [
        "PAR", "BCN", "ROM", "LON", "AMS", "BER", "MAD", "VIE",
        "PRG", "DUB", "LIS", "ATH", "IST", "CPH", "STO",
    ]  # fmt: skip
    anywhere_fanout: int = 10
    anywhere_offers_per_destination: int = 5
    anywhere_result_limit: int = 50

    model_config = SettingsConfigDict(
        env_prefix="API_", env_file=".env", extra="ignore"
    )

    def require_auth(self) -> None:
        if not self.jwt_secret:
            raise ConfigurationError("API_JWT_SECRET")


settings = ApiSettings()

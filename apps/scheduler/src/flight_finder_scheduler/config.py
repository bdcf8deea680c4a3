"""Scheduler configuration via environment variables."""

from pydantic_settings import BaseSettings


class SchedulerSettings(BaseSettings):
    """Settings loaded from environment variables."""

    model_config = {"env_prefix": "SCHEDULER_", "env_file": ".env", "extra": "ignore"}

    # Celery
    celery_broker_url: str = "redis://localhost:6379/1"
    celery_result_backend: str = "redis://localhost:6379/2"

    # Price refresh: one batch per tick inside the nightly window (UTC)
    refresh_hours: str = "3-5"
    refresh_every_minutes: int = 15
    refresh_batch_size: int = 10

    # Destination discovery (weekly)
    discovery_day: str = "mon"
    discovery_hour: int = 2


scheduler_settings = SchedulerSettings()

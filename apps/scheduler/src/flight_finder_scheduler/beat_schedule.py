"""Celery Beat schedule for the price-cache pipelines."""

from __future__ import annotations

from typing import TYPE_CHECKING

from celery.schedules import crontab

from .config import scheduler_settings

if TYPE_CHECKING:
    from .config import SchedulerSettings

REFRESH_TASK = "flight_finder_sync.tasks.refresh_prices"
DISCOVERY_TASK = "flight_finder_sync.tasks.discover_destinations"


def build_beat_schedule(config: SchedulerSettings | None = None) -> dict:
    """Build the complete Celery Beat schedule.

    Each refresh tick processes one batch of stale destinations; repeated
    ticks inside the window walk the whole list, after which further ticks
    find nothing stale and return immediately.
    """
    config = config or scheduler_settings
    return {
        "refresh-prices": {
            "task": REFRESH_TASK,
            "schedule": crontab(
                minute=f"*/{config.refresh_every_minutes}",
                hour=config.refresh_hours,
            ),
            "kwargs": {"batch_size": config.refresh_batch_size},
            "options": {"queue": "sync"},
        },
        "discover-destinations": {
            "task": DISCOVERY_TASK,
            "schedule": crontab(
                minute=0,
                hour=config.discovery_hour,
                day_of_week=config.discovery_day,
            ),
            "options": {"queue": "sync"},
        },
    }

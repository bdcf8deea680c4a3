"""Celery tasks for the sync pipelines."""

from __future__ import annotations

import asyncio
import logging

from flight_finder_core.weekends import parse_week_offsets

from .celery_app import app
from .runner import run_discovery, run_refresh

logger = logging.getLogger(__name__)


@app.task(name="flight_finder_sync.tasks.refresh_prices")
def refresh_prices(
    batch_size: int | None = None,
    week_offsets: str | None = None,
    offset_destinations: int = 0,
) -> dict:
    """Refresh one batch of stale destinations in the price cache."""
    offsets = parse_week_offsets(week_offsets) if week_offsets else None
    result = asyncio.run(
        run_refresh(batch_size, offsets, offset_destinations=offset_destinations)
    )
    logger.info("refresh_prices: %s", result.message)
    return result.model_dump(mode="json")


@app.task(name="flight_finder_sync.tasks.discover_destinations")
def discover_destinations() -> dict:
    """Rebuild the destination list from the origin's departures."""
    result = asyncio.run(run_discovery())
    logger.info("discover_destinations: %s", result.message)
    return result.model_dump(mode="json")

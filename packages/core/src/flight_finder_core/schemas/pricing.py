"""Price-cache and pipeline result schemas."""

from __future__ import annotations

from datetime import date  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field

from .base import CamelModel
from .enums import WeekendType  # noqa: TC001


class WeekendCombination(BaseModel):
    """One departure/return pair to sample."""

    model_config = ConfigDict(frozen=True)

    departure_date: date
    return_date: date
    weekend_type: WeekendType


class BatchResult(CamelModel):
    """Outcome of one price refresh invocation."""

    processed: int = 0
    remaining: int = 0
    prices_saved: int = 0
    errors: int = 0
    rate_limited: int = 0
    completed: bool = False
    week_offsets: list[int] = Field(default_factory=list)
    message: str = ""


class SyncResult(CamelModel):
    """Outcome of one destination discovery run."""

    dates_scanned: int = 0
    pages_fetched: int = 0
    destinations_found: int = 0
    destinations_enriched: int = 0
    destinations_saved: int = 0
    skipped_outside_region: int = 0
    errors: int = 0
    rate_limited: bool = False
    message: str = ""


class CachedPriceQuery(CamelModel):
    """Filters accepted by the cached-price read path."""

    departure_date: date
    return_date: date
    max_price: float | None = Field(default=None, gt=0)
    destination_code: str | None = Field(
        default=None, min_length=3, max_length=3, pattern=r"^[A-Z]{3}$"
    )

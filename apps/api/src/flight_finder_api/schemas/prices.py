"""Cached price schemas."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import Any

from pydantic import Field

from flight_finder_core.schemas import CamelModel


class CachedPricesResponse(CamelModel):
    """Cached rows reshaped into flight-offer documents, cheapest first."""

    data: list[dict[str, Any]]
    message: str = ""


class WeekendTypeCount(CamelModel):
    weekend_type: str
    count: int


class PriceCacheStatus(CamelModel):
    total_prices: int
    destinations: int
    last_updated_at: datetime | None = None
    weekend_types: list[WeekendTypeCount] = Field(default_factory=list)

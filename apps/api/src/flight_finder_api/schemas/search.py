"""Live search request / response schemas."""

from __future__ import annotations

from datetime import date  # noqa: TC003
from typing import Any

from pydantic import Field, model_validator

from flight_finder_core.schemas import CamelModel, TimeOfDay

_IATA = r"^[A-Z]{3}$"


class FlightSearchRequest(CamelModel):
    """Live offer search.  Without a destination the popular cities are searched."""

    origin: str = Field(pattern=_IATA, description="IATA airport or city code")
    destination: str | None = Field(default=None, pattern=_IATA)
    departure_date: date
    return_date: date | None = None
    max_price: float | None = Field(default=None, gt=0)
    adults: int = Field(default=1, ge=1, le=9)
    departure_time_preference: TimeOfDay = TimeOfDay.ANY
    arrival_time_preference: TimeOfDay = TimeOfDay.ANY

    @model_validator(mode="after")
    def _return_after_departure(self) -> FlightSearchRequest:
        if self.return_date is not None and self.return_date < self.departure_date:
            raise ValueError("returnDate must not be before departureDate")
        return self


class InspirationSearchRequest(CamelModel):
    origin: str = Field(pattern=_IATA)
    departure_date: date
    return_date: date | None = None
    max_price: float | None = Field(default=None, gt=0)


class OffersResponse(CamelModel):
    """``data`` holds raw offer documents exactly as the flight API shaped them."""

    data: list[dict[str, Any]]
    meta: dict[str, Any] = Field(default_factory=dict)
    message: str = ""

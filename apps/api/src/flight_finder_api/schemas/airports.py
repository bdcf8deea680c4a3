"""Airport and destination lookup schemas."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from flight_finder_core.schemas import CamelModel


class AirportQuery(CamelModel):
    query: str | None = Field(default=None, max_length=50)
    limit: int | None = Field(default=None, ge=1, le=200)


class AirportOut(CamelModel):
    iata_code: str
    name: str
    city: str
    country: str


class AirportListResponse(CamelModel):
    data: list[AirportOut]


class LocationQuery(CamelModel):
    query: str | None = Field(default=None, max_length=50)


class LocationSearchResponse(CamelModel):
    """Amadeus location documents, passed through unchanged."""

    data: list[dict[str, Any]]


class ClosestAirportRequest(CamelModel):
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)


class UserLocation(CamelModel):
    lat: float
    lon: float


class ClosestAirportResponse(CamelModel):
    airport: AirportOut
    distance: int | None = None
    user_location: UserLocation | None = None
    error: str | None = None


class DestinationQuery(CamelModel):
    query: str | None = Field(default=None, max_length=50)


class DestinationOut(CamelModel):
    code: str
    city: str
    country: str


class DestinationListResponse(CamelModel):
    data: list[DestinationOut]

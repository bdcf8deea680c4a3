"""Airport lookup router: static autocomplete, live location search, nearest airport."""

from __future__ import annotations

import logging
from typing import Annotated

import redis.asyncio as redis  # noqa: TC002
from fastapi import APIRouter, Depends

from flight_finder_core.airports import (
    EUROPEAN_AIRPORTS,
    Airport,
    closest_airport,
    search_airports,
)
from flight_finder_gds.amadeus import AmadeusClient  # noqa: TC001

from ..cache.cache_keys import airport_search_key, location_search_key
from ..cache.redis_client import cache_get, cache_set
from ..config import ApiSettings  # noqa: TC001
from ..dependencies import get_amadeus, get_redis, get_settings
from ..schemas.airports import (
    AirportListResponse,
    AirportOut,
    AirportQuery,
    ClosestAirportRequest,
    ClosestAirportResponse,
    LocationQuery,
    LocationSearchResponse,
    UserLocation,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["airports"])

RedisDep = Annotated[redis.Redis, Depends(get_redis)]
SettingsDep = Annotated[ApiSettings, Depends(get_settings)]
AmadeusDep = Annotated[AmadeusClient, Depends(get_amadeus)]

MIN_LOCATION_QUERY = 2
DEFAULT_AIRPORT_CODE = "LHR"


def _airport_out(ap: Airport) -> AirportOut:
    return AirportOut(
        iata_code=ap.iata_code, name=ap.name, city=ap.city, country=ap.country
    )


@router.post("/get-airports", response_model=AirportListResponse)
async def get_airports(
    request: AirportQuery,
    redis_conn: RedisDep,
    config: SettingsDep,
) -> AirportListResponse:
    """European airports matching the query; no authentication required."""
    key = airport_search_key(f"{(request.query or '').strip().lower()}:{request.limit}")
    cached = await cache_get(redis_conn, key)
    if cached is not None:
        return AirportListResponse.model_validate(cached)

    response = AirportListResponse(
        data=[_airport_out(ap) for ap in search_airports(request.query, request.limit)]
    )
    await cache_set(
        redis_conn, key, response.model_dump(mode="json"), config.airports_cache_ttl
    )
    return response


@router.post("/search-airports", response_model=LocationSearchResponse)
async def search_locations(
    request: LocationQuery,
    amadeus: AmadeusDep,
    redis_conn: RedisDep,
    config: SettingsDep,
) -> LocationSearchResponse:
    """Airports and cities worldwide from the flight API's location index."""
    keyword = (request.query or "").strip()
    if len(keyword) < MIN_LOCATION_QUERY:
        return LocationSearchResponse(data=[])

    key = location_search_key(keyword.lower())
    cached = await cache_get(redis_conn, key)
    if cached is not None:
        return LocationSearchResponse.model_validate(cached)

    response = LocationSearchResponse(data=await amadeus.search_locations(keyword))
    logger.info("Location search %r: %d results", keyword, len(response.data))
    await cache_set(
        redis_conn, key, response.model_dump(mode="json"), config.airports_cache_ttl
    )
    return response


@router.post("/get-closest-airport", response_model=ClosestAirportResponse)
async def get_closest_airport(request: ClosestAirportRequest) -> ClosestAirportResponse:
    """Nearest catalogue airport to the given coordinates.

    Without a full coordinate pair the default airport is returned with an
    explanatory ``error`` and no distance.
    """
    if request.latitude is None or request.longitude is None:
        default = next(
            ap for ap in EUROPEAN_AIRPORTS if ap.iata_code == DEFAULT_AIRPORT_CODE
        )
        return ClosestAirportResponse(
            airport=_airport_out(default),
            error="Could not detect location, using default airport",
        )

    airport, distance = closest_airport(request.latitude, request.longitude)
    logger.info(
        "Closest airport to (%.4f, %.4f): %s, %.0f km",
        request.latitude,
        request.longitude,
        airport.iata_code,
        distance,
    )
    return ClosestAirportResponse(
        airport=_airport_out(airport),
        distance=round(distance),
        user_location=UserLocation(lat=request.latitude, lon=request.longitude),
    )

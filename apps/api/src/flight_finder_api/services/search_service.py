"""Live flight search against the flight API."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from flight_finder_core.errors import (
    ConfigurationError,
    QueryError,
    UpstreamAuthError,
)
from flight_finder_core.schemas import TimeOfDay
from flight_finder_db.models import Destination
from flight_finder_gds.amadeus.offers import (
    first_departure,
    last_arrival,
    offer_price,
    sort_by_price,
)

from ..schemas.search import OffersResponse

if TYPE_CHECKING:
    from datetime import date

    from sqlalchemy.ext.asyncio import AsyncSession

    from ..config import ApiSettings
    from ..schemas.search import FlightSearchRequest, InspirationSearchRequest

logger = logging.getLogger(__name__)

# Local-hour buckets, [start, end).
TIME_BUCKETS: dict[TimeOfDay, tuple[int, int]] = {
    TimeOfDay.MORNING: (6, 12),
    TimeOfDay.AFTERNOON: (12, 18),
    TimeOfDay.EVENING: (18, 24),
}


class FlightSearchApi(Protocol):
    async def search_offers(
        self,
        origin: str,
        destination: str,
        departure_date: date,
        return_date: date | None = None,
        *,
        adults: int = 1,
        max_price: float | None = None,
        max_results: int = 50,
    ) -> list[dict[str, Any]]: ...

    async def search_inspiration(
        self,
        origin: str,
        departure_date: date,
        return_date: date | None = None,
        *,
        max_price: float | None = None,
    ) -> list[dict[str, Any]]: ...


def in_bucket(hour: int, preference: TimeOfDay) -> bool:
    if preference is TimeOfDay.ANY:
        return True
    start, end = TIME_BUCKETS[preference]
    return start <= hour < end


def filter_by_time(
    offers: list[dict[str, Any]],
    departure: TimeOfDay = TimeOfDay.ANY,
    arrival: TimeOfDay = TimeOfDay.ANY,
) -> list[dict[str, Any]]:
    """Keep offers whose first departure and last arrival fall in the buckets."""
    if departure is TimeOfDay.ANY and arrival is TimeOfDay.ANY:
        return offers
    kept = []
    for offer in offers:
        dep = first_departure(offer)
        arr = last_arrival(offer)
        if departure is not TimeOfDay.ANY and (
            dep is None or not in_bucket(dep.hour, departure)
        ):
            continue
        if arrival is not TimeOfDay.ANY and (
            arr is None or not in_bucket(arr.hour, arrival)
        ):
            continue
        kept.append(offer)
    return kept


def _priced(offers: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Drop offers without a readable, non-negative price; sort the rest."""
    usable = []
    for offer in offers:
        price = offer_price(offer)
        if price is not None and price >= 0:
            usable.append(offer)
    return sort_by_price(usable)


def _is_fatal(exc: BaseException) -> bool:
    return isinstance(exc, ConfigurationError | UpstreamAuthError)


class SearchService:
    """Single-route and "anywhere" searches plus destination inspiration."""

    def __init__(
        self,
        api: FlightSearchApi,
        settings: ApiSettings,
        db: AsyncSession | None = None,
    ) -> None:
        self._api = api
        self._settings = settings
        self._db = db

    async def search_flights(self, request: FlightSearchRequest) -> OffersResponse:
        if request.destination:
            offers = await self._api.search_offers(
                request.origin,
                request.destination,
                request.departure_date,
                request.return_date,
                adults=request.adults,
                max_price=request.max_price,
            )
            offers = _priced(offers)
            meta: dict[str, Any] = {"destinationsSearched": 1}
        else:
            offers, searched = await self._search_anywhere(request)
            meta = {"destinationsSearched": searched}

        offers = filter_by_time(
            offers,
            request.departure_time_preference,
            request.arrival_time_preference,
        )
        meta["count"] = len(offers)
        return OffersResponse(data=offers, meta=meta)

    async def _search_anywhere(
        self, request: FlightSearchRequest
    ) -> tuple[list[dict[str, Any]], int]:
        """Search the popular destinations concurrently; failed routes are skipped."""
        targets = [
            code
            for code in self._settings.popular_destinations
            if code != request.origin
        ][: self._settings.anywhere_fanout]
        logger.info(
            "Searching %s to %d destinations", request.origin, len(targets)
        )

        results = await asyncio.gather(
            *(
                self._api.search_offers(
                    request.origin,
                    code,
                    request.departure_date,
                    request.return_date,
                    adults=request.adults,
                    max_price=request.max_price,
                    max_results=self._settings.anywhere_offers_per_destination,
                )
                for code in targets
            ),
            return_exceptions=True,
        )

        merged: list[dict[str, Any]] = []
        for code, result in zip(targets, results, strict=True):
            if isinstance(result, Exception):
                if _is_fatal(result):
                    raise result
                logger.warning(
                    "Search %s->%s failed: %s", request.origin, code, result
                )
                continue
            if isinstance(result, BaseException):
                raise result
            merged.extend(result)

        offers = _priced(merged)[: self._settings.anywhere_result_limit]
        logger.info(
            "Found %d offers across %d destinations", len(offers), len(targets)
        )
        return offers, len(targets)

    async def search_inspiration(
        self, request: InspirationSearchRequest
    ) -> OffersResponse:
        """Cheapest destinations from the origin, annotated with city and country."""
        items = await self._api.search_inspiration(
            request.origin,
            request.departure_date,
            request.return_date,
            max_price=request.max_price,
        )
        places = await self._destination_names(
            {item.get("destination") for item in items if item.get("destination")}
        )
        enriched = []
        for item in items:
            city, country = places.get(item.get("destination"), (None, None))
            enriched.append(
                {**item, "destinationCity": city, "destinationCountry": country}
            )
        enriched = sort_by_price(enriched)
        return OffersResponse(
            data=enriched,
            message=f"Found {len(enriched)} destinations from {request.origin}",
        )

    async def _destination_names(
        self, codes: set[str]
    ) -> dict[str, tuple[str, str]]:
        if not codes or self._db is None:
            return {}
        try:
            result = await self._db.execute(
                select(Destination.code, Destination.city, Destination.country).where(
                    Destination.code.in_(codes)
                )
            )
        except SQLAlchemyError as exc:
            raise QueryError(f"Destination lookup failed: {exc}") from exc
        return {code: (city, country) for code, city, country in result.all()}

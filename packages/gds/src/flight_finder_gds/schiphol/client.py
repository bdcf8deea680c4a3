"""Schiphol Public Flight API client.

Only the departures listing is used: it tells us which destinations are
served from the airport on a given day and by which operating carriers.

API portal: https://developer.schiphol.nl
Auth: ``app_id`` / ``app_key`` request headers
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import httpx

from flight_finder_core.errors import NetworkError, RateLimited, UpstreamError

from ..config import SchipholSettings

if TYPE_CHECKING:
    from datetime import date

logger = logging.getLogger(__name__)

SERVICE = "schiphol"


@dataclass(frozen=True)
class ScheduledFlight:
    flight_name: str
    carrier_code: str
    destination_codes: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class DeparturesPage:
    flights: list[ScheduledFlight]
    is_last_page: bool


def parse_flight(raw: dict[str, Any]) -> ScheduledFlight | None:
    """Return the operating flight, or ``None`` for codeshare duplicates."""
    name = raw.get("flightName") or ""
    main = raw.get("mainFlight") or name
    if name != main:
        return None
    carrier = raw.get("prefixIATA") or ""
    destinations = (raw.get("route") or {}).get("destinations") or []
    if not carrier or not destinations:
        return None
    return ScheduledFlight(
        flight_name=name, carrier_code=carrier, destination_codes=list(destinations)
    )


class SchipholClient:
    """Async HTTP client for departures listed by the Schiphol Public Flight API."""

    def __init__(
        self,
        settings: SchipholSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or SchipholSettings()
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    async def _ensure_http(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(
                base_url=self.settings.base_url,
                timeout=httpx.Timeout(self.settings.timeout, connect=10),
                transport=self._transport,
                headers={
                    "app_id": self.settings.app_id,
                    "app_key": self.settings.app_key,
                    "ResourceVersion": self.settings.resource_version,
                    "Accept": "application/json",
                },
            )
        return self._http

    async def close(self) -> None:
        if self._http and not self._http.is_closed:
            await self._http.aclose()
        self._http = None

    async def __aenter__(self) -> SchipholClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def get_departures(self, schedule_date: date, page: int = 0) -> DeparturesPage:
        """Fetch one page of departures scheduled on ``schedule_date``.

        A page shorter than the configured page size, or an empty 204
        response, marks the end of the listing.
        """
        self.settings.require()
        http = await self._ensure_http()
        try:
            resp = await http.get(
                "/public-flights/flights",
                params={
                    "flightDirection": "D",
                    "scheduleDate": schedule_date.isoformat(),
                    "page": page,
                    "includedelays": "false",
                    "sort": "+scheduleTime",
                },
            )
        except httpx.TransportError as exc:
            raise NetworkError(f"Schiphol departures request failed: {exc}") from exc

        if resp.status_code == 204:
            return DeparturesPage(flights=[], is_last_page=True)
        if resp.status_code == 429:
            raise RateLimited(resp.text, service=SERVICE)
        if not resp.is_success:
            raise UpstreamError(resp.status_code, resp.text, service=SERVICE)

        raw_flights = resp.json().get("flights") or []
        flights = [f for f in (parse_flight(raw) for raw in raw_flights) if f]
        logger.debug(
            "Schiphol %s page %d: %d records, %d operating flights",
            schedule_date,
            page,
            len(raw_flights),
            len(flights),
        )
        return DeparturesPage(
            flights=flights,
            is_last_page=len(raw_flights) < self.settings.page_size,
        )

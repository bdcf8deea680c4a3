"""Destination discovery: which airports are served from the origin, and by whom.

Walks the origin's scheduled departures on the next few target weekdays,
aggregates destination codes with their operating carriers, resolves each
new code to a city and country, keeps the ones inside the region allow-list
and upserts them.  Every external call is awaited sequentially with a fixed
delay in between.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Protocol

from flight_finder_core.errors import (
    ConfigurationError,
    NetworkError,
    RateLimited,
    UpstreamAuthError,
    UpstreamError,
)
from flight_finder_core.schemas import SyncResult
from flight_finder_core.weekends import upcoming_weekdays

from .store import DestinationRecord

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from datetime import date

    from flight_finder_gds.amadeus import Location
    from flight_finder_gds.schiphol import DeparturesPage

    from ..config import SyncSettings
    from .store import PriceCacheStore

logger = logging.getLogger(__name__)


class ScheduleSource(Protocol):
    async def get_departures(
        self, schedule_date: date, page: int = 0
    ) -> DeparturesPage: ...


class LocationSource(Protocol):
    async def lookup_location(self, iata_code: str) -> Location | None: ...


def is_credential_failure(exc: BaseException) -> bool:
    """Missing or rejected credentials abort the whole run."""
    if isinstance(exc, ConfigurationError | UpstreamAuthError):
        return True
    return isinstance(exc, UpstreamError) and exc.status in (401, 403)


class DestinationDiscovery:
    """Discover destinations served from ``settings.origin``."""

    def __init__(
        self,
        schedule: ScheduleSource,
        locations: LocationSource,
        store: PriceCacheStore,
        settings: SyncSettings,
        *,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self.schedule = schedule
        self.locations = locations
        self.store = store
        self.settings = settings
        self._sleep = sleep

    async def run(self, today: date | None = None) -> SyncResult:
        result = SyncResult()
        dates = upcoming_weekdays(self.settings.discovery_weekdays, today)
        carriers: dict[str, set[str]] = defaultdict(set)

        for schedule_date in dates:
            await self._scan_date(schedule_date, carriers, result)
            result.dates_scanned += 1

        carriers.pop(self.settings.origin, None)
        result.destinations_found = len(carriers)
        logger.info(
            "Discovered %d destinations from %s over %d dates",
            len(carriers),
            self.settings.origin,
            len(dates),
        )

        records = await self._enrich(carriers, result)
        result.destinations_saved = await self.store.upsert_destinations(records)
        result.message = (
            f"Synced {result.destinations_saved} destinations from "
            f"{self.settings.origin}"
        )
        if result.rate_limited:
            result.message += " (rate limited, results are partial)"
        return result

    async def _scan_date(
        self,
        schedule_date: date,
        carriers: dict[str, set[str]],
        result: SyncResult,
    ) -> None:
        for page in range(self.settings.page_ceiling):
            if page:
                await self._sleep(self.settings.page_delay)
            try:
                departures = await self.schedule.get_departures(schedule_date, page)
            except RateLimited:
                logger.warning(
                    "Rate limited on %s page %d, skipping rest of date",
                    schedule_date,
                    page,
                )
                result.rate_limited = True
                await self._sleep(self.settings.rate_limit_pause)
                return
            except (UpstreamError, NetworkError) as exc:
                if is_credential_failure(exc):
                    raise
                logger.error(
                    "Departures %s page %d failed: %s", schedule_date, page, exc
                )
                result.errors += 1
                return

            result.pages_fetched += 1
            for flight in departures.flights:
                for code in flight.destination_codes:
                    carriers[code].add(flight.carrier_code)
            if departures.is_last_page:
                return
        logger.warning(
            "Page ceiling (%d) reached for %s",
            self.settings.page_ceiling,
            schedule_date,
        )

    async def _enrich(
        self, carriers: dict[str, set[str]], result: SyncResult
    ) -> list[DestinationRecord]:
        known = {d.code: d for d in await self.store.list_destinations()}
        allowed = set(self.settings.region_country_codes)
        records: list[DestinationRecord] = []
        looked_up = 0

        for code in sorted(carriers):
            existing = known.get(code)
            if existing is not None and existing.country_code:
                record = DestinationRecord(
                    code=code,
                    city=existing.city,
                    country=existing.country,
                    country_code=existing.country_code,
                )
            else:
                if looked_up:
                    await self._sleep(self.settings.enrichment_delay)
                looked_up += 1
                try:
                    location = await self.locations.lookup_location(code)
                except RateLimited:
                    logger.warning(
                        "Rate limited during enrichment at %s, keeping %d records",
                        code,
                        len(records),
                    )
                    result.rate_limited = True
                    break
                except (UpstreamError, NetworkError) as exc:
                    if is_credential_failure(exc):
                        raise
                    logger.error("Location lookup for %s failed: %s", code, exc)
                    result.errors += 1
                    continue
                if location is None:
                    logger.warning("No location found for %s, skipping", code)
                    result.errors += 1
                    continue
                result.destinations_enriched += 1
                record = DestinationRecord(
                    code=code,
                    city=location.city,
                    country=location.country,
                    country_code=location.country_code,
                )

            if record.country_code not in allowed:
                result.skipped_outside_region += 1
                continue
            record.carriers = sorted(carriers[code])
            records.append(record)
        return records

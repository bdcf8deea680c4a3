"""Incremental refresh of the weekend price cache.

Each invocation handles a bounded batch of stale destinations.  Prices are
written as soon as they are fetched, and destinations with a price newer
than the staleness window are skipped, so calling :meth:`PriceRefresh.run`
repeatedly walks through every destination and a partial run loses nothing.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol

from flight_finder_core.errors import NetworkError, RateLimited, UpstreamError
from flight_finder_core.freshness import stale_cutoff
from flight_finder_core.schemas import BatchResult
from flight_finder_core.weekends import parse_week_offsets, weekend_combinations
from flight_finder_gds.amadeus.offers import (
    offer_carriers,
    offer_currency,
    offer_price,
    sort_by_price,
)

from .discovery import is_credential_failure
from .store import PriceRecord

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence
    from datetime import date

    from flight_finder_core.schemas import WeekendCombination

    from ..config import SyncSettings
    from .store import DestinationRecord, PriceCacheStore

logger = logging.getLogger(__name__)


class OfferSource(Protocol):
    async def search_offers(
        self,
        origin: str,
        destination: str,
        departure_date: date,
        return_date: date | None = None,
        *,
        adults: int = 1,
        max_results: int = 50,
    ) -> list[dict[str, Any]]: ...


def select_candidates(
    destinations: Sequence[DestinationRecord],
    fresh_codes: set[str],
    min_carriers: int,
) -> list[DestinationRecord]:
    """Multi-carrier destinations without a fresh price, most carriers first."""
    candidates = [
        d
        for d in destinations
        if len(set(d.carriers)) >= min_carriers and d.code not in fresh_codes
    ]
    # Stable sort keeps insertion order among equal carrier counts.
    candidates.sort(key=lambda d: len(set(d.carriers)), reverse=True)
    return candidates


class PriceRefresh:
    """Refresh cached weekend prices for the stalest multi-carrier destinations."""

    def __init__(
        self,
        offers: OfferSource,
        store: PriceCacheStore,
        settings: SyncSettings,
        *,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.offers = offers
        self.store = store
        self.settings = settings
        self._sleep = sleep
        self._clock = clock or (lambda: datetime.now(UTC))

    async def run(
        self,
        batch_size: int | None = None,
        week_offsets: Sequence[int] | None = None,
        *,
        offset_destinations: int = 0,
        today: date | None = None,
    ) -> BatchResult:
        batch_size = batch_size or self.settings.batch_size
        if week_offsets is None:
            week_offsets = parse_week_offsets(self.settings.week_offsets)
        now = self._clock()
        combos = weekend_combinations(week_offsets, today or now.date())

        destinations = await self.store.list_destinations()
        fresh = await self.store.recently_updated_codes(
            stale_cutoff(now, self.settings.staleness)
        )
        candidates = select_candidates(destinations, fresh, self.settings.min_carriers)
        batch = candidates[offset_destinations : offset_destinations + batch_size]
        logger.info(
            "Refreshing %d of %d stale destinations (%d combinations each)",
            len(batch),
            len(candidates),
            len(combos),
        )

        result = BatchResult(week_offsets=list(week_offsets))
        for index, destination in enumerate(batch):
            if index:
                await self._sleep(self.settings.destination_delay)
            await self._refresh_destination(destination, combos, result)
            result.processed += 1

        result.remaining = max(0, len(candidates) - offset_destinations - len(batch))
        result.completed = result.remaining == 0
        result.message = (
            f"Processed {result.processed} destinations, saved "
            f"{result.prices_saved} prices, {result.remaining} remaining"
        )
        logger.info(result.message)
        return result

    async def _refresh_destination(
        self,
        destination: DestinationRecord,
        combos: list[WeekendCombination],
        result: BatchResult,
    ) -> None:
        logger.info(
            "%s (%s): %d carriers",
            destination.code,
            destination.city,
            len(destination.carriers),
        )
        for index, combo in enumerate(combos):
            if index:
                await self._sleep(self.settings.search_delay)
            try:
                offers = await self.offers.search_offers(
                    self.settings.origin,
                    destination.code,
                    combo.departure_date,
                    combo.return_date,
                    adults=self.settings.adults,
                    max_results=1,
                )
            except RateLimited:
                logger.warning(
                    "Rate limited on %s %s, moving to next destination",
                    destination.code,
                    combo.weekend_type,
                )
                result.rate_limited += 1
                await self._sleep(self.settings.rate_limit_pause)
                return
            except (UpstreamError, NetworkError) as exc:
                if is_credential_failure(exc):
                    raise
                logger.error(
                    "%s %s failed: %s", destination.code, combo.weekend_type, exc
                )
                result.errors += 1
                continue

            if await self._store_cheapest(destination, combo, offers):
                result.prices_saved += 1

    async def _store_cheapest(
        self,
        destination: DestinationRecord,
        combo: WeekendCombination,
        offers: list[dict[str, Any]],
    ) -> bool:
        if not offers:
            logger.info("   %s: no flights found", combo.weekend_type)
            return False
        cheapest = sort_by_price(offers)[0]
        price = offer_price(cheapest)
        if price is None or price < 0:
            logger.warning("   %s: offer without usable price", combo.weekend_type)
            return False
        await self.store.upsert_price(
            PriceRecord(
                destination_code=destination.code,
                departure_date=combo.departure_date,
                return_date=combo.return_date,
                weekend_type=combo.weekend_type,
                price=price,
                currency=offer_currency(cheapest),
                carriers=offer_carriers(cheapest),
                flight_data=cheapest,
            ),
            now=self._clock(),
        )
        logger.info("   %s: %s %s", combo.weekend_type, price, offer_currency(cheapest))
        return True

"""Wire settings, clients and the datastore into ready-to-run pipelines.

Each run builds and disposes its own engine: worker tasks drive every run
through a fresh event loop, and pooled connections cannot outlive theirs.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from flight_finder_core.schemas import BatchResult, SyncResult
from flight_finder_db.database import make_engine, make_session_factory
from flight_finder_gds.amadeus import AmadeusClient
from flight_finder_gds.config import AmadeusSettings, SchipholSettings
from flight_finder_gds.schiphol import SchipholClient

from .config import SyncSettings
from .config import settings as default_settings
from .pipeline import DestinationDiscovery, PriceCacheStore, PriceRefresh

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Sequence

logger = logging.getLogger(__name__)


@asynccontextmanager
async def price_store(database_url: str) -> AsyncIterator[PriceCacheStore]:
    engine = make_engine(database_url)
    try:
        yield PriceCacheStore(make_session_factory(engine))
    finally:
        await engine.dispose()


async def run_refresh(
    batch_size: int | None = None,
    week_offsets: Sequence[int] | None = None,
    *,
    offset_destinations: int = 0,
    settings: SyncSettings | None = None,
    amadeus_settings: AmadeusSettings | None = None,
) -> BatchResult:
    """Run one price refresh batch.  Missing credentials fail before any work."""
    settings = settings or default_settings
    amadeus_settings = amadeus_settings or AmadeusSettings()
    amadeus_settings.require()

    async with (
        price_store(settings.database_url) as store,
        AmadeusClient(amadeus_settings) as amadeus,
    ):
        return await PriceRefresh(amadeus, store, settings).run(
            batch_size, week_offsets, offset_destinations=offset_destinations
        )


async def run_discovery(
    *,
    settings: SyncSettings | None = None,
    amadeus_settings: AmadeusSettings | None = None,
    schiphol_settings: SchipholSettings | None = None,
) -> SyncResult:
    """Run one destination discovery pass."""
    settings = settings or default_settings
    amadeus_settings = amadeus_settings or AmadeusSettings()
    schiphol_settings = schiphol_settings or SchipholSettings()
    amadeus_settings.require()
    schiphol_settings.require()

    async with (
        price_store(settings.database_url) as store,
        AmadeusClient(amadeus_settings) as amadeus,
        SchipholClient(schiphol_settings) as schiphol,
    ):
        return await DestinationDiscovery(schiphol, amadeus, store, settings).run()

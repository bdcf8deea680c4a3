"""Shared fakes and fixtures for the sync pipeline tests."""

from __future__ import annotations

from collections import defaultdict
from datetime import UTC, date, datetime, timedelta
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from flight_finder_db.models import Base
from flight_finder_gds.amadeus import Location
from flight_finder_gds.schiphol import DeparturesPage, ScheduledFlight
from flight_finder_sync.config import SyncSettings
from flight_finder_sync.pipeline import DestinationRecord, PriceCacheStore, PriceRecord

# A Monday, so next Thursday is 2026-10-22.
TODAY = date(2026, 10, 19)
NOW = datetime(2026, 10, 19, 8, 0, tzinfo=UTC)


class RecordingSleep:
    """Drop-in for ``asyncio.sleep`` that records delays instead of waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeClock:
    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


class InMemoryStore:
    """Same interface as :class:`PriceCacheStore`, backed by dicts."""

    def __init__(self, destinations: list[DestinationRecord] | None = None) -> None:
        self.destinations = {d.code: d for d in destinations or []}
        self.prices: dict[tuple[str, date, date], tuple[PriceRecord, datetime]] = {}
        self.price_writes = 0

    async def list_destinations(self) -> list[DestinationRecord]:
        return list(self.destinations.values())

    async def recently_updated_codes(self, cutoff: datetime) -> set[str]:
        return {key[0] for key, (_, at) in self.prices.items() if at > cutoff}

    async def upsert_destinations(
        self, records: list[DestinationRecord], *, now: datetime | None = None
    ) -> int:
        for record in records:
            self.destinations[record.code] = record
        return len(records)

    async def upsert_price(
        self, record: PriceRecord, *, now: datetime | None = None
    ) -> None:
        key = (record.destination_code, record.departure_date, record.return_date)
        self.prices[key] = (record, now or datetime.now(UTC))
        self.price_writes += 1


def make_offer_payload(
    price: str, carriers: tuple[str, ...] = ("KL",), **extra: Any
) -> dict:
    return {
        "type": "flight-offer",
        "id": extra.pop("id", "1"),
        "price": {"currency": "EUR", "total": price, "grandTotal": price},
        "itineraries": [
            {"segments": [{"carrierCode": c} for c in carriers]},
        ],
        **extra,
    }


class FakeOffers:
    """Scripted ``search_offers``: a per-destination list of responses."""

    def __init__(self, script: dict[str, list[Any]] | None = None) -> None:
        self.script = defaultdict(list, script or {})
        self.calls: list[tuple[str, date, date, int]] = []

    async def search_offers(
        self,
        origin: str,
        destination: str,
        departure_date: date,
        return_date: date | None = None,
        *,
        adults: int = 1,
        max_results: int = 50,
    ) -> list[dict]:
        self.calls.append((destination, departure_date, return_date, max_results))
        queue = self.script[destination]
        outcome = queue.pop(0) if queue else [make_offer_payload("99.00")]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeSchedule:
    """Scripted ``get_departures`` keyed by (date, page)."""

    def __init__(self, pages: dict[tuple[date, int], Any]) -> None:
        self.pages = pages
        self.calls: list[tuple[date, int]] = []

    async def get_departures(
        self, schedule_date: date, page: int = 0
    ) -> DeparturesPage:
        self.calls.append((schedule_date, page))
        outcome = self.pages.get(
            (schedule_date, page), DeparturesPage(flights=[], is_last_page=True)
        )
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeLocations:
    def __init__(self, locations: dict[str, Any]) -> None:
        self.locations = locations
        self.calls: list[str] = []

    async def lookup_location(self, iata_code: str) -> Location | None:
        self.calls.append(iata_code)
        outcome = self.locations.get(iata_code)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def flight(carrier: str, *destinations: str) -> ScheduledFlight:
    return ScheduledFlight(
        flight_name=f"{carrier}100",
        carrier_code=carrier,
        destination_codes=list(destinations),
    )


def destination(
    code: str, *carriers: str, country_code: str = "ES"
) -> DestinationRecord:
    return DestinationRecord(
        code=code,
        city=code.title(),
        country="Spain",
        country_code=country_code,
        carriers=list(carriers),
    )


@pytest.fixture
def sync_settings() -> SyncSettings:
    return SyncSettings(
        _env_file=None,
        origin="AMS",
        batch_size=2,
        week_offsets="0",
        search_delay=3.0,
        destination_delay=1.0,
        rate_limit_pause=10.0,
        page_delay=0.5,
        enrichment_delay=0.25,
    )


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def sql_store(session_factory) -> PriceCacheStore:
    return PriceCacheStore(session_factory)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def make_offer():
    return make_offer_payload


@pytest.fixture
def make_destination():
    return destination


@pytest.fixture
def make_flight():
    return flight


@pytest.fixture
def make_store():
    return InMemoryStore


@pytest.fixture
def fake_offers():
    return FakeOffers


@pytest.fixture
def fake_schedule():
    return FakeSchedule


@pytest.fixture
def fake_locations():
    return FakeLocations

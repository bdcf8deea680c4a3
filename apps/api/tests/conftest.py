"""Shared fakes and fixtures for the API tests."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime
from typing import Any

import httpx
import jwt
import pytest
from cryptography.fernet import Fernet
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from flight_finder_api.config import ApiSettings
from flight_finder_api.dependencies import (
    get_amadeus,
    get_db,
    get_redis,
    get_settings,
    get_task_dispatcher,
)
from flight_finder_api.main import create_app
from flight_finder_api.services.booking_store import ContactCipher
from flight_finder_core.schemas import ContactInput, TravelerInput
from flight_finder_db.models import Base
from flight_finder_gds.amadeus import CreatedOrder

JWT_SECRET = "test-secret"
NOW = datetime(2026, 10, 19, 8, 0, tzinfo=UTC)
USER_ID = uuid.UUID("0f8fad5b-d9cb-469f-a165-70867728950e")


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeGateway:
    """Scripted flight API.

    ``orders`` is consumed one outcome per ``create_order`` call; the last
    outcome repeats.  Exceptions in either script are raised.
    """

    def __init__(
        self,
        confirm: dict[str, Any] | Exception | None = None,
        orders: list[Any] | None = None,
    ) -> None:
        self.confirm = confirm
        self.orders = list(orders or [CreatedOrder("ORDER-1", "AB1234", {"id": "1"})])
        self.confirm_calls: list[dict[str, Any]] = []
        self.order_calls: list[dict[str, Any]] = []
        self.get_order_calls: list[str] = []
        self.locations: list[dict[str, Any]] = []
        self.location_calls: list[str] = []

    async def confirm_price(self, offer: dict[str, Any]) -> dict[str, Any]:
        self.confirm_calls.append(offer)
        if isinstance(self.confirm, Exception):
            raise self.confirm
        return self.confirm if self.confirm is not None else offer

    async def create_order(
        self,
        offer: dict[str, Any],
        travelers: list[dict[str, Any]],
        contacts: list[dict[str, Any]],
        *,
        remark: str = "",
    ) -> CreatedOrder:
        self.order_calls.append(
            {
                "offer": offer,
                "travelers": travelers,
                "contacts": contacts,
                "remark": remark,
            }
        )
        outcome = self.orders.pop(0) if len(self.orders) > 1 else self.orders[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def get_order(self, order_id: str) -> dict[str, Any]:
        self.get_order_calls.append(order_id)
        return {"id": order_id, "type": "flight-order"}

    async def search_locations(self, keyword: str) -> list[dict[str, Any]]:
        self.location_calls.append(keyword)
        return self.locations


class FakeSearchApi:
    """``search_offers`` keyed by destination; ``search_inspiration`` returns a list."""

    def __init__(
        self,
        offers: dict[str, Any] | None = None,
        inspiration: list[dict[str, Any]] | None = None,
    ) -> None:
        self.offers = offers or {}
        self.inspiration = inspiration or []
        self.calls: list[dict[str, Any]] = []

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
    ) -> list[dict[str, Any]]:
        self.calls.append(
            {
                "origin": origin,
                "destination": destination,
                "max_price": max_price,
                "max_results": max_results,
            }
        )
        outcome = self.offers.get(destination, [])
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def search_inspiration(
        self,
        origin: str,
        departure_date: date,
        return_date: date | None = None,
        *,
        max_price: float | None = None,
    ) -> list[dict[str, Any]]:
        return self.inspiration


class FakeRedis:
    """Dict-backed stand-in for the two Redis calls the cache helpers make."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key: str) -> str | None:
        return self.store.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> None:
        self.store[key] = value
        self.ttls[key] = ex


class FakeDispatcher:
    def __init__(self) -> None:
        self.sent: list[tuple[str, dict[str, Any]]] = []
        self.statuses: dict[str, dict[str, Any]] = {}

    def refresh_prices(
        self,
        batch_size: int | None = None,
        week_offsets: str | None = None,
        offset_destinations: int = 0,
    ) -> str:
        self.sent.append(
            (
                "refresh",
                {
                    "batch_size": batch_size,
                    "week_offsets": week_offsets,
                    "offset_destinations": offset_destinations,
                },
            )
        )
        return f"task-{len(self.sent)}"

    def discover_destinations(self) -> str:
        self.sent.append(("discover", {}))
        return f"task-{len(self.sent)}"

    def task_status(self, task_id: str) -> dict[str, Any]:
        return self.statuses.get(
            task_id,
            {"task_id": task_id, "state": "PENDING", "result": None, "error": None},
        )


def make_offer_payload(price: str = "120.50", **extra: Any) -> dict[str, Any]:
    return {
        "type": "flight-offer",
        "id": extra.pop("id", "1"),
        "source": "GDS",
        "price": {
            "currency": "EUR",
            "base": "100.00",
            "total": price,
            "grandTotal": price,
        },
        "itineraries": [
            {
                "segments": [
                    {
                        "carrierCode": "KL",
                        "departure": {"iataCode": "AMS", "at": "2026-10-23T08:15:00"},
                        "arrival": {"iataCode": "BCN", "at": "2026-10-23T10:30:00"},
                    }
                ]
            }
        ],
        **extra,
    }


def make_traveler(**overrides: Any) -> TravelerInput:
    values = {
        "first_name": "Anna",
        "last_name": "de Vries",
        "date_of_birth": date(1990, 4, 12),
        "gender": "FEMALE",
        "email": "anna@example.com",
        "phone": "06-1234 5678",
        "phone_country_code": "+31",
        "passport_number": "nx1234567",
        "passport_expiry": date(2030, 1, 1),
        "passport_issuance_country": "NL",
        "nationality": "NL",
    }
    values.update(overrides)
    return TravelerInput(**values)


def make_contact(**overrides: Any) -> ContactInput:
    values = {
        "address_lines": ["Damrak 1"],
        "postal_code": "1012 LG",
        "city": "Amsterdam",
        "country_code": "NL",
    }
    values.update(overrides)
    return ContactInput(**values)


def make_token(role: str = "authenticated", **claims: Any) -> str:
    payload = {"sub": str(USER_ID), "aud": "authenticated", "role": role, **claims}
    return jwt.encode(payload, JWT_SECRET, algorithm="HS256")


@pytest.fixture
def api_settings() -> ApiSettings:
    return ApiSettings(
        _env_file=None,
        jwt_secret=JWT_SECRET,
        booking_encryption_key=Fernet.generate_key().decode(),
        popular_destinations=["PAR", "BCN", "ROM", "LON", "AMS", "BER"],
        anywhere_fanout=4,
    )


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
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def cipher(api_settings) -> ContactCipher:
    return ContactCipher(api_settings.booking_encryption_key)


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def user_id() -> uuid.UUID:
    return USER_ID


@pytest.fixture
def make_offer():
    return make_offer_payload


@pytest.fixture
def traveler_factory():
    return make_traveler


@pytest.fixture
def contact_factory():
    return make_contact


@pytest.fixture
def fake_gateway():
    return FakeGateway


@pytest.fixture
def fake_search_api():
    return FakeSearchApi


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def redis_conn() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def dispatcher() -> FakeDispatcher:
    return FakeDispatcher()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def service_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(role='service_role')}"}


@pytest.fixture
def stranger_headers() -> dict[str, str]:
    """A signed-in user who is not the one the other fixtures act for."""
    token = make_token(sub="5b6c1a2e-8f0d-4c3b-9a7e-2d1f0e9c8b7a")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def app(api_settings, session_factory, gateway, redis_conn, dispatcher):
    """The real app with every external dependency swapped for a fake."""
    application = create_app(api_settings)

    async def _db():
        async with session_factory() as session:
            yield session

    async def _redis():
        yield redis_conn

    application.dependency_overrides.update(
        {
            get_db: _db,
            get_redis: _redis,
            get_settings: lambda: api_settings,
            get_amadeus: lambda: gateway,
            get_task_dispatcher: lambda: dispatcher,
        }
    )
    return application


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport, base_url="http://test/api/v1"
    ) as ac:
        yield ac

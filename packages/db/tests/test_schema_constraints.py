"""Schema constraints the pipelines and booking path rely on."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from flight_finder_core.schemas import BookingStatus, WeekendType
from flight_finder_db.database import make_engine, make_session_factory
from flight_finder_db.models import Base, Destination, FlightBooking, FlightPrice


@pytest.fixture
async def session_factory():
    engine = make_engine("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield make_session_factory(engine)
    await engine.dispose()


def _price(value: str) -> FlightPrice:
    return FlightPrice(
        destination_code="BCN",
        departure_date=date(2026, 10, 23),
        return_date=date(2026, 10, 25),
        weekend_type=WeekendType.FRI_SUN,
        price=Decimal(value),
    )


async def test_one_price_per_destination_and_dates(session_factory):
    async with session_factory() as session:
        session.add(Destination(code="BCN", city="Barcelona", country="Spain"))
        session.add(_price("99.00"))
        await session.commit()

        session.add(_price("89.00"))
        with pytest.raises(IntegrityError):
            await session.commit()


async def test_negative_price_is_rejected(session_factory):
    async with session_factory() as session:
        session.add(Destination(code="BCN", city="Barcelona", country="Spain"))
        session.add(_price("-1.00"))
        with pytest.raises(IntegrityError):
            await session.commit()


async def test_booking_status_round_trips_as_value(session_factory):
    async with session_factory() as session:
        booking = FlightBooking(
            user_id=uuid.uuid4(),
            order_id="SANDBOX-1",
            booking_reference="AB123456",
            total_price=Decimal("120.00"),
            status=BookingStatus.PENDING_SANDBOX,
            booked_at=datetime(2026, 10, 19, tzinfo=UTC),
        )
        session.add(booking)
        await session.commit()

    async with session_factory() as session:
        stored = await session.get(FlightBooking, booking.id)

    assert stored.status is BookingStatus.PENDING_SANDBOX
    assert stored.currency == "EUR"
    assert stored.flight_data is None

"""Persist discovered destinations and cached weekend prices."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite

from flight_finder_db.models import Destination, FlightPrice

if TYPE_CHECKING:
    from datetime import date
    from decimal import Decimal

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from flight_finder_core.schemas import WeekendType

logger = logging.getLogger(__name__)


@dataclass
class DestinationRecord:
    code: str
    city: str
    country: str = ""
    country_code: str | None = None
    carriers: list[str] = field(default_factory=list)


@dataclass
class PriceRecord:
    destination_code: str
    departure_date: date
    return_date: date
    weekend_type: WeekendType
    price: Decimal
    currency: str
    carriers: list[str] = field(default_factory=list)
    flight_data: dict[str, Any] | None = None


def _insert_for(session: AsyncSession, table: Any) -> Any:
    """Dialect-specific INSERT supporting ``ON CONFLICT DO UPDATE``."""
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(table)
    if dialect == "sqlite":
        return sqlite.insert(table)
    raise NotImplementedError(f"Upsert not supported on {dialect}")


class PriceCacheStore:
    """Upsert-only writes and the reads the pipelines need.

    Every upsert is keyed by a unique constraint, so overlapping pipeline
    runs interleave safely; the last writer wins on ``last_updated_at``.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list_destinations(self) -> list[DestinationRecord]:
        async with self._session_factory() as session:
            rows = (await session.execute(select(Destination))).scalars().all()
        return [
            DestinationRecord(
                code=row.code,
                city=row.city,
                country=row.country,
                country_code=row.country_code,
                carriers=list(row.carriers or []),
            )
            for row in rows
        ]

    async def recently_updated_codes(self, cutoff: datetime) -> set[str]:
        """Destination codes with any cached price updated strictly after ``cutoff``.

        With ``cutoff = stale_cutoff(now, ttl)`` these are the codes holding a
        price for which ``is_stale`` is false.
        """
        stmt = (
            select(FlightPrice.destination_code)
            .where(FlightPrice.last_updated_at > cutoff)
            .distinct()
        )
        async with self._session_factory() as session:
            return set((await session.execute(stmt)).scalars().all())

    async def upsert_destinations(
        self, records: list[DestinationRecord], *, now: datetime | None = None
    ) -> int:
        if not records:
            return 0
        synced_at = now or datetime.now(UTC)
        values = [
            {
                "code": r.code,
                "city": r.city,
                "country": r.country,
                "country_code": r.country_code,
                "carriers": sorted(set(r.carriers)),
                "last_synced_at": synced_at,
            }
            for r in records
        ]
        async with self._session_factory() as session:
            stmt = _insert_for(session, Destination).values(values)
            stmt = stmt.on_conflict_do_update(
                index_elements=[Destination.code],
                set_={
                    "city": stmt.excluded.city,
                    "country": stmt.excluded.country,
                    "country_code": stmt.excluded.country_code,
                    "carriers": stmt.excluded.carriers,
                    "last_synced_at": stmt.excluded.last_synced_at,
                    "updated_at": func.now(),
                },
            )
            await session.execute(stmt)
            await session.commit()
        logger.info("Upserted %d destinations", len(values))
        return len(values)

    async def upsert_price(
        self, record: PriceRecord, *, now: datetime | None = None
    ) -> None:
        updated_at = now or datetime.now(UTC)
        async with self._session_factory() as session:
            stmt = _insert_for(session, FlightPrice).values(
                destination_code=record.destination_code,
                departure_date=record.departure_date,
                return_date=record.return_date,
                weekend_type=record.weekend_type,
                price=record.price,
                currency=record.currency,
                carriers=record.carriers,
                flight_data=record.flight_data,
                last_updated_at=updated_at,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[
                    FlightPrice.destination_code,
                    FlightPrice.departure_date,
                    FlightPrice.return_date,
                ],
                set_={
                    "weekend_type": stmt.excluded.weekend_type,
                    "price": stmt.excluded.price,
                    "currency": stmt.excluded.currency,
                    "carriers": stmt.excluded.carriers,
                    "flight_data": stmt.excluded.flight_data,
                    "last_updated_at": stmt.excluded.last_updated_at,
                },
            )
            await session.execute(stmt)
            await session.commit()

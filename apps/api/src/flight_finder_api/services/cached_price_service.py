"""Read path over the weekend price cache."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError

from flight_finder_core.errors import QueryError
from flight_finder_db.models import Destination, FlightPrice

from ..schemas.prices import PriceCacheStatus, WeekendTypeCount

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from flight_finder_core.schemas import CachedPriceQuery

logger = logging.getLogger(__name__)


def to_offer(
    row: FlightPrice, city: str | None, country: str | None
) -> dict[str, Any]:
    """Reshape a cache row into a flight-offer document.

    The stored offer is reused as-is when present; only the price block is
    overridden with the cached price, so cached and live results look alike.
    """
    cached = str(row.price)
    extra = {
        "destinationCode": row.destination_code,
        "destinationCity": city,
        "destinationCountry": country,
        "weekendType": str(row.weekend_type),
        "lastUpdatedAt": row.last_updated_at.isoformat(),
    }
    data = row.flight_data
    if isinstance(data, dict) and data.get("type") == "flight-offer":
        price = dict(data.get("price") or {})
        price.update(
            currency=row.currency or price.get("currency") or "EUR",
            total=cached,
            grandTotal=cached,
            base=price.get("base") or cached,
        )
        return {**data, **extra, "price": price}

    # Rows written before the raw offer was kept.
    return {
        "type": "flight-offer",
        "id": str(row.id),
        "source": "GDS",
        "price": {"currency": row.currency or "EUR", "total": cached, "base": cached},
        "itineraries": (data or {}).get("itineraries", []),
        "validatingAirlineCodes": list(row.carriers or []),
        **extra,
    }


class CachedPriceService:
    """Queries cached weekend prices for the display layer."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def query(self, query: CachedPriceQuery) -> list[dict[str, Any]]:
        """Matching cache rows as offers, cheapest first.  Empty means no data yet."""
        stmt = (
            select(FlightPrice, Destination.city, Destination.country)
            .outerjoin(Destination, FlightPrice.destination_code == Destination.code)
            .where(
                FlightPrice.departure_date == query.departure_date,
                FlightPrice.return_date == query.return_date,
                FlightPrice.price.is_not(None),
            )
            .order_by(FlightPrice.price.asc(), FlightPrice.destination_code)
        )
        if query.max_price is not None:
            stmt = stmt.where(FlightPrice.price <= Decimal(str(query.max_price)))
        if query.destination_code:
            stmt = stmt.where(FlightPrice.destination_code == query.destination_code)

        try:
            result = await self._db.execute(stmt)
            rows = result.all()
        except SQLAlchemyError as exc:
            logger.error("Cached price query failed: %s", exc)
            raise QueryError(f"Cached price query failed: {exc}") from exc

        logger.info(
            "Cached prices %s->%s: %d rows",
            query.departure_date,
            query.return_date,
            len(rows),
        )
        return [to_offer(price, city, country) for price, city, country in rows]

    async def status(self) -> PriceCacheStatus:
        """Totals shown on the price monitor page."""
        try:
            total_prices = await self._db.scalar(
                select(func.count()).select_from(FlightPrice)
            )
            destinations = await self._db.scalar(
                select(func.count()).select_from(Destination)
            )
            last_updated = await self._db.scalar(
                select(func.max(FlightPrice.last_updated_at))
            )
            by_type = await self._db.execute(
                select(FlightPrice.weekend_type, func.count())
                .group_by(FlightPrice.weekend_type)
                .order_by(FlightPrice.weekend_type)
            )
        except SQLAlchemyError as exc:
            logger.error("Price cache status query failed: %s", exc)
            raise QueryError(f"Price cache status query failed: {exc}") from exc

        return PriceCacheStatus(
            total_prices=total_prices or 0,
            destinations=destinations or 0,
            last_updated_at=last_updated,
            weekend_types=[
                WeekendTypeCount(weekend_type=str(wt), count=count)
                for wt, count in by_type.all()
            ],
        )

    async def destinations(self, query: str | None = None) -> list[Destination]:
        """Known destinations by city; ``query`` matches code, city or country."""
        stmt = select(Destination).order_by(Destination.city, Destination.code)
        term = (query or "").strip()
        if term:
            stmt = stmt.where(
                or_(
                    Destination.code.icontains(term, autoescape=True),
                    Destination.city.icontains(term, autoescape=True),
                    Destination.country.icontains(term, autoescape=True),
                )
            )
        try:
            result = await self._db.execute(stmt)
        except SQLAlchemyError as exc:
            logger.error("Destination query failed: %s", exc)
            raise QueryError(f"Destination query failed: {exc}") from exc
        return list(result.scalars().all())

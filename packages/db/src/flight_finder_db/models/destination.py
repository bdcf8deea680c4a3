"""Destination model."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from decimal import Decimal  # noqa: TC003
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, JSONType, TimestampMixin

if TYPE_CHECKING:
    from .flight_price import FlightPrice


class Destination(TimestampMixin, Base):
    """Destinations table - airports served from the origin, keyed by IATA code."""

    __tablename__ = "destinations"

    code: Mapped[str] = mapped_column(String(3), primary_key=True)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    country: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    country_code: Mapped[str | None] = mapped_column(String(2))
    carriers: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    last_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="EUR")
    last_synced_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Relationships
    prices: Mapped[list[FlightPrice]] = relationship(back_populates="destination")

    __table_args__ = (Index("ix_destinations_country_code", "country_code"),)

    def __repr__(self) -> str:
        return f"<Destination {self.code} {self.city}>"

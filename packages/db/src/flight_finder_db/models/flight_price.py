"""Cached weekend price model."""

from __future__ import annotations

from datetime import date, datetime  # noqa: TC003
from decimal import Decimal  # noqa: TC003
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from flight_finder_core.schemas.enums import WeekendType

from .base import Base, JSONType, UUIDPrimaryKeyMixin, value_enum

if TYPE_CHECKING:
    from .destination import Destination


class FlightPrice(UUIDPrimaryKeyMixin, Base):
    """Flight prices table - cheapest known offer per destination and date pair."""

    __tablename__ = "flight_prices"

    destination_code: Mapped[str] = mapped_column(
        String(3), ForeignKey("destinations.code", ondelete="CASCADE"), nullable=False
    )
    departure_date: Mapped[date] = mapped_column(Date, nullable=False)
    return_date: Mapped[date] = mapped_column(Date, nullable=False)
    weekend_type: Mapped[WeekendType] = mapped_column(
        value_enum(WeekendType, "weekendtype"), nullable=False
    )
    price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="EUR")
    carriers: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    flight_data: Mapped[dict[str, Any] | None] = mapped_column(JSONType)
    last_updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    destination: Mapped[Destination] = relationship(back_populates="prices")

    __table_args__ = (
        UniqueConstraint(
            "destination_code",
            "departure_date",
            "return_date",
            name="uq_flight_prices_destination_dates",
        ),
        CheckConstraint("price >= 0", name="ck_flight_prices_price_non_negative"),
        Index("ix_flight_prices_last_updated_at", "last_updated_at"),
        Index("ix_flight_prices_dates", "departure_date", "return_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<FlightPrice {self.destination_code} {self.departure_date}"
            f"->{self.return_date} {self.price} {self.currency}>"
        )

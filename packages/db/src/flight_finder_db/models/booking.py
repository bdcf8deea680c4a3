"""Booking model."""

from __future__ import annotations

import uuid  # noqa: TC003
from datetime import datetime  # noqa: TC003
from decimal import Decimal  # noqa: TC003
from typing import Any

from sqlalchemy import DateTime, Index, Numeric, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from flight_finder_core.schemas.enums import BookingStatus

from .base import Base, JSONType, TimestampMixin, UUIDPrimaryKeyMixin, value_enum


class FlightBooking(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Flight bookings table.

    Traveler name, email and phone are stored only as Fernet tokens; the key
    lives in the API settings, never in the database.
    """

    __tablename__ = "flight_bookings"

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
    order_id: Mapped[str] = mapped_column(String(100), nullable=False)
    booking_reference: Mapped[str] = mapped_column(String(20), nullable=False)
    flight_offer_id: Mapped[str | None] = mapped_column(String(50))
    flight_data: Mapped[dict[str, Any] | None] = mapped_column(JSONType)
    encrypted_traveler_name: Mapped[str | None] = mapped_column(Text)
    encrypted_email: Mapped[str | None] = mapped_column(Text)
    encrypted_phone: Mapped[str | None] = mapped_column(Text)
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="EUR")
    status: Mapped[BookingStatus] = mapped_column(
        value_enum(BookingStatus, "bookingstatus"), nullable=False
    )
    booked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("ix_flight_bookings_user_id", "user_id"),
        Index("ix_flight_bookings_order_id", "order_id"),
    )

    def __repr__(self) -> str:
        return f"<FlightBooking {self.booking_reference} {self.status}>"

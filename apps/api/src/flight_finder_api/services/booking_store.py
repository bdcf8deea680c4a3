"""Encrypting write path for bookings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from cryptography.fernet import Fernet, InvalidToken
from sqlalchemy import select

from flight_finder_core.errors import ConfigurationError
from flight_finder_db.models import FlightBooking

if TYPE_CHECKING:
    import uuid
    from datetime import datetime
    from decimal import Decimal

    from sqlalchemy.ext.asyncio import AsyncSession

    from flight_finder_core.schemas import BookingStatus

logger = logging.getLogger(__name__)


class ContactCipher:
    """Fernet wrapper for the traveler contact columns."""

    def __init__(self, key: str | bytes) -> None:
        if not key:
            raise ConfigurationError("API_BOOKING_ENCRYPTION_KEY")
        try:
            self._fernet = Fernet(key)
        except ValueError as exc:
            raise ConfigurationError("API_BOOKING_ENCRYPTION_KEY") from exc

    def encrypt(self, value: str | None) -> str | None:
        if value is None or value == "":
            return None
        return self._fernet.encrypt(value.encode()).decode()

    def decrypt(self, token: str | None) -> str | None:
        if token is None:
            return None
        try:
            return self._fernet.decrypt(token.encode()).decode()
        except InvalidToken:
            logger.error("Stored contact token could not be decrypted")
            raise


@dataclass
class NewBooking:
    """A booking as the orchestrator hands it over, contact fields in plaintext."""

    user_id: uuid.UUID
    order_id: str
    booking_reference: str
    flight_offer_id: str | None
    flight_data: dict[str, Any]
    traveler_name: str
    email: str | None
    phone: str | None
    total_price: Decimal
    currency: str
    status: BookingStatus
    booked_at: datetime


class BookingRepository:
    """Writes bookings; contact fields are encrypted before they reach the session."""

    def __init__(self, db: AsyncSession, cipher: ContactCipher) -> None:
        self._db = db
        self._cipher = cipher

    async def save(self, booking: NewBooking) -> FlightBooking:
        row = FlightBooking(
            user_id=booking.user_id,
            order_id=booking.order_id,
            booking_reference=booking.booking_reference,
            flight_offer_id=booking.flight_offer_id,
            flight_data=booking.flight_data,
            encrypted_traveler_name=self._cipher.encrypt(booking.traveler_name),
            encrypted_email=self._cipher.encrypt(booking.email),
            encrypted_phone=self._cipher.encrypt(booking.phone),
            total_price=booking.total_price,
            currency=booking.currency,
            status=booking.status,
            booked_at=booking.booked_at,
        )
        self._db.add(row)
        await self._db.commit()
        await self._db.refresh(row)
        logger.info(
            "Saved booking %s (%s) for user %s",
            row.booking_reference,
            row.status,
            row.user_id,
        )
        return row

    async def get_by_order_id(
        self, user_id: uuid.UUID, order_id: str
    ) -> FlightBooking | None:
        return await self._db.scalar(
            select(FlightBooking).where(
                FlightBooking.user_id == user_id,
                FlightBooking.order_id == order_id,
            )
        )

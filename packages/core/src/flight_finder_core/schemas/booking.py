"""Traveler, contact and booking result schemas."""

from __future__ import annotations

import uuid  # noqa: TC003
from datetime import date, datetime  # noqa: TC003
from decimal import Decimal  # noqa: TC003
from typing import Any

from pydantic import EmailStr, Field

from .base import CamelModel
from .enums import BookingStatus  # noqa: TC001


class TravelerInput(CamelModel):
    """Traveler details as typed into the booking form.

    Length caps are enforced on parse; presence, dates and country codes are
    checked by :func:`flight_finder_core.validation.validate_booking_input` so
    the caller gets every offending field at once.
    """

    first_name: str = Field(default="", max_length=50)
    last_name: str = Field(default="", max_length=50)
    date_of_birth: date | None = None
    gender: str = Field(default="", max_length=10)
    email: EmailStr | None = None
    phone: str = Field(default="", max_length=20)
    phone_country_code: str = Field(default="", max_length=4)
    passport_number: str = Field(default="", max_length=20)
    passport_expiry: date | None = None
    passport_issuance_country: str = Field(default="", max_length=3)
    nationality: str = Field(default="", max_length=3)


class ContactInput(CamelModel):
    """Postal address of the booking contact."""

    address_lines: list[str] = Field(default_factory=list, max_length=3)
    postal_code: str = Field(default="", max_length=12)
    city: str = Field(default="", max_length=50)
    country_code: str = Field(default="", max_length=3)
    company_name: str | None = Field(default=None, max_length=100)


class BookingResult(CamelModel):
    """What the client gets back after a successful (or simulated) booking."""

    booking_id: uuid.UUID
    order_id: str
    booking_reference: str
    status: BookingStatus
    simulated: bool = False
    total_price: Decimal
    currency: str
    booked_at: datetime
    message: str = ""
    order: dict[str, Any] | None = None

"""Booking orchestration: validate, confirm price, create order, persist.

The flow mirrors the booking dialog's steps as an explicit state machine:

    details -> confirming -> booking -> details

Validation failures never leave ``details``.  A failed price confirmation
returns from ``confirming`` to ``details``; order creation, successful or
not, returns from ``booking`` to ``details``.

Order creation is retried on 5xx and transport failures only.  When the
final failure matches a known sandbox-inventory signature the booking is
simulated: a local order id and reference are generated and the booking is
stored with status ``pending_sandbox`` so the user flow is not blocked by a
test-environment limitation.
"""

from __future__ import annotations

import asyncio
import logging
import re
import secrets
import string
import uuid
from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Protocol

from flight_finder_core.errors import (
    InvalidTransitionError,
    NetworkError,
    OrderCreationError,
    PriceConfirmationError,
    RateLimited,
    UpstreamError,
    ValidationError,
)
from flight_finder_core.retry import RetryPolicy, execute_with_retry
from flight_finder_core.schemas import BookingResult, BookingStatus, BookingStep
from flight_finder_core.validation import digits_only, validate_booking_input
from flight_finder_gds.amadeus.offers import offer_currency, offer_price

from .booking_store import NewBooking

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence
    from datetime import date

    from flight_finder_core.schemas import ContactInput, TravelerInput
    from flight_finder_db.models import FlightBooking
    from flight_finder_gds.amadeus import CreatedOrder

logger = logging.getLogger(__name__)

COMPANY_NAME_MAX = 30
COMPANY_NAME_MIN = 2
SANDBOX_ORDER_PREFIX = "SANDBOX-"
SANDBOX_MESSAGE = (
    "The flight API's test environment could not issue this order, so a "
    "simulated booking was recorded instead. Try a different date or a less "
    "popular route, or switch to production credentials for real bookings."
)


def _is_retryable_order_error(exc: BaseException) -> bool:
    if isinstance(exc, NetworkError):
        return True
    if isinstance(exc, RateLimited):
        return False
    return isinstance(exc, UpstreamError) and exc.is_server_error


ORDER_RETRY_POLICY = RetryPolicy(
    max_attempts=3, backoff=(1.0, 2.0, 4.0), retryable=_is_retryable_order_error
)


class BookingFlow:
    """The booking steps as a state machine; undefined transitions are rejected."""

    TRANSITIONS: dict[BookingStep, frozenset[BookingStep]] = {
        BookingStep.DETAILS: frozenset({BookingStep.CONFIRMING}),
        BookingStep.CONFIRMING: frozenset({BookingStep.BOOKING, BookingStep.DETAILS}),
        BookingStep.BOOKING: frozenset({BookingStep.DETAILS}),
    }

    def __init__(self) -> None:
        self.step = BookingStep.DETAILS
        self.history: list[BookingStep] = [BookingStep.DETAILS]

    def can_advance(self, target: BookingStep) -> bool:
        return target in self.TRANSITIONS[self.step]

    def advance(self, target: BookingStep) -> None:
        if not self.can_advance(target):
            raise InvalidTransitionError(
                f"Cannot move booking from {self.step} to {target}"
            )
        self.step = target
        self.history.append(target)

    def reset(self) -> None:
        """Return to ``details`` from wherever the flow stopped."""
        if self.step is not BookingStep.DETAILS:
            self.advance(BookingStep.DETAILS)


class OrderGateway(Protocol):
    async def confirm_price(self, offer: dict[str, Any]) -> dict[str, Any]: ...

    async def create_order(
        self,
        offer: dict[str, Any],
        travelers: list[dict[str, Any]],
        contacts: list[dict[str, Any]],
        *,
        remark: str = ...,
    ) -> CreatedOrder: ...


class BookingWriter(Protocol):
    async def save(self, booking: NewBooking) -> FlightBooking: ...


# ----------------------------------------------------------------------
# Payload normalisation
# ----------------------------------------------------------------------


def sanitize_company_name(name: str | None) -> str | None:
    """Alphanumerics and single spaces, capped; ``None`` when too short to send."""
    if not name:
        return None
    cleaned = re.sub(r"[^A-Za-z0-9 ]", "", name)
    cleaned = re.sub(r" +", " ", cleaned).strip()[:COMPANY_NAME_MAX].strip()
    if len(cleaned) < COMPANY_NAME_MIN:
        return None
    return cleaned


def build_traveler_payloads(
    travelers: Sequence[TravelerInput], today: date
) -> list[dict[str, Any]]:
    """Identity and travel documents only; contact details go in ``contacts``."""
    payloads: list[dict[str, Any]] = []
    for index, traveler in enumerate(travelers, start=1):
        payload: dict[str, Any] = {
            "id": str(index),
            "dateOfBirth": traveler.date_of_birth.isoformat()
            if traveler.date_of_birth
            else None,
            "name": {
                "firstName": traveler.first_name.strip().upper(),
                "lastName": traveler.last_name.strip().upper(),
            },
            "gender": traveler.gender.upper(),
        }
        expiry = traveler.passport_expiry
        if expiry is not None and expiry > today:
            payload["documents"] = [
                {
                    "documentType": "PASSPORT",
                    "number": traveler.passport_number.strip().upper(),
                    "expiryDate": expiry.isoformat(),
                    "issuanceCountry": traveler.passport_issuance_country,
                    "nationality": traveler.nationality,
                    "holder": True,
                }
            ]
        else:
            logger.warning("Dropping expired passport for traveler %d", index)
        payloads.append(payload)
    return payloads


def build_contact_payloads(
    contacts: Sequence[ContactInput],
    lead: TravelerInput,
    default_company: str | None = None,
) -> list[dict[str, Any]]:
    """Contacts addressed to the lead traveler, with phone reduced to digits."""
    payloads: list[dict[str, Any]] = []
    for contact in contacts:
        lines = [line.strip() for line in contact.address_lines if line.strip()]
        payload: dict[str, Any] = {
            "addresseeName": {
                "firstName": lead.first_name.strip().upper(),
                "lastName": lead.last_name.strip().upper(),
            },
            "purpose": "STANDARD",
            "phones": [
                {
                    "deviceType": "MOBILE",
                    "countryCallingCode": digits_only(lead.phone_country_code),
                    "number": digits_only(lead.phone),
                }
            ],
            "emailAddress": str(lead.email) if lead.email else None,
            "address": {
                "lines": lines,
                "postalCode": contact.postal_code.strip(),
                "cityName": contact.city.strip(),
                "countryCode": contact.country_code,
            },
        }
        company = sanitize_company_name(contact.company_name or default_company)
        if company is not None:
            payload["companyName"] = company
        payloads.append(payload)
    return payloads


def generate_booking_reference() -> str:
    """Two uppercase letters followed by six digits."""
    letters = "".join(secrets.choice(string.ascii_uppercase) for _ in range(2))
    digits = "".join(secrets.choice(string.digits) for _ in range(6))
    return letters + digits


def generate_sandbox_order_id() -> str:
    return SANDBOX_ORDER_PREFIX + uuid.uuid4().hex[:12].upper()


def matches_sandbox_signature(exc: UpstreamError, signatures: Sequence[str]) -> bool:
    body = exc.body_text()
    return any(signature and signature in body for signature in signatures)


def upstream_detail(exc: BaseException) -> str:
    """First human-readable error detail from an upstream failure."""
    if isinstance(exc, UpstreamError) and isinstance(exc.body, dict):
        for error in exc.body.get("errors") or []:
            detail = error.get("detail") or error.get("title")
            if detail:
                return str(detail)
        if exc.body.get("error_description"):
            return str(exc.body["error_description"])
    if isinstance(exc, UpstreamError) and exc.body:
        return exc.body_text()[:300]
    return str(exc)


# ----------------------------------------------------------------------
# Orchestrator
# ----------------------------------------------------------------------


class BookingOrchestrator:
    """Runs one booking from validated input to a persisted record."""

    def __init__(
        self,
        gateway: OrderGateway,
        bookings: BookingWriter,
        *,
        sandbox_signatures: Sequence[str] = ("38189", "Internal error"),
        retry_policy: RetryPolicy = ORDER_RETRY_POLICY,
        company_name: str | None = None,
        remark: str = "BOOKING FROM WEEKEND FLIGHT FINDER",
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.gateway = gateway
        self.bookings = bookings
        self.sandbox_signatures = tuple(sandbox_signatures)
        self.retry_policy = retry_policy
        self.company_name = company_name
        self.remark = remark
        self._sleep = sleep
        self._clock = clock or (lambda: datetime.now(UTC))

    async def create_booking(
        self,
        flight_offer: dict[str, Any],
        travelers: Sequence[TravelerInput],
        contacts: Sequence[ContactInput],
        user_id: uuid.UUID,
        *,
        flow: BookingFlow | None = None,
    ) -> BookingResult:
        flow = flow or BookingFlow()
        now = self._clock()
        today = now.date()

        errors = validate_booking_input(travelers, contacts, today)
        if errors:
            logger.info("Booking input rejected: %s", ", ".join(e.path for e in errors))
            raise ValidationError(errors)

        flow.advance(BookingStep.CONFIRMING)
        try:
            confirmed = await self.gateway.confirm_price(flight_offer)
        except (UpstreamError, NetworkError) as exc:
            flow.advance(BookingStep.DETAILS)
            logger.warning("Price confirmation failed: %s", exc)
            raise PriceConfirmationError(upstream_detail(exc)) from exc

        flow.advance(BookingStep.BOOKING)
        try:
            result = await self._order(confirmed, travelers, contacts, user_id, now)
        finally:
            flow.reset()
        return result

    async def _order(
        self,
        confirmed: dict[str, Any],
        travelers: Sequence[TravelerInput],
        contacts: Sequence[ContactInput],
        user_id: uuid.UUID,
        now: datetime,
    ) -> BookingResult:
        traveler_payloads = build_traveler_payloads(travelers, now.date())
        contact_payloads = build_contact_payloads(
            contacts, travelers[0], self.company_name
        )

        async def _create() -> CreatedOrder:
            return await self.gateway.create_order(
                confirmed, traveler_payloads, contact_payloads, remark=self.remark
            )

        simulated = False
        try:
            order = await execute_with_retry(
                self.retry_policy, _create, sleep=self._sleep, label="create_order"
            )
            order_id, reference = order.order_id, order.booking_reference
            raw: dict[str, Any] | None = order.raw
        except UpstreamError as exc:
            if not matches_sandbox_signature(exc, self.sandbox_signatures):
                logger.error("Order creation failed: %s", exc)
                raise OrderCreationError(
                    upstream_detail(exc), status=exc.status
                ) from exc
            logger.warning(
                "Order creation hit sandbox inventory limits (%s), simulating booking",
                exc.status,
            )
            simulated = True
            order_id, reference, raw = (
                generate_sandbox_order_id(),
                generate_booking_reference(),
                None,
            )

        status = BookingStatus.PENDING_SANDBOX if simulated else BookingStatus.CONFIRMED
        total = offer_price(confirmed) or Decimal("0")
        currency = offer_currency(confirmed)
        lead = travelers[0]
        row = await self.bookings.save(
            NewBooking(
                user_id=user_id,
                order_id=order_id,
                booking_reference=reference,
                flight_offer_id=confirmed.get("id"),
                flight_data=confirmed,
                traveler_name=f"{lead.first_name} {lead.last_name}".strip(),
                email=str(lead.email) if lead.email else None,
                phone=f"+{digits_only(lead.phone_country_code)} "
                f"{digits_only(lead.phone)}",
                total_price=total,
                currency=currency,
                status=status,
                booked_at=now,
            )
        )
        logger.info("Booking %s created (%s)", reference, status)
        return BookingResult(
            booking_id=row.id,
            order_id=order_id,
            booking_reference=reference,
            status=status,
            simulated=simulated,
            total_price=total,
            currency=currency,
            booked_at=now,
            message=SANDBOX_MESSAGE if simulated else "Booking confirmed",
            order=raw,
        )

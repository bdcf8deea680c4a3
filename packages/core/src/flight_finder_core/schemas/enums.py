"""Pydantic-compatible enums shared across packages (DB-independent)."""

from enum import StrEnum


class WeekendType(StrEnum):
    """Departure/return weekday pair sampled by the price refresh."""

    THU_SUN = "thu-sun"
    FRI_SUN = "fri-sun"
    FRI_MON = "fri-mon"


class BookingStatus(StrEnum):
    """Status of a persisted booking."""

    CONFIRMED = "confirmed"
    PENDING_SANDBOX = "pending_sandbox"


class BookingStep(StrEnum):
    """Steps of the booking flow as seen by the client."""

    DETAILS = "details"
    CONFIRMING = "confirming"
    BOOKING = "booking"


class TimeOfDay(StrEnum):
    """Local-hour buckets used to post-filter live search results."""

    ANY = "any"
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"

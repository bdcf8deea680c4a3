"""Core schemas for the weekend flight finder."""

from .base import CamelModel
from .booking import BookingResult, ContactInput, TravelerInput
from .enums import BookingStatus, BookingStep, TimeOfDay, WeekendType
from .pricing import BatchResult, CachedPriceQuery, SyncResult, WeekendCombination

__all__ = [
    "BatchResult",
    "BookingResult",
    "BookingStatus",
    "BookingStep",
    "CachedPriceQuery",
    "CamelModel",
    "ContactInput",
    "SyncResult",
    "TimeOfDay",
    "TravelerInput",
    "WeekendCombination",
    "WeekendType",
]

"""SQLAlchemy ORM models for the flight finder datastore."""

from .base import Base, JSONType, TimestampMixin, UUIDPrimaryKeyMixin
from .booking import FlightBooking
from .destination import Destination
from .flight_price import FlightPrice
from .profile import Profile, UserPreference

__all__ = [
    "Base",
    "Destination",
    "FlightBooking",
    "FlightPrice",
    "JSONType",
    "Profile",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "UserPreference",
]

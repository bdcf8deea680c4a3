"""User profile and preference models.

Both tables are keyed by the external identity provider's user id and are
maintained by the client directly; the application only reads them.
"""

from __future__ import annotations

import uuid  # noqa: TC003

from sqlalchemy import Boolean, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, JSONType, TimestampMixin


class Profile(TimestampMixin, Base):
    """Profiles table."""

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(255))
    display_name: Mapped[str | None] = mapped_column(String(255))
    home_airport: Mapped[str] = mapped_column(String(3), nullable=False, default="AMS")

    def __repr__(self) -> str:
        return f"<Profile {self.id}>"


class UserPreference(TimestampMixin, Base):
    """User preferences table - search defaults shown in the client."""

    __tablename__ = "user_preferences"

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    max_price: Mapped[int | None] = mapped_column(Integer)
    preferred_weekend_types: Mapped[list[str] | None] = mapped_column(JSONType)
    preferred_carriers: Mapped[list[str] | None] = mapped_column(JSONType)
    non_stop_only: Mapped[bool] = mapped_column(Boolean, default=False)

    def __repr__(self) -> str:
        return f"<UserPreference user_id={self.user_id}>"

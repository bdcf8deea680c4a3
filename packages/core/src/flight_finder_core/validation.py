"""Business-rule validation for booking input, run before any upstream call."""

from __future__ import annotations

import re
from datetime import date
from typing import TYPE_CHECKING

from pydantic.alias_generators import to_camel

from .errors import FieldError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .schemas.booking import ContactInput, TravelerInput

COUNTRY_CODE_RE = re.compile(r"^[A-Z]{2}$")
CALLING_CODE_RE = re.compile(r"^\d{1,3}$")
GENDERS = frozenset({"MALE", "FEMALE"})

_TRAVELER_REQUIRED = (
    "first_name",
    "last_name",
    "date_of_birth",
    "gender",
    "email",
    "phone",
    "phone_country_code",
    "passport_number",
    "passport_expiry",
    "passport_issuance_country",
    "nationality",
)
_CONTACT_REQUIRED = ("postal_code", "city", "country_code")


def is_country_code(value: str | None) -> bool:
    """Exactly two uppercase ASCII letters."""
    return bool(value) and COUNTRY_CODE_RE.fullmatch(value) is not None


def digits_only(value: str) -> str:
    return re.sub(r"\D", "", value)


def _blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _path(prefix: str, field: str) -> str:
    return f"{prefix}.{to_camel(field)}"


def validate_traveler(
    traveler: TravelerInput, prefix: str, today: date
) -> list[FieldError]:
    errors: list[FieldError] = []
    for field in _TRAVELER_REQUIRED:
        if _blank(getattr(traveler, field)):
            errors.append(FieldError(_path(prefix, field), "is required"))

    if traveler.passport_expiry is not None and traveler.passport_expiry <= today:
        errors.append(
            FieldError(
                _path(prefix, "passport_expiry"), "must be a date in the future"
            )
        )
    if traveler.date_of_birth is not None and traveler.date_of_birth >= today:
        errors.append(
            FieldError(_path(prefix, "date_of_birth"), "must be in the past")
        )
    if traveler.gender and traveler.gender.upper() not in GENDERS:
        errors.append(FieldError(_path(prefix, "gender"), "must be MALE or FEMALE"))

    for field in ("passport_issuance_country", "nationality"):
        value = getattr(traveler, field)
        if value and not is_country_code(value):
            errors.append(
                FieldError(
                    _path(prefix, field), "must be exactly two uppercase letters"
                )
            )

    if traveler.phone and not 4 <= len(digits_only(traveler.phone)) <= 15:
        errors.append(FieldError(_path(prefix, "phone"), "must contain 4-15 digits"))
    if traveler.phone_country_code and not CALLING_CODE_RE.fullmatch(
        traveler.phone_country_code.lstrip("+")
    ):
        errors.append(
            FieldError(_path(prefix, "phone_country_code"), "must be 1-3 digits")
        )
    return errors


def validate_contact(contact: ContactInput, prefix: str) -> list[FieldError]:
    errors: list[FieldError] = []
    if not any(line.strip() for line in contact.address_lines):
        errors.append(FieldError(_path(prefix, "address_lines"), "is required"))
    for field in _CONTACT_REQUIRED:
        if _blank(getattr(contact, field)):
            errors.append(FieldError(_path(prefix, field), "is required"))
    if contact.country_code and not is_country_code(contact.country_code):
        errors.append(
            FieldError(
                _path(prefix, "country_code"), "must be exactly two uppercase letters"
            )
        )
    return errors


def validate_booking_input(
    travelers: Sequence[TravelerInput],
    contacts: Sequence[ContactInput],
    today: date | None = None,
) -> list[FieldError]:
    """Return every rule violation; an empty list means the input may be submitted."""
    current = today or date.today()
    errors: list[FieldError] = []
    if not travelers:
        errors.append(FieldError("travelers", "at least one traveler is required"))
    if not contacts:
        errors.append(FieldError("contacts", "at least one contact is required"))
    for index, traveler in enumerate(travelers):
        errors.extend(validate_traveler(traveler, f"travelers[{index}]", current))
    for index, contact in enumerate(contacts):
        errors.extend(validate_contact(contact, f"contacts[{index}]"))
    return errors

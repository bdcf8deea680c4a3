"""Price confirmation and order request / response schemas."""

from __future__ import annotations

import re
from typing import Annotated, Any

from pydantic import AfterValidator, Field

from flight_finder_core.schemas import CamelModel, ContactInput, TravelerInput

_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")


def _check_offer(offer: dict[str, Any]) -> dict[str, Any]:
    price = offer.get("price")
    if not isinstance(price, dict) or not price.get("total"):
        raise ValueError("flight offer must carry price.total")
    currency = price.get("currency")
    if currency is not None and not _CURRENCY_RE.fullmatch(str(currency)):
        raise ValueError("price.currency must be a 3-letter code")
    return offer


FlightOfferPayload = Annotated[dict[str, Any], AfterValidator(_check_offer)]


class ConfirmPriceRequest(CamelModel):
    flight_offer: FlightOfferPayload


class ConfirmPriceResponse(CamelModel):
    data: dict[str, Any]


class CreateOrderRequest(CamelModel):
    """Offer to book plus the traveler form.  The offer is passed through verbatim."""

    flight_offer: FlightOfferPayload
    travelers: list[TravelerInput] = Field(max_length=9)
    contacts: list[ContactInput] = Field(max_length=3)


class GetOrderRequest(CamelModel):
    order_id: str = Field(min_length=1, max_length=100)


class OrderResponse(CamelModel):
    data: dict[str, Any]

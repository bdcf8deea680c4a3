"""Read-only helpers over raw Amadeus flight-offer payloads.

Offers are passed around as the JSON the API returned; these helpers read
the handful of fields the application cares about without validating the
rest of the document.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

Offer = dict[str, Any]


def offer_price(offer: Offer) -> Decimal | None:
    """Total price of the offer, preferring ``grandTotal`` over ``total``."""
    price = offer.get("price") or {}
    raw = price.get("grandTotal") or price.get("total")
    if raw in (None, ""):
        return None
    try:
        return Decimal(str(raw))
    except InvalidOperation:
        return None


def offer_currency(offer: Offer, default: str = "EUR") -> str:
    return (offer.get("price") or {}).get("currency") or default


def offer_carriers(offer: Offer) -> list[str]:
    """Distinct marketing carrier codes across every segment, sorted."""
    carriers = {
        segment.get("carrierCode")
        for itinerary in offer.get("itineraries", [])
        for segment in itinerary.get("segments", [])
    }
    carriers.discard(None)
    carriers.discard("")
    return sorted(carriers)


def _segment_time(offer: Offer, *, first: bool, key: str) -> datetime | None:
    itineraries = offer.get("itineraries") or []
    if not itineraries:
        return None
    itinerary = itineraries[0] if first else itineraries[-1]
    segments = itinerary.get("segments") or []
    if not segments:
        return None
    segment = segments[0] if first else segments[-1]
    raw = (segment.get(key) or {}).get("at")
    if not raw:
        return None
    try:
        # Amadeus reports airport-local wall-clock times without an offset.
        return datetime.fromisoformat(raw)
    except ValueError:
        return None


def first_departure(offer: Offer) -> datetime | None:
    """Local departure time of the first segment of the outbound itinerary."""
    return _segment_time(offer, first=True, key="departure")


def last_arrival(offer: Offer) -> datetime | None:
    """Local arrival time of the last segment of the last itinerary."""
    return _segment_time(offer, first=False, key="arrival")


def sort_by_price(offers: list[Offer]) -> list[Offer]:
    """Sort ascending by price; offers without a readable price go last."""

    def _key(offer: Offer) -> tuple[int, Decimal]:
        price = offer_price(offer)
        return (0, price) if price is not None else (1, Decimal(0))

    return sorted(offers, key=_key)

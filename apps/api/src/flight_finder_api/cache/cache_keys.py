"""Cache key builders for consistent namespacing."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flight_finder_core.schemas import CachedPriceQuery


def cached_prices_key(query: CachedPriceQuery) -> str:
    """Build cache key for a cached-price lookup."""
    max_price = "" if query.max_price is None else f"{query.max_price:g}"
    return (
        f"cached_prices:{query.departure_date}:{query.return_date}:"
        f"{max_price}:{query.destination_code or '*'}"
    )


def airport_search_key(query: str) -> str:
    """Build cache key for airport autocomplete."""
    return f"airports:search:{query}"


def location_search_key(keyword: str) -> str:
    return f"airports:locations:{keyword}"


def price_cache_status_key() -> str:
    return "price_cache:status"

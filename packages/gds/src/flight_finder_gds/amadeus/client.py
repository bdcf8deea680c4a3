"""Amadeus Self-Service API client with OAuth2 token management.

Covers flight offer search, price confirmation, order creation and
retrieval, flight inspiration, and airport/city lookups.

API portal: https://developers.amadeus.com
Auth: OAuth2 client_credentials grant
"""

from __future__ import annotations

import logging
import time
from urllib.parse import quote
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import httpx

from flight_finder_core.errors import (
    NetworkError,
    RateLimited,
    UpstreamAuthError,
    UpstreamError,
)

from ..config import AmadeusSettings

if TYPE_CHECKING:
    from datetime import date

logger = logging.getLogger(__name__)

SERVICE = "amadeus"

# Refresh this many seconds before the advertised expiry.
TOKEN_EXPIRY_MARGIN = 60


@dataclass(frozen=True)
class AccessToken:
    token: str
    expires_in: int


@dataclass(frozen=True)
class Location:
    """City and country of an IATA airport or city code."""

    iata_code: str
    city: str
    country: str
    country_code: str


@dataclass(frozen=True)
class CreatedOrder:
    order_id: str
    booking_reference: str
    raw: dict[str, Any] = field(default_factory=dict)


def _parse_body(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text


class AmadeusClient:
    """Async HTTP client for the Amadeus Self-Service APIs.

    The access token is obtained via ``POST /v1/security/oauth2/token`` and
    cached in memory until shortly before it expires.  A 401 on any call
    forces one token refresh and a single replay of the request.

    Status mapping: 429 raises :class:`RateLimited`, any other non-2xx raises
    :class:`UpstreamError` carrying the status and parsed body, and transport
    failures raise :class:`NetworkError`.  The client never retries on its own;
    callers decide through a retry policy.
    """

    def __init__(
        self,
        settings: AmadeusSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or AmadeusSettings()
        self._transport = transport
        self._http: httpx.AsyncClient | None = None
        self._access_token: str = ""
        self._token_expires_at: float = 0.0

    # ------------------------------------------------------------------
    # Lifecycle helpers
    # ------------------------------------------------------------------

    async def _ensure_http(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(
                base_url=self.settings.base_url,
                timeout=httpx.Timeout(self.settings.timeout, connect=10),
                transport=self._transport,
            )
        return self._http

    async def close(self) -> None:
        """Close the underlying HTTP client and forget the cached token."""
        if self._http and not self._http.is_closed:
            await self._http.aclose()
        self._http = None
        self._access_token = ""
        self._token_expires_at = 0.0

    async def __aenter__(self) -> AmadeusClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # OAuth2 token lifecycle
    # ------------------------------------------------------------------

    async def get_access_token(self) -> AccessToken:
        """Exchange the client credentials for a fresh bearer token."""
        self.settings.require()
        http = await self._ensure_http()
        try:
            resp = await http.post(
                "/v1/security/oauth2/token",
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.settings.client_id,
                    "client_secret": self.settings.client_secret,
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.TransportError as exc:
            raise NetworkError(f"Amadeus token request failed: {exc}") from exc

        if not resp.is_success:
            raise UpstreamAuthError(
                resp.status_code, _parse_body(resp), service=SERVICE
            )

        body = resp.json()
        token = AccessToken(
            token=body["access_token"], expires_in=int(body.get("expires_in", 1799))
        )
        self._access_token = token.token
        self._token_expires_at = (
            time.monotonic() + token.expires_in - TOKEN_EXPIRY_MARGIN
        )
        logger.info("Amadeus token acquired (expires_in=%ds)", token.expires_in)
        return token

    async def _ensure_token(self) -> str:
        if not self._access_token or time.monotonic() >= self._token_expires_at:
            await self.get_access_token()
        return self._access_token

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------

    async def _send(
        self,
        method: str,
        path: str,
        token: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        http = await self._ensure_http()
        headers = {"Authorization": f"Bearer {token}", "Accept": "application/json"}
        if json is not None:
            headers["Content-Type"] = "application/vnd.amadeus+json"
        try:
            return await http.request(
                method, path, params=params, json=json, headers=headers
            )
        except httpx.TransportError as exc:
            raise NetworkError(f"Amadeus {method} {path} failed: {exc}") from exc

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        token = await self._ensure_token()
        resp = await self._send(method, path, token, params=params, json=json)

        if resp.status_code == 401:
            logger.warning("Amadeus token rejected, refreshing...")
            self._access_token = ""
            token = await self._ensure_token()
            resp = await self._send(method, path, token, params=params, json=json)

        if resp.status_code == 429:
            raise RateLimited(_parse_body(resp), service=SERVICE)
        if not resp.is_success:
            raise UpstreamError(resp.status_code, _parse_body(resp), service=SERVICE)
        body = resp.json()
        return body if isinstance(body, dict) else {"data": body}

    # ------------------------------------------------------------------
    # API methods
    # ------------------------------------------------------------------

    async def search_offers(
        self,
        origin: str,
        destination: str,
        departure_date: date,
        return_date: date | None = None,
        *,
        adults: int = 1,
        max_price: float | None = None,
        max_results: int = 50,
        non_stop: bool = False,
        currency: str | None = None,
    ) -> list[dict[str, Any]]:
        """Search round-trip (or one-way) offers via GET /v2/shopping/flight-offers."""
        params: dict[str, Any] = {
            "originLocationCode": origin,
            "destinationLocationCode": destination,
            "departureDate": departure_date.isoformat(),
            "adults": adults,
            "currencyCode": currency or self.settings.currency,
            "max": max_results,
        }
        if return_date is not None:
            params["returnDate"] = return_date.isoformat()
        if max_price is not None:
            params["maxPrice"] = int(max_price)
        if non_stop:
            params["nonStop"] = "true"

        body = await self._request("GET", "/v2/shopping/flight-offers", params=params)
        offers = body.get("data") or []
        logger.debug("Amadeus %s->%s: %d offers", origin, destination, len(offers))
        return offers

    async def confirm_price(self, offer: dict[str, Any]) -> dict[str, Any]:
        """Re-price an offer.  Returns the confirmed offer, not the envelope."""
        body = await self._request(
            "POST",
            "/v1/shopping/flight-offers/pricing",
            json={
                "data": {"type": "flight-offers-pricing", "flightOffers": [offer]}
            },
        )
        confirmed = (body.get("data") or {}).get("flightOffers") or []
        if not confirmed:
            raise UpstreamError(200, body, service=SERVICE)
        return confirmed[0]

    async def create_order(
        self,
        offer: dict[str, Any],
        travelers: list[dict[str, Any]],
        contacts: list[dict[str, Any]],
        *,
        remark: str = "Weekend trip booking",
    ) -> CreatedOrder:
        """Create a flight order via POST /v1/booking/flight-orders."""
        body = await self._request(
            "POST",
            "/v1/booking/flight-orders",
            json={
                "data": {
                    "type": "flight-order",
                    "flightOffers": [offer],
                    "travelers": travelers,
                    "remarks": {
                        "general": [
                            {"subType": "GENERAL_MISCELLANEOUS", "text": remark}
                        ]
                    },
                    "ticketingAgreement": {
                        "option": "DELAY_TO_CANCEL",
                        "delay": "6D",
                    },
                    "contacts": contacts,
                }
            },
        )
        data = body.get("data") or {}
        records = data.get("associatedRecords") or [{}]
        return CreatedOrder(
            order_id=data.get("id", ""),
            booking_reference=records[0].get("reference", ""),
            raw=data,
        )

    async def get_order(self, order_id: str) -> dict[str, Any]:
        """Fetch an existing order via GET /v1/booking/flight-orders/{id}."""
        body = await self._request(
            "GET", f"/v1/booking/flight-orders/{quote(order_id, safe='')}"
        )
        return body.get("data") or {}

    async def search_inspiration(
        self,
        origin: str,
        departure_date: date,
        return_date: date | None = None,
        *,
        max_price: float | None = None,
        non_stop: bool = False,
    ) -> list[dict[str, Any]]:
        """Cheapest destinations from ``origin`` via GET /v1/shopping/flight-destinations."""
        params: dict[str, Any] = {
            "origin": origin,
            "departureDate": departure_date.isoformat(),
            "viewBy": "DESTINATION",
        }
        if return_date is not None:
            params["duration"] = max((return_date - departure_date).days, 1)
        else:
            params["oneWay"] = "true"
        if max_price is not None:
            params["maxPrice"] = int(max_price)
        if non_stop:
            params["nonStop"] = "true"

        body = await self._request(
            "GET", "/v1/shopping/flight-destinations", params=params
        )
        return body.get("data") or []

    async def search_locations(
        self, keyword: str, *, sub_types: str = "AIRPORT,CITY"
    ) -> list[dict[str, Any]]:
        """Keyword search via GET /v1/reference-data/locations."""
        body = await self._request(
            "GET",
            "/v1/reference-data/locations",
            params={"subType": sub_types, "keyword": keyword},
        )
        return body.get("data") or []

    async def lookup_location(self, iata_code: str) -> Location | None:
        """Resolve an airport or city code to its city and country."""
        for item in await self.search_locations(iata_code):
            if item.get("iataCode") != iata_code:
                continue
            address = item.get("address") or {}
            city = address.get("cityName") or item.get("name") or iata_code
            return Location(
                iata_code=iata_code,
                city=city.title(),
                country=(address.get("countryName") or "").title(),
                country_code=address.get("countryCode") or "",
            )
        return None

"""Price confirmation and flight order router."""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: TC002

from flight_finder_core.errors import PriceConfirmationError, RateLimited, UpstreamError
from flight_finder_core.schemas import BookingResult
from flight_finder_gds.amadeus import AmadeusClient  # noqa: TC002

from ..dependencies import (
    get_amadeus,
    get_booking_orchestrator,
    get_cipher,
    get_db,
    require_current_user,
    user_id_from_token,
)
from ..schemas.booking import (
    ConfirmPriceRequest,
    ConfirmPriceResponse,
    CreateOrderRequest,
    GetOrderRequest,
    OrderResponse,
)
from ..services.booking_service import (
    SANDBOX_ORDER_PREFIX,
    BookingOrchestrator,
    upstream_detail,
)
from ..services.booking_store import BookingRepository, ContactCipher

logger = logging.getLogger(__name__)

router = APIRouter(tags=["booking"])

DbDep = Annotated[AsyncSession, Depends(get_db)]
AmadeusDep = Annotated[AmadeusClient, Depends(get_amadeus)]
CurrentUser = Annotated[dict[str, Any], Depends(require_current_user)]
OrchestratorDep = Annotated[BookingOrchestrator, Depends(get_booking_orchestrator)]
CipherDep = Annotated[ContactCipher, Depends(get_cipher)]


@router.post("/confirm-flight-price", response_model=ConfirmPriceResponse)
async def confirm_flight_price(
    request: ConfirmPriceRequest,
    amadeus: AmadeusDep,
    current_user: CurrentUser,
) -> ConfirmPriceResponse:
    """Re-price an offer; the confirmed price supersedes the search price."""
    try:
        confirmed = await amadeus.confirm_price(request.flight_offer)
    except RateLimited:
        raise
    except UpstreamError as exc:
        raise PriceConfirmationError(upstream_detail(exc)) from exc
    return ConfirmPriceResponse(
        data={"type": "flight-offers-pricing", "flightOffers": [confirmed]}
    )


@router.post(
    "/create-flight-order",
    response_model=BookingResult,
    status_code=status.HTTP_201_CREATED,
)
async def create_flight_order(
    request: CreateOrderRequest,
    current_user: CurrentUser,
    orchestrator: OrchestratorDep,
) -> BookingResult:
    return await orchestrator.create_booking(
        request.flight_offer,
        request.travelers,
        request.contacts,
        user_id_from_token(current_user),
    )


@router.post("/get-flight-order", response_model=OrderResponse)
async def get_flight_order(
    request: GetOrderRequest,
    current_user: CurrentUser,
    db: DbDep,
    amadeus: AmadeusDep,
    cipher: CipherDep,
) -> OrderResponse:
    """Fetch one of the caller's orders; simulated orders only exist locally."""
    booking = await BookingRepository(db, cipher).get_by_order_id(
        user_id_from_token(current_user), request.order_id
    )
    if booking is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Order not found")
    if not booking.order_id.startswith(SANDBOX_ORDER_PREFIX):
        return OrderResponse(data=await amadeus.get_order(booking.order_id))

    return OrderResponse(
        data={
            "id": booking.order_id,
            "associatedRecords": [{"reference": booking.booking_reference}],
            "status": str(booking.status),
            "simulated": True,
            "flightOffers": [booking.flight_data] if booking.flight_data else [],
        }
    )

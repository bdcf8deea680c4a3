"""Live flight search router."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: TC002

from flight_finder_gds.amadeus import AmadeusClient  # noqa: TC002

from ..config import ApiSettings  # noqa: TC001
from ..dependencies import get_amadeus, get_db, get_settings, require_current_user
from ..schemas.search import (
    FlightSearchRequest,
    InspirationSearchRequest,
    OffersResponse,
)
from ..services.search_service import SearchService

router = APIRouter(tags=["search"])

DbDep = Annotated[AsyncSession, Depends(get_db)]
AmadeusDep = Annotated[AmadeusClient, Depends(get_amadeus)]
SettingsDep = Annotated[ApiSettings, Depends(get_settings)]
CurrentUser = Annotated[dict[str, Any], Depends(require_current_user)]


@router.post("/search-flights", response_model=OffersResponse)
async def search_flights(
    request: FlightSearchRequest,
    amadeus: AmadeusDep,
    config: SettingsDep,
    current_user: CurrentUser,
) -> OffersResponse:
    """Live offers for one route, or for the popular cities when no destination."""
    service = SearchService(amadeus, config)
    return await service.search_flights(request)


@router.post("/search-inspiration-flights", response_model=OffersResponse)
async def search_inspiration_flights(
    request: InspirationSearchRequest,
    db: DbDep,
    amadeus: AmadeusDep,
    config: SettingsDep,
    current_user: CurrentUser,
) -> OffersResponse:
    service = SearchService(amadeus, config, db)
    return await service.search_inspiration(request)

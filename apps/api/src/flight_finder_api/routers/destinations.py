"""Destination autocomplete over the synced destinations table."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: TC002

from ..dependencies import get_db
from ..schemas.airports import DestinationListResponse, DestinationOut, DestinationQuery
from ..services.cached_price_service import CachedPriceService

router = APIRouter(tags=["destinations"])

DbDep = Annotated[AsyncSession, Depends(get_db)]


@router.post("/get-destinations", response_model=DestinationListResponse)
async def get_destinations(
    request: DestinationQuery, db: DbDep
) -> DestinationListResponse:
    """Every destination when the query is empty; no authentication required."""
    rows = await CachedPriceService(db).destinations(request.query)
    return DestinationListResponse(
        data=[
            DestinationOut(code=row.code, city=row.city, country=row.country)
            for row in rows
        ]
    )

"""Cached weekend price router."""

from __future__ import annotations

import logging
from typing import Annotated, Any

import redis.asyncio as redis  # noqa: TC002
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: TC002

from flight_finder_core.schemas import CachedPriceQuery

from ..cache.cache_keys import cached_prices_key, price_cache_status_key
from ..cache.redis_client import cache_get, cache_set
from ..config import ApiSettings  # noqa: TC001
from ..dependencies import get_db, get_redis, get_settings, require_current_user
from ..schemas.prices import CachedPricesResponse, PriceCacheStatus
from ..services.cached_price_service import CachedPriceService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["prices"])

DbDep = Annotated[AsyncSession, Depends(get_db)]
RedisDep = Annotated[redis.Redis, Depends(get_redis)]
SettingsDep = Annotated[ApiSettings, Depends(get_settings)]
CurrentUser = Annotated[dict[str, Any], Depends(require_current_user)]


@router.post("/cached-prices", response_model=CachedPricesResponse)
async def cached_prices(
    query: CachedPriceQuery,
    db: DbDep,
    redis_conn: RedisDep,
    config: SettingsDep,
    current_user: CurrentUser,
) -> CachedPricesResponse:
    """Cached weekend prices for a date pair, cheapest first."""
    key = cached_prices_key(query)
    cached = await cache_get(redis_conn, key)
    if cached is not None:
        return CachedPricesResponse.model_validate(cached)

    offers = await CachedPriceService(db).query(query)
    if not offers:
        # Nothing cached yet; not worth remembering.
        return CachedPricesResponse(
            data=[], message="No cached prices for these dates yet, try again later"
        )

    response = CachedPricesResponse(
        data=offers, message=f"Found {len(offers)} cached prices"
    )
    await cache_set(
        redis_conn, key, response.model_dump(mode="json"), config.cached_prices_ttl
    )
    return response


@router.get("/price-cache/status", response_model=PriceCacheStatus)
async def price_cache_status(
    db: DbDep,
    redis_conn: RedisDep,
    config: SettingsDep,
    current_user: CurrentUser,
) -> PriceCacheStatus:
    key = price_cache_status_key()
    cached = await cache_get(redis_conn, key)
    if cached is not None:
        return PriceCacheStatus.model_validate(cached)

    status = await CachedPriceService(db).status()
    await cache_set(
        redis_conn, key, status.model_dump(mode="json"), config.status_cache_ttl
    )
    return status

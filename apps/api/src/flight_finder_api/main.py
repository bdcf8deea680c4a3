"""FastAPI application factory."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from flight_finder_api.config import ApiSettings, settings

# Propagate DB URL so flight_finder_db.database picks it up via os.getenv.
os.environ.setdefault("DATABASE_URL", settings.database_url)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from flight_finder_api.cache.redis_client import close_redis, init_redis
from flight_finder_api.errors import register_exception_handlers
from flight_finder_api.routers import (
    admin,
    airports,
    booking,
    destinations,
    prices,
    search,
)
from flight_finder_gds.amadeus import AmadeusClient
from flight_finder_gds.config import AmadeusSettings

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Open the Redis pool and the flight API client; close both on shutdown."""
    config: ApiSettings = app.state.settings
    await init_redis(config.redis_url)
    app.state.amadeus = AmadeusClient(AmadeusSettings())
    logger.info("API ready, CORS origins %s", config.cors_origins)
    try:
        yield
    finally:
        await app.state.amadeus.close()
        await close_redis()


def create_app(config: ApiSettings | None = None) -> FastAPI:
    """Build the application; routes live under ``/api/v1``."""
    config = config or settings
    app = FastAPI(
        title="Weekend Flight Finder API",
        version="0.1.0",
        lifespan=_lifespan,
    )
    app.state.settings = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    for module in (search, booking, prices, airports, destinations, admin):
        app.include_router(module.router, prefix=API_PREFIX)

    return app


app = create_app()

"""Async database engine and session configuration."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

DEFAULT_DATABASE_URL = "postgresql+asyncpg://localhost:5432/flight_finder"


def make_engine(url: str, *, echo: bool = False) -> AsyncEngine:
    """Create an engine; pool sizing only applies to server databases."""
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=echo)
    return create_async_engine(url, echo=echo, pool_size=20, max_overflow=10)


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@lru_cache(maxsize=4)
def get_session_factory(url: str | None = None) -> async_sessionmaker[AsyncSession]:
    """Process-wide session factory for ``url`` (``DATABASE_URL`` by default)."""
    return make_session_factory(
        make_engine(url or os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL))
    )


async def get_db() -> AsyncGenerator[AsyncSession]:
    """FastAPI dependency that yields an async database session."""
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

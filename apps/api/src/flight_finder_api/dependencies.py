"""FastAPI dependency injection providers."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Annotated, Any

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: TC002

from flight_finder_core.errors import AuthenticationError
from flight_finder_db.database import get_db as _db_dependency
from flight_finder_gds.amadeus import AmadeusClient  # noqa: TC002

from .cache.redis_client import get_redis_pool
from .config import ApiSettings, settings
from .dispatch.dispatcher import TaskDispatcher, get_dispatcher
from .services.booking_service import BookingOrchestrator
from .services.booking_store import BookingRepository, ContactCipher

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    import redis.asyncio as redis

# Re-export the DB dependency unchanged.
get_db = _db_dependency

_bearer_scheme = HTTPBearer(auto_error=False)


def get_settings() -> ApiSettings:
    return settings


async def get_redis() -> AsyncGenerator[redis.Redis]:
    """Yield the shared Redis connection."""
    pool = await get_redis_pool()
    yield pool


def get_amadeus(request: Request) -> AmadeusClient:
    """The flight API client created in the app lifespan."""
    return request.app.state.amadeus


def decode_token(token: str, config: ApiSettings) -> dict[str, Any]:
    """Verify a token issued by the identity service and return its claims."""
    config.require_auth()
    try:
        return jwt.decode(
            token,
            config.jwt_secret,
            algorithms=[config.jwt_algorithm],
            audience=config.jwt_audience,
        )
    except jwt.PyJWTError as exc:
        raise AuthenticationError(f"Invalid token: {exc}") from exc


async def require_current_user(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)
    ],
    config: Annotated[ApiSettings, Depends(get_settings)],
) -> dict[str, Any]:
    """Decoded claims of the caller; raises when the token is absent or invalid."""
    if credentials is None:
        raise AuthenticationError("Missing authorization header")
    return decode_token(credentials.credentials, config)


async def require_service_role(
    user: Annotated[dict[str, Any], Depends(require_current_user)],
    config: Annotated[ApiSettings, Depends(get_settings)],
) -> dict[str, Any]:
    """Operator endpoints accept only the identity service's service role."""
    if user.get("role") != config.service_role:
        raise AuthenticationError("Service role required")
    return user


def user_id_from_token(user: dict[str, Any]) -> uuid.UUID:
    """Extract the user UUID from decoded JWT claims."""
    raw = user.get("sub") or user.get("user_id")
    if raw is None:
        raise AuthenticationError("Token has no subject")
    try:
        return uuid.UUID(str(raw))
    except ValueError as exc:
        raise AuthenticationError("Token subject is not a user id") from exc


def get_cipher(
    config: Annotated[ApiSettings, Depends(get_settings)],
) -> ContactCipher:
    return ContactCipher(config.booking_encryption_key)


def get_booking_orchestrator(
    _user: Annotated[dict[str, Any], Depends(require_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    amadeus: Annotated[AmadeusClient, Depends(get_amadeus)],
    cipher: Annotated[ContactCipher, Depends(get_cipher)],
    config: Annotated[ApiSettings, Depends(get_settings)],
) -> BookingOrchestrator:
    return BookingOrchestrator(
        amadeus,
        BookingRepository(db, cipher),
        sandbox_signatures=config.sandbox_error_signatures,
        company_name=config.company_name,
        remark=config.booking_remark,
    )


def get_task_dispatcher() -> TaskDispatcher:
    return get_dispatcher()

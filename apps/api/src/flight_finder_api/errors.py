"""Map the flight_finder error taxonomy onto HTTP responses.

Every error body has the shape ``{"error": str, "details": str}``; validation
failures add ``"fields": [{"path", "message"}, ...]``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from flight_finder_core.errors import (
    AuthenticationError,
    ConfigurationError,
    FieldError,
    FlightFinderError,
    InvalidTransitionError,
    NetworkError,
    OrderCreationError,
    PriceConfirmationError,
    QueryError,
    RateLimited,
    UpstreamError,
    ValidationError,
)

if TYPE_CHECKING:
    from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)

# Most specific first; the first isinstance match wins.
_STATUS_MAP: list[tuple[type[FlightFinderError], int, str]] = [
    (ConfigurationError, 500, "Server misconfigured"),
    (AuthenticationError, 401, "Authentication required"),
    (ValidationError, 400, "Invalid input"),
    (PriceConfirmationError, 502, "Failed to confirm price"),
    (OrderCreationError, 502, "Failed to create flight order"),
    (RateLimited, 429, "Upstream rate limit reached"),
    (UpstreamError, 502, "Upstream request failed"),
    (NetworkError, 504, "Upstream unreachable"),
    (QueryError, 503, "Datastore unavailable"),
    (InvalidTransitionError, 409, "Booking already in progress"),
]


def error_status(exc: FlightFinderError) -> tuple[int, str]:
    for exc_type, code, details in _STATUS_MAP:
        if isinstance(exc, exc_type):
            return code, details
    return 500, "Unexpected error"


def error_body(exc: FlightFinderError) -> dict:
    _, details = error_status(exc)
    body: dict = {"error": str(exc), "details": details}
    if isinstance(exc, ValidationError):
        body["fields"] = [e.as_dict() for e in exc.errors]
    elif isinstance(exc, ConfigurationError):
        # Variable names only, never values.
        body["missing"] = exc.missing
    return body


async def flight_finder_error_handler(
    request: Request, exc: FlightFinderError
) -> JSONResponse:
    code, _ = error_status(exc)
    if code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
    headers = {"WWW-Authenticate": "Bearer"} if code == 401 else None
    return JSONResponse(status_code=code, content=error_body(exc), headers=headers)


def _loc_to_path(loc: tuple) -> str:
    """``("body", "travelers", 0, "firstName")`` -> ``travelers[0].firstName``."""
    path = ""
    for part in loc:
        if part == "body" and not path:
            continue
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path or "body"


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Reshape pydantic request errors into the same field-path list."""
    errors = [FieldError(_loc_to_path(e["loc"]), e["msg"]) for e in exc.errors()]
    return await flight_finder_error_handler(request, ValidationError(errors))


async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail), "details": str(exc.detail)},
        headers=exc.headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(FlightFinderError, flight_finder_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

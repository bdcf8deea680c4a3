"""Exception hierarchy shared by the API, the sync pipelines and the GDS clients."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any


class FlightFinderError(Exception):
    """Base class for every error raised by flight_finder packages."""


class ConfigurationError(FlightFinderError):
    """A required secret or setting is missing.  Fatal, never retried."""

    def __init__(self, missing: list[str] | str) -> None:
        self.missing = [missing] if isinstance(missing, str) else list(missing)
        super().__init__(
            "Missing required configuration: " + ", ".join(self.missing)
        )


class AuthenticationError(FlightFinderError):
    """The caller's bearer token is missing or invalid."""


@dataclass(frozen=True)
class FieldError:
    """One offending input field, addressed by a dotted path."""

    path: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"path": self.path, "message": self.message}


class ValidationError(FlightFinderError):
    """Malformed input.  Carries the field-level detail returned to the caller."""

    def __init__(self, errors: list[FieldError]) -> None:
        self.errors = list(errors)
        super().__init__(
            "Invalid input: " + ", ".join(e.path for e in self.errors)
        )

    @property
    def fields(self) -> list[str]:
        return [e.path for e in self.errors]


class UpstreamError(FlightFinderError):
    """Non-2xx response from an external API."""

    def __init__(self, status: int, body: Any = None, *, service: str = "") -> None:
        self.status = status
        self.body = body
        self.service = service
        prefix = f"{service} " if service else ""
        super().__init__(f"{prefix}upstream error {status}: {_truncate(body)}")

    @property
    def is_server_error(self) -> bool:
        return 500 <= self.status < 600

    def body_text(self) -> str:
        """Return the response body as text, whatever shape it was parsed into."""
        if self.body is None:
            return ""
        if isinstance(self.body, str):
            return self.body
        return json.dumps(self.body, default=str)


class UpstreamAuthError(UpstreamError):
    """The external API rejected our client credentials."""


class RateLimited(UpstreamError):
    """HTTP 429 from an external API.  Pipelines pause and move on."""

    def __init__(self, body: Any = None, *, service: str = "") -> None:
        super().__init__(429, body, service=service)


class NetworkError(FlightFinderError):
    """Transport-level failure (DNS, connect, read timeout...)."""


class QueryError(FlightFinderError):
    """Datastore failure on the read path."""


class PriceConfirmationError(FlightFinderError):
    """The external API refused to confirm the offer's price."""

    def __init__(self, upstream_detail: str) -> None:
        self.upstream_detail = upstream_detail
        super().__init__(f"Price confirmation failed: {upstream_detail}")


class OrderCreationError(FlightFinderError):
    """Order creation failed and no fallback applied."""

    def __init__(self, upstream_detail: str, *, status: int | None = None) -> None:
        self.upstream_detail = upstream_detail
        self.status = status
        super().__init__(f"Order creation failed: {upstream_detail}")


class InvalidTransitionError(FlightFinderError):
    """A booking flow step was requested from a state that does not allow it."""


def _truncate(body: Any, limit: int = 300) -> str:
    text = str(body) if body is not None else ""
    return text if len(text) <= limit else text[:limit] + "..."

"""Retry policy with a fixed exponential backoff sequence for async calls."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")

logger = logging.getLogger(__name__)


def _retry_everything(exc: BaseException) -> bool:
    return isinstance(exc, Exception)


@dataclass(frozen=True)
class RetryPolicy:
    """How many attempts to make, how long to wait between them, and on what.

    ``backoff[i]`` is the pause after failed attempt ``i + 1``.  When there are
    more attempts than backoff entries the last entry is reused.
    """

    max_attempts: int = 3
    backoff: tuple[float, ...] = (1.0, 2.0, 4.0)
    retryable: Callable[[BaseException], bool] = field(default=_retry_everything)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if not self.backoff:
            raise ValueError("backoff must contain at least one delay")

    def delay_after(self, attempt: int) -> float:
        """Return the pause after the given 1-based failed attempt."""
        index = min(attempt - 1, len(self.backoff) - 1)
        return self.backoff[index]

    def should_retry(self, exc: BaseException, attempt: int) -> bool:
        return attempt < self.max_attempts and self.retryable(exc)


async def execute_with_retry(
    policy: RetryPolicy,
    func: Callable[[], Awaitable[T]],
    *,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    label: str | None = None,
) -> T:
    """Await ``func()`` until it succeeds or the policy gives up.

    The last exception is re-raised unchanged when the policy stops retrying,
    either because it is not retryable or because attempts are exhausted.
    """
    name = label or getattr(func, "__name__", "call")
    attempt = 0
    while True:
        attempt += 1
        try:
            return await func()
        except Exception as exc:
            if not policy.should_retry(exc, attempt):
                raise
            delay = policy.delay_after(attempt)
            logger.warning(
                "Retry %d/%d for %s after %.1fs: %s",
                attempt,
                policy.max_attempts - 1,
                name,
                delay,
                exc,
            )
            await sleep(delay)

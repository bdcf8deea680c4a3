"""Staleness rules for the price and destination caches.

:func:`is_stale` is the rule; :func:`stale_cutoff` restates it as a bound for
queries, so a row is fresh exactly when `last_updated_at > stale_cutoff(now)`.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

DEFAULT_TTL = timedelta(hours=24)


def as_utc(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC (SQLite hands them back without tzinfo)."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def is_stale(
    last_updated_at: datetime | None,
    now: datetime | None = None,
    ttl: timedelta = DEFAULT_TTL,
) -> bool:
    """Return True when an entry was never refreshed or is older than ``ttl``."""
    if last_updated_at is None:
        return True
    current = as_utc(now) if now is not None else datetime.now(tz=UTC)
    return current - as_utc(last_updated_at) >= ttl


def stale_cutoff(now: datetime | None = None, ttl: timedelta = DEFAULT_TTL) -> datetime:
    """Entries updated strictly after the returned instant are still fresh.

    Equivalent to ``not is_stale(last_updated_at, now, ttl)``.
    """
    current = as_utc(now) if now is not None else datetime.now(tz=UTC)
    return current - ttl

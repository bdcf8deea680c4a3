"""Weekend date-combination builder for recurring price sampling."""

from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING

from .schemas.enums import WeekendType
from .schemas.pricing import WeekendCombination

if TYPE_CHECKING:
    from collections.abc import Iterable

_THURSDAY = 3  # date.weekday()


def next_thursday(today: date) -> date:
    """Return ``today`` if it is a Thursday, otherwise the following Thursday."""
    return today + timedelta(days=(_THURSDAY - today.weekday()) % 7)


def weekend_combinations(
    week_offsets: Iterable[int],
    today: date | None = None,
) -> list[WeekendCombination]:
    """Build thu-sun, fri-sun and fri-mon pairs for each week offset.

    Week 0 starts at the next Thursday (today included).  Combinations come
    back grouped by week in the order the offsets were given.
    """
    anchor = next_thursday(today or date.today())
    combos: list[WeekendCombination] = []
    for offset in week_offsets:
        if offset < 0:
            raise ValueError(f"week offset must be >= 0, got {offset}")
        thursday = anchor + timedelta(weeks=offset)
        friday = thursday + timedelta(days=1)
        sunday = thursday + timedelta(days=3)
        monday = thursday + timedelta(days=4)
        combos.extend(
            [
                WeekendCombination(
                    departure_date=thursday,
                    return_date=sunday,
                    weekend_type=WeekendType.THU_SUN,
                ),
                WeekendCombination(
                    departure_date=friday,
                    return_date=sunday,
                    weekend_type=WeekendType.FRI_SUN,
                ),
                WeekendCombination(
                    departure_date=friday,
                    return_date=monday,
                    weekend_type=WeekendType.FRI_MON,
                ),
            ]
        )
    return combos


def parse_week_offsets(value: str) -> tuple[int, ...]:
    """Parse an inclusive range (``"17-18"``), a list (``"1,5"``) or one offset."""
    value = value.strip()
    if "," in value:
        return tuple(int(part) for part in value.split(",") if part.strip())
    if "-" in value:
        start, end = (int(part) for part in value.split("-", 1))
        if end < start:
            raise ValueError(f"invalid week range: {value}")
        return tuple(range(start, end + 1))
    return (int(value),)


def upcoming_weekdays(
    weekdays: Iterable[int],
    today: date | None = None,
) -> list[date]:
    """Return the next occurrence (strictly after today) of each weekday, sorted."""
    base = today or date.today()
    dates = []
    for weekday in weekdays:
        delta = (weekday - base.weekday()) % 7 or 7
        dates.append(base + timedelta(days=delta))
    return sorted(set(dates))

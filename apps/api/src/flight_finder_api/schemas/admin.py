"""Operator endpoint schemas."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from flight_finder_core.schemas import CamelModel

# Week-offset presets: the default four weeks ahead plus two sampling windows.
WEEK_PRESETS = ("0-3", "3-4", "17-18")


class RefreshRequest(CamelModel):
    batch_size: int | None = Field(default=None, ge=1, le=100)
    offset_destinations: int = Field(default=0, ge=0)
    week_offsets: str | None = Field(
        default=None,
        pattern=r"^\d{1,2}(-\d{1,2})?(,\d{1,2}(-\d{1,2})?)*$",
        description=f"Range or list of week offsets, e.g. {', '.join(WEEK_PRESETS)}",
    )


class TaskAccepted(CamelModel):
    task_id: str
    status_url: str


class TaskStatus(CamelModel):
    task_id: str
    state: str
    result: dict[str, Any] | None = None
    error: str | None = None

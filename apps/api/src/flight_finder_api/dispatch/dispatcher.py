"""Dispatch sync pipeline tasks to the Celery worker pool."""

from __future__ import annotations

import logging
from typing import Any

from celery import Celery
from kombu.exceptions import OperationalError

from flight_finder_core.errors import NetworkError

from ..config import settings

logger = logging.getLogger(__name__)

REFRESH_TASK = "flight_finder_sync.tasks.refresh_prices"
DISCOVERY_TASK = "flight_finder_sync.tasks.discover_destinations"


class TaskDispatcher:
    """Send pipeline tasks by name; the API never imports the worker code."""

    def __init__(self, celery_app: Celery | None = None) -> None:
        self._app = celery_app or Celery(
            broker=settings.celery_broker_url,
            backend=settings.celery_result_backend,
        )

    def _send(self, name: str, **kwargs: Any) -> str:
        try:
            result = self._app.send_task(name, kwargs=kwargs, queue="sync")
        except OperationalError as exc:
            logger.exception("Failed to dispatch %s", name)
            raise NetworkError(f"Task broker unreachable: {exc}") from exc
        logger.info("Dispatched %s as %s with %s", name, result.id, kwargs)
        return result.id

    def refresh_prices(
        self,
        batch_size: int | None = None,
        week_offsets: str | None = None,
        offset_destinations: int = 0,
    ) -> str:
        return self._send(
            REFRESH_TASK,
            batch_size=batch_size,
            week_offsets=week_offsets,
            offset_destinations=offset_destinations,
        )

    def discover_destinations(self) -> str:
        return self._send(DISCOVERY_TASK)

    def task_status(self, task_id: str) -> dict[str, Any]:
        """State of a dispatched task plus its result once it has finished."""
        async_result = self._app.AsyncResult(task_id)
        status: dict[str, Any] = {
            "task_id": task_id,
            "state": async_result.state,
            "result": None,
            "error": None,
        }
        if async_result.ready():
            if async_result.successful():
                status["result"] = async_result.result
            else:
                status["error"] = str(async_result.result)
        return status


_dispatcher: TaskDispatcher | None = None


def get_dispatcher() -> TaskDispatcher:
    """Process-wide dispatcher, created on first use."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = TaskDispatcher()
    return _dispatcher

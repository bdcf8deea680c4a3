"""Celery application configuration."""

from __future__ import annotations

from celery import Celery

from .config import settings

app = Celery(
    "flight_finder_sync",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["flight_finder_sync.tasks"],
)

app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_routes={
        "flight_finder_sync.tasks.refresh_prices": {"queue": "sync"},
        "flight_finder_sync.tasks.discover_destinations": {"queue": "sync"},
    },
    # One pipeline at a time per worker: the delays assume a single caller.
    worker_concurrency=1,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
)

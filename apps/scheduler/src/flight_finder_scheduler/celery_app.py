"""Celery Beat application for scheduling the sync pipelines.

Run with ``celery -A flight_finder_scheduler.celery_app beat``.  Tasks are
sent by name, so the beat process never imports the worker code.
"""

from __future__ import annotations

from celery import Celery

from .beat_schedule import build_beat_schedule
from .config import scheduler_settings

app = Celery(
    "flight_finder_scheduler",
    broker=scheduler_settings.celery_broker_url,
    backend=scheduler_settings.celery_result_backend,
)

app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    beat_schedule=build_beat_schedule(),
)

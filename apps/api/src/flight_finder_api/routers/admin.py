"""Operator endpoints that trigger the sync pipelines on the worker."""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Request, status

from ..dependencies import get_task_dispatcher, require_service_role
from ..dispatch.dispatcher import TaskDispatcher  # noqa: TC001
from ..schemas.admin import RefreshRequest, TaskAccepted, TaskStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

DispatcherDep = Annotated[TaskDispatcher, Depends(get_task_dispatcher)]
ServiceRole = Annotated[dict[str, Any], Depends(require_service_role)]


def _accepted(request: Request, task_id: str) -> TaskAccepted:
    return TaskAccepted(
        task_id=task_id,
        status_url=str(request.url_for("get_task_status", task_id=task_id)),
    )


@router.post(
    "/refresh-ams-prices",
    response_model=TaskAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
def refresh_ams_prices(
    request: Request,
    dispatcher: DispatcherDep,
    caller: ServiceRole,
    body: Annotated[RefreshRequest | None, Body()] = None,
) -> TaskAccepted:
    """Queue one price refresh batch; poll the status URL for the BatchResult."""
    body = body or RefreshRequest()
    task_id = dispatcher.refresh_prices(
        batch_size=body.batch_size,
        week_offsets=body.week_offsets,
        offset_destinations=body.offset_destinations,
    )
    return _accepted(request, task_id)


@router.post(
    "/sync-ams-destinations",
    response_model=TaskAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
def sync_ams_destinations(
    request: Request,
    dispatcher: DispatcherDep,
    caller: ServiceRole,
) -> TaskAccepted:
    task_id = dispatcher.discover_destinations()
    return _accepted(request, task_id)


@router.get("/tasks/{task_id}", response_model=TaskStatus, name="get_task_status")
def get_task_status(
    task_id: str,
    dispatcher: DispatcherDep,
    caller: ServiceRole,
) -> TaskStatus:
    return TaskStatus.model_validate(dispatcher.task_status(task_id))

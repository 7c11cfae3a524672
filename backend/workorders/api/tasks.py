"""Task CRUD and lifecycle transition endpoints."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from fastapi import APIRouter, Query, status

from workorders.api.deps import TASK_SERVICE_DEP
from workorders.schemas.tasks import (
    TaskCreate,
    TaskCreateResponse,
    TaskDeleteResponse,
    TaskRead,
    TaskStatusUpdate,
    TaskUpdate,
)

if TYPE_CHECKING:
    from workorders.services.task_lifecycle import TaskLifecycleService

router = APIRouter(prefix="/tasks", tags=["tasks"])
STATUS_QUERY = Query(default=None)
EMPLOYEE_QUERY = Query(default=None)
DATE_QUERY = Query(default=None, alias="date")
LIMIT_QUERY = Query(default=None, ge=1, le=1000)
OFFSET_QUERY = Query(default=0, ge=0)


@router.get("", response_model=list[TaskRead])
async def list_tasks(
    status_filter: str | None = Query(default=None, alias="status"),
    employee_id: int | None = EMPLOYEE_QUERY,
    on_date: date | None = DATE_QUERY,
    limit: int | None = LIMIT_QUERY,
    offset: int = OFFSET_QUERY,
    service: TaskLifecycleService = TASK_SERVICE_DEP,
) -> list[TaskRead]:
    """List tasks, newest start date first."""
    return await service.list_tasks(
        status=status_filter,
        employee_id=employee_id,
        on_date=on_date,
        limit=limit,
        offset=offset,
    )


@router.get("/today", response_model=list[TaskRead])
async def list_today_tasks(service: TaskLifecycleService = TASK_SERVICE_DEP) -> list[TaskRead]:
    return await service.list_today()


@router.get("/overdue", response_model=list[TaskRead])
async def list_overdue_tasks(service: TaskLifecycleService = TASK_SERVICE_DEP) -> list[TaskRead]:
    return await service.list_overdue()


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(task_id: int, service: TaskLifecycleService = TASK_SERVICE_DEP) -> TaskRead:
    return await service.get_task(task_id)


@router.post("", response_model=TaskCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    payload: TaskCreate,
    service: TaskLifecycleService = TASK_SERVICE_DEP,
) -> TaskCreateResponse:
    """Create a task; recurring tasks materialize their first batch of occurrences."""
    return await service.create_task(payload)


@router.put("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: int,
    payload: TaskUpdate,
    service: TaskLifecycleService = TASK_SERVICE_DEP,
) -> TaskRead:
    return await service.update_task(task_id, payload)


@router.put("/{task_id}/status", response_model=TaskRead)
async def update_task_status(
    task_id: int,
    payload: TaskStatusUpdate,
    service: TaskLifecycleService = TASK_SERVICE_DEP,
) -> TaskRead:
    """Directly set a task's status, including completion without approval."""
    return await service.set_status(task_id, payload.status)


@router.post("/{task_id}/approve", response_model=TaskRead)
async def approve_task(task_id: int, service: TaskLifecycleService = TASK_SERVICE_DEP) -> TaskRead:
    """Approve a task waiting in `pending_approval`."""
    return await service.approve(task_id)


@router.post("/{task_id}/star", response_model=TaskRead)
async def toggle_task_star(task_id: int, service: TaskLifecycleService = TASK_SERVICE_DEP) -> TaskRead:
    return await service.toggle_star(task_id)


@router.delete("/{task_id}", response_model=TaskDeleteResponse)
async def delete_task(
    task_id: int,
    service: TaskLifecycleService = TASK_SERVICE_DEP,
) -> TaskDeleteResponse:
    await service.delete_task(task_id)
    return TaskDeleteResponse(id=task_id)

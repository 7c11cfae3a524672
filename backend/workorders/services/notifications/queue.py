"""Task change events persisted on the shared Redis queue."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from workorders.core.config import settings
from workorders.core.logging import get_logger
from workorders.services.queue import QueuedTask, enqueue_task
from workorders.services.queue import requeue_if_failed as generic_requeue_if_failed

logger = get_logger(__name__)
TASK_TYPE = "task_event"


@dataclass(frozen=True)
class TaskEvent:
    """One `task.created` / `task.updated` / `tasks.auto_closed` style event."""

    event_name: str
    payload: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    attempts: int = 0


def _queued_from_event(event: TaskEvent) -> QueuedTask:
    return QueuedTask(
        task_type=TASK_TYPE,
        payload={"event_name": event.event_name, "payload": event.payload},
        created_at=event.created_at,
        attempts=event.attempts,
    )


def decode_task_event(task: QueuedTask) -> TaskEvent:
    if task.task_type != TASK_TYPE:
        raise ValueError(f"Unexpected task_type={task.task_type!r}; expected {TASK_TYPE!r}")
    return TaskEvent(
        event_name=str(task.payload["event_name"]),
        payload=dict(task.payload.get("payload") or {}),
        created_at=task.created_at,
        attempts=task.attempts,
    )


def enqueue_task_event(event: TaskEvent) -> bool:
    """Push an event for the queue worker; never raises."""
    return enqueue_task(
        _queued_from_event(event),
        settings.rq_queue_name,
        redis_url=settings.rq_redis_url,
    )


def requeue_task_event(event: TaskEvent, *, delay_seconds: float = 0) -> bool:
    return generic_requeue_if_failed(
        _queued_from_event(event),
        settings.rq_queue_name,
        max_retries=settings.rq_dispatch_max_retries,
        redis_url=settings.rq_redis_url,
        delay_seconds=delay_seconds,
    )

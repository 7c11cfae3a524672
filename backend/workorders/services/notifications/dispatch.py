"""Queue worker handler for task change events."""

from __future__ import annotations

from workorders.core.logging import get_logger
from workorders.services.notifications.queue import (
    TaskEvent,
    decode_task_event,
    requeue_task_event,
)
from workorders.services.queue import QueuedTask

logger = get_logger(__name__)


def _deliver(event: TaskEvent) -> None:
    """Publish a task change event to subscribers.

    Currently logs the event. Realtime fan-out (websocket or push) attaches
    here.
    """
    logger.info(
        "task.event.dispatch",
        extra={
            "event_name": event.event_name,
            "task_id": event.payload.get("id"),
            "payload_keys": sorted(event.payload),
            "attempt": event.attempts,
        },
    )


async def process_task_event_task(task: QueuedTask) -> None:
    _deliver(decode_task_event(task))


def requeue_task_event_task(task: QueuedTask, *, delay_seconds: float = 0) -> bool:
    return requeue_task_event(decode_task_event(task), delay_seconds=delay_seconds)

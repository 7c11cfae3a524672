"""Notification sinks injected into services to publish task change events."""

from __future__ import annotations

from typing import Any, Protocol

from workorders.core.config import settings
from workorders.core.logging import get_logger
from workorders.services.notifications.queue import TaskEvent, enqueue_task_event

logger = get_logger(__name__)

TASK_CREATED = "task.created"
TASK_UPDATED = "task.updated"
TASK_DELETED = "task.deleted"
TASKS_AUTO_CLOSED = "tasks.auto_closed"
SCHEDULE_DAILY = "schedule.daily"


class NotificationSink(Protocol):
    def emit(self, event_name: str, payload: dict[str, Any]) -> None: ...


class QueueNotificationSink:
    """Hand events to the Redis queue; the worker delivers them."""

    def emit(self, event_name: str, payload: dict[str, Any]) -> None:
        if not enqueue_task_event(TaskEvent(event_name=event_name, payload=payload)):
            logger.warning("task.event.not_queued", extra={"event_name": event_name})


class LoggingNotificationSink:
    """Log-only sink for deployments without Redis."""

    def emit(self, event_name: str, payload: dict[str, Any]) -> None:
        logger.info(
            "task.event.emitted",
            extra={"event_name": event_name, "task_id": payload.get("id")},
        )


def build_notifier(kind: str | None = None) -> NotificationSink:
    if (kind or settings.notification_sink) == "log":
        return LoggingNotificationSink()
    return QueueNotificationSink()


def get_notifier() -> NotificationSink:
    """FastAPI dependency returning the configured sink."""
    return build_notifier()

"""Task change notification sinks, queueing and dispatch."""

from workorders.services.notifications.queue import (
    TASK_TYPE,
    TaskEvent,
    decode_task_event,
    enqueue_task_event,
)
from workorders.services.notifications.sinks import (
    SCHEDULE_DAILY,
    TASK_CREATED,
    TASK_DELETED,
    TASK_UPDATED,
    TASKS_AUTO_CLOSED,
    LoggingNotificationSink,
    NotificationSink,
    QueueNotificationSink,
    build_notifier,
    get_notifier,
)

__all__ = [
    "SCHEDULE_DAILY",
    "TASKS_AUTO_CLOSED",
    "TASK_CREATED",
    "TASK_DELETED",
    "TASK_TYPE",
    "TASK_UPDATED",
    "LoggingNotificationSink",
    "NotificationSink",
    "QueueNotificationSink",
    "TaskEvent",
    "build_notifier",
    "decode_task_event",
    "enqueue_task_event",
    "get_notifier",
]

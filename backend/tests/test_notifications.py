# ruff: noqa: INP001
"""Notification sinks and task event queue encoding."""

from __future__ import annotations

import pytest

from workorders.services.notifications import dispatch
from workorders.services.notifications import sinks as sinks_module
from workorders.services.notifications.queue import TASK_TYPE, TaskEvent, _queued_from_event, decode_task_event
from workorders.services.notifications.sinks import (
    LoggingNotificationSink,
    QueueNotificationSink,
    build_notifier,
)
from workorders.services.queue import QueuedTask


def test_build_notifier_follows_configuration() -> None:
    assert isinstance(build_notifier("log"), LoggingNotificationSink)
    assert isinstance(build_notifier("queue"), QueueNotificationSink)
    # Test configuration selects the logging sink.
    assert isinstance(build_notifier(), LoggingNotificationSink)


def test_queue_sink_enqueues_events(monkeypatch: pytest.MonkeyPatch) -> None:
    queued: list[TaskEvent] = []

    def _enqueue(event: TaskEvent) -> bool:
        queued.append(event)
        return True

    monkeypatch.setattr(sinks_module, "enqueue_task_event", _enqueue)
    QueueNotificationSink().emit("task.updated", {"id": 5, "status": "sent"})

    (event,) = queued
    assert event.event_name == "task.updated"
    assert event.payload == {"id": 5, "status": "sent"}


def test_queue_sink_does_not_raise_when_queue_unavailable(monkeypatch: pytest.MonkeyPatch) -> None:
    warnings: list[str] = []
    monkeypatch.setattr(sinks_module, "enqueue_task_event", lambda _event: False)
    monkeypatch.setattr(sinks_module.logger, "warning", lambda event, *a, **k: warnings.append(event))

    QueueNotificationSink().emit("task.created", {"id": 1})

    assert warnings == ["task.event.not_queued"]


def test_task_event_survives_queue_envelope() -> None:
    event = TaskEvent(event_name="tasks.auto_closed", payload={"count": 2}, attempts=1)
    queued = QueuedTask.from_json(_queued_from_event(event).to_json())
    decoded = decode_task_event(queued)
    assert decoded.event_name == "tasks.auto_closed"
    assert decoded.payload == {"count": 2}
    assert decoded.attempts == 1


def test_decode_rejects_foreign_task_type() -> None:
    foreign = QueuedTask(task_type="other", payload={}, created_at=TaskEvent("x").created_at)
    with pytest.raises(ValueError):
        decode_task_event(foreign)


@pytest.mark.asyncio
async def test_dispatch_delivers_decoded_event(monkeypatch: pytest.MonkeyPatch) -> None:
    delivered: list[TaskEvent] = []
    monkeypatch.setattr(dispatch, "_deliver", delivered.append)

    await dispatch.process_task_event_task(
        _queued_from_event(TaskEvent(event_name="task.deleted", payload={"id": 9})),
    )

    assert [event.payload for event in delivered] == [{"id": 9}]
    assert TASK_TYPE == "task_event"

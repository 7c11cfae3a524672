# ruff: noqa: INP001
"""Queue worker dispatch and retry behaviour."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from workorders.services import queue_worker
from workorders.services.notifications.queue import TASK_TYPE as TASK_EVENT_TASK_TYPE
from workorders.services.queue import QueuedTask
from workorders.services.queue_worker import _TASK_HANDLERS, _TaskHandler, flush_queue, retry_delay_seconds


def _queued(task_type: str = TASK_EVENT_TASK_TYPE, attempts: int = 0) -> QueuedTask:
    return QueuedTask(
        task_type=task_type,
        payload={"event_name": "task.created", "payload": {"id": 1}},
        created_at=datetime.now(UTC),
        attempts=attempts,
    )


def _feed(monkeypatch: pytest.MonkeyPatch, tasks: list[QueuedTask]) -> None:
    pending = list(tasks)

    def _dequeue(*_args: object, **_kwargs: object) -> QueuedTask | None:
        return pending.pop(0) if pending else None

    monkeypatch.setattr(queue_worker, "dequeue_task", _dequeue)


def test_worker_registers_task_event_handler() -> None:
    assert TASK_EVENT_TASK_TYPE in _TASK_HANDLERS


def test_retry_delay_grows_and_caps(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(queue_worker.random, "uniform", lambda _a, _b: 0.0)
    assert retry_delay_seconds(0) == 2.0
    assert retry_delay_seconds(2) == 8.0
    assert retry_delay_seconds(20) == 120.0


@pytest.mark.asyncio
async def test_flush_processes_events_and_skips_unknown_types(monkeypatch: pytest.MonkeyPatch) -> None:
    _feed(monkeypatch, [_queued(), _queued("mystery"), _queued()])
    assert await flush_queue() == 2


@pytest.mark.asyncio
async def test_failed_handler_requeues_with_backoff(monkeypatch: pytest.MonkeyPatch) -> None:
    requeued: list[tuple[int, float]] = []

    async def _fail(_task: QueuedTask) -> None:
        raise RuntimeError("subscriber offline")

    def _requeue(task: QueuedTask, delay: float) -> bool:
        requeued.append((task.attempts, delay))
        return True

    monkeypatch.setitem(_TASK_HANDLERS, TASK_EVENT_TASK_TYPE, _TaskHandler(handler=_fail, requeue=_requeue))
    monkeypatch.setattr(queue_worker, "retry_delay_seconds", lambda attempts: 4.0)
    _feed(monkeypatch, [_queued(attempts=1)])

    assert await flush_queue() == 0
    assert requeued == [(1, 4.0)]

# ruff: noqa: INP001
"""Redis list queue helper tests."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
import redis

from workorders.services.queue import QueuedTask, dequeue_task, enqueue_task, requeue_if_failed


class _FakeRedis:
    def __init__(self) -> None:
        self.values: list[str] = []
        self.delayed: dict[str, float] = {}

    def lpush(self, key: str, *values: str) -> None:
        del key
        for value in values:
            self.values.insert(0, value)

    def rpop(self, key: str) -> str | None:
        del key
        if not self.values:
            return None
        return self.values.pop()

    def zadd(self, key: str, mapping: dict[str, float]) -> None:
        del key
        self.delayed.update(mapping)


class _BrokenRedis:
    def lpush(self, key: str, *values: str) -> None:
        raise redis.ConnectionError("connection refused")


def _install(monkeypatch: pytest.MonkeyPatch, client: object) -> None:
    def _fake_redis(*, redis_url: str | None = None) -> object:
        return client

    monkeypatch.setattr("workorders.services.queue._redis_client", _fake_redis)


def _task(attempts: int = 0) -> QueuedTask:
    return QueuedTask(
        task_type="task_event",
        payload={"event_name": "task.updated", "payload": {"id": 3}},
        created_at=datetime.now(UTC),
        attempts=attempts,
    )


@pytest.mark.parametrize("attempts", [0, 2])
def test_queue_roundtrip_preserves_envelope(monkeypatch: pytest.MonkeyPatch, attempts: int) -> None:
    _install(monkeypatch, _FakeRedis())
    payload = _task(attempts)

    assert enqueue_task(payload, "workorders")
    item = dequeue_task("workorders")
    assert item is not None
    assert item.task_type == payload.task_type
    assert item.payload == payload.payload
    assert item.attempts == attempts
    assert dequeue_task("workorders") is None


def test_queue_is_fifo(monkeypatch: pytest.MonkeyPatch) -> None:
    _install(monkeypatch, _FakeRedis())
    for index in range(3):
        enqueue_task(_task(index), "workorders")
    assert [dequeue_task("workorders").attempts for _ in range(3)] == [0, 1, 2]  # type: ignore[union-attr]


def test_delayed_enqueue_parks_task_in_sorted_set(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = _FakeRedis()
    _install(monkeypatch, fake)

    assert enqueue_task(_task(), "workorders", delay_seconds=30)
    assert fake.values == []
    assert len(fake.delayed) == 1


def test_enqueue_reports_redis_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    _install(monkeypatch, _BrokenRedis())
    assert enqueue_task(_task(), "workorders") is False


@pytest.mark.parametrize("attempts", [0, 1, 2, 3])
def test_requeue_respects_retry_cap(monkeypatch: pytest.MonkeyPatch, attempts: int) -> None:
    fake = _FakeRedis()
    _install(monkeypatch, fake)

    if attempts >= 3:
        assert requeue_if_failed(_task(attempts), "workorders", max_retries=3) is False
        assert fake.values == []
    else:
        assert requeue_if_failed(_task(attempts), "workorders", max_retries=3) is True
        requeued = dequeue_task("workorders")
        assert requeued is not None
        assert requeued.attempts == attempts + 1


def test_decode_accepts_bytes() -> None:
    raw = _task(1).to_json().encode("utf-8")
    decoded = QueuedTask.from_json(raw)
    assert decoded.attempts == 1
    assert decoded.payload["payload"] == {"id": 3}

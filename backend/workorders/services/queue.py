"""Redis list queue carrying background work for the queue worker."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Any, cast

import redis

from workorders.core.config import settings
from workorders.core.logging import get_logger

logger = get_logger(__name__)

_DELAYED_SUFFIX = ":delayed"
_PROMOTE_BATCH_SIZE = 100


@dataclass(frozen=True)
class QueuedTask:
    """Envelope for one unit of queued work."""

    task_type: str
    payload: dict[str, Any]
    created_at: datetime
    attempts: int = 0

    def to_json(self) -> str:
        return json.dumps(
            {
                "task_type": self.task_type,
                "payload": self.payload,
                "created_at": self.created_at.isoformat(),
                "attempts": self.attempts,
            },
            sort_keys=True,
            default=str,
        )

    @classmethod
    def from_json(cls, raw: str | bytes) -> QueuedTask:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        data: dict[str, Any] = json.loads(raw)
        created_at = data.get("created_at")
        return cls(
            task_type=str(data["task_type"]),
            payload=dict(data.get("payload") or {}),
            created_at=datetime.fromisoformat(created_at) if created_at else datetime.now(UTC),
            attempts=int(data.get("attempts", 0)),
        )


def _redis_client(redis_url: str | None = None) -> redis.Redis:
    return redis.Redis.from_url(redis_url or settings.rq_redis_url)


def _delayed_key(queue_name: str) -> str:
    return f"{queue_name}{_DELAYED_SUFFIX}"


def _promote_due_tasks(client: redis.Redis, queue_name: str) -> float | None:
    """Move delayed tasks whose time has come onto the live list.

    Returns seconds until the next delayed task is due, or None when none wait.
    """
    delayed = _delayed_key(queue_name)
    now = time.time()
    due = cast(
        list[str | bytes],
        client.zrangebyscore(delayed, "-inf", now, start=0, num=_PROMOTE_BATCH_SIZE),
    )
    if due:
        client.lpush(queue_name, *due)
        client.zrem(delayed, *due)
        logger.debug("queue.promoted_delayed", extra={"queue_name": queue_name, "count": len(due)})

    upcoming = cast(
        list[tuple[str | bytes, float]],
        client.zrangebyscore(delayed, now, "+inf", start=0, num=1, withscores=True),
    )
    if not upcoming:
        return None
    return max(0.0, float(upcoming[0][1]) - now)


def enqueue_task(
    task: QueuedTask,
    queue_name: str,
    *,
    redis_url: str | None = None,
    delay_seconds: float = 0,
) -> bool:
    """Push a task onto the queue, optionally holding it back `delay_seconds`."""
    delay = max(0.0, float(delay_seconds))
    try:
        client = _redis_client(redis_url=redis_url)
        if delay:
            client.zadd(_delayed_key(queue_name), {task.to_json(): time.time() + delay})
        else:
            client.lpush(queue_name, task.to_json())
    except redis.RedisError as exc:
        logger.warning(
            "queue.enqueue_failed",
            extra={"task_type": task.task_type, "queue_name": queue_name, "error": str(exc)},
        )
        return False
    logger.info(
        "queue.enqueued",
        extra={
            "task_type": task.task_type,
            "queue_name": queue_name,
            "attempt": task.attempts,
            "delay_seconds": delay,
        },
    )
    return True


def dequeue_task(
    queue_name: str,
    *,
    redis_url: str | None = None,
    block: bool = False,
    block_timeout: float = 0,
) -> QueuedTask | None:
    """Pop the oldest task, or None when the queue is empty."""
    client = _redis_client(redis_url=redis_url)
    raw: str | bytes | None
    if block:
        next_due = _promote_due_tasks(client, queue_name)
        timeout = max(0.0, float(block_timeout))
        if next_due is not None:
            timeout = min(timeout, next_due) if timeout else next_due
        popped = cast(
            tuple[bytes | str, bytes | str] | None,
            client.brpop([queue_name], timeout=timeout),
        )
        raw = popped[1] if popped is not None else None
    else:
        raw = cast(str | bytes | None, client.rpop(queue_name))
    if raw is None:
        return None
    try:
        return QueuedTask.from_json(raw)
    except (ValueError, KeyError, TypeError) as exc:
        logger.error(
            "queue.decode_failed",
            extra={"queue_name": queue_name, "raw_payload": str(raw), "error": str(exc)},
        )
        raise


def requeue_if_failed(
    task: QueuedTask,
    queue_name: str,
    *,
    max_retries: int,
    redis_url: str | None = None,
    delay_seconds: float = 0,
) -> bool:
    """Re-enqueue a failed task with one more attempt; False once retries run out."""
    retried = replace(task, attempts=task.attempts + 1)
    if retried.attempts > max_retries:
        logger.warning(
            "queue.drop_failed_task",
            extra={
                "task_type": task.task_type,
                "queue_name": queue_name,
                "attempts": retried.attempts,
            },
        )
        return False
    return enqueue_task(retried, queue_name, redis_url=redis_url, delay_seconds=delay_seconds)

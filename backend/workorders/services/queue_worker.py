"""Queue worker consuming background tasks and dispatching them by task type."""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from workorders.core.config import settings
from workorders.core.logging import configure_logging, get_logger
from workorders.services.notifications.dispatch import (
    process_task_event_task,
    requeue_task_event_task,
)
from workorders.services.notifications.queue import TASK_TYPE as TASK_EVENT_TASK_TYPE
from workorders.services.queue import QueuedTask, dequeue_task

logger = get_logger(__name__)
_WORKER_BLOCK_TIMEOUT_SECONDS = 5.0


@dataclass(frozen=True)
class _TaskHandler:
    handler: Callable[[QueuedTask], Awaitable[None]]
    requeue: Callable[[QueuedTask, float], bool]


_TASK_HANDLERS: dict[str, _TaskHandler] = {
    TASK_EVENT_TASK_TYPE: _TaskHandler(
        handler=process_task_event_task,
        requeue=lambda task, delay: requeue_task_event_task(task, delay_seconds=delay),
    ),
}


def retry_delay_seconds(attempts: int) -> float:
    """Exponential backoff capped at the configured maximum, plus jitter."""
    base = min(
        settings.rq_dispatch_retry_base_seconds * (2 ** max(0, attempts)),
        settings.rq_dispatch_retry_max_seconds,
    )
    return base + random.uniform(0, base * 0.1)


async def flush_queue(*, block: bool = False, block_timeout: float = 0) -> int:
    """Drain the queue, returning how many tasks were handled successfully."""
    processed = 0
    while True:
        try:
            task = dequeue_task(
                settings.rq_queue_name,
                redis_url=settings.rq_redis_url,
                block=block,
                block_timeout=block_timeout,
            )
        except Exception:
            logger.exception(
                "queue.worker.dequeue_failed",
                extra={"queue_name": settings.rq_queue_name},
            )
            continue

        if task is None:
            break

        entry = _TASK_HANDLERS.get(task.task_type)
        if entry is None:
            logger.warning(
                "queue.worker.task_unhandled",
                extra={"task_type": task.task_type, "queue_name": settings.rq_queue_name},
            )
            continue

        try:
            await entry.handler(task)
            processed += 1
        except Exception as exc:
            logger.exception(
                "queue.worker.failed",
                extra={"task_type": task.task_type, "attempt": task.attempts, "error": str(exc)},
            )
            if not entry.requeue(task, retry_delay_seconds(task.attempts)):
                logger.warning(
                    "queue.worker.drop_task",
                    extra={"task_type": task.task_type, "attempt": task.attempts},
                )
        if settings.rq_dispatch_throttle_seconds:
            await asyncio.sleep(settings.rq_dispatch_throttle_seconds)

    if processed:
        logger.info("queue.worker.batch_complete", extra={"count": processed})
    return processed


async def _run_worker_loop() -> None:
    while True:
        try:
            # Finite timeout so delayed retries get promoted periodically.
            await flush_queue(block=True, block_timeout=_WORKER_BLOCK_TIMEOUT_SECONDS)
        except Exception:
            logger.exception("queue.worker.loop_failed", extra={"queue_name": settings.rq_queue_name})
            await asyncio.sleep(1)


def run_worker() -> None:
    """Blocking entrypoint for the queue worker process."""
    configure_logging()
    logger.info("queue.worker.started", extra={"queue_name": settings.rq_queue_name})
    try:
        asyncio.run(_run_worker_loop())
    finally:
        logger.info("queue.worker.stopped", extra={"queue_name": settings.rq_queue_name})


if __name__ == "__main__":
    run_worker()

"""rq-scheduler bootstrap for the minute-interval sweep jobs."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from redis import Redis
from rq_scheduler import Scheduler  # type: ignore[import-untyped]

from workorders.core.config import settings
from workorders.core.logging import get_logger
from workorders.services.autoclose import run_autoclose_job
from workorders.services.daily_schedule import run_daily_schedule_job

logger = get_logger(__name__)


def _sweep_jobs() -> list[tuple[str, Callable[[], None]]]:
    return [
        (settings.autoclose_schedule_id, run_autoclose_job),
        (settings.daily_schedule_schedule_id, run_daily_schedule_job),
    ]


def bootstrap_sweep_schedules(interval_seconds: int | None = None) -> None:
    """Register (or re-register) each sweep as a recurring scheduler job.

    Sweeps gate themselves on the civil clock and a daily watermark, so the
    scheduler only needs to tick them frequently.
    """
    connection = Redis.from_url(settings.rq_redis_url)
    scheduler = Scheduler(queue_name=settings.rq_queue_name, connection=connection)
    interval = settings.sweep_schedule_interval_seconds if interval_seconds is None else interval_seconds
    jobs = _sweep_jobs()
    job_ids = {job_id for job_id, _ in jobs}

    for job in scheduler.get_jobs():
        if job.id in job_ids:
            scheduler.cancel(job)

    first_run = datetime.now(tz=timezone.utc) + timedelta(seconds=5)
    for job_id, func in jobs:
        scheduler.schedule(
            first_run,
            func=func,
            interval=interval,
            repeat=None,
            id=job_id,
            queue_name=settings.rq_queue_name,
        )
        logger.info("scheduler.sweep.registered", extra={"job_id": job_id, "interval_seconds": interval})


if __name__ == "__main__":
    bootstrap_sweep_schedules()

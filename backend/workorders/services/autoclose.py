"""End-of-workday sweep closing tasks nobody started.

Runs every minute from rq-scheduler; does real work at most once per civil
day, guarded by a watermark row written in the same transaction as the bulk
update.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import and_, or_, update
from sqlmodel import col

from workorders.core.clock import Clock
from workorders.core.logging import get_logger
from workorders.db.session import async_session_maker
from workorders.models.app_settings import AUTOCLOSE_LAST_RUN_KEY
from workorders.models.tasks import Task
from workorders.services.notifications.sinks import TASKS_AUTO_CLOSED, build_notifier
from workorders.services.settings_store import DailyRunWatermark, SettingsStore

if TYPE_CHECKING:
    from datetime import datetime

    from sqlmodel.ext.asyncio.session import AsyncSession

    from workorders.services.notifications.sinks import NotificationSink

logger = get_logger(__name__)

# Tasks still in these states at the end of their day were never worked on.
UNSTARTED_STATUSES = ("draft", "sent", "received")


@dataclass(frozen=True)
class AutoCloseResult:
    ran_today: bool
    changed_count: int
    date: str
    end_time: str


async def run_autoclose_sweep(
    session: AsyncSession,
    *,
    notifier: NotificationSink,
    clock: Clock,
    now: datetime | None = None,
) -> AutoCloseResult:
    """Close today's unstarted tasks once the workday has ended."""
    now = now or clock.now()
    today = clock.today(now)
    civil_date = today.isoformat()
    civil_time = clock.civil_time(now)

    store = SettingsStore(session)
    end_time = await store.workday_end_time()
    if civil_time < end_time:
        return AutoCloseResult(ran_today=False, changed_count=0, date=civil_date, end_time=end_time)

    watermark = DailyRunWatermark(store, AUTOCLOSE_LAST_RUN_KEY)
    if await watermark.has_run_on(civil_date):
        return AutoCloseResult(ran_today=False, changed_count=0, date=civil_date, end_time=end_time)

    due_today = or_(
        and_(col(Task.due_date).is_(None), col(Task.start_date) == today),
        col(Task.due_date) == today,
    )
    statement = (
        update(Task)
        .where(col(Task.status).in_(UNSTARTED_STATUSES), due_today)
        .values(status="not_completed", updated_at=now)
        .execution_options(synchronize_session=False)
    )
    result = await session.exec(statement)  # type: ignore[call-overload]
    changed = int(result.rowcount or 0)
    await watermark.mark_run_on(civil_date)
    await session.commit()

    logger.info(
        "task.autoclose.completed",
        extra={"date": civil_date, "end_time": end_time, "changed_count": changed},
    )
    notifier.emit(TASKS_AUTO_CLOSED, {"count": changed, "date": civil_date, "end_time": end_time})
    return AutoCloseResult(ran_today=True, changed_count=changed, date=civil_date, end_time=end_time)


async def _run_scheduled_autoclose() -> AutoCloseResult:
    async with async_session_maker() as session:
        return await run_autoclose_sweep(session, notifier=build_notifier(), clock=Clock())


def run_autoclose_job() -> None:
    """RQ entrypoint invoked by the scheduler every tick."""
    try:
        asyncio.run(_run_scheduled_autoclose())
    except Exception:
        # The watermark was not written, so the next tick retries.
        logger.exception("task.autoclose.failed")

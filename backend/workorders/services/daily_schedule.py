"""Morning sweep publishing each active employee's schedule for the day."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlmodel import col

from workorders.core.clock import Clock, sunday_based_weekday
from workorders.core.logging import get_logger
from workorders.db.session import async_session_maker
from workorders.models.app_settings import DAILY_SCHEDULE_LAST_RUN_KEY
from workorders.models.employees import Employee
from workorders.models.tasks import Task
from workorders.services.notifications.sinks import SCHEDULE_DAILY, build_notifier
from workorders.services.settings_store import DailyRunWatermark, SettingsStore

if TYPE_CHECKING:
    from datetime import date, datetime

    from sqlmodel.ext.asyncio.session import AsyncSession

    from workorders.services.notifications.sinks import NotificationSink

logger = get_logger(__name__)

# Sunday through Thursday.
WORKING_WEEKDAYS = frozenset({0, 1, 2, 3, 4})
CLOSED_STATUSES = ("completed", "not_completed")


@dataclass(frozen=True)
class DailyScheduleResult:
    ran_today: bool
    employee_count: int
    date: str


async def _open_tasks_for(session: AsyncSession, employee_id: int, day: date) -> list[Task]:
    rows = await (
        Task.objects.filter(
            col(Task.employee_id) == employee_id,
            col(Task.start_date) == day,
            col(Task.status).not_in(CLOSED_STATUSES),
        )
        .order_by(col(Task.start_time).asc(), col(Task.id).asc())
        .all(session)
    )
    return list(rows)


async def run_daily_schedule_sweep(
    session: AsyncSession,
    *,
    notifier: NotificationSink,
    clock: Clock,
    now: datetime | None = None,
) -> DailyScheduleResult:
    """Emit one `schedule.daily` event per active employee with a phone."""
    now = now or clock.now()
    today = clock.today(now)
    civil_date = today.isoformat()
    if sunday_based_weekday(today) not in WORKING_WEEKDAYS:
        return DailyScheduleResult(ran_today=False, employee_count=0, date=civil_date)

    store = SettingsStore(session)
    if clock.civil_time(now) < await store.workday_start_time():
        return DailyScheduleResult(ran_today=False, employee_count=0, date=civil_date)

    watermark = DailyRunWatermark(store, DAILY_SCHEDULE_LAST_RUN_KEY)
    if await watermark.has_run_on(civil_date):
        return DailyScheduleResult(ran_today=False, employee_count=0, date=civil_date)

    employees = await (
        Employee.objects.filter(
            col(Employee.is_active).is_(True),
            col(Employee.phone).is_not(None),
            col(Employee.phone) != "",
        )
        .order_by(col(Employee.id).asc())
        .all(session)
    )
    schedules: list[dict[str, object]] = []
    for employee in employees:
        if employee.id is None:
            continue
        tasks = await _open_tasks_for(session, employee.id, today)
        schedules.append(
            {
                "employee_id": employee.id,
                "employee_name": employee.name,
                "phone": employee.phone,
                "language": employee.language,
                "date": civil_date,
                "tasks": [
                    {"id": task.id, "title": task.title, "start_time": task.start_time}
                    for task in tasks
                ],
            },
        )

    await watermark.mark_run_on(civil_date)
    await session.commit()

    for schedule in schedules:
        notifier.emit(SCHEDULE_DAILY, schedule)
    logger.info(
        "schedule.daily.completed",
        extra={"date": civil_date, "employee_count": len(schedules)},
    )
    return DailyScheduleResult(ran_today=True, employee_count=len(schedules), date=civil_date)


async def _run_scheduled_daily_schedule() -> DailyScheduleResult:
    async with async_session_maker() as session:
        return await run_daily_schedule_sweep(session, notifier=build_notifier(), clock=Clock())


def run_daily_schedule_job() -> None:
    """RQ entrypoint invoked by the scheduler every tick."""
    try:
        asyncio.run(_run_scheduled_daily_schedule())
    except Exception:
        logger.exception("schedule.daily.failed")

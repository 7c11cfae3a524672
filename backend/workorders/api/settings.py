"""Workday settings and on-demand sweep endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter

from workorders.api.deps import CLOCK_DEP, NOTIFIER_DEP, SESSION_DEP
from workorders.core.errors import ValidationError
from workorders.models.app_settings import WORKDAY_END_TIME_KEY, WORKDAY_START_TIME_KEY
from workorders.schemas.settings import WorkdaySettings, WorkdaySettingsUpdate
from workorders.schemas.sweeps import AutoCloseRunResponse, DailyScheduleRunResponse
from workorders.services.autoclose import run_autoclose_sweep
from workorders.services.daily_schedule import run_daily_schedule_sweep
from workorders.services.settings_store import SettingsStore

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

    from workorders.core.clock import Clock
    from workorders.services.notifications.sinks import NotificationSink

router = APIRouter(prefix="/settings", tags=["settings"])
sweeps_router = APIRouter(prefix="/sweeps", tags=["sweeps"])


async def _read_workday(store: SettingsStore) -> WorkdaySettings:
    return WorkdaySettings(
        workday_start_time=await store.workday_start_time(),
        workday_end_time=await store.workday_end_time(),
    )


@router.get("/workday", response_model=WorkdaySettings)
async def get_workday_settings(session: AsyncSession = SESSION_DEP) -> WorkdaySettings:
    return await _read_workday(SettingsStore(session))


@router.put("/workday", response_model=WorkdaySettings)
async def update_workday_settings(
    payload: WorkdaySettingsUpdate,
    session: AsyncSession = SESSION_DEP,
) -> WorkdaySettings:
    """Update workday boundaries used by timing and both sweeps."""
    store = SettingsStore(session)
    current = await _read_workday(store)
    start = payload.workday_start_time or current.workday_start_time
    end = payload.workday_end_time or current.workday_end_time
    if start >= end:
        raise ValidationError(
            "workday_start_time must be earlier than workday_end_time",
            workday_start_time=start,
            workday_end_time=end,
        )
    await store.upsert(WORKDAY_START_TIME_KEY, start)
    await store.upsert(WORKDAY_END_TIME_KEY, end)
    await session.commit()
    return WorkdaySettings(workday_start_time=start, workday_end_time=end)


@sweeps_router.post("/autoclose", response_model=AutoCloseRunResponse)
async def run_autoclose(
    session: AsyncSession = SESSION_DEP,
    notifier: NotificationSink = NOTIFIER_DEP,
    clock: Clock = CLOCK_DEP,
) -> AutoCloseRunResponse:
    """Run the end-of-workday sweep now; still gated by end time and watermark."""
    result = await run_autoclose_sweep(session, notifier=notifier, clock=clock)
    return AutoCloseRunResponse(
        ran_today=result.ran_today,
        changed_count=result.changed_count,
        date=result.date,
        end_time=result.end_time,
    )


@sweeps_router.post("/daily-schedule", response_model=DailyScheduleRunResponse)
async def run_daily_schedule(
    session: AsyncSession = SESSION_DEP,
    notifier: NotificationSink = NOTIFIER_DEP,
    clock: Clock = CLOCK_DEP,
) -> DailyScheduleRunResponse:
    result = await run_daily_schedule_sweep(session, notifier=notifier, clock=clock)
    return DailyScheduleRunResponse(
        ran_today=result.ran_today,
        employee_count=result.employee_count,
        date=result.date,
    )

"""Completed-task history with punctuality statistics."""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Any

from sqlalchemy import case, func, or_
from sqlmodel import col, select

from workorders.models.locations import System
from workorders.models.tasks import Task
from workorders.schemas.history import (
    DEFAULT_HISTORY_WINDOW_DAYS,
    HistoryFilters,
    HistoryPage,
    HistoryPagination,
    HistoryStats,
)
from workorders.services.task_lifecycle import enrich_tasks

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

    from workorders.core.clock import Clock

_MIDNIGHT = "00:00"


def _conditions(filters: HistoryFilters, *, clock: Clock) -> list[Any]:
    start_day = filters.start_date or clock.today() - timedelta(days=DEFAULT_HISTORY_WINDOW_DAYS)
    conditions: list[Any] = [
        col(Task.status) == "completed",
        col(Task.completed_at) >= clock.combine(start_day, _MIDNIGHT),
    ]
    if filters.end_date is not None:
        # Inclusive of the whole civil end day.
        conditions.append(
            col(Task.completed_at) < clock.combine(filters.end_date + timedelta(days=1), _MIDNIGHT),
        )
    if filters.employee_id is not None:
        conditions.append(col(Task.employee_id) == filters.employee_id)
    if filters.system_id is not None:
        conditions.append(col(Task.system_id) == filters.system_id)
    if filters.location_id is not None:
        conditions.append(
            or_(
                col(Task.location_id) == filters.location_id,
                col(System.location_id) == filters.location_id,
            ),
        )
    return conditions


async def list_completion_history(
    session: AsyncSession,
    filters: HistoryFilters,
    *,
    clock: Clock,
) -> HistoryPage:
    """Page of completed tasks (newest first) plus stats over the whole window."""
    conditions = _conditions(filters, clock=clock)
    system_join = (System, col(Task.system_id) == col(System.id))

    tasks = await (
        Task.objects.outerjoin(*system_join)
        .filter(*conditions)
        .order_by(col(Task.completed_at).desc(), col(Task.id).desc())
        .offset(filters.offset)
        .limit(filters.limit)
        .all(session)
    )

    late = col(Task.time_delta_minutes) > 0
    stats_statement = (
        select(func.count(col(Task.id)), func.coalesce(func.sum(case((late, 1), else_=0)), 0))
        .select_from(Task)
        .outerjoin(*system_join)
        .where(*conditions)
    )
    total, total_late = (await session.exec(stats_statement)).one()
    total = int(total or 0)
    total_late = int(total_late or 0)
    # A missing delta counts as on time.
    on_time = round(100.0 * (total - total_late) / total, 1) if total else 0.0

    return HistoryPage(
        tasks=await enrich_tasks(session, tasks, clock=clock),
        pagination=HistoryPagination(
            total=total,
            limit=filters.limit,
            offset=filters.offset,
            has_more=filters.offset + filters.limit < total,
        ),
        stats=HistoryStats(total_completed=total, total_late=total_late, on_time_percentage=on_time),
    )

"""Completion history report endpoint."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from fastapi import APIRouter, Query

from workorders.api.deps import CLOCK_DEP, SESSION_DEP
from workorders.schemas.history import DEFAULT_HISTORY_LIMIT, HistoryFilters, HistoryPage
from workorders.services.history import list_completion_history

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

    from workorders.core.clock import Clock

router = APIRouter(prefix="/history", tags=["history"])


@router.get("", response_model=HistoryPage)
async def get_completion_history(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    employee_id: int | None = Query(default=None),
    system_id: int | None = Query(default=None),
    location_id: int | None = Query(default=None),
    limit: int = Query(default=DEFAULT_HISTORY_LIMIT, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    session: AsyncSession = SESSION_DEP,
    clock: Clock = CLOCK_DEP,
) -> HistoryPage:
    """Completed tasks in a civil-date window (default last 7 days) with stats."""
    filters = HistoryFilters(
        start_date=start_date,
        end_date=end_date,
        employee_id=employee_id,
        system_id=system_id,
        location_id=location_id,
        limit=limit,
        offset=offset,
    )
    return await list_completion_history(session, filters, clock=clock)

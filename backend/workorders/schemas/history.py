"""Schemas for the completion history report."""

from __future__ import annotations

from datetime import date

from sqlmodel import Field, SQLModel

from workorders.schemas.tasks import TaskRead

RUNTIME_ANNOTATION_TYPES = (date,)
DEFAULT_HISTORY_LIMIT = 50
DEFAULT_HISTORY_WINDOW_DAYS = 7


class HistoryFilters(SQLModel):
    """Civil-date window and reference filters over completed tasks."""

    start_date: date | None = None
    end_date: date | None = None
    employee_id: int | None = None
    system_id: int | None = None
    location_id: int | None = None
    limit: int = Field(default=DEFAULT_HISTORY_LIMIT, ge=1, le=500)
    offset: int = Field(default=0, ge=0)


class HistoryPagination(SQLModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class HistoryStats(SQLModel):
    total_completed: int = 0
    total_late: int = 0
    on_time_percentage: float = 0.0


class HistoryPage(SQLModel):
    tasks: list[TaskRead] = Field(default_factory=list)
    pagination: HistoryPagination
    stats: HistoryStats

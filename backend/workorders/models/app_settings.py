"""Flat key/value table for process-wide durable settings."""

from __future__ import annotations

from datetime import datetime

from sqlmodel import Field

from workorders.core.time import utcnow
from workorders.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)

WORKDAY_START_TIME_KEY = "workday_start_time"
WORKDAY_END_TIME_KEY = "workday_end_time"
DAILY_SCHEDULE_LAST_RUN_KEY = "daily_schedule_last_run_date"
AUTOCLOSE_LAST_RUN_KEY = "task_autoclose_last_run_date"


class AppSetting(QueryModel, table=True):
    """One durable setting row; written by operators and sweep jobs."""

    __tablename__ = "settings"  # pyright: ignore[reportAssignmentType]

    key: str = Field(primary_key=True)
    value: str
    updated_at: datetime = Field(default_factory=utcnow)

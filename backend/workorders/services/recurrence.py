"""Occurrence date arithmetic for recurring tasks."""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import TYPE_CHECKING

from workorders.core.clock import sunday_based_weekday
from workorders.core.logging import get_logger
from workorders.models.tasks import Task

if TYPE_CHECKING:
    from collections.abc import Collection
    from datetime import datetime

logger = get_logger(__name__)

DAILY_LOOKAHEAD_DAYS = 30
# Size of the batch materialized when a recurring task is first created.
INITIAL_OCCURRENCE_COUNTS: dict[str, int] = {
    "weekly": 12,
    "biweekly": 6,
    "monthly": 6,
    "semi-annual": 4,
    "annual": 3,
}
_DAY_STEPS = {"daily": 1, "weekly": 7, "biweekly": 14}
_MONTH_STEPS = {"monthly": 1, "semi-annual": 6, "annual": 12}

# Fields carried verbatim from an occurrence to its successor.
_COPIED_FIELDS = (
    "title",
    "description",
    "system_id",
    "employee_id",
    "location_id",
    "building_id",
    "frequency",
    "start_time",
    "due_date",
    "weekly_days",
    "estimated_duration_minutes",
    "priority",
)


def add_months(day: date, months: int) -> date:
    """Calendar month arithmetic, clamping the day to the target month's length."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def step_date(frequency: str, anchor: date, steps: int) -> date:
    """Date `steps` intervals after `anchor` for a fixed-interval frequency."""
    if frequency in _DAY_STEPS:
        return anchor + timedelta(days=_DAY_STEPS[frequency] * steps)
    if frequency in _MONTH_STEPS:
        return add_months(anchor, _MONTH_STEPS[frequency] * steps)
    raise ValueError(f"Frequency {frequency!r} has no recurrence interval")


def _next_matching_weekday(current: date, weekly_days: Collection[int]) -> date | None:
    for offset in range(1, DAILY_LOOKAHEAD_DAYS + 1):
        candidate = current + timedelta(days=offset)
        if sunday_based_weekday(candidate) in weekly_days:
            return candidate
    return None


def next_occurrence_date(
    frequency: str,
    current: date,
    weekly_days: Collection[int] | None = None,
) -> date | None:
    """Start date of the occurrence following one dated `current`.

    Returns None for one-time tasks and when a weekday-restricted daily task
    has no matching weekday within the lookahead window.
    """
    if frequency == "one-time":
        return None
    if frequency == "daily" and weekly_days:
        return _next_matching_weekday(current, weekly_days)
    return step_date(frequency, current, 1)


def initial_occurrence_dates(
    frequency: str,
    start_date: date,
    weekly_days: Collection[int] | None,
    *,
    today: date,
) -> list[date]:
    """Dates materialized eagerly when a recurring task is created.

    Daily tasks fill the next 30 days starting tomorrow (optionally restricted
    to `weekly_days`). Other frequencies produce a fixed count of occurrences
    anchored at `start_date`.
    """
    if frequency == "daily":
        window = [today + timedelta(days=offset) for offset in range(1, DAILY_LOOKAHEAD_DAYS + 1)]
        if weekly_days:
            return [day for day in window if sunday_based_weekday(day) in weekly_days]
        return window
    count = INITIAL_OCCURRENCE_COUNTS.get(frequency)
    if count is None:
        return [start_date]
    # Step from the anchor each time so month-end clamping never accumulates.
    return [step_date(frequency, start_date, index) for index in range(count)]


def clone_occurrence(template: Task, *, start_date: date, now: datetime) -> Task:
    """New draft occurrence sharing the template's scheduling fields."""
    values = {name: getattr(template, name) for name in _COPIED_FIELDS}
    if values["weekly_days"] is not None:
        values["weekly_days"] = list(values["weekly_days"])
    return Task(
        **values,
        start_date=start_date,
        is_recurring=True,
        status="draft",
        created_at=now,
        updated_at=now,
    )


def build_follow_up(task: Task, *, now: datetime) -> Task | None:
    """Successor occurrence for a just-completed recurring task, if any."""
    if not task.is_recurring or task.frequency == "one-time":
        return None
    next_date = next_occurrence_date(task.frequency, task.start_date, task.weekly_days)
    if next_date is None:
        logger.info(
            "task.recurrence.no_next_date",
            extra={
                "task_id": task.id,
                "frequency": task.frequency,
                "weekly_days": task.weekly_days,
                "lookahead_days": DAILY_LOOKAHEAD_DAYS,
            },
        )
        return None
    follow_up = clone_occurrence(task, start_date=next_date, now=now)
    follow_up.parent_task_id = task.id
    return follow_up

"""Schemas for task create/update/status/read API operations."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Self

from pydantic import field_validator, model_validator
from sqlmodel import Field, SQLModel

from workorders.core.config import CLOCK_TIME_PATTERN
from workorders.models.tasks import FREQUENCIES, PRIORITIES, TASK_STATUSES

RUNTIME_ANNOTATION_TYPES = (date, datetime)

_ERR_TITLE_REQUIRED = "title is required"
_ERR_START_TIME_FORMAT = "start_time must be formatted as HH:MM"
_ERR_RECURRING_START_TIME = "start_time is required for recurring tasks"
_ERR_DUE_DATE_ONE_TIME = "due_date is only valid for one-time tasks"
_ERR_STATUS_VIA_UPDATE = "status cannot be changed here; use the status endpoint"

# Columns a partial update may change but never clear.
NON_NULLABLE_UPDATE_FIELDS = frozenset(
    {"title", "frequency", "start_date", "estimated_duration_minutes", "priority", "is_starred"},
)


def _check_choice(value: str | None, choices: tuple[str, ...], name: str) -> str | None:
    if value is not None and value not in choices:
        raise ValueError(f"{name} must be one of: {', '.join(choices)}")
    return value


def _check_clock_time(value: str | None) -> str | None:
    if value is None or value == "":
        return None
    if not CLOCK_TIME_PATTERN.match(value):
        raise ValueError(_ERR_START_TIME_FORMAT)
    return value


def _check_weekly_days(value: list[int] | None) -> list[int] | None:
    if value is None:
        return None
    if any(day < 0 or day > 6 for day in value):
        raise ValueError("weekly_days entries must be between 0 (Sunday) and 6 (Saturday)")
    return sorted(set(value))


class TaskBase(SQLModel):
    """Scheduling and reference fields shared by create and read payloads."""

    title: str
    description: str | None = None
    system_id: int | None = None
    employee_id: int | None = None
    location_id: int | None = None
    building_id: int | None = None
    frequency: str = "one-time"
    start_date: date
    start_time: str | None = None
    due_date: date | None = None
    weekly_days: list[int] | None = None
    estimated_duration_minutes: int = Field(default=30, ge=1)
    priority: str = "normal"


class TaskCreate(TaskBase):
    """Payload for creating a task (and its recurring occurrences)."""

    is_recurring: bool | None = None
    # Optional initial status; only terminal/approval states are honored.
    status: str | None = None

    @field_validator("frequency")
    @classmethod
    def _frequency(cls, value: str) -> str:
        return _check_choice(value, FREQUENCIES, "frequency") or value

    @field_validator("priority")
    @classmethod
    def _priority(cls, value: str) -> str:
        return _check_choice(value, PRIORITIES, "priority") or value

    @field_validator("status")
    @classmethod
    def _status(cls, value: str | None) -> str | None:
        return _check_choice(value, TASK_STATUSES, "status")

    @field_validator("start_time")
    @classmethod
    def _start_time(cls, value: str | None) -> str | None:
        return _check_clock_time(value)

    @field_validator("weekly_days")
    @classmethod
    def _weekly_days(cls, value: list[int] | None) -> list[int] | None:
        return _check_weekly_days(value)

    @model_validator(mode="after")
    def _consistency(self) -> Self:
        title = self.title.strip()
        if not title:
            raise ValueError(_ERR_TITLE_REQUIRED)
        self.title = title
        if self.is_recurring is None:
            self.is_recurring = self.frequency != "one-time"
        if self.frequency == "one-time":
            self.is_recurring = False
        if self.is_recurring:
            if not self.start_time:
                raise ValueError(_ERR_RECURRING_START_TIME)
            if self.due_date is not None:
                raise ValueError(_ERR_DUE_DATE_ONE_TIME)
        if self.frequency != "daily":
            self.weekly_days = None
        return self


class TaskUpdate(SQLModel):
    """Partial update of non-lifecycle task fields."""

    title: str | None = None
    description: str | None = None
    system_id: int | None = None
    employee_id: int | None = None
    location_id: int | None = None
    building_id: int | None = None
    frequency: str | None = None
    start_date: date | None = None
    start_time: str | None = None
    due_date: date | None = None
    weekly_days: list[int] | None = None
    estimated_duration_minutes: int | None = Field(default=None, ge=1)
    priority: str | None = None
    is_starred: bool | None = None

    @model_validator(mode="before")
    @classmethod
    def _reject_status(cls, data: Any) -> Any:
        if isinstance(data, dict) and "status" in data:
            raise ValueError(_ERR_STATUS_VIA_UPDATE)
        return data

    @model_validator(mode="before")
    @classmethod
    def _reject_cleared_required(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        cleared = sorted(key for key in NON_NULLABLE_UPDATE_FIELDS if key in data and data[key] is None)
        if cleared:
            raise ValueError(f"{', '.join(cleared)} cannot be null")
        return data

    @field_validator("title")
    @classmethod
    def _title(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            raise ValueError(_ERR_TITLE_REQUIRED)
        return value.strip() if value is not None else None

    @field_validator("frequency")
    @classmethod
    def _frequency(cls, value: str | None) -> str | None:
        return _check_choice(value, FREQUENCIES, "frequency")

    @field_validator("priority")
    @classmethod
    def _priority(cls, value: str | None) -> str | None:
        return _check_choice(value, PRIORITIES, "priority")

    @field_validator("start_time")
    @classmethod
    def _start_time(cls, value: str | None) -> str | None:
        return _check_clock_time(value)

    @field_validator("weekly_days")
    @classmethod
    def _weekly_days(cls, value: list[int] | None) -> list[int] | None:
        return _check_weekly_days(value)


class TaskStatusUpdate(SQLModel):
    status: str

    @field_validator("status")
    @classmethod
    def _status(cls, value: str) -> str:
        return _check_choice(value, TASK_STATUSES, "status") or value


class TaskRead(TaskBase):
    """Task with display-name joins and live timing fields."""

    id: int
    is_recurring: bool
    parent_task_id: int | None = None
    status: str
    sent_at: datetime | None = None
    acknowledged_at: datetime | None = None
    completed_at: datetime | None = None
    completion_note: str | None = None
    is_starred: bool = False
    created_at: datetime
    updated_at: datetime

    employee_name: str | None = None
    system_name: str | None = None
    location_name: str | None = None
    building_name: str | None = None

    estimated_end: datetime | None = None
    estimated_end_time: str | None = None
    is_late: bool | None = None
    minutes_remaining: int | None = None
    minutes_remaining_text: str | None = None
    timing_status: str | None = None
    time_delta_minutes: int | None = None
    time_delta_text: str | None = None


class TaskCreateResponse(SQLModel):
    """First materialized occurrence plus how many occurrences were created."""

    task: TaskRead
    created_count: int


class TaskDeleteResponse(SQLModel):
    ok: bool = True
    id: int

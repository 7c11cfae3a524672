"""Task model representing one scheduled maintenance work order occurrence."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import JSON, Column
from sqlmodel import Field

from workorders.core.time import utcnow
from workorders.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (date, datetime)

FREQUENCIES = ("one-time", "daily", "weekly", "biweekly", "monthly", "semi-annual", "annual")
TASK_STATUSES = (
    "draft",
    "sent",
    "received",
    "in_progress",
    "pending_approval",
    "completed",
    "not_completed",
)
TERMINAL_STATUSES = frozenset({"completed", "not_completed"})
PRIORITIES = ("urgent", "normal", "optional")
DEFAULT_DURATION_MINUTES = 30


class Task(QueryModel, table=True):
    """Work order occurrence with scheduling, lifecycle and completion fields."""

    __tablename__ = "tasks"  # pyright: ignore[reportAssignmentType]

    id: int | None = Field(default=None, primary_key=True)

    title: str
    description: str | None = None
    system_id: int | None = Field(
        default=None, foreign_key="systems.id", ondelete="SET NULL", index=True
    )
    employee_id: int | None = Field(
        default=None, foreign_key="employees.id", ondelete="SET NULL", index=True
    )
    location_id: int | None = Field(
        default=None, foreign_key="locations.id", ondelete="SET NULL", index=True
    )
    building_id: int | None = Field(
        default=None, foreign_key="buildings.id", ondelete="SET NULL", index=True
    )

    frequency: str = Field(default="one-time", index=True)
    start_date: date = Field(index=True)
    start_time: str | None = None  # HH:MM civil time; optional for one-time tasks
    due_date: date | None = Field(default=None, index=True)
    # Weekday numbers, 0=Sunday..6=Saturday; only meaningful for daily tasks.
    weekly_days: list[int] | None = Field(default=None, sa_column=Column(JSON))
    estimated_duration_minutes: int = Field(default=DEFAULT_DURATION_MINUTES)
    priority: str = Field(default="normal")

    is_recurring: bool = Field(default=False)
    parent_task_id: int | None = Field(
        default=None, foreign_key="tasks.id", ondelete="SET NULL", index=True
    )
    status: str = Field(default="draft", index=True)
    sent_at: datetime | None = None
    acknowledged_at: datetime | None = None
    completed_at: datetime | None = None
    time_delta_minutes: int | None = None
    completion_note: str | None = None
    is_starred: bool = Field(default=False)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_one_time(self) -> bool:
        return not self.is_recurring or self.frequency == "one-time"

"""Confirmation token binding one employee to a fixed set of tasks."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Column
from sqlmodel import Field

from workorders.core.time import utcnow
from workorders.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)


class TaskConfirmation(QueryModel, table=True):
    """Opaque, expiring capability token over the task ids captured at issuance."""

    __tablename__ = "task_confirmations"  # pyright: ignore[reportAssignmentType]

    id: int | None = Field(default=None, primary_key=True)
    token: str = Field(unique=True, index=True)
    employee_id: int = Field(foreign_key="employees.id", ondelete="CASCADE", index=True)
    task_ids: list[int] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    is_acknowledged: bool = Field(default=False)
    acknowledged_at: datetime | None = None
    expires_at: datetime
    created_at: datetime = Field(default_factory=utcnow)

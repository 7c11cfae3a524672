"""Schemas for the token-based task confirmation endpoints."""

from __future__ import annotations

from datetime import datetime

from sqlmodel import Field, SQLModel

from workorders.schemas.tasks import TaskRead

RUNTIME_ANNOTATION_TYPES = (datetime,)


class ConfirmationGenerate(SQLModel):
    employee_id: int
    task_ids: list[int] = Field(min_length=1)


class ConfirmationIssued(SQLModel):
    token: str
    employee_id: int
    task_ids: list[int]
    expires_at: datetime
    url: str | None = None


class ConfirmationEmployee(SQLModel):
    id: int
    name: str
    phone: str | None = None
    language: str = "he"


class ConfirmationRead(SQLModel):
    """What the assignee sees when opening a confirmation link."""

    employee: ConfirmationEmployee | None = None
    tasks: list[TaskRead] = Field(default_factory=list)
    is_acknowledged: bool
    acknowledged_at: datetime | None = None
    expires_at: datetime


class ConfirmationTaskStatusUpdate(SQLModel):
    status: str


class ConfirmationComplete(SQLModel):
    task_id: int
    note: str | None = None


class ConfirmationAcknowledged(SQLModel):
    ok: bool = True
    already_acknowledged: bool
    acknowledged_at: datetime | None = None
    affected_task_ids: list[int] = Field(default_factory=list)

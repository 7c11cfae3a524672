"""Employee directory rows referenced by tasks and confirmation tokens."""

from __future__ import annotations

from datetime import datetime

from sqlmodel import Field

from workorders.core.time import utcnow
from workorders.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)


class Employee(QueryModel, table=True):
    """Staff member who can be assigned tasks. Managed outside this service."""

    __tablename__ = "employees"  # pyright: ignore[reportAssignmentType]

    id: int | None = Field(default=None, primary_key=True)
    name: str
    phone: str | None = None
    language: str = Field(default="he")
    is_active: bool = Field(default=True, index=True)
    created_at: datetime = Field(default_factory=utcnow)

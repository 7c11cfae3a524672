"""Location, building and system directory rows used for display joins."""

from __future__ import annotations

from datetime import datetime

from sqlmodel import Field

from workorders.core.time import utcnow
from workorders.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)


class Location(QueryModel, table=True):
    __tablename__ = "locations"  # pyright: ignore[reportAssignmentType]

    id: int | None = Field(default=None, primary_key=True)
    name: str
    created_at: datetime = Field(default_factory=utcnow)


class Building(QueryModel, table=True):
    __tablename__ = "buildings"  # pyright: ignore[reportAssignmentType]

    id: int | None = Field(default=None, primary_key=True)
    name: str
    location_id: int | None = Field(
        default=None, foreign_key="locations.id", ondelete="SET NULL", index=True
    )
    created_at: datetime = Field(default_factory=utcnow)


class System(QueryModel, table=True):
    """Maintained installation (HVAC, elevator, ...) tasks are raised against."""

    __tablename__ = "systems"  # pyright: ignore[reportAssignmentType]

    id: int | None = Field(default=None, primary_key=True)
    name: str
    location_id: int | None = Field(
        default=None, foreign_key="locations.id", ondelete="SET NULL", index=True
    )
    created_at: datetime = Field(default_factory=utcnow)

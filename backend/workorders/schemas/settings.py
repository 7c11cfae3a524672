"""Schemas for workday boundary settings."""

from __future__ import annotations

from typing import Self

from pydantic import field_validator, model_validator
from sqlmodel import SQLModel

from workorders.core.config import CLOCK_TIME_PATTERN


class WorkdaySettings(SQLModel):
    workday_start_time: str
    workday_end_time: str


class WorkdaySettingsUpdate(SQLModel):
    """Partial update; each provided value must be `HH:MM`."""

    workday_start_time: str | None = None
    workday_end_time: str | None = None

    @field_validator("workday_start_time", "workday_end_time")
    @classmethod
    def _clock_time(cls, value: str | None) -> str | None:
        if value is not None and not CLOCK_TIME_PATTERN.match(value):
            raise ValueError("workday times must be formatted as HH:MM")
        return value

    @model_validator(mode="after")
    def _ordered(self) -> Self:
        if (
            self.workday_start_time is not None
            and self.workday_end_time is not None
            and self.workday_start_time >= self.workday_end_time
        ):
            raise ValueError("workday_start_time must be earlier than workday_end_time")
        return self

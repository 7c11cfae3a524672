"""Responses for on-demand sweep runs."""

from __future__ import annotations

from sqlmodel import SQLModel


class AutoCloseRunResponse(SQLModel):
    ran_today: bool
    changed_count: int
    date: str
    end_time: str


class DailyScheduleRunResponse(SQLModel):
    ran_today: bool
    employee_count: int
    date: str

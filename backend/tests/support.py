# ruff: noqa: INP001
"""Shared builders for database-backed service tests."""

from __future__ import annotations

from datetime import date
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from workorders.core.clock import FixedClock
from workorders.db.session import _enable_sqlite_foreign_keys
from workorders.models.tasks import Task

TZ = "Asia/Jerusalem"


class RecordingNotifier:
    """Notification sink that keeps every emitted event in memory."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def emit(self, event_name: str, payload: dict[str, Any]) -> None:
        self.events.append((event_name, payload))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]


async def make_engine(url: str = "sqlite+aiosqlite:///:memory:", **options: Any) -> AsyncEngine:
    engine = create_async_engine(url, **options)
    _enable_sqlite_foreign_keys(engine)
    async with engine.connect() as conn, conn.begin():
        await conn.run_sync(SQLModel.metadata.create_all)
    return engine


def make_session(engine: AsyncEngine) -> AsyncSession:
    return AsyncSession(engine, expire_on_commit=False)


def clock_at(day: date, clock_time: str) -> FixedClock:
    return FixedClock.at_civil(day, clock_time, TZ)


async def add_task(session: AsyncSession, **values: Any) -> Task:
    values.setdefault("title", "Check pumps")
    values.setdefault("start_date", date(2024, 1, 1))
    task = Task(**values)
    session.add(task)
    await session.commit()
    await session.refresh(task)
    return task

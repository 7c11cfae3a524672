"""Durable key/value settings and per-day run watermarks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from workorders.core.config import settings
from workorders.core.time import utcnow
from workorders.models.app_settings import (
    WORKDAY_END_TIME_KEY,
    WORKDAY_START_TIME_KEY,
    AppSetting,
)

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession


class SettingsStore:
    """get / upsert over the `settings` table.

    `upsert` only stages the row on the session; callers own the commit so a
    watermark can land in the same transaction as the work it guards.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, key: str) -> str | None:
        row = await self.session.get(AppSetting, key)
        return row.value if row is not None else None

    async def upsert(self, key: str, value: str) -> AppSetting:
        row = await self.session.get(AppSetting, key)
        if row is None:
            row = AppSetting(key=key, value=value)
        else:
            row.value = value
            row.updated_at = utcnow()
        self.session.add(row)
        return row

    async def workday_start_time(self) -> str:
        return await self.get(WORKDAY_START_TIME_KEY) or settings.default_workday_start_time

    async def workday_end_time(self) -> str:
        return await self.get(WORKDAY_END_TIME_KEY) or settings.default_workday_end_time


@dataclass(frozen=True)
class DailyRunWatermark:
    """Exactly-once-per-civil-day marker for a sweep job."""

    store: SettingsStore
    key: str

    async def has_run_on(self, civil_date: str) -> bool:
        return await self.store.get(self.key) == civil_date

    async def mark_run_on(self, civil_date: str) -> None:
        await self.store.upsert(self.key, civil_date)

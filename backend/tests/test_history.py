# ruff: noqa: INP001
"""Completion history window, filters, pagination and punctuality stats."""

from __future__ import annotations

from datetime import date

import pytest

from support import add_task, clock_at, make_engine, make_session

from workorders.models.locations import Location, System
from workorders.schemas.history import HistoryFilters
from workorders.services.history import list_completion_history

TODAY = date(2024, 1, 10)


def _at(day: date, clock_time: str):  # type: ignore[no-untyped-def]
    return clock_at(day, clock_time).now()


async def _completed(session, title: str, day: date, delta: int | None = 0, **values):  # type: ignore[no-untyped-def]
    return await add_task(
        session,
        title=title,
        start_date=day,
        status="completed",
        completed_at=_at(day, "12:00"),
        time_delta_minutes=delta,
        **values,
    )


@pytest.mark.asyncio
async def test_default_window_is_last_seven_civil_days() -> None:
    engine = await make_engine()
    try:
        async with make_session(engine) as session:
            await _completed(session, "too-old", date(2024, 1, 2))
            await _completed(session, "edge", date(2024, 1, 3))
            await _completed(session, "recent", date(2024, 1, 9), delta=25)
            await add_task(session, title="open", start_date=date(2024, 1, 9))
            await add_task(session, title="closed-unfinished", start_date=date(2024, 1, 9), status="not_completed")

            page = await list_completion_history(session, HistoryFilters(), clock=clock_at(TODAY, "09:00"))

            assert [task.title for task in page.tasks] == ["recent", "edge"]
            assert page.stats.total_completed == 2
            assert page.stats.total_late == 1
            assert page.stats.on_time_percentage == 50.0
            assert page.pagination.has_more is False
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_end_date_includes_whole_civil_day() -> None:
    engine = await make_engine()
    try:
        async with make_session(engine) as session:
            late_evening = await add_task(
                session,
                title="late-evening",
                status="completed",
                completed_at=_at(date(2024, 1, 5), "23:30"),
            )
            await add_task(
                session,
                title="next-morning",
                status="completed",
                completed_at=_at(date(2024, 1, 6), "00:10"),
            )
            filters = HistoryFilters(start_date=date(2024, 1, 5), end_date=date(2024, 1, 5))
            page = await list_completion_history(session, filters, clock=clock_at(TODAY, "09:00"))
            assert [task.id for task in page.tasks] == [late_evening.id]
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_location_filter_matches_task_or_system_location() -> None:
    engine = await make_engine()
    try:
        async with make_session(engine) as session:
            north = Location(name="North")
            south = Location(name="South")
            session.add_all([north, south])
            await session.commit()
            chiller = System(name="Chiller", location_id=north.id)
            session.add(chiller)
            await session.commit()

            await _completed(session, "direct", date(2024, 1, 8), location_id=north.id)
            await _completed(session, "via-system", date(2024, 1, 8), system_id=chiller.id)
            await _completed(session, "elsewhere", date(2024, 1, 8), location_id=south.id)

            filters = HistoryFilters(location_id=north.id)
            page = await list_completion_history(session, filters, clock=clock_at(TODAY, "09:00"))
            assert sorted(task.title for task in page.tasks) == ["direct", "via-system"]
            assert {task.title: task.system_name for task in page.tasks}["via-system"] == "Chiller"
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_pagination_keeps_stats_over_full_window() -> None:
    engine = await make_engine()
    try:
        async with make_session(engine) as session:
            for index in range(5):
                await _completed(session, f"task-{index}", date(2024, 1, 4 + index), delta=index - 2)

            filters = HistoryFilters(limit=2, offset=1)
            page = await list_completion_history(session, filters, clock=clock_at(TODAY, "09:00"))

            assert [task.title for task in page.tasks] == ["task-3", "task-2"]
            assert page.pagination.total == 5
            assert page.pagination.has_more is True
            assert page.stats.total_late == 2
            assert page.stats.on_time_percentage == 60.0
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_empty_window_reports_zero_percentage() -> None:
    engine = await make_engine()
    try:
        async with make_session(engine) as session:
            page = await list_completion_history(session, HistoryFilters(), clock=clock_at(TODAY, "09:00"))
            assert page.tasks == []
            assert page.stats.on_time_percentage == 0.0
    finally:
        await engine.dispose()

# ruff: noqa: INP001
"""Occurrence date arithmetic and follow-up construction."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from workorders.models.tasks import Task
from workorders.services.recurrence import (
    DAILY_LOOKAHEAD_DAYS,
    INITIAL_OCCURRENCE_COUNTS,
    add_months,
    build_follow_up,
    clone_occurrence,
    initial_occurrence_dates,
    next_occurrence_date,
)

NOW = datetime(2024, 1, 1, 12, 0)


@pytest.mark.parametrize(
    ("day", "months", "expected"),
    [
        (date(2024, 1, 31), 1, date(2024, 2, 29)),
        (date(2023, 1, 31), 1, date(2023, 2, 28)),
        (date(2024, 8, 31), 6, date(2025, 2, 28)),
        (date(2024, 2, 29), 12, date(2025, 2, 28)),
        (date(2024, 11, 15), 2, date(2025, 1, 15)),
    ],
)
def test_add_months_clamps_to_month_length(day: date, months: int, expected: date) -> None:
    assert add_months(day, months) == expected


@pytest.mark.parametrize(
    ("frequency", "current", "expected"),
    [
        ("daily", date(2024, 1, 1), date(2024, 1, 2)),
        ("weekly", date(2024, 1, 1), date(2024, 1, 8)),
        ("biweekly", date(2024, 1, 1), date(2024, 1, 15)),
        ("monthly", date(2024, 1, 31), date(2024, 2, 29)),
        ("semi-annual", date(2024, 3, 10), date(2024, 9, 10)),
        ("annual", date(2024, 2, 29), date(2025, 2, 28)),
    ],
)
def test_next_occurrence_date_by_frequency(frequency: str, current: date, expected: date) -> None:
    assert next_occurrence_date(frequency, current) == expected


def test_one_time_has_no_next_occurrence() -> None:
    assert next_occurrence_date("one-time", date(2024, 1, 1)) is None


def test_daily_with_weekdays_skips_to_next_selected_day() -> None:
    # 2024-01-01 is a Monday; 3 is Wednesday with Sunday as 0.
    assert next_occurrence_date("daily", date(2024, 1, 1), [3]) == date(2024, 1, 3)
    # Thursday (4) -> next Monday (1).
    assert next_occurrence_date("daily", date(2024, 1, 4), [1, 3]) == date(2024, 1, 8)


def test_daily_with_unmatched_weekdays_yields_none() -> None:
    assert next_occurrence_date("daily", date(2024, 1, 1), [9]) is None


@pytest.mark.parametrize("frequency", sorted(INITIAL_OCCURRENCE_COUNTS))
def test_initial_batch_sizes(frequency: str) -> None:
    dates = initial_occurrence_dates(frequency, date(2024, 1, 31), None, today=date(2024, 1, 1))
    assert len(dates) == INITIAL_OCCURRENCE_COUNTS[frequency]
    assert dates[0] == date(2024, 1, 31)


def test_monthly_batch_steps_from_anchor_without_drift() -> None:
    dates = initial_occurrence_dates("monthly", date(2024, 1, 31), None, today=date(2024, 1, 1))
    assert dates == [
        date(2024, 1, 31),
        date(2024, 2, 29),
        date(2024, 3, 31),
        date(2024, 4, 30),
        date(2024, 5, 31),
        date(2024, 6, 30),
    ]


def test_daily_batch_covers_lookahead_starting_tomorrow() -> None:
    dates = initial_occurrence_dates("daily", date(2024, 1, 1), None, today=date(2024, 1, 1))
    assert len(dates) == DAILY_LOOKAHEAD_DAYS
    assert dates[0] == date(2024, 1, 2)
    assert dates[-1] == date(2024, 1, 31)


def test_daily_batch_filters_weekdays() -> None:
    dates = initial_occurrence_dates("daily", date(2024, 1, 1), [5], today=date(2024, 1, 1))
    # Fridays in 2024-01-02..2024-01-31.
    assert dates == [date(2024, 1, 5), date(2024, 1, 12), date(2024, 1, 19), date(2024, 1, 26)]


def test_clone_occurrence_copies_schedule_fields_into_draft() -> None:
    template = Task(
        id=7,
        title="Inspect boiler",
        frequency="daily",
        start_date=date(2024, 1, 1),
        start_time="09:00",
        weekly_days=[1, 3],
        priority="urgent",
        is_recurring=True,
        status="completed",
        completion_note="done",
    )
    clone = clone_occurrence(template, start_date=date(2024, 1, 3), now=NOW)
    assert clone.id is None
    assert clone.status == "draft"
    assert clone.start_date == date(2024, 1, 3)
    assert clone.start_time == "09:00"
    assert clone.priority == "urgent"
    assert clone.completion_note is None
    assert clone.weekly_days == [1, 3]
    assert clone.weekly_days is not template.weekly_days


def test_follow_up_links_parent() -> None:
    task = Task(
        id=3,
        title="Grease elevator",
        frequency="weekly",
        start_date=date(2024, 1, 1),
        start_time="10:00",
        is_recurring=True,
    )
    follow_up = build_follow_up(task, now=NOW)
    assert follow_up is not None
    assert follow_up.parent_task_id == 3
    assert follow_up.start_date == date(2024, 1, 8)


def test_follow_up_skipped_for_one_time_tasks() -> None:
    task = Task(id=4, title="Fix door", start_date=date(2024, 1, 1))
    assert build_follow_up(task, now=NOW) is None

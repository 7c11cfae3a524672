# ruff: noqa: INP001
"""Deadline, lateness classification and duration rendering."""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from support import TZ, clock_at

from workorders.core.clock import Clock
from workorders.models.tasks import Task
from workorders.services.timing import (
    DurationVocabulary,
    classify,
    compute_time_delta,
    describe_time_delta,
    estimated_end,
    evaluate_timing,
    format_duration,
    whole_minutes_between,
)

CLOCK = Clock(TZ)
DAY = date(2024, 1, 1)


def _one_time(**values: object) -> Task:
    return Task(title="Replace filter", start_date=DAY, **values)


def _recurring(**values: object) -> Task:
    values.setdefault("start_time", "09:00")
    return Task(title="Inspect boiler", start_date=DAY, frequency="weekly", is_recurring=True, **values)


@pytest.mark.parametrize(
    ("minutes", "expected"),
    [
        (0, "0 minutes"),
        (1, "1 minute"),
        (59, "59 minutes"),
        (60, "1 hour"),
        (61, "1 hour, 1 minute"),
        (1440, "1 day"),
        (1500, "1 day, 1 hour"),
        (2 * 1440 + 3, "2 days, 3 minutes"),
        (-125, "2 hours, 5 minutes"),
    ],
)
def test_format_duration_omits_zero_units_and_uses_singulars(minutes: int, expected: str) -> None:
    assert format_duration(minutes) == expected


def test_format_duration_accepts_custom_vocabulary() -> None:
    terse = DurationVocabulary(hours="{n}h", minutes="{n}m", separator=" ")
    assert format_duration(185, terse) == "3h 5m"


def test_one_time_deadline_is_workday_end_on_due_or_start_date() -> None:
    # Jerusalem is UTC+2 in January.
    assert estimated_end(_one_time(), workday_end="18:00", clock=CLOCK) == datetime(2024, 1, 1, 16, 0)
    with_due = _one_time(due_date=date(2024, 1, 3))
    assert estimated_end(with_due, workday_end="18:00", clock=CLOCK) == datetime(2024, 1, 3, 16, 0)


def test_recurring_deadline_is_start_plus_duration() -> None:
    task = _recurring(estimated_duration_minutes=45)
    assert estimated_end(task, workday_end="18:00", clock=CLOCK) == datetime(2024, 1, 1, 7, 45)


def test_recurring_deadline_defaults_to_thirty_minutes() -> None:
    task = _recurring()
    task.estimated_duration_minutes = 0
    assert estimated_end(task, workday_end="18:00", clock=CLOCK) == datetime(2024, 1, 1, 7, 30)


@pytest.mark.parametrize(
    ("minutes", "expected"),
    [(-1, "late"), (0, "near-deadline"), (9, "near-deadline"), (10, "on-time"), (600, "on-time")],
)
def test_classify_thresholds(minutes: int, expected: str) -> None:
    assert classify(minutes) == expected


def test_whole_minutes_truncate_toward_zero() -> None:
    base = datetime(2024, 1, 1, 12, 0)
    assert whole_minutes_between(base + timedelta(seconds=119), base) == 1
    assert whole_minutes_between(base - timedelta(seconds=119), base) == -1
    assert whole_minutes_between(base - timedelta(seconds=30), base) == 0


def test_open_task_near_deadline() -> None:
    now = clock_at(DAY, "17:55").now()
    info = evaluate_timing(_one_time(), now=now, workday_end="18:00", clock=CLOCK)
    assert info.timing_status == "near-deadline"
    assert info.is_late is False
    assert info.minutes_remaining == 5
    assert info.minutes_remaining_text == "5 minutes"
    assert info.estimated_end_time == "18:00"
    assert info.time_delta_minutes is None


def test_open_task_past_deadline_reports_absolute_magnitude() -> None:
    now = clock_at(DAY, "19:30").now()
    info = evaluate_timing(_one_time(), now=now, workday_end="18:00", clock=CLOCK)
    assert info.timing_status == "late"
    assert info.is_late is True
    assert info.minutes_remaining == 90
    assert info.minutes_remaining_text == "1 hour, 30 minutes"


def test_completed_task_reports_signed_delta() -> None:
    late = _one_time(status="completed", completed_at=clock_at(DAY, "18:30").now())
    info = evaluate_timing(late, now=late.completed_at, workday_end="18:00", clock=CLOCK)
    assert info.time_delta_minutes == 30
    assert info.time_delta_text == "Completed 30 minutes late"
    assert info.timing_status is None

    early = _recurring(status="completed", completed_at=clock_at(DAY, "09:10").now())
    assert compute_time_delta(early, workday_end="18:00", clock=CLOCK) == -20
    assert describe_time_delta(-20) == "Completed 20 minutes early"
    assert describe_time_delta(0) == "Completed on time"


def test_terminal_task_without_completion_has_no_delta() -> None:
    closed = _one_time(status="not_completed")
    info = evaluate_timing(closed, now=clock_at(DAY, "20:00").now(), workday_end="18:00", clock=CLOCK)
    assert info.time_delta_minutes is None
    assert info.time_delta_text is None

"""Deadline and lateness calculations for tasks.

Pure functions: every read path (task API, confirmation pages, history) runs
tasks through `evaluate_timing` so the classification is computed one way.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Literal

from workorders.models.tasks import DEFAULT_DURATION_MINUTES, TERMINAL_STATUSES

if TYPE_CHECKING:
    from workorders.core.clock import Clock
    from workorders.models.tasks import Task

TimingStatus = Literal["on-time", "near-deadline", "late"]
NEAR_DEADLINE_MINUTES = 10
_MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class DurationVocabulary:
    """Unit words and completion phrases used to render minute magnitudes."""

    day: str = "1 day"
    days: str = "{n} days"
    hour: str = "1 hour"
    hours: str = "{n} hours"
    minute: str = "1 minute"
    minutes: str = "{n} minutes"
    separator: str = ", "
    completed_early: str = "Completed {duration} early"
    completed_late: str = "Completed {duration} late"
    completed_on_time: str = "Completed on time"


ENGLISH = DurationVocabulary()


@dataclass(frozen=True)
class TimingInfo:
    """Timing fields attached to an enriched task read."""

    estimated_end: datetime
    estimated_end_time: str | None = None
    is_late: bool | None = None
    minutes_remaining: int | None = None
    minutes_remaining_text: str | None = None
    timing_status: TimingStatus | None = None
    time_delta_minutes: int | None = None
    time_delta_text: str | None = None


def whole_minutes_between(later: datetime, earlier: datetime) -> int:
    """Signed whole minutes from `earlier` to `later`, truncated toward zero."""
    seconds = (later - earlier).total_seconds()
    return int(seconds / 60)


def format_duration(total_minutes: int, vocabulary: DurationVocabulary = ENGLISH) -> str:
    """Render |total_minutes| as days/hours/minutes, omitting zero units."""
    remaining = abs(total_minutes)
    days, remaining = divmod(remaining, _MINUTES_PER_DAY)
    hours, minutes = divmod(remaining, 60)

    parts: list[str] = []
    if days:
        parts.append(vocabulary.day if days == 1 else vocabulary.days.format(n=days))
    if hours:
        parts.append(vocabulary.hour if hours == 1 else vocabulary.hours.format(n=hours))
    if minutes or not parts:
        parts.append(vocabulary.minute if minutes == 1 else vocabulary.minutes.format(n=minutes))
    return vocabulary.separator.join(parts)


def estimated_end(task: Task, *, workday_end: str, clock: Clock) -> datetime:
    """Deadline instant (naive UTC) for a task.

    One-time tasks are due at the end of the workday on their due date (or
    start date). Recurring occurrences are due `estimated_duration_minutes`
    after their start.
    """
    if task.is_one_time or not task.start_time:
        return clock.combine(task.due_date or task.start_date, workday_end)
    start = clock.combine(task.start_date, task.start_time)
    duration = task.estimated_duration_minutes or DEFAULT_DURATION_MINUTES
    return start + timedelta(minutes=duration)


def classify(minutes_remaining: int) -> TimingStatus:
    if minutes_remaining < 0:
        return "late"
    if minutes_remaining < NEAR_DEADLINE_MINUTES:
        return "near-deadline"
    return "on-time"


def compute_time_delta(task: Task, *, workday_end: str, clock: Clock) -> int | None:
    """Signed minutes between completion and deadline; None when not completed."""
    if task.completed_at is None:
        return None
    deadline = estimated_end(task, workday_end=workday_end, clock=clock)
    return whole_minutes_between(task.completed_at, deadline)


def describe_time_delta(delta_minutes: int, vocabulary: DurationVocabulary = ENGLISH) -> str:
    if delta_minutes < 0:
        return vocabulary.completed_early.format(duration=format_duration(delta_minutes, vocabulary))
    if delta_minutes > 0:
        return vocabulary.completed_late.format(duration=format_duration(delta_minutes, vocabulary))
    return vocabulary.completed_on_time


def evaluate_timing(
    task: Task,
    *,
    now: datetime,
    workday_end: str,
    clock: Clock,
    vocabulary: DurationVocabulary = ENGLISH,
) -> TimingInfo:
    """Compute live timing for open tasks and the completion delta for closed ones."""
    deadline = estimated_end(task, workday_end=workday_end, clock=clock)
    end_time = clock.localize(deadline).strftime("%H:%M")

    if task.status in TERMINAL_STATUSES:
        delta = compute_time_delta(task, workday_end=workday_end, clock=clock)
        return TimingInfo(
            estimated_end=deadline,
            estimated_end_time=end_time,
            time_delta_minutes=delta,
            time_delta_text=describe_time_delta(delta, vocabulary) if delta is not None else None,
        )

    remaining = whole_minutes_between(deadline, now)
    return TimingInfo(
        estimated_end=deadline,
        estimated_end_time=end_time,
        is_late=remaining < 0,
        minutes_remaining=abs(remaining),
        minutes_remaining_text=format_duration(remaining, vocabulary),
        timing_status=classify(remaining),
    )

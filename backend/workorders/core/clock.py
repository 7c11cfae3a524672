"""Civil-time adapter for the fixed operational timezone.

Instants are stored as naive UTC datetimes. Every scheduling decision is made
on the *civil* date and time-of-day of the operational timezone, which can
differ from the host timezone and from UTC by a calendar day.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, date, datetime, time
from zoneinfo import ZoneInfo

from workorders.core.config import settings
from workorders.core.time import utcnow


def parse_clock_time(value: str) -> time:
    """Parse an `HH:MM` (or `HH:MM:SS`) string into a time-of-day."""
    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time-of-day {value!r}; expected HH:MM")
    hour, minute = int(parts[0]), int(parts[1])
    second = int(parts[2]) if len(parts) == 3 else 0
    return time(hour, minute, second)


def sunday_based_weekday(day: date) -> int:
    """Weekday number with 0=Sunday .. 6=Saturday."""
    return (day.weekday() + 1) % 7


class Clock:
    """Resolve instants into civil dates/times of one fixed timezone."""

    def __init__(
        self,
        timezone: str | None = None,
        *,
        now_fn: Callable[[], datetime] = utcnow,
    ) -> None:
        self.timezone = ZoneInfo(timezone or settings.operational_timezone)
        self._now_fn = now_fn

    def now(self) -> datetime:
        return self._now_fn()

    def localize(self, instant: datetime) -> datetime:
        """Convert a naive-UTC (or aware) instant to an aware civil datetime."""
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=UTC)
        return instant.astimezone(self.timezone)

    def today(self, instant: datetime | None = None) -> date:
        return self.localize(instant or self.now()).date()

    def civil_date(self, instant: datetime | None = None) -> str:
        """`YYYY-MM-DD` of the instant in the operational timezone."""
        return self.today(instant).isoformat()

    def civil_time(self, instant: datetime | None = None) -> str:
        """`HH:MM` of the instant in the operational timezone."""
        return self.localize(instant or self.now()).strftime("%H:%M")

    def combine(self, day: date, clock_time: str | time) -> datetime:
        """Civil date + time-of-day -> naive UTC instant."""
        if isinstance(clock_time, str):
            clock_time = parse_clock_time(clock_time)
        local = datetime.combine(day, clock_time, tzinfo=self.timezone)
        return local.astimezone(UTC).replace(tzinfo=None)


class FixedClock(Clock):
    """Clock pinned to a settable instant, for on-demand runs and tests."""

    def __init__(self, instant: datetime, timezone: str | None = None) -> None:
        super().__init__(timezone, now_fn=lambda: self.instant)
        self.instant = instant

    def set(self, instant: datetime) -> None:
        self.instant = instant

    @classmethod
    def at_civil(cls, day: date, clock_time: str, timezone: str | None = None) -> FixedClock:
        """Build a clock whose `now()` is the given civil date/time."""
        probe = Clock(timezone)
        return cls(probe.combine(day, clock_time), timezone)


def get_clock() -> Clock:
    """FastAPI dependency returning the process clock."""
    return Clock()

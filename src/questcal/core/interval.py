"""Half-open time intervals - pure, no I/O."""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta


class InvalidInterval(ValueError):
    """Raised when an interval would have zero or negative length."""


def is_aware(dt: datetime) -> bool:
    """Check if a datetime carries a UTC offset."""
    return dt.tzinfo is not None and dt.utcoffset() is not None


def same_awareness(a: datetime, b: datetime) -> bool:
    """Naive and aware datetimes cannot be compared with each other."""
    return is_aware(a) == is_aware(b)


@dataclass(frozen=True)
class Interval:
    """A half-open time interval [start, end)."""

    start: datetime
    end: datetime

    def __post_init__(self):
        if not same_awareness(self.start, self.end):
            raise InvalidInterval(f"Interval mixes naive and aware datetimes: {self.start} - {self.end}")
        if self.start >= self.end:
            raise InvalidInterval(f"Interval must have start < end, got {self.start} - {self.end}")

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def duration_minutes(self) -> int:
        return int(self.duration.total_seconds() // 60)

    def duration_hours(self) -> float:
        return self.duration.total_seconds() / 3600

    def contains(self, dt: datetime) -> bool:
        """Check if a datetime falls within this interval."""
        return self.start <= dt < self.end

    def format(self) -> str:
        return f"{self.start.strftime('%H:%M')}-{self.end.strftime('%H:%M')}"


def overlaps(a: Interval, b: Interval) -> bool:
    """Touching endpoints do not overlap."""
    return a.start < b.end and b.start < a.end


def intersect(a: Interval, b: Interval) -> Interval | None:
    """Positive-length intersection of two intervals, or None."""
    start = max(a.start, b.start)
    end = min(a.end, b.end)
    if start >= end:
        return None
    return Interval(start, end)


def day_bounds(day: date, tzinfo=None) -> Interval:
    """[midnight, next midnight) for a date."""
    start = datetime.combine(day, time(0, 0), tzinfo=tzinfo)
    return Interval(start, start + timedelta(days=1))


def clamp_to_day(interval: Interval, day: date) -> Interval | None:
    """Intersection of an interval with a calendar day."""
    return intersect(interval, day_bounds(day, interval.start.tzinfo))


@dataclass(frozen=True)
class ActivityWindow:
    """
    Daily hours to consider when searching for free time.

    end=None means midnight at the end of the day, so the default window is
    the full day.
    """

    start: time = time(0, 0)
    end: time | None = None

    def __post_init__(self):
        if self.end is not None and self.end <= self.start:
            raise InvalidInterval(f"Activity window must have start < end, got {self.start}-{self.end}")

    @classmethod
    def parse(cls, value: str) -> "ActivityWindow":
        """Parse 'HH:MM-HH:MM'; '24:00' is accepted as the end of the day."""
        start_str, sep, end_str = value.strip().partition("-")
        if not sep:
            raise ValueError(f"Expected HH:MM-HH:MM, got {value!r}")
        start = time.fromisoformat(start_str.strip())
        end_str = end_str.strip()
        end = None if end_str in ("24:00", "24:00:00") else time.fromisoformat(end_str)
        return cls(start, end)

    @property
    def is_full_day(self) -> bool:
        return self.start == time(0, 0) and self.end is None

    def bounds(self, day: date, tzinfo=None) -> Interval:
        """The window on a given day."""
        start = datetime.combine(day, self.start, tzinfo=tzinfo)
        if self.end is None:
            end = datetime.combine(day + timedelta(days=1), time(0, 0), tzinfo=tzinfo)
        else:
            end = datetime.combine(day, self.end, tzinfo=tzinfo)
        return Interval(start, end)

    def format(self) -> str:
        end = self.end.strftime("%H:%M") if self.end else "24:00"
        return f"{self.start.strftime('%H:%M')}-{end}"


FULL_DAY = ActivityWindow()


def window_bounds(day: date, window: ActivityWindow | None, tzinfo=None) -> Interval | None:
    """The activity window on a day, or None when no window applies."""
    if window is None or window.is_full_day:
        return None
    return window.bounds(day, tzinfo)

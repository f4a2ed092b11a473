"""Daily free-time summaries for calendar grids - pure, no I/O."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable

from .commitments import Commitment
from .interval import ActivityWindow, Interval, intersect, window_bounds
from .segments import ClassificationContext, Segment, segment_range


@dataclass(frozen=True)
class FreeSlot:
    """An unoccupied interval."""

    interval: Interval

    @property
    def start(self) -> datetime:
        return self.interval.start

    @property
    def end(self) -> datetime:
        return self.interval.end

    @property
    def duration_minutes(self) -> int:
        return self.interval.duration_minutes()

    @property
    def duration_hours(self) -> float:
        return self.interval.duration_hours()

    def format(self) -> str:
        return f"{self.interval.format()} ({self.duration_minutes} min)"


@dataclass(frozen=True)
class DailyFreeTime:
    """Free time of one calendar day."""

    date: date
    free_slots: tuple[FreeSlot, ...] = field(default=())
    total_free_hours: float = 0.0

    @property
    def has_free_time(self) -> bool:
        return self.total_free_hours > 0

    @property
    def total_free_minutes(self) -> int:
        return sum(s.duration_minutes for s in self.free_slots)


def summarize_day(
    day: date,
    segments: Iterable[Segment],
    window: ActivityWindow | None = None,
) -> DailyFreeTime:
    """
    Reduce a day's segments to its free time.

    The free segments are reported verbatim. With a window, they are first
    clipped to it (and dropped when outside it).
    """
    segments = list(segments)
    free = [s.interval for s in segments if not s.is_occupied]

    bounds = window_bounds(day, window, free[0].start.tzinfo) if free else None
    if bounds is not None:
        free = [part for part in (intersect(iv, bounds) for iv in free) if part is not None]

    slots = tuple(FreeSlot(iv) for iv in free)
    return DailyFreeTime(
        date=day,
        free_slots=slots,
        total_free_hours=sum((s.duration_hours for s in slots), 0.0),
    )


def summarize_range(
    start_date: date,
    days: int,
    commitments: Iterable[Commitment],
    context: ClassificationContext | None = None,
    window: ActivityWindow | None = None,
    tzinfo=None,
) -> list[DailyFreeTime]:
    """Free time of each day in a range, in date order."""
    by_day = segment_range(start_date, days, commitments, context, tzinfo)
    return [summarize_day(day, segments, window) for day, segments in by_day.items()]

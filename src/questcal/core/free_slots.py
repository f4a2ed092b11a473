"""Free-slot search over a multi-day horizon - pure, no I/O.

Suggestions are ranked by start time only: earlier date first, then earlier
time of day. A long free block early in the horizon ranks above a tighter
fit later on.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Iterable

from .aggregate import DailyFreeTime, FreeSlot, summarize_range
from .commitments import Commitment
from .conflicts import is_slot_free
from .interval import FULL_DAY, ActivityWindow, Interval, InvalidInterval, same_awareness
from .segments import ClassificationContext

logger = logging.getLogger(__name__)


class SlotPolicy(Enum):
    """Where inside a free run a suggested slot is placed."""

    EARLIEST = "earliest"
    CENTERED = "centered"


@dataclass(frozen=True)
class SearchResult:
    """Ranked suggestions plus a per-day free-time overview."""

    suggestions: tuple[FreeSlot, ...] = field(default=())
    daily: tuple[DailyFreeTime, ...] = field(default=())

    @property
    def has_suggestions(self) -> bool:
        return bool(self.suggestions)

    @property
    def total_free_hours(self) -> float:
        return sum((d.total_free_hours for d in self.daily), 0.0)


def place_slot(run: Interval, duration: timedelta, policy: SlotPolicy = SlotPolicy.EARLIEST) -> Interval:
    """Place a slot of the given duration inside a free run at least as long."""
    if policy is SlotPolicy.CENTERED:
        spare_minutes = (run.duration - duration) // timedelta(minutes=1)
        start = run.start + timedelta(minutes=spare_minutes // 2)
    else:
        start = run.start
    return Interval(start, start + duration)


def find_free_slots(
    duration_minutes: int,
    start_date: date,
    days: int = 7,
    commitments: Iterable[Commitment] = (),
    context: ClassificationContext | None = None,
    window: ActivityWindow = FULL_DAY,
    policy: SlotPolicy = SlotPolicy.EARLIEST,
    max_suggestions: int | None = None,
    search_from: datetime | None = None,
    exclude_task_id: str | None = None,
    exclude_event_id: str | None = None,
) -> SearchResult:
    """
    Search a horizon for free slots of a requested duration.

    Pure function - no I/O.

    Args:
        duration_minutes: Requested slot length
        start_date: First day of the horizon
        days: Number of days to search; zero or less yields an empty result
        commitments: Existing commitments
        context: Current task/category, passed through to segmentation
        window: Daily hours to consider (default full day)
        policy: Slot placement in a free run (default earliest start)
        max_suggestions: Cap on returned suggestions (None = unlimited)
        search_from: Ignore free time before this instant; days are bounded in its zone.
            Raises InvalidInterval when it is naive and the commitments are aware, or vice versa
        exclude_task_id: Task being rescheduled; its own time counts as free
        exclude_event_id: Calendar event being moved; likewise

    Returns:
        SearchResult with suggestions ordered by start and one DailyFreeTime per day
    """
    if duration_minutes <= 0:
        raise InvalidInterval(f"Requested duration must be positive, got {duration_minutes} min")
    if days <= 0:
        return SearchResult()

    duration = timedelta(minutes=duration_minutes)
    corpus = [
        c
        for c in commitments
        if not (exclude_task_id is not None and c.task_id == exclude_task_id)
        and not (exclude_event_id is not None and c.event_id == exclude_event_id)
    ]

    # Days are bounded in the zone of search_from, else of the first commitment
    reference = search_from if search_from is not None else (corpus[0].interval.start if corpus else None)
    if reference is not None:
        matching = []
        for c in corpus:
            if same_awareness(c.interval.start, reference):
                matching.append(c)
            else:
                logger.warning(f"Skipping commitment {c.event_id or c.task_id}: naive/aware mismatch")
        if corpus and not matching:
            raise InvalidInterval(f"search_from {search_from} is not comparable with the commitments' times")
        corpus = matching
    tz = reference.tzinfo if reference is not None else None

    daily = summarize_range(start_date, days, corpus, context, window, tz)
    suggestions: list[FreeSlot] = []

    for summary in daily:
        for free in summary.free_slots:
            run = free.interval
            if search_from is not None:
                if run.end <= search_from:
                    continue
                if run.start < search_from:
                    run = Interval(search_from, run.end)
            if run.duration < duration:
                continue

            slot = place_slot(run, duration, policy)
            if not is_slot_free(slot, corpus):
                logger.warning(f"Discarding slot {slot.start} - {slot.end}: overlaps a commitment")
                continue
            suggestions.append(FreeSlot(slot))

    suggestions.sort(key=lambda s: s.start)
    if max_suggestions is not None:
        suggestions = suggestions[:max_suggestions]

    logger.debug(
        f"Searched {days} days from {start_date} for {duration_minutes} min: "
        f"{len(suggestions)} suggestions"
    )
    return SearchResult(suggestions=tuple(suggestions), daily=tuple(daily))


def find_next_available_slot(
    duration_minutes: int,
    start: datetime,
    days: int = 30,
    commitments: Iterable[Commitment] = (),
    window: ActivityWindow = FULL_DAY,
    exclude_task_id: str | None = None,
    exclude_event_id: str | None = None,
) -> FreeSlot | None:
    """First free slot of the requested duration at or after start, or None."""
    result = find_free_slots(
        duration_minutes,
        start.date(),
        days=days,
        commitments=commitments,
        window=window,
        max_suggestions=1,
        search_from=start,
        exclude_task_id=exclude_task_id,
        exclude_event_id=exclude_event_id,
    )
    return result.suggestions[0] if result.suggestions else None

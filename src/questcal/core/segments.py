"""Day occupancy segmentation - pure, no I/O.

Turns a day's commitments into an ordered, gap-free list of classified
segments covering [midnight, next midnight). Month-view cells render these
as a proportional occupancy bar.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Iterable

from .commitments import Commitment
from .interval import Interval, day_bounds, intersect, overlaps, same_awareness

logger = logging.getLogger(__name__)


class SegmentClass(Enum):
    """Segment classification, highest priority first."""

    OVERLAP = 5
    CURRENT_TASK = 4
    SAME_CATEGORY = 3
    OWN_EVENT = 2
    EXTERNAL_EVENT = 1
    FREE = 0

    @property
    def priority(self) -> int:
        return self.value

    @property
    def is_occupied(self) -> bool:
        return self is not SegmentClass.FREE


@dataclass(frozen=True)
class ClassificationContext:
    """The task being viewed/edited, used to highlight it and its category."""

    current_task_id: str | None = None
    current_category_id: str | None = None


NO_CONTEXT = ClassificationContext()


def classify_commitment(commitment: Commitment, context: ClassificationContext = NO_CONTEXT) -> SegmentClass:
    """Class of a time range covered by this commitment alone."""
    if context.current_task_id is not None and commitment.task_id == context.current_task_id:
        return SegmentClass.CURRENT_TASK
    if commitment.is_external:
        return SegmentClass.EXTERNAL_EVENT
    if context.current_category_id is not None and commitment.category_id == context.current_category_id:
        return SegmentClass.SAME_CATEGORY
    return SegmentClass.OWN_EVENT


def resolve_class(covering: Iterable[Commitment], context: ClassificationContext = NO_CONTEXT) -> SegmentClass:
    """
    Resolve the class of a time range from the commitments covering it.

    Nothing covering it is FREE; two or more is OVERLAP regardless of what
    each would classify as on its own.
    """
    covering = list(covering)
    if not covering:
        return SegmentClass.FREE
    if len(covering) > 1:
        return SegmentClass.OVERLAP
    return classify_commitment(covering[0], context)


@dataclass(frozen=True)
class Segment:
    """A maximal run of a day sharing one classification."""

    interval: Interval
    classification: SegmentClass
    day: Interval
    commitments: tuple[Commitment, ...] = field(default=())

    @property
    def is_occupied(self) -> bool:
        return self.classification.is_occupied

    @property
    def weight_in_day(self) -> float:
        """Fraction of the day this segment spans."""
        return self.interval.duration / self.day.duration

    @property
    def start_hour(self) -> float:
        return (self.interval.start - self.day.start) / timedelta(hours=1)

    @property
    def end_hour(self) -> float:
        return (self.interval.end - self.day.start) / timedelta(hours=1)


def segment_day(
    day: date,
    commitments: Iterable[Commitment],
    context: ClassificationContext | None = None,
    tzinfo=None,
) -> list[Segment]:
    """
    Segment a day into contiguous classified intervals.

    Pure function - no I/O.

    Args:
        day: The calendar day to segment
        commitments: All commitments; those not touching the day are ignored
        context: Current task/category for highlighting
        tzinfo: Zone of the day's midnight bounds; defaults to the zone of
            the first commitment, or naive for an empty corpus

    Returns:
        Segments ordered by start, covering the whole day without gaps
    """
    context = context or NO_CONTEXT
    commitments = list(commitments)
    # Commitments and the day share one reference zone
    if tzinfo is None and commitments:
        tzinfo = commitments[0].interval.start.tzinfo
    bounds = day_bounds(day, tzinfo)

    # Clamp to the day, keeping the original commitment for reporting
    clamped: list[tuple[Interval, Commitment]] = []
    for c in commitments:
        if not same_awareness(c.interval.start, bounds.start):
            logger.warning(f"Skipping commitment {c.event_id or c.task_id}: naive/aware mismatch with {day}")
            continue
        part = intersect(c.interval, bounds)
        if part is not None:
            clamped.append((part, c))

    breakpoints = {bounds.start, bounds.end}
    for part, _ in clamped:
        breakpoints.add(part.start)
        breakpoints.add(part.end)
    ordered = sorted(breakpoints)

    segments: list[Segment] = []
    for start, end in zip(ordered, ordered[1:]):
        micro = Interval(start, end)
        covering = [c for part, c in clamped if overlaps(part, micro)]
        cls = resolve_class(covering, context)

        if segments and segments[-1].classification is cls:
            prev = segments[-1]
            merged = prev.commitments + tuple(c for c in covering if c not in prev.commitments)
            segments[-1] = Segment(Interval(prev.interval.start, end), cls, bounds, merged)
        else:
            segments.append(Segment(micro, cls, bounds, tuple(covering)))

    logger.debug(f"Segmented {day}: {len(clamped)} commitments -> {len(segments)} segments")
    return segments


def segment_range(
    start_date: date,
    days: int,
    commitments: Iterable[Commitment],
    context: ClassificationContext | None = None,
    tzinfo=None,
) -> dict[date, list[Segment]]:
    """Segment each day of a range, e.g. the visible days of a month grid."""
    commitments = list(commitments)
    return {
        start_date + timedelta(days=i): segment_day(start_date + timedelta(days=i), commitments, context, tzinfo)
        for i in range(max(days, 0))
    }

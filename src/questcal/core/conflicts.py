"""Schedule conflict detection - pure, no I/O."""

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Iterable, Iterator

from .commitments import Commitment
from .interval import Interval, intersect, overlaps

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Conflict:
    """A commitment overlapping a candidate, with the overlapping part."""

    commitment: Commitment
    overlap: Interval

    @property
    def overlap_minutes(self) -> int:
        return self.overlap.duration_minutes()


@dataclass(frozen=True)
class ConflictReport:
    """All commitments overlapping one candidate interval."""

    candidate: Interval
    conflicts: tuple[Conflict, ...] = field(default=())

    def __iter__(self) -> Iterator[Conflict]:
        return iter(self.conflicts)

    def __len__(self) -> int:
        return len(self.conflicts)

    @property
    def count(self) -> int:
        return len(self.conflicts)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    @property
    def total_overlap_minutes(self) -> int:
        """Sum of per-commitment overlaps; overlapping conflicts count twice."""
        return sum(c.overlap_minutes for c in self.conflicts)


def detect_conflicts(
    candidate: Interval,
    commitments: Iterable[Commitment],
    exclude_task_id: str | None = None,
    exclude_event_id: str | None = None,
) -> ConflictReport:
    """
    Find every commitment overlapping a candidate interval.

    Pure function - no I/O.

    Args:
        candidate: Proposed interval (e.g. a task being rescheduled)
        commitments: Existing commitments
        exclude_task_id: Task being edited; its own commitments are ignored
        exclude_event_id: Calendar event being edited; ignored likewise

    Returns:
        ConflictReport ordered by overlap start, then commitment start
    """
    conflicts = []
    for c in commitments:
        if exclude_task_id is not None and c.task_id == exclude_task_id:
            continue
        if exclude_event_id is not None and c.event_id == exclude_event_id:
            continue
        overlap = intersect(candidate, c.interval)
        if overlap is not None:
            conflicts.append(Conflict(commitment=c, overlap=overlap))

    conflicts.sort(key=lambda x: (x.overlap.start, x.commitment.interval.start))
    if conflicts:
        logger.debug(f"{len(conflicts)} conflicts for {candidate.start} - {candidate.end}")
    return ConflictReport(candidate=candidate, conflicts=tuple(conflicts))


def is_slot_free(
    candidate: Interval,
    commitments: Iterable[Commitment],
    exclude_task_id: str | None = None,
    exclude_event_id: str | None = None,
) -> bool:
    """Check if a candidate interval overlaps no commitment."""
    return not detect_conflicts(candidate, commitments, exclude_task_id, exclude_event_id).has_conflicts


class ConflictState(Enum):
    """Per-commitment state on a day timeline, highest priority first."""

    OVERLAP = 2
    TOLERANCE_WARNING = 1
    NO_CONFLICT = 0


def _gap(a: Interval, b: Interval) -> timedelta:
    """Gap between two non-overlapping intervals."""
    if a.end <= b.start:
        return b.start - a.end
    return a.start - b.end


def conflict_state(
    target: Commitment,
    others: Iterable[Commitment],
    tolerance_minutes: int = 0,
) -> ConflictState:
    """
    Timeline state of one commitment against its neighbours.

    A neighbour closer than tolerance_minutes without overlapping is a
    tolerance warning; any overlap wins over warnings.
    """
    tolerance = timedelta(minutes=tolerance_minutes)
    warning = False
    for other in others:
        if other is target:
            continue
        if overlaps(target.interval, other.interval):
            return ConflictState.OVERLAP
        if _gap(target.interval, other.interval) < tolerance:
            warning = True
    return ConflictState.TOLERANCE_WARNING if warning else ConflictState.NO_CONFLICT


def conflict_states(
    commitments: Iterable[Commitment],
    tolerance_minutes: int = 0,
) -> list[tuple[Commitment, ConflictState]]:
    """Timeline state for every commitment of a day."""
    commitments = list(commitments)
    return [(c, conflict_state(c, commitments, tolerance_minutes)) for c in commitments]


def overlapping_pairs(commitments: Iterable[Commitment]) -> list[tuple[Commitment, Commitment]]:
    """
    Find overlapping commitment pairs.

    Returns (earlier, later) tuples ordered by the earlier commitment's start.
    """
    ordered = sorted(commitments, key=lambda c: (c.interval.start, c.interval.end))
    pairs = []
    for i, c1 in enumerate(ordered):
        for c2 in ordered[i + 1 :]:
            # c2 starts after c1 ends - no more overlaps possible
            if c2.interval.start >= c1.interval.end:
                break
            pairs.append((c1, c2))
    return pairs

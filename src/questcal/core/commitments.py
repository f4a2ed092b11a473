"""Tasks and calendar events normalized to intervals - pure, no I/O."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable

from .interval import Interval, InvalidInterval, same_awareness

logger = logging.getLogger(__name__)

DEFAULT_TASK_MINUTES = 60


@dataclass
class EventRecord:
    """A calendar event link as supplied by the event source."""

    id: str
    starts_at: datetime
    ends_at: datetime
    title: str = ""
    description: str = ""
    calendar_name: str = ""
    is_external: bool = False
    task_id: str | None = None
    category_id: str | None = None


@dataclass
class TaskRecord:
    """A task as supplied by the task source."""

    id: str
    due_date: datetime | None
    estimated_minutes: int | None = None
    category_id: str | None = None
    is_completed: bool = False
    title: str = ""


@dataclass(frozen=True)
class TaskRef:
    task_id: str
    category_id: str | None = None
    title: str = ""


@dataclass(frozen=True)
class EventRef:
    event_id: str
    is_external: bool
    title: str = ""
    calendar_name: str = ""
    task_id: str | None = None
    category_id: str | None = None


@dataclass(frozen=True)
class Commitment:
    """Something occupying time: a task or a calendar event."""

    interval: Interval
    source: TaskRef | EventRef

    @property
    def task_id(self) -> str | None:
        return self.source.task_id

    @property
    def category_id(self) -> str | None:
        return self.source.category_id

    @property
    def event_id(self) -> str | None:
        if isinstance(self.source, EventRef):
            return self.source.event_id
        return None

    @property
    def is_external(self) -> bool:
        """External calendar events are the only commitments not owned by the app."""
        return isinstance(self.source, EventRef) and self.source.is_external

    @property
    def title(self) -> str:
        return self.source.title


def task_commitment(task: TaskRecord, default_minutes: int = DEFAULT_TASK_MINUTES) -> Commitment | None:
    """
    Build a commitment from a task's due timestamp and estimated duration.

    Returns None for tasks without a due date. Raises InvalidInterval when an
    explicit duration is not positive.
    """
    if task.due_date is None:
        return None
    minutes = task.estimated_minutes if task.estimated_minutes is not None else default_minutes
    interval = Interval(task.due_date, task.due_date + timedelta(minutes=minutes))
    return Commitment(
        interval=interval,
        source=TaskRef(task_id=task.id, category_id=task.category_id, title=task.title),
    )


def event_commitment(event: EventRecord) -> Commitment:
    """Build a commitment from a calendar event. Raises InvalidInterval on malformed times."""
    return Commitment(
        interval=Interval(event.starts_at, event.ends_at),
        source=EventRef(
            event_id=event.id,
            is_external=event.is_external,
            title=event.title,
            calendar_name=event.calendar_name,
            task_id=event.task_id,
            category_id=event.category_id,
        ),
    )


def build_commitments(
    events: Iterable[EventRecord] = (),
    tasks: Iterable[TaskRecord] = (),
    default_minutes: int = DEFAULT_TASK_MINUTES,
    include_completed: bool = False,
) -> list[Commitment]:
    """
    Normalize events and tasks into one commitment corpus.

    Malformed records are skipped with a warning, as are records whose times
    are naive when the first accepted record's are aware (or vice versa).
    Tasks that already have an accepted calendar event link are represented
    by that link only, so a task never overlaps with itself.
    """
    events = list(events)
    commitments: list[Commitment] = []

    def accept(commitment: Commitment, label: str) -> None:
        if commitments and not same_awareness(commitment.interval.start, commitments[0].interval.start):
            logger.warning(f"Skipping {label}: naive/aware mismatch with the other records")
            return
        commitments.append(commitment)

    for event in events:
        try:
            commitment = event_commitment(event)
        except InvalidInterval as e:
            logger.warning(f"Skipping event {event.id}: {e}")
            continue
        accept(commitment, f"event {event.id}")

    linked_task_ids = {c.task_id for c in commitments if c.task_id is not None}

    for task in tasks:
        if task.is_completed and not include_completed:
            continue
        if task.id in linked_task_ids:
            continue
        try:
            commitment = task_commitment(task, default_minutes)
        except InvalidInterval as e:
            logger.warning(f"Skipping task {task.id}: {e}")
            continue
        if commitment is not None:
            accept(commitment, f"task {task.id}")

    logger.debug(f"Built {len(commitments)} commitments from {len(events)} events")
    return commitments

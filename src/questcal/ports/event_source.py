"""Event source interface."""

from datetime import datetime
from typing import Protocol

from questcal.core.commitments import EventRecord, TaskRecord


class EventSource(Protocol):
    """Interface for loading calendar events and tasks from any backend."""

    def fetch_events(self, start: datetime, end: datetime) -> list[EventRecord]:
        """Fetch events intersecting [start, end)."""
        ...

    def fetch_tasks(self) -> list[TaskRecord]:
        """Fetch all tasks."""
        ...

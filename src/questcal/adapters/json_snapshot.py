"""JSON snapshot adapter - events and tasks exported from the app's database."""

import json
import logging
from datetime import datetime
from pathlib import Path

from questcal.core.commitments import EventRecord, TaskRecord
from questcal.core.interval import same_awareness

logger = logging.getLogger(__name__)


class SnapshotError(ValueError):
    """Raised when a snapshot file is not a usable JSON document."""


def _optional_id(value) -> str | None:
    if value is None:
        return None
    return str(value)


def _parse_timestamp(value: str) -> datetime:
    """ISO-8601 timestamp; a trailing 'Z' means UTC."""
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


class JsonSnapshotSource:
    """
    Read-only event source backed by a JSON file.

    Implements EventSource protocol. The file holds
    {"events": [...], "tasks": [...]} with ISO-8601 timestamps:

        events: id, startsAt, endsAt, title, description, calendarName,
                isExternal, taskId, categoryId
        tasks:  id, dueDate, estimatedMinutes, categoryId, isCompleted, title
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()
        self._data: dict | None = None

    def _load(self) -> dict:
        if self._data is None:
            try:
                data = json.loads(self.path.read_text())
            except json.JSONDecodeError as e:
                raise SnapshotError(f"Failed to parse {self.path}: {e}") from e
            if not isinstance(data, dict):
                raise SnapshotError(f"Expected a JSON object in {self.path}")
            self._data = data
        return self._data

    def fetch_events(self, start: datetime, end: datetime) -> list[EventRecord]:
        """Fetch events intersecting [start, end)."""
        events = []
        for e in self._parse_events(self._load().get("events", [])):
            if not (same_awareness(e.starts_at, start) and same_awareness(e.ends_at, start)):
                logger.warning(f"Skipping event {e.id}: naive/aware mismatch with the requested range")
                continue
            if e.starts_at < end and start < e.ends_at:
                events.append(e)
        return events

    def fetch_all_events(self) -> list[EventRecord]:
        return self._parse_events(self._load().get("events", []))

    def fetch_tasks(self) -> list[TaskRecord]:
        return self._parse_tasks(self._load().get("tasks", []))

    def _parse_events(self, data: list[dict]) -> list[EventRecord]:
        events = []
        for item in data:
            try:
                events.append(
                    EventRecord(
                        id=str(item["id"]),
                        starts_at=_parse_timestamp(item["startsAt"]),
                        ends_at=_parse_timestamp(item["endsAt"]),
                        title=item.get("title") or "",
                        description=item.get("description") or "",
                        calendar_name=item.get("calendarName") or "",
                        is_external=bool(item.get("isExternal", False)),
                        task_id=_optional_id(item.get("taskId")),
                        category_id=_optional_id(item.get("categoryId")),
                    )
                )
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed event {item!r}: {e}")
        return events

    def _parse_tasks(self, data: list[dict]) -> list[TaskRecord]:
        tasks = []
        for item in data:
            try:
                due = item.get("dueDate")
                minutes = item.get("estimatedMinutes")
                tasks.append(
                    TaskRecord(
                        id=str(item["id"]),
                        due_date=_parse_timestamp(due) if due else None,
                        estimated_minutes=int(minutes) if minutes is not None else None,
                        category_id=_optional_id(item.get("categoryId")),
                        is_completed=bool(item.get("isCompleted", False)),
                        title=item.get("title") or "",
                    )
                )
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed task {item!r}: {e}")
        return tasks

"""Tests for the JSON snapshot adapter."""

import json
import logging
from datetime import datetime, timezone

import pytest

from questcal.adapters.json_snapshot import JsonSnapshotSource, SnapshotError


@pytest.fixture
def snapshot(tmp_path):
    """Factory writing a snapshot file and returning its source."""
    def _write(data) -> JsonSnapshotSource:
        path = tmp_path / "snapshot.json"
        path.write_text(json.dumps(data))
        return JsonSnapshotSource(path)
    return _write


class TestJsonSnapshotSource:
    def test_parses_events(self, snapshot):
        source = snapshot({
            "events": [
                {
                    "id": 7,
                    "startsAt": "2025-01-15T14:00:00",
                    "endsAt": "2025-01-15T15:00:00",
                    "title": "Dentist",
                    "calendarName": "Google",
                    "isExternal": True,
                },
                {
                    "id": 8,
                    "startsAt": "2025-01-15T09:00:00",
                    "endsAt": "2025-01-15T10:00:00",
                    "title": "Write report",
                    "taskId": 3,
                    "categoryId": 2,
                },
            ]
        })
        events = source.fetch_all_events()
        assert len(events) == 2
        dentist, report = events
        assert dentist.id == "7"
        assert dentist.starts_at == datetime(2025, 1, 15, 14, 0)
        assert dentist.is_external is True
        assert dentist.calendar_name == "Google"
        assert dentist.task_id is None
        assert report.is_external is False
        assert report.task_id == "3"
        assert report.category_id == "2"

    def test_fetch_events_filters_range(self, snapshot):
        source = snapshot({
            "events": [
                {"id": 1, "startsAt": "2025-01-15T09:00:00", "endsAt": "2025-01-15T10:00:00"},
                {"id": 2, "startsAt": "2025-01-16T09:00:00", "endsAt": "2025-01-16T10:00:00"},
                {"id": 3, "startsAt": "2025-01-14T23:00:00", "endsAt": "2025-01-15T01:00:00"},
            ]
        })
        events = source.fetch_events(datetime(2025, 1, 15), datetime(2025, 1, 16))
        assert [e.id for e in events] == ["1", "3"]

    def test_parses_tasks(self, snapshot):
        source = snapshot({
            "tasks": [
                {"id": 1, "dueDate": "2025-01-15T09:00:00", "estimatedMinutes": 30, "categoryId": 4},
                {"id": 2, "dueDate": None, "estimatedMinutes": None, "isCompleted": True},
            ]
        })
        first, second = source.fetch_tasks()
        assert first.due_date == datetime(2025, 1, 15, 9, 0)
        assert first.estimated_minutes == 30
        assert first.category_id == "4"
        assert first.is_completed is False
        assert second.due_date is None
        assert second.estimated_minutes is None
        assert second.is_completed is True

    def test_skips_malformed_records(self, snapshot, caplog):
        source = snapshot({
            "events": [
                {"id": 1, "startsAt": "not a date", "endsAt": "2025-01-15T10:00:00"},
                {"startsAt": "2025-01-15T09:00:00", "endsAt": "2025-01-15T10:00:00"},
                {"id": 3, "startsAt": "2025-01-15T09:00:00", "endsAt": "2025-01-15T10:00:00"},
            ],
            "tasks": [{"id": 1, "dueDate": "2025-01-15T09:00:00", "estimatedMinutes": "soon"}],
        })
        with caplog.at_level(logging.WARNING):
            events = source.fetch_all_events()
            tasks = source.fetch_tasks()
        assert [e.id for e in events] == ["3"]
        assert tasks == []
        assert "Skipping malformed event" in caplog.text
        assert "Skipping malformed task" in caplog.text

    def test_utc_z_suffix(self, snapshot):
        source = snapshot({
            "events": [{"id": 1, "startsAt": "2025-01-15T09:00:00Z", "endsAt": "2025-01-15T10:00:00Z"}],
            "tasks": [{"id": 2, "dueDate": "2025-01-15T11:00:00Z"}],
        })
        (event,) = source.fetch_all_events()
        (task,) = source.fetch_tasks()
        assert event.starts_at == datetime(2025, 1, 15, 9, 0, tzinfo=timezone.utc)
        assert event.ends_at == datetime(2025, 1, 15, 10, 0, tzinfo=timezone.utc)
        assert task.due_date == datetime(2025, 1, 15, 11, 0, tzinfo=timezone.utc)

    def test_fetch_events_skips_mismatched_awareness(self, snapshot, caplog):
        source = snapshot({
            "events": [
                {"id": 1, "startsAt": "2025-01-15T09:00:00+01:00", "endsAt": "2025-01-15T10:00:00+01:00"},
                {"id": 2, "startsAt": "2025-01-15T11:00:00", "endsAt": "2025-01-15T12:00:00"},
            ]
        })
        with caplog.at_level(logging.WARNING):
            events = source.fetch_events(datetime(2025, 1, 15), datetime(2025, 1, 16))
        assert [e.id for e in events] == ["2"]
        assert "Skipping event 1" in caplog.text

    def test_missing_sections(self, snapshot):
        source = snapshot({})
        assert source.fetch_all_events() == []
        assert source.fetch_tasks() == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            JsonSnapshotSource(tmp_path / "nope.json").fetch_tasks()

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "snapshot.json"
        path.write_text("{not json")
        with pytest.raises(SnapshotError):
            JsonSnapshotSource(path).fetch_tasks()

    def test_top_level_must_be_object(self, snapshot):
        with pytest.raises(SnapshotError):
            snapshot([1, 2, 3]).fetch_all_events()

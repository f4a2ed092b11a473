"""Functional core - pure scheduling logic with no I/O."""

from .interval import Interval, InvalidInterval, ActivityWindow, overlaps, intersect, clamp_to_day, window_bounds
from .commitments import Commitment, EventRecord, TaskRecord, build_commitments
from .segments import ClassificationContext, Segment, SegmentClass, resolve_class, segment_day, segment_range
from .conflicts import (
    Conflict,
    ConflictReport,
    ConflictState,
    conflict_states,
    detect_conflicts,
    is_slot_free,
    overlapping_pairs,
)
from .aggregate import DailyFreeTime, FreeSlot, summarize_day, summarize_range
from .free_slots import SearchResult, SlotPolicy, find_free_slots, find_next_available_slot

__all__ = [
    # Intervals
    "Interval",
    "InvalidInterval",
    "ActivityWindow",
    "overlaps",
    "intersect",
    "clamp_to_day",
    "window_bounds",
    # Commitments
    "Commitment",
    "EventRecord",
    "TaskRecord",
    "build_commitments",
    # Segmentation
    "ClassificationContext",
    "Segment",
    "SegmentClass",
    "resolve_class",
    "segment_day",
    "segment_range",
    # Conflicts
    "Conflict",
    "ConflictReport",
    "ConflictState",
    "conflict_states",
    "detect_conflicts",
    "is_slot_free",
    "overlapping_pairs",
    # Free time
    "DailyFreeTime",
    "FreeSlot",
    "summarize_day",
    "summarize_range",
    "SearchResult",
    "SlotPolicy",
    "find_free_slots",
    "find_next_available_slot",
]

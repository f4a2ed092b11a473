"""Adapters - I/O implementations of ports."""

from .json_snapshot import JsonSnapshotSource, SnapshotError

__all__ = [
    "JsonSnapshotSource",
    "SnapshotError",
]

"""Ports - interfaces/protocols for external dependencies."""

from .event_source import EventSource

__all__ = [
    "EventSource",
]

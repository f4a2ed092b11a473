"""Calendar occupancy and free-slot scheduling engine."""

__version__ = "0.1.0"

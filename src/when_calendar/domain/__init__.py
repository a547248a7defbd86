"""Domain models for the shared availability calendar."""

from __future__ import annotations

from .models import AvailabilityEvent, format_timestamp, parse_timestamp

__all__ = ["AvailabilityEvent", "format_timestamp", "parse_timestamp"]

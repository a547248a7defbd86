"""Event store adapters over the external collection."""

from __future__ import annotations

from .base import EventNotFoundError, EventStore
from .events import SupabaseEventRepository
from .local import JsonEventRepository

__all__ = ["EventNotFoundError", "EventStore", "JsonEventRepository", "SupabaseEventRepository"]

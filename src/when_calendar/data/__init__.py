"""Data access layer."""

from __future__ import annotations

from ..config import AppSettings
from .repositories import EventNotFoundError, EventStore, JsonEventRepository, SupabaseEventRepository
from .supabase import StoreNotConfiguredError, SupabaseGateway


def build_event_store(settings: AppSettings) -> EventStore:
    """Select the configured store backend."""

    if settings.storage.backend == "json":
        return JsonEventRepository(settings.storage.json_path)
    if not settings.supabase.is_configured:
        raise StoreNotConfiguredError(
            "Supabase credentials not found. Set SUPABASE_CREDENTIALS_JSON or provide SUPABASE_CREDENTIALS_FILE."
        )
    return SupabaseEventRepository(
        gateway=SupabaseGateway(settings.supabase),
        table_name=settings.storage.events_table,
    )


__all__ = [
    "EventNotFoundError",
    "EventStore",
    "JsonEventRepository",
    "StoreNotConfiguredError",
    "SupabaseEventRepository",
    "SupabaseGateway",
    "build_event_store",
]

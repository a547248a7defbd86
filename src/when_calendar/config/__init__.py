"""Configuration models and helpers."""

from __future__ import annotations

from .settings import (
    AppSettings,
    CredentialsError,
    ServerSettings,
    StorageSettings,
    SupabaseSettings,
    get_settings,
    load_supabase_credentials,
)

__all__ = [
    "AppSettings",
    "CredentialsError",
    "ServerSettings",
    "StorageSettings",
    "SupabaseSettings",
    "get_settings",
    "load_supabase_credentials",
]

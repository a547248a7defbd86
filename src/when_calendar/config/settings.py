from __future__ import annotations

import json
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional, Tuple

from dotenv import load_dotenv
from platformdirs import user_data_dir

load_dotenv()

APP_NAME = "When"
APP_AUTHOR = "When"
DATA_DIR = Path(user_data_dir(APP_NAME, APP_AUTHOR))

SUPPORTED_BACKENDS = ("supabase", "json")


class CredentialsError(RuntimeError):
    """Raised when the store credential blob cannot be read."""


@dataclass(frozen=True)
class ServerSettings:
    host: str
    port: int
    static_dir: Path
    cors_origins: Tuple[str, ...]


@dataclass(frozen=True)
class SupabaseSettings:
    url: Optional[str]
    key: Optional[str]

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.key)


@dataclass(frozen=True)
class StorageSettings:
    backend: str
    events_table: str
    json_path: Path


@dataclass(frozen=True)
class AppSettings:
    server: ServerSettings
    supabase: SupabaseSettings
    storage: StorageSettings


def _parse_credentials(raw: str, source: str) -> SupabaseSettings:
    try:
        blob: Any = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CredentialsError(f"Credentials from {source} are not valid JSON.") from exc
    if not isinstance(blob, dict):
        raise CredentialsError(f"Credentials from {source} must be a JSON object.")
    return SupabaseSettings(url=blob.get("url"), key=blob.get("key"))


def load_supabase_credentials() -> SupabaseSettings:
    """Read the credential blob; the environment variable wins over the local file."""

    raw = os.getenv("SUPABASE_CREDENTIALS_JSON")
    if raw:
        return _parse_credentials(raw, "SUPABASE_CREDENTIALS_JSON")

    path = Path(os.getenv("SUPABASE_CREDENTIALS_FILE", "supabase_credentials.json"))
    if path.is_file():
        return _parse_credentials(path.read_text(encoding="utf-8"), str(path))
    return SupabaseSettings(url=None, key=None)


def _origins_from_env(name: str, default: str) -> Tuple[str, ...]:
    raw = os.getenv(name, default)
    return tuple(origin.strip() for origin in raw.split(",") if origin.strip())


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    server = ServerSettings(
        host=os.getenv("WHEN_HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3001")),
        static_dir=Path(os.getenv("WHEN_STATIC_DIR", "client/build")),
        cors_origins=_origins_from_env("WHEN_CORS_ORIGINS", "*"),
    )

    backend = os.getenv("WHEN_STORE_BACKEND", "supabase").lower()
    if backend not in SUPPORTED_BACKENDS:
        raise ValueError(f"Unsupported WHEN_STORE_BACKEND {backend!r}; expected one of {SUPPORTED_BACKENDS}.")

    storage = StorageSettings(
        backend=backend,
        events_table=os.getenv("SUPABASE_EVENTS_TABLE", "events"),
        json_path=Path(os.getenv("WHEN_JSON_STORE_PATH", str(DATA_DIR / "events.json"))),
    )

    supabase = load_supabase_credentials() if backend == "supabase" else SupabaseSettings(url=None, key=None)

    return AppSettings(server=server, supabase=supabase, storage=storage)

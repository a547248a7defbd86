"""Shared fixtures for When tests.

Provides an in-memory event store that honours the adapter contract and
recording sessions that capture every frame the relay sends them.
"""

from __future__ import annotations

import asyncio
import itertools
from datetime import datetime
from typing import Any

import pytest

from when_calendar.config import get_settings
from when_calendar.data import EventNotFoundError
from when_calendar.domain import AvailabilityEvent
from when_calendar.services import SyncServer


class StoreFailure(RuntimeError):
    """Simulated network/quota failure from the managed store."""


class InMemoryEventStore:
    """Dict-backed store; every call yields to the loop like real I/O would."""

    def __init__(self) -> None:
        self.records: dict[str, AvailabilityEvent] = {}
        self.failing: set[str] = set()
        self._ids = itertools.count(1)

    async def _io(self, operation: str) -> None:
        await asyncio.sleep(0)
        if operation in self.failing:
            raise StoreFailure(f"{operation} failed")

    async def list_all(self) -> list[AvailabilityEvent]:
        await self._io("list_all")
        return sorted(self.records.values(), key=AvailabilityEvent.sort_key)

    async def add(self, event: AvailabilityEvent) -> AvailabilityEvent:
        await self._io("add")
        identifier = f"evt-{next(self._ids)}"
        saved = AvailabilityEvent(
            id=identifier,
            title=event.title,
            start=event.start,
            end=event.end,
            is_tentative=event.is_tentative,
            notes=event.notes,
        )
        self.records[identifier] = saved
        return saved

    async def update_by_id(self, event_id: str, event: AvailabilityEvent) -> AvailabilityEvent:
        await self._io("update_by_id")
        if event_id not in self.records:
            raise EventNotFoundError(event_id)
        event.id = event_id
        self.records[event_id] = event
        return event

    async def delete_by_id(self, event_id: str) -> bool:
        await self._io("delete_by_id")
        return self.records.pop(event_id, None) is not None

    async def delete_where(self, end_before: datetime) -> int:
        await self._io("delete_where")
        doomed = [key for key, event in self.records.items() if event.end is not None and event.end < end_before]
        for key in doomed:
            del self.records[key]
        return len(doomed)


class HeldSnapshotStore(InMemoryEventStore):
    """Takes its next ``list_all`` snapshot immediately but returns it only once released."""

    def __init__(self) -> None:
        super().__init__()
        self.hold_next = False
        self.holding = asyncio.Event()
        self.release = asyncio.Event()

    async def list_all(self) -> list[AvailabilityEvent]:
        if not self.hold_next:
            return await super().list_all()
        self.hold_next = False
        snapshot = await super().list_all()
        self.holding.set()
        await self.release.wait()
        return snapshot


class RecordingSession:
    def __init__(self, session_id: str) -> None:
        self.id = session_id
        self.frames: list[tuple[str, Any]] = []
        self.broken = False

    async def send(self, event: str, data: Any) -> None:
        if self.broken:
            raise ConnectionResetError("socket gone")
        self.frames.append((event, data))

    def received(self, event: str) -> list[Any]:
        return [data for name, data in self.frames if name == event]

    def latest_list(self) -> list[dict]:
        return self.frames[-1][1] if self.frames else []


@pytest.fixture
def store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def sync(store: InMemoryEventStore) -> SyncServer:
    return SyncServer(store)


@pytest.fixture
def make_session():
    counter = itertools.count(1)

    def _make() -> RecordingSession:
        return RecordingSession(f"session-{next(counter)}")

    return _make


@pytest.fixture
def clean_settings(monkeypatch):
    """Clear cached settings and every variable the loader reads."""

    for name in (
        "PORT",
        "WHEN_HOST",
        "WHEN_STATIC_DIR",
        "WHEN_CORS_ORIGINS",
        "WHEN_STORE_BACKEND",
        "WHEN_JSON_STORE_PATH",
        "SUPABASE_CREDENTIALS_JSON",
        "SUPABASE_CREDENTIALS_FILE",
        "SUPABASE_EVENTS_TABLE",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


@pytest.fixture
def held_store() -> HeldSnapshotStore:
    return HeldSnapshotStore()

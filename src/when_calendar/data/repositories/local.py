from __future__ import annotations

import asyncio
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional
from uuid import uuid4

import orjson

from ...domain import AvailabilityEvent
from .base import EventNotFoundError


def _read_file(path: Path) -> bytes:
    return path.read_bytes() if path.exists() else b""


def _write_file(path: Path, payload: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(payload)


class JsonEventRepository:
    """File-backed event collection for running without a managed store.

    The whole collection is rewritten on every mutation, so a sweep either lands
    completely or not at all. Disk access runs in worker threads; writes are
    serialized in the order the mutations happened.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._records: Optional[Dict[str, Dict[str, Any]]] = None
        self._write_lock = asyncio.Lock()

    async def _load(self) -> Dict[str, Dict[str, Any]]:
        if self._records is not None:
            return self._records
        raw = await asyncio.to_thread(_read_file, self._path)
        # Another caller may have loaded while this one was reading.
        if self._records is None:
            data = orjson.loads(raw) if raw else {}
            self._records = {str(record["id"]): record for record in data.get("events", [])}
        return self._records

    async def _persist(self) -> None:
        if self._records is None:
            return
        payload = orjson.dumps({"events": list(self._records.values())}, option=orjson.OPT_INDENT_2) + b"\n"
        async with self._write_lock:
            await asyncio.to_thread(_write_file, self._path, payload)

    async def list_all(self) -> List[AvailabilityEvent]:
        records = await self._load()
        events = [AvailabilityEvent.from_record(record) for record in records.values()]
        return sorted(events, key=AvailabilityEvent.sort_key)

    async def add(self, event: AvailabilityEvent) -> AvailabilityEvent:
        records = await self._load()
        identifier = str(uuid4())
        records[identifier] = {"id": identifier, **event.to_record()}
        saved = AvailabilityEvent.from_record(records[identifier])
        await self._persist()
        return saved

    async def update_by_id(self, event_id: str, event: AvailabilityEvent) -> AvailabilityEvent:
        records = await self._load()
        if event_id not in records:
            raise EventNotFoundError(event_id)
        records[event_id] = {"id": event_id, **event.to_record()}
        saved = AvailabilityEvent.from_record(records[event_id])
        await self._persist()
        return saved

    async def delete_by_id(self, event_id: str) -> bool:
        records = await self._load()
        if records.pop(event_id, None) is None:
            return False
        await self._persist()
        return True

    async def delete_where(self, end_before: datetime) -> int:
        records = await self._load()
        doomed: list[str] = []
        for identifier, record in records.items():
            end = AvailabilityEvent.from_record(record).end
            if end is not None and end < end_before:
                doomed.append(identifier)
        if not doomed:
            return 0
        for identifier in doomed:
            del records[identifier]
        await self._persist()
        return len(doomed)

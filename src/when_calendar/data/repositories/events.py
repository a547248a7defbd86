from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List

from ...domain import AvailabilityEvent
from ..supabase import SupabaseGateway
from .base import EventNotFoundError


@dataclass(slots=True)
class SupabaseEventRepository:
    gateway: SupabaseGateway
    table_name: str

    async def list_all(self) -> List[AvailabilityEvent]:
        table = await self.gateway.table(self.table_name)
        response = await table.select("*").order("starts_at", desc=False).execute()
        records = response.data or []
        return [AvailabilityEvent.from_record(record) for record in records]

    async def add(self, event: AvailabilityEvent) -> AvailabilityEvent:
        # The table generates the id; anything set on the event is not sent.
        table = await self.gateway.table(self.table_name)
        response = await table.insert(event.to_record()).execute()
        return AvailabilityEvent.from_record(response.data[0])

    async def update_by_id(self, event_id: str, event: AvailabilityEvent) -> AvailabilityEvent:
        table = await self.gateway.table(self.table_name)
        response = await table.update(event.to_record()).eq("id", event_id).execute()
        if not response.data:
            raise EventNotFoundError(event_id)
        return AvailabilityEvent.from_record(response.data[0])

    async def delete_by_id(self, event_id: str) -> bool:
        table = await self.gateway.table(self.table_name)
        response = await table.delete().eq("id", event_id).execute()
        deleted = response.data or []
        return bool(deleted)

    async def delete_where(self, end_before: datetime) -> int:
        # A single DELETE statement, so the sweep is atomic on the store side.
        table = await self.gateway.table(self.table_name)
        response = await table.delete().lt("ends_at", end_before.isoformat()).execute()
        deleted = response.data or []
        return len(deleted)

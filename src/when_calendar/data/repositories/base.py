from __future__ import annotations

from datetime import datetime
from typing import List, Protocol

from ...domain import AvailabilityEvent


class EventNotFoundError(LookupError):
    """Raised when an update targets an id the store does not hold."""

    def __init__(self, event_id: str) -> None:
        super().__init__(f"Event not found: {event_id}")
        self.event_id = event_id


class EventStore(Protocol):
    """Pass-through contract over an external event collection.

    Implementations own no state of their own. ``list_all`` returns events ordered
    by start ascending; ``delete_where`` removes every event ending strictly before
    the cutoff in a single atomic operation and reports how many it removed.
    """

    async def list_all(self) -> List[AvailabilityEvent]: ...

    async def add(self, event: AvailabilityEvent) -> AvailabilityEvent: ...

    async def update_by_id(self, event_id: str, event: AvailabilityEvent) -> AvailabilityEvent: ...

    async def delete_by_id(self, event_id: str) -> bool: ...

    async def delete_where(self, end_before: datetime) -> int: ...

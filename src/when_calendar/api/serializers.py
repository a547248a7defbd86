from __future__ import annotations

from typing import Any, Dict, Iterable, List

from ..domain import AvailabilityEvent
from .models import EventPayload


def serialize_event(event: AvailabilityEvent) -> Dict[str, Any]:
    return EventPayload.from_domain(event).model_dump(by_alias=True)


def serialize_events(events: Iterable[AvailabilityEvent]) -> List[Dict[str, Any]]:
    return [serialize_event(event) for event in events]

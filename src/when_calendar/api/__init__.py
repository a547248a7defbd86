"""Wire format shared by the websocket transport and its clients."""

from __future__ import annotations

from .enums import ClientEvent, ServerEvent
from .models import ClientMessage, EventPayload
from .serializers import serialize_event, serialize_events

__all__ = ["ClientEvent", "ClientMessage", "EventPayload", "ServerEvent", "serialize_event", "serialize_events"]

from __future__ import annotations

from enum import Enum


class ServerEvent(str, Enum):
    INITIAL_EVENTS = "initial_events"
    EVENTS_UPDATED = "events_updated"


class ClientEvent(str, Enum):
    ADD_EVENT = "add_event"
    UPDATE_EVENT = "update_event"
    DELETE_EVENT = "delete_event"
    MANUAL_DELETE_OLD_EVENTS = "manual_delete_old_events"

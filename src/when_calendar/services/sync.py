"""Fan-out of the shared event list to every connected session.

Every successful mutation re-reads the whole collection from the store and
pushes it to all sessions as ``events_updated``. Nothing is diffed; a client
always replaces its list with the latest one it received, so concurrent
mutations converge on whatever the store holds when the last broadcast runs.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from pydantic import ValidationError

from ..api import ClientEvent, ClientMessage, ServerEvent, serialize_events
from ..data import EventStore
from ..domain import AvailabilityEvent, parse_timestamp
from .sessions import Session

logger = logging.getLogger(__name__)

Handler = Callable[[Session, Any], Awaitable[None]]


class SyncServer:
    def __init__(self, store: EventStore) -> None:
        self.store = store
        self._sessions: Dict[str, Session] = {}
        # Bumped once per broadcast list fetched from the store.
        self._generation = 0
        self._handlers: Dict[str, Handler] = {
            ClientEvent.ADD_EVENT.value: self.on_add,
            ClientEvent.UPDATE_EVENT.value: self.on_update,
            ClientEvent.DELETE_EVENT.value: self.on_delete,
            ClientEvent.MANUAL_DELETE_OLD_EVENTS.value: self.on_bulk_delete_older_than,
        }

    @property
    def sessions(self) -> List[Session]:
        return list(self._sessions.values())

    async def on_connect(self, session: Session) -> None:
        """Register ``session`` and send it the current list, once.

        The session joins the broadcast set before the fetch so it misses no update.
        If a broadcast goes out while the fetch is in flight, the fetched list may be
        older than what the session already holds, so it is fetched again.
        """

        self._sessions[session.id] = session
        logger.info("Session %s connected. Total: %d", session.id, len(self._sessions))
        while True:
            generation = self._generation
            try:
                events = await self.store.list_all()
            except Exception:  # noqa: BLE001
                logger.exception("Error sending initial events to session %s", session.id)
                return
            if generation == self._generation:
                break
            logger.debug("Snapshot for session %s went stale during fetch; refetching", session.id)
        await self._send(session, ServerEvent.INITIAL_EVENTS.value, serialize_events(events))

    def on_disconnect(self, session: Session) -> None:
        self._sessions.pop(session.id, None)
        logger.info("Session %s disconnected. Total: %d", session.id, len(self._sessions))

    async def dispatch(self, session: Session, raw: Any) -> None:
        try:
            message = ClientMessage.model_validate(raw)
        except ValidationError:
            logger.warning("Ignoring malformed message from session %s: %r", session.id, raw)
            return
        handler = self._handlers.get(message.event)
        if handler is None:
            logger.warning("Ignoring unknown message %r from session %s", message.event, session.id)
            return
        await handler(session, message.data)

    async def on_add(self, session: Session, payload: Any) -> None:
        if not isinstance(payload, Mapping):
            logger.warning("Error adding event: payload %r is not an object", payload)
            return
        event = AvailabilityEvent.from_payload(payload)
        self._warn_if_inverted(event)
        try:
            saved = await self.store.add(event)
        except Exception:  # noqa: BLE001
            logger.exception("Error adding event")
            return
        logger.info("New event added with ID: %s", saved.id)
        await self.broadcast_events()

    async def on_update(self, session: Session, payload: Any) -> None:
        event_id = payload.get("id") if isinstance(payload, Mapping) else None
        if not event_id:
            logger.warning("Error updating event: no id in payload %r", payload)
            return
        event = AvailabilityEvent.from_payload(payload, event_id=str(event_id))
        self._warn_if_inverted(event)
        try:
            await self.store.update_by_id(event.id, event)
        except Exception:  # noqa: BLE001
            logger.exception("Error updating event %s", event.id)
            return
        logger.info("Event updated with ID: %s", event.id)
        await self.broadcast_events()

    async def on_delete(self, session: Session, event_id: Any) -> None:
        if not isinstance(event_id, str) or not event_id:
            logger.warning("Error deleting event: invalid id %r", event_id)
            return
        try:
            deleted = await self.store.delete_by_id(event_id)
        except Exception:  # noqa: BLE001
            logger.exception("Error deleting event %s", event_id)
            return
        if not deleted:
            logger.info("No event with ID %s; nothing to delete", event_id)
            return
        logger.info("Event deleted with ID: %s", event_id)
        await self.broadcast_events()

    async def on_bulk_delete_older_than(self, session: Session, payload: Any) -> None:
        raw_cutoff = payload.get("beforeDate") if isinstance(payload, Mapping) else None
        cutoff = parse_timestamp(raw_cutoff)
        if cutoff is None:
            logger.warning("Ignoring request to delete old events with invalid cutoff %r", raw_cutoff)
            return
        logger.info("Manual request to delete events before %s", cutoff.isoformat())
        deleted = await self.purge_older_than(cutoff)
        if deleted:
            await self.broadcast_events()

    async def purge_older_than(self, cutoff: datetime) -> Optional[int]:
        """Delete events ending before ``cutoff``; ``None`` when the store call failed."""

        try:
            deleted = await self.store.delete_where(cutoff)
        except Exception:  # noqa: BLE001
            logger.exception("Error during deletion of events before %s", cutoff.isoformat())
            return None
        if not deleted:
            logger.info("No old events to delete.")
        else:
            logger.info("Deleted %d old events.", deleted)
        return deleted

    async def broadcast_events(self) -> None:
        try:
            events = await self.store.list_all()
        except Exception:  # noqa: BLE001
            logger.exception("Error broadcasting events")
            return
        self._generation += 1
        payload = serialize_events(events)
        logger.debug("Broadcasting %d events to %d sessions", len(payload), len(self._sessions))
        for session in self.sessions:
            await self._send(session, ServerEvent.EVENTS_UPDATED.value, payload)

    async def _send(self, session: Session, event: str, data: Any) -> None:
        try:
            await session.send(event, data)
        except Exception as exc:  # noqa: BLE001
            logger.debug("Failed to send %s to session %s: %s", event, session.id, exc)
            self._sessions.pop(session.id, None)

    @staticmethod
    def _warn_if_inverted(event: AvailabilityEvent) -> None:
        if event.is_inverted:
            logger.warning("Event %r starts after it ends; writing it as sent", event.title)

"""Session tracking and the broadcast relay."""

from __future__ import annotations

from .sessions import ClientSession, Session
from .sync import SyncServer

__all__ = ["ClientSession", "Session", "SyncServer"]

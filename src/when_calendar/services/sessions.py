from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol
from uuid import uuid4

from fastapi import WebSocket


class Session(Protocol):
    id: str

    async def send(self, event: str, data: Any) -> None: ...


@dataclass(eq=False)
class ClientSession:
    """One connected client's websocket, speaking ``{"event", "data"}`` frames."""

    websocket: WebSocket
    id: str = field(default_factory=lambda: uuid4().hex)

    async def send(self, event: str, data: Any) -> None:
        await self.websocket.send_json({"event": event, "data": data})

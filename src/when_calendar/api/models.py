from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domain import AvailabilityEvent, format_timestamp


class EventPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    start: Optional[str] = Field(default=None)
    end: Optional[str] = Field(default=None)
    is_tentative: bool = Field(default=False, alias="isTentative")
    notes: str = Field(default="")

    @classmethod
    def from_domain(cls, event: AvailabilityEvent) -> "EventPayload":
        return cls(
            id=event.id,
            title=event.title,
            start=format_timestamp(event.start),
            end=format_timestamp(event.end),
            is_tentative=event.is_tentative,
            notes=event.notes,
        )


class ClientMessage(BaseModel):
    """Envelope of every websocket frame. Only the envelope is checked, never ``data``."""

    event: str
    data: Any = Field(default=None)

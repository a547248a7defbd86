from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Coerce a client or store timestamp to an aware UTC datetime.

    Numbers are milliseconds since the epoch. Anything that cannot be read as a
    point in time becomes ``None``, the invalid-date sentinel, instead of raising.
    """

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, bool) or value is None:
        return None
    elif isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(slots=True)
class AvailabilityEvent:
    id: str
    title: str
    start: Optional[datetime]
    end: Optional[datetime]
    is_tentative: bool = False
    notes: str = ""

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], *, event_id: str = "") -> "AvailabilityEvent":
        """Build an event from a client mutation without validating it.

        Any ``id`` inside ``payload`` is ignored; callers pass the target id explicitly.
        """

        title = payload.get("title")
        return cls(
            id=event_id,
            title="" if title is None else str(title),
            start=parse_timestamp(payload.get("start")),
            end=parse_timestamp(payload.get("end")),
            is_tentative=bool(payload.get("isTentative") or False),
            notes=str(payload.get("notes") or ""),
        )

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "AvailabilityEvent":
        return cls(
            id=str(record["id"]),
            title=str(record.get("title") or ""),
            start=parse_timestamp(record.get("starts_at")),
            end=parse_timestamp(record.get("ends_at")),
            is_tentative=bool(record.get("is_tentative") or False),
            notes=record.get("notes") or "",
        )

    def to_record(self) -> Dict[str, Any]:
        """Document body as written to the store. The id is never part of it."""

        return {
            "title": self.title,
            "starts_at": format_timestamp(self.start),
            "ends_at": format_timestamp(self.end),
            "is_tentative": self.is_tentative,
            "notes": self.notes,
        }

    @property
    def is_inverted(self) -> bool:
        return self.start is not None and self.end is not None and self.start > self.end

    def sort_key(self) -> Tuple[bool, datetime]:
        # Undated events sort after every dated one.
        return (self.start is None, self.start or _EPOCH)

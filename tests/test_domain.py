"""Tests for event coercion and wire serialization."""

from datetime import datetime, timedelta, timezone

import pytest

from when_calendar.api import serialize_event
from when_calendar.domain import AvailabilityEvent, parse_timestamp


class TestParseTimestamp:
    def test_naive_iso_string_is_utc(self):
        assert parse_timestamp("2024-01-01T10:00") == datetime(2024, 1, 1, 10, tzinfo=timezone.utc)

    def test_zulu_suffix(self):
        assert parse_timestamp("2024-01-01T10:00:00.000Z") == datetime(2024, 1, 1, 10, tzinfo=timezone.utc)

    def test_offset_is_normalized_to_utc(self):
        parsed = parse_timestamp("2024-01-01T12:00:00+02:00")
        assert parsed == datetime(2024, 1, 1, 10, tzinfo=timezone.utc)
        assert parsed.utcoffset() == timedelta(0)

    def test_epoch_milliseconds(self):
        assert parse_timestamp(1_704_103_200_000) == datetime(2024, 1, 1, 10, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", ["tomorrow", "", None, True, {"date": "2024-01-01"}, float("nan")])
    def test_unreadable_values_become_none(self, value):
        assert parse_timestamp(value) is None


class TestAvailabilityEvent:
    def test_from_payload_defaults(self):
        event = AvailabilityEvent.from_payload({"title": "Alice", "start": "2024-01-01T10:00", "end": "2024-01-01T11:00"})

        assert event.id == ""
        assert event.is_tentative is False
        assert event.notes == ""

    def test_from_payload_ignores_payload_id(self):
        event = AvailabilityEvent.from_payload({"id": "abc", "title": "x"}, event_id="target")
        assert event.id == "target"

    def test_record_never_carries_id(self):
        event = AvailabilityEvent.from_payload({"title": "x"}, event_id="target")
        assert "id" not in event.to_record()

    def test_record_round_trip_through_store_columns(self):
        event = AvailabilityEvent.from_payload(
            {"title": "Alice", "start": "2024-01-01T10:00", "end": "2024-01-01T11:00", "isTentative": True, "notes": "n"}
        )
        restored = AvailabilityEvent.from_record({"id": "1", **event.to_record()})

        assert restored.start == event.start
        assert restored.end == event.end
        assert restored.is_tentative is True
        assert restored.notes == "n"

    def test_undated_events_sort_last(self):
        dated = AvailabilityEvent.from_payload({"title": "dated", "start": "2030-01-01T00:00"})
        undated = AvailabilityEvent.from_payload({"title": "undated", "start": "garbage"})

        ordered = sorted([undated, dated], key=AvailabilityEvent.sort_key)

        assert [event.title for event in ordered] == ["dated", "undated"]

    def test_is_inverted(self):
        event = AvailabilityEvent.from_payload({"start": "2024-01-01T12:00", "end": "2024-01-01T10:00"})
        assert event.is_inverted


def test_serialize_event_uses_camel_case():
    event = AvailabilityEvent.from_payload(
        {"title": "Alice", "start": "2024-01-01T10:00", "end": "2024-01-01T11:00", "isTentative": True},
        event_id="evt-1",
    )

    assert serialize_event(event) == {
        "id": "evt-1",
        "title": "Alice",
        "start": "2024-01-01T10:00:00+00:00",
        "end": "2024-01-01T11:00:00+00:00",
        "isTentative": True,
        "notes": "",
    }

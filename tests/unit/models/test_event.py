"""
Module: test_event.py
Description: Unit tests for event and result model validation.
"""

import pytest
from pydantic import ValidationError

from event_relay.models.event import QueuedEvent, TelemetryEvent
from event_relay.models.request import BatchPayload
from event_relay.models.response import BatchResult


class TestTelemetryEvent:
    """Test cases for TelemetryEvent validation."""

    def test_valid_event(self, sample_event):
        event = TelemetryEvent(**sample_event)

        assert event.event == "item_created"
        assert event.properties["platform"] == "desktop"
        assert event.timestamp == "2026-10-18T09:30:00.000Z"

    def test_defaults(self):
        event = TelemetryEvent(event="app_opened")

        assert event.properties == {}
        assert event.timestamp is None

    def test_null_properties_become_empty(self):
        assert TelemetryEvent(event="app_opened", properties=None).properties == {}

    def test_event_name_required(self):
        with pytest.raises(ValidationError):
            TelemetryEvent(properties={})

        with pytest.raises(ValidationError):
            TelemetryEvent(event=None)

    @pytest.mark.parametrize("name", ["", "   ", " $pageview ", "x" * 201, "\u00e9v\u00e9nement \u2713"])
    def test_event_name_kept_verbatim(self, name):
        assert TelemetryEvent(event=name).event == name

    def test_properties_must_be_object(self):
        with pytest.raises(ValidationError, match="properties must be a dictionary"):
            TelemetryEvent(event="app_opened", properties=["not", "a", "dict"])

    def test_properties_preserve_json_types(self):
        properties = {"count": 3, "ratio": 0.5, "flag": True, "tags": ["a"], "nested": {"k": None}}
        event = TelemetryEvent(event="app_opened", properties=properties)

        restored = TelemetryEvent.model_validate_json(event.model_dump_json())

        assert restored.properties == properties


class TestQueuedEvent:

    def test_to_event(self, sample_event):
        row = QueuedEvent(
            id=1,
            event_json=TelemetryEvent(**sample_event).model_dump_json(),
            created_at=1_700_000_000_000,
        )

        assert row.retry_count == 0
        assert row.to_event() == TelemetryEvent(**sample_event)

    def test_to_event_corrupt(self):
        row = QueuedEvent(id=1, event_json='{"properties": {}}', created_at=0)

        with pytest.raises(ValueError):
            row.to_event()


class TestBatchModels:

    def test_batch_payload_coerces_events(self, sample_event):
        payload = BatchPayload(events=[sample_event], api_key=" phc_key ")

        assert isinstance(payload.events[0], TelemetryEvent)
        assert payload.api_key == "phc_key"

    def test_batch_result_counts(self):
        assert BatchResult().model_dump() == {"sent": 0, "queued": 0}

        with pytest.raises(ValidationError):
            BatchResult(sent=-1)

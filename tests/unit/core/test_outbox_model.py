"""Unit tests for the OutboxEvent model.

Covers:
- Default status is PENDING with no processing data.
- JSON payload persistence.
- mark_as_published() and mark_as_failed(error) transitions.
"""

from __future__ import annotations

import uuid

import pytest

from modules.core.models import EventStatus, OutboxEvent

pytestmark = pytest.mark.unit


def _make_event(**overrides) -> OutboxEvent:
    defaults = {
        "event_type": "DocumentStatusChanged",
        "payload": {"old_status": "sent", "new_status": "paid"},
        "aggregate_id": "0190f1c2-7a51-7000-8000-000000000001",
        "topic": "documents",
    }
    defaults.update(overrides)
    return OutboxEvent.objects.create(**defaults)


class TestOutboxEventCreation:
    def test_create_event_with_defaults(self):
        event = _make_event()
        event.refresh_from_db()
        assert event.status == EventStatus.PENDING
        assert event.processed_at is None
        assert event.error_message is None
        assert event.retry_count == 0

    def test_id_is_uuid7(self):
        event = _make_event()
        assert isinstance(event.id, uuid.UUID)
        assert event.id.version == 7

    def test_payload_persisted_and_retrieved(self):
        payload = {"action": "convert_to_invoice", "target": {"type": "invoice"}}
        event = _make_event(payload=payload)
        event.refresh_from_db()
        assert event.payload == payload


class TestOutboxEventStatus:
    def test_mark_as_published(self):
        event = _make_event()

        event.mark_as_published()
        event.refresh_from_db()

        assert event.status == EventStatus.PUBLISHED
        assert event.processed_at is not None

    def test_mark_as_failed_increments_retry(self):
        event = _make_event()

        event.mark_as_failed("Error 1")
        event.mark_as_failed("Error 2")
        event.refresh_from_db()

        assert event.status == EventStatus.FAILED
        assert event.retry_count == 2
        assert event.error_message == "Error 2"

    def test_str_representation(self):
        result = str(_make_event(event_type="DocumentConverted", aggregate_id="so-456"))
        assert "DocumentConverted" in result
        assert "PENDING" in result
        assert "so-456" in result

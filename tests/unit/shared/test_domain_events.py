"""Unit tests for domain events registration on entities."""

from __future__ import annotations

import dataclasses

import pytest

from modules.documents.constants import DocumentType
from modules.documents.events import DocumentCreated
from modules.documents.models import Document

pytestmark = pytest.mark.unit


def test_document_registers_and_clears_domain_events():
    document = Document(document_type=DocumentType.QUOTATION, customer_name="Test")

    assert document.domain_events == []

    event = DocumentCreated(aggregate_id=document.id, payload={"status": "draft"})
    document.add_domain_event(event)

    assert document.domain_events == [event]
    assert event.event_name == "DocumentCreated"

    document.clear_domain_events()
    assert document.domain_events == []


def test_domain_events_are_immutable():
    event = DocumentCreated(aggregate_id=Document().id)

    with pytest.raises(dataclasses.FrozenInstanceError):
        event.payload = {"status": "sent"}

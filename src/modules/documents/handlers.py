"""Handlers for document workflow events published on the in-memory bus."""

from __future__ import annotations

import structlog

from modules.documents.events import (
    DocumentConverted,
    DocumentCreated,
    DocumentStatusChanged,
)
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class DocumentCreatedHandler(IEventHandler[DocumentCreated]):
    def handle(self, event: DocumentCreated) -> None:
        logger.info(
            f"Document {event.payload.get('document_number')} created",
            document_id=str(event.aggregate_id),
            document_type=event.payload.get("document_type"),
        )


class DocumentStatusChangedHandler(IEventHandler[DocumentStatusChanged]):
    def handle(self, event: DocumentStatusChanged) -> None:
        logger.info(
            f"Document {event.aggregate_id} moved "
            f"{event.payload.get('old_status')} -> {event.payload.get('new_status')}",
            document_id=str(event.aggregate_id),
            available_actions=event.payload.get("available_actions", []),
        )


class DocumentConvertedHandler(IEventHandler[DocumentConverted]):
    def handle(self, event: DocumentConverted) -> None:
        logger.info(
            f"Document {event.aggregate_id} converted via {event.payload.get('action')}",
            document_id=str(event.aggregate_id),
            target_id=event.payload.get("target_id"),
        )


document_created_handler = DocumentCreatedHandler()
document_status_changed_handler = DocumentStatusChangedHandler()
document_converted_handler = DocumentConvertedHandler()

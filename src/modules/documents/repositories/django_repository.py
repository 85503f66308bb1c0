"""Django ORM implementation of the Document repository.

Writes are atomic. Domain events collected on the aggregate are stored as
``OutboxEvent`` rows in the same transaction and handed to the in-process
event bus once the transaction commits.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.core.models import OutboxEvent
from modules.documents.models import (
    ConversionLink,
    Document,
    DocumentItem,
    DocumentStatusHistory,
)
from modules.documents.repositories.interfaces import IDocumentRepository
from shared.domain.events import DomainEvent
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)

OUTBOX_TOPIC = "documents"


class DocumentDjangoRepository(IDocumentRepository):
    """Concrete Document repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + items)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Document:
        document = Document(
            document_type=data["document_type"],
            customer_name=data["customer_name"],
            notes=data.get("notes", ""),
            delivery_address=data.get("delivery_address", ""),
            related_document=data.get("related_document"),
            due_date=data.get("due_date"),
        )
        for optional in ("currency", "issue_date", "paid_amount"):
            if data.get(optional) is not None:
                setattr(document, optional, data[optional])
        document.save()

        items = data.get("items", [])
        for item_data in items:
            DocumentItem(
                document=document,
                item_code=item_data.get("item_code", ""),
                description=item_data["description"],
                quantity=item_data["quantity"],
                unit_price=item_data["unit_price"],
                tax_rate=item_data["tax_rate"],
            ).save()

        document.recalculate_totals()
        document.save(update_fields=["subtotal", "tax_amount", "total"])

        logger.info(
            "document.persisted",
            document_id=str(document.id),
            document_type=document.document_type,
            item_count=len(items),
        )
        return document

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def _queryset(self, document_type: Optional[str] = None):
        queryset = (
            Document.objects.alive()
            .select_related("related_document")
            .prefetch_related("items", "status_history")
        )
        if document_type:
            queryset = queryset.filter(document_type=document_type)
        return queryset

    def get_by_id(
        self, id: str, document_type: Optional[str] = None
    ) -> Optional[Document]:
        """Returns ``None`` for unknown, malformed or soft-deleted IDs."""
        try:
            return self._queryset(document_type).filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(
        self, id: str, document_type: Optional[str] = None
    ) -> Optional[Document]:
        try:
            return (
                self._queryset(document_type)
                .select_for_update(of=("self",))
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Document]:
        queryset = self._queryset()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    # ------------------------------------------------------------------
    # Save (outbox)
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Document) -> Document:
        entity.save()

        events = entity.domain_events
        pending: List[Tuple[OutboxEvent, DomainEvent]] = []
        for event in events:
            row = OutboxEvent.objects.create(
                event_type=event.event_name,
                aggregate_id=str(event.aggregate_id),
                payload=_serialize_event_payload(event),
                topic=OUTBOX_TOPIC,
            )
            pending.append((row, event))
        entity.clear_domain_events()

        if pending:
            transaction.on_commit(lambda: _publish(pending))

        logger.info(
            "document.saved", document_id=str(entity.id), event_count=len(events)
        )
        return entity

    # ------------------------------------------------------------------
    # Audit records
    # ------------------------------------------------------------------

    @transaction.atomic
    def add_history(
        self,
        document_id: UUID,
        status: str,
        notes: str = "",
        old_status: Optional[str] = None,
        user: Any = None,
    ) -> DocumentStatusHistory:
        history = DocumentStatusHistory.objects.create(
            document_id=document_id,
            old_status=old_status,
            new_status=status,
            notes=notes,
            user=_real_user(user),
        )
        logger.info(
            "document.history_added",
            document_id=str(document_id),
            old_status=old_status,
            new_status=status,
        )
        return history

    @transaction.atomic
    def add_conversion_link(
        self,
        source: Document,
        target: Document,
        action: str,
        user: Any = None,
    ) -> ConversionLink:
        return ConversionLink.objects.create(
            source=source,
            target=target,
            action=action,
            user=_real_user(user),
        )


def _real_user(user: Any) -> Any:
    """Anonymous or token-only principals are stored as "system" (``None``)."""
    if user is None or not getattr(user, "pk", None):
        return None
    return user


def _publish(pending: Sequence[Tuple[OutboxEvent, DomainEvent]]) -> None:
    for row, event in pending:
        try:
            event_bus.publish(event)
        except Exception as exc:
            logger.exception(
                "outbox.publish_failed",
                event_type=row.event_type,
                aggregate_id=row.aggregate_id,
            )
            row.mark_as_failed(str(exc))
        else:
            row.mark_as_published()


def _serialize_event_payload(event: DomainEvent) -> Dict[str, Any]:
    return json.loads(json.dumps(_normalize_for_json(asdict(event))))


def _normalize_for_json(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_for_json(item) for item in value]
    if isinstance(value, dict):
        return {key: _normalize_for_json(val) for key, val in value.items()}
    return value

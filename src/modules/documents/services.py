"""Document workflow service layer (use cases).

Every write runs in one transaction and locks the document it changes
(``SELECT FOR UPDATE``) before validating against the transition table.

Operations:
- ``update_document_status``: move a document along the status table.
- ``convert_quotation_to_sales_order``: accepted quotation -> draft sales order.
- ``convert_sales_order_to_invoice``: confirmed sales order -> pending invoice.
- ``create_delivery_note_from_sales_order``: confirmed sales order ->
  pending delivery note (quantities only, no prices).

Conversions never change the source status; the new document carries
``related_document`` and a ``ConversionLink`` back to its source.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from modules.documents import workflow
from modules.documents.constants import (
    CONVERSION_TARGETS,
    DocumentType,
    WorkflowActionName,
)
from modules.documents.dtos import WorkflowDTO
from modules.documents.events import (
    DocumentConverted,
    DocumentCreated,
    DocumentStatusChanged,
)
from modules.documents.exceptions import DocumentNotFound, InvalidTransition

if TYPE_CHECKING:
    from modules.documents.dtos import CreateDocumentDTO
    from modules.documents.models import Document
    from modules.documents.repositories.interfaces import IDocumentRepository

logger = structlog.get_logger(__name__)


@dataclass
class StatusChangeResult:
    """Outcome of ``update_document_status``.

    ``available_actions`` lists what the new status unlocks; nothing is
    triggered automatically.
    """

    document: Document
    updated: bool = True
    available_actions: List[workflow.WorkflowAction] = field(default_factory=list)


class DocumentService:
    """Application service for the sales document workflow.

    Receives the repository via constructor injection.
    """

    def __init__(self, document_repository: IDocumentRepository) -> None:
        self._repo = document_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_document(self, dto: CreateDocumentDTO, user: Any = None) -> Document:
        """Create a document in the initial status of its type."""
        log = logger.bind(document_type=dto.document_type)
        log.info("document.creation_started", item_count=len(dto.items))

        document = self._repo.create(
            {
                "document_type": dto.document_type,
                "customer_name": dto.customer_name,
                "currency": dto.currency,
                "issue_date": dto.issue_date,
                "due_date": dto.due_date,
                "notes": dto.notes,
                "delivery_address": dto.delivery_address,
                "items": [item.model_dump() for item in dto.items],
            }
        )
        self._record_creation(document, notes="Document created", user=user)

        log.info(
            "document.created",
            document_id=str(document.id),
            document_number=document.document_number,
        )
        return self._repo.get_by_id(str(document.id)) or document

    @transaction.atomic
    def update_document_status(
        self,
        document_type: str,
        document_id: UUID,
        new_status: str,
        notes: str = "",
        user: Any = None,
    ) -> StatusChangeResult:
        """Move a document to ``new_status``.

        Raises:
            DocumentNotFound: no live document of ``document_type`` with that id.
            InvalidTransition: ``new_status`` is not allowed from the current status.
        """
        document = self._repo.get_for_update(str(document_id), document_type)
        if not document:
            raise DocumentNotFound(f"{document_type} {document_id} not found.")

        log = logger.bind(
            document_id=str(document_id),
            document_type=document_type,
            current_status=document.status,
            new_status=new_status,
        )

        try:
            workflow.validate_transition(document_type, document.status, new_status)
        except InvalidTransition:
            log.warning("document.invalid_transition")
            raise

        old_status = document.status
        document.status = new_status
        actions = workflow.available_actions(document_type, new_status)
        document.add_domain_event(
            DocumentStatusChanged(
                aggregate_id=document.id,
                payload={
                    "document_type": document_type,
                    "old_status": old_status,
                    "new_status": new_status,
                    "available_actions": [a.action for a in actions],
                },
            )
        )
        self._repo.save(document)
        self._repo.add_history(
            document_id=document.id,
            status=new_status,
            notes=notes,
            old_status=old_status,
            user=user,
        )

        log.info("document.status_updated", available_actions=[a.action for a in actions])
        return StatusChangeResult(
            document=self._repo.get_by_id(str(document_id)) or document,
            updated=True,
            available_actions=actions,
        )

    @transaction.atomic
    def convert_quotation_to_sales_order(
        self, quotation_id: UUID, user: Any = None
    ) -> Document:
        """Create a draft sales order from an accepted quotation."""
        quotation = self._lock_source(quotation_id, DocumentType.QUOTATION)
        return self._convert(
            quotation,
            WorkflowActionName.CONVERT_TO_SALES_ORDER,
            overrides={
                "notes": f"Generated from quotation {quotation.document_number}",
            },
            user=user,
        )

    @transaction.atomic
    def convert_sales_order_to_invoice(
        self, sales_order_id: UUID, user: Any = None
    ) -> Document:
        """Create a pending invoice (due after the payment terms) from a confirmed order."""
        sales_order = self._lock_source(sales_order_id, DocumentType.SALES_ORDER)
        today = timezone.localdate()
        return self._convert(
            sales_order,
            WorkflowActionName.CONVERT_TO_INVOICE,
            overrides={
                "issue_date": today,
                "due_date": today + timedelta(days=settings.INVOICE_PAYMENT_TERMS_DAYS),
                "paid_amount": Decimal("0.00"),
                "notes": f"Generated from sales order {sales_order.document_number}",
            },
            user=user,
        )

    @transaction.atomic
    def create_delivery_note_from_sales_order(
        self, sales_order_id: UUID, user: Any = None
    ) -> Document:
        """Create a pending delivery note listing the ordered quantities."""
        sales_order = self._lock_source(sales_order_id, DocumentType.SALES_ORDER)
        return self._convert(
            sales_order,
            WorkflowActionName.CREATE_DELIVERY_NOTE,
            overrides={
                "notes": f"Generated from sales order {sales_order.document_number}",
            },
            priced=False,
            user=user,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_document(
        self, document_id: str, document_type: Optional[str] = None
    ) -> Document:
        """Raises ``DocumentNotFound`` when absent (or of another type)."""
        document = self._repo.get_by_id(document_id, document_type)
        if not document:
            raise DocumentNotFound(f"Document {document_id} not found.")
        return document

    def list_documents(self, filters: Optional[Dict[str, Any]] = None) -> List[Document]:
        return self._repo.list(filters)

    def get_workflow(self, document: Document) -> WorkflowDTO:
        return WorkflowDTO.resolve(document.document_type, document.status)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _lock_source(self, document_id: UUID, document_type: str) -> Document:
        document = self._repo.get_for_update(str(document_id), document_type)
        if not document:
            raise DocumentNotFound(f"{document_type} {document_id} not found.")
        return document

    def _convert(
        self,
        source: Document,
        action: str,
        overrides: Dict[str, Any],
        priced: bool = True,
        user: Any = None,
    ) -> Document:
        target_type = CONVERSION_TARGETS[action]
        log = logger.bind(
            source_id=str(source.id),
            source_type=source.document_type,
            source_status=source.status,
            action=str(action),
        )

        if not workflow.can_convert(source.document_type, target_type, source.status):
            log.warning("document.conversion_not_allowed")
            raise InvalidTransition(
                f"Cannot {WorkflowActionName(action).label.lower()} from "
                f"{source.document_type} in status {source.status}.",
                document_type=source.document_type,
                current_status=source.status,
                new_status=workflow.initial_status(target_type),
            )

        data: Dict[str, Any] = {
            "document_type": target_type,
            "customer_name": source.customer_name,
            "currency": source.currency,
            "delivery_address": source.delivery_address,
            "related_document": source,
            "items": [
                {
                    "item_code": item.item_code,
                    "description": item.description,
                    "quantity": item.quantity,
                    "unit_price": item.unit_price if priced else Decimal("0.00"),
                    "tax_rate": item.tax_rate if priced else Decimal("0"),
                }
                for item in source.items.all()
            ],
        }
        data.update(overrides)

        target = self._repo.create(data)
        self._repo.add_conversion_link(source, target, action, user=user)
        self._record_creation(
            target,
            notes=f"Created from {source.document_number}",
            user=user,
        )

        source.add_domain_event(
            DocumentConverted(
                aggregate_id=source.id,
                payload={
                    "action": str(action),
                    "target_id": str(target.id),
                    "target_type": target_type,
                    "target_number": target.document_number,
                },
            )
        )
        self._repo.save(source)

        log.info(
            "document.converted",
            target_id=str(target.id),
            target_number=target.document_number,
        )
        return self._repo.get_by_id(str(target.id)) or target

    def _record_creation(self, document: Document, notes: str, user: Any) -> None:
        document.add_domain_event(
            DocumentCreated(
                aggregate_id=document.id,
                payload={
                    "document_type": document.document_type,
                    "document_number": document.document_number,
                    "status": document.status,
                    "related_document_id": (
                        str(document.related_document_id)
                        if document.related_document_id
                        else None
                    ),
                },
            )
        )
        self._repo.save(document)
        self._repo.add_history(
            document_id=document.id,
            status=document.status,
            notes=notes,
            user=user,
        )

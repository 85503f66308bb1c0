"""Document repository interface.

The Document aggregate includes its line items, status history and the
conversion links it takes part in. ``DocumentService`` depends only on
this contract.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from uuid import UUID

    from modules.documents.models import (
        ConversionLink,
        Document,
        DocumentStatusHistory,
    )


class IDocumentRepository(IRepository["Document"]):
    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Document:
        """Create a document and its items atomically.

        ``data`` must include ``document_type``, ``customer_name`` and
        ``items`` (dicts with ``item_code``, ``description``, ``quantity``,
        ``unit_price``, ``tax_rate``). Optional keys: ``currency``,
        ``issue_date``, ``due_date``, ``notes``, ``delivery_address``,
        ``paid_amount`` and ``related_document``.
        """

    @abstractmethod
    def get_by_id(
        self, id: str, document_type: Optional[str] = None
    ) -> Optional[Document]:
        """Live document with prefetched items and history, or ``None``."""

    @abstractmethod
    def get_for_update(
        self, id: str, document_type: Optional[str] = None
    ) -> Optional[Document]:
        """Like ``get_by_id`` but holding a row lock until the transaction ends."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Document]:
        """List live documents with optional ORM filters."""

    @abstractmethod
    def add_history(
        self,
        document_id: UUID,
        status: str,
        notes: str = "",
        old_status: Optional[str] = None,
        user: Any = None,
    ) -> DocumentStatusHistory:
        """Append a status change to the document's audit trail."""

    @abstractmethod
    def add_conversion_link(
        self,
        source: Document,
        target: Document,
        action: str,
        user: Any = None,
    ) -> ConversionLink:
        """Record that ``target`` was produced from ``source``."""

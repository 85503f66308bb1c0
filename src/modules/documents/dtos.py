"""Pydantic DTOs passed between the API layer and ``DocumentService``.

Input DTOs are immutable and validate everything the service relies on,
so the service never sees a document without line items or an unknown
document type.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.documents import workflow
from modules.documents.constants import DocumentType

# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class LineItemDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    item_code: str = ""
    description: str
    quantity: int = Field(ge=1)
    unit_price: Decimal = Field(ge=0, decimal_places=2)
    tax_rate: Decimal = Field(default=Decimal("16"), ge=0, le=100)

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Description is required.")
        return v.strip()


class CreateDocumentDTO(BaseModel):
    """A new document; it always starts in the initial status of its type."""

    model_config = ConfigDict(frozen=True)

    document_type: str
    customer_name: str
    items: List[LineItemDTO]
    currency: str = "KES"
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    notes: str = ""
    delivery_address: str = ""

    @field_validator("document_type")
    @classmethod
    def known_document_type(cls, v: str) -> str:
        if v not in DocumentType.values:
            raise ValueError(f"Unknown document type: {v}.")
        return v

    @field_validator("customer_name")
    @classmethod
    def customer_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Customer name is required.")
        return v.strip()

    @field_validator("currency")
    @classmethod
    def currency_code(cls, v: str) -> str:
        if len(v) != 3 or not v.isalpha():
            raise ValueError("Currency must be a 3-letter code.")
        return v.upper()

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(cls, v: List[LineItemDTO]) -> List[LineItemDTO]:
        if not v:
            raise ValueError("A document must have at least one line item.")
        return v


class StatusUpdateDTO(BaseModel):
    """Generic ``updateDocumentStatus(document_type, document_id, new_status)`` call."""

    model_config = ConfigDict(frozen=True)

    document_type: str
    document_id: UUID
    new_status: str
    notes: str = ""

    @field_validator("document_type")
    @classmethod
    def known_document_type(cls, v: str) -> str:
        if v not in DocumentType.values:
            raise ValueError(f"Unknown document type: {v}.")
        return v

    @field_validator("new_status")
    @classmethod
    def normalize_status(cls, v: str) -> str:
        return v.strip().lower()


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class WorkflowActionDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    action: str
    label: str
    short_label: str


class WorkflowDTO(BaseModel):
    """What the UI may offer for a document in its current status."""

    model_config = ConfigDict(frozen=True)

    document_type: str
    status: str
    is_terminal: bool
    allowed_next_statuses: List[str]
    actions: List[WorkflowActionDTO]
    next_document_types: List[str]
    message: str

    @classmethod
    def resolve(cls, document_type: str, status: str) -> WorkflowDTO:
        return cls(
            document_type=str(document_type),
            status=str(status),
            is_terminal=workflow.is_terminal(document_type, status),
            allowed_next_statuses=[
                str(s) for s in workflow.allowed_next_statuses(document_type, status)
            ],
            actions=[
                WorkflowActionDTO(
                    action=str(a.action), label=a.label, short_label=a.short_label
                )
                for a in workflow.available_actions(document_type, status)
            ],
            next_document_types=[
                str(t) for t in workflow.next_document_types(document_type, status)
            ],
            message=workflow.workflow_status_message(document_type, status),
        )

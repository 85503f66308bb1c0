"""Unit tests for document DTOs."""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from modules.documents.dtos import (
    CreateDocumentDTO,
    LineItemDTO,
    StatusUpdateDTO,
    WorkflowDTO,
)

pytestmark = pytest.mark.unit


def _item(**overrides) -> dict:
    data = {"description": "Paint 20L", "quantity": 2, "unit_price": "4500.00"}
    data.update(overrides)
    return data


class TestLineItemDTO:
    def test_defaults(self):
        item = LineItemDTO(**_item())
        assert item.tax_rate == Decimal("16")
        assert item.item_code == ""

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError):
            LineItemDTO(**_item(quantity=0))

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            LineItemDTO(**_item(unit_price="-1.00"))

    def test_blank_description_rejected(self):
        with pytest.raises(ValidationError, match="Description is required"):
            LineItemDTO(**_item(description="   "))

    def test_tax_rate_above_100_rejected(self):
        with pytest.raises(ValidationError):
            LineItemDTO(**_item(tax_rate="101"))

    def test_is_frozen(self):
        item = LineItemDTO(**_item())
        with pytest.raises(ValidationError):
            item.quantity = 5


class TestCreateDocumentDTO:
    def test_valid(self):
        dto = CreateDocumentDTO(
            document_type="quotation",
            customer_name="  Mama Mboga Stores ",
            items=[_item()],
            currency="kes",
        )
        assert dto.customer_name == "Mama Mboga Stores"
        assert dto.currency == "KES"
        assert dto.items[0].quantity == 2

    def test_unknown_document_type(self):
        with pytest.raises(ValidationError, match="Unknown document type"):
            CreateDocumentDTO(
                document_type="purchase_order", customer_name="X", items=[_item()]
            )

    def test_items_required(self):
        with pytest.raises(ValidationError, match="at least one line item"):
            CreateDocumentDTO(document_type="quotation", customer_name="X", items=[])

    def test_blank_customer(self):
        with pytest.raises(ValidationError, match="Customer name is required"):
            CreateDocumentDTO(document_type="quotation", customer_name=" ", items=[_item()])

    def test_bad_currency(self):
        with pytest.raises(ValidationError, match="3-letter"):
            CreateDocumentDTO(
                document_type="quotation",
                customer_name="X",
                items=[_item()],
                currency="K1S",
            )


class TestStatusUpdateDTO:
    def test_status_is_normalized(self):
        dto = StatusUpdateDTO(
            document_type="invoice", document_id=uuid4(), new_status=" Paid "
        )
        assert dto.new_status == "paid"
        assert dto.notes == ""

    def test_unknown_type(self):
        with pytest.raises(ValidationError):
            StatusUpdateDTO(document_type="receipt", document_id=uuid4(), new_status="paid")


class TestWorkflowDTO:
    def test_resolve_confirmed_sales_order(self):
        dto = WorkflowDTO.resolve("sales_order", "confirmed")
        assert dto.model_dump() == {
            "document_type": "sales_order",
            "status": "confirmed",
            "is_terminal": True,
            "allowed_next_statuses": [],
            "actions": [
                {
                    "action": "convert_to_invoice",
                    "label": "Convert to Invoice",
                    "short_label": "Make Invoice",
                },
                {
                    "action": "create_delivery_note",
                    "label": "Create Delivery Note",
                    "short_label": "Create DNote",
                },
            ],
            "next_document_types": ["invoice", "delivery_note"],
            "message": "Ready to create Invoice and Delivery Note",
        }

    def test_resolve_unknown_pair(self):
        dto = WorkflowDTO.resolve("receipt", "void")
        assert dto.allowed_next_statuses == []
        assert dto.actions == []
        assert dto.is_terminal is False
        assert dto.message == ""

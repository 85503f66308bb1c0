"""Unit tests for the status transition table and the action resolver.

Covers:
- Exact allowed next statuses per (document type, status).
- Unknown types/statuses and delivery notes resolve to nothing.
- Terminal statuses have no transitions.
- validate_transition raises InvalidTransition with context.
- Actions only appear for accepted quotations and confirmed sales orders.
- Conversion table, next document types and status hints.
"""

from __future__ import annotations

import pytest

from modules.documents import workflow
from modules.documents.constants import (
    STATUS_TRANSITIONS,
    DocumentStatus,
    DocumentType,
    WorkflowActionName,
)
from modules.documents.exceptions import InvalidTransition

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Status transition table
# ---------------------------------------------------------------------------


class TestAllowedNextStatuses:
    @pytest.mark.parametrize(
        "document_type, status, expected",
        [
            ("quotation", "draft", ("sent",)),
            ("quotation", "sent", ("accepted", "rejected", "expired")),
            ("quotation", "accepted", ()),
            ("quotation", "rejected", ()),
            ("quotation", "expired", ()),
            ("sales_order", "draft", ("confirmed", "cancelled")),
            ("sales_order", "confirmed", ()),
            ("sales_order", "cancelled", ()),
            ("invoice", "pending", ("sent", "cancelled")),
            ("invoice", "sent", ("paid", "overdue")),
            ("invoice", "paid", ()),
            ("invoice", "overdue", ("paid",)),
            ("invoice", "cancelled", ()),
        ],
    )
    def test_table(self, document_type, status, expected):
        assert workflow.allowed_next_statuses(document_type, status) == expected

    @pytest.mark.parametrize(
        "document_type, status",
        [
            ("quotation", "paid"),
            ("sales_order", "sent"),
            ("invoice", "draft"),
            ("purchase_order", "draft"),
            ("", ""),
            ("QUOTATION", "DRAFT"),
        ],
    )
    def test_unknown_pairs_allow_nothing(self, document_type, status):
        assert workflow.allowed_next_statuses(document_type, status) == ()

    @pytest.mark.parametrize("status", DocumentStatus.values)
    def test_delivery_notes_have_no_transitions(self, status):
        assert workflow.allowed_next_statuses(DocumentType.DELIVERY_NOTE, status) == ()

    def test_targets_are_known_statuses(self):
        for statuses in STATUS_TRANSITIONS.values():
            for targets in statuses.values():
                assert set(targets) <= set(DocumentStatus.values)

    def test_every_target_has_its_own_row(self):
        for document_type, statuses in STATUS_TRANSITIONS.items():
            for targets in statuses.values():
                for target in targets:
                    assert target in statuses, (document_type, target)


class TestTerminalStatuses:
    @pytest.mark.parametrize(
        "document_type, status",
        [
            ("quotation", "accepted"),
            ("quotation", "rejected"),
            ("quotation", "expired"),
            ("sales_order", "confirmed"),
            ("sales_order", "cancelled"),
            ("invoice", "paid"),
            ("invoice", "cancelled"),
        ],
    )
    def test_terminal(self, document_type, status):
        assert workflow.is_terminal(document_type, status) is True
        assert workflow.allowed_next_statuses(document_type, status) == ()

    @pytest.mark.parametrize(
        "document_type, status",
        [
            ("quotation", "draft"),
            ("invoice", "overdue"),
            ("invoice", "nonexistent"),
            ("delivery_note", "pending"),
        ],
    )
    def test_not_terminal(self, document_type, status):
        assert workflow.is_terminal(document_type, status) is False


class TestCanTransition:
    def test_overdue_invoice_can_be_paid(self):
        assert workflow.can_transition("invoice", "overdue", "paid") is True

    def test_paid_invoice_cannot_go_back_to_sent(self):
        assert workflow.can_transition("invoice", "paid", "sent") is False

    def test_draft_quotation_cannot_skip_to_accepted(self):
        assert workflow.can_transition("quotation", "draft", "accepted") is False

    def test_same_status_is_not_a_transition(self):
        assert workflow.can_transition("quotation", "draft", "draft") is False


class TestValidateTransition:
    def test_allowed_transition_passes(self):
        workflow.validate_transition("sales_order", "draft", "confirmed")

    def test_illegal_transition_raises_with_context(self):
        with pytest.raises(InvalidTransition) as exc_info:
            workflow.validate_transition("quotation", "draft", "accepted")

        exc = exc_info.value
        assert exc.document_type == "quotation"
        assert exc.current_status == "draft"
        assert exc.new_status == "accepted"
        assert "draft" in str(exc)
        assert "accepted" in str(exc)


class TestInitialStatus:
    @pytest.mark.parametrize(
        "document_type, expected",
        [
            ("quotation", "draft"),
            ("sales_order", "draft"),
            ("invoice", "pending"),
            ("delivery_note", "pending"),
        ],
    )
    def test_initial_status(self, document_type, expected):
        assert workflow.initial_status(document_type) == expected


# ---------------------------------------------------------------------------
# Action resolver
# ---------------------------------------------------------------------------


class TestAvailableActions:
    def test_accepted_quotation_offers_sales_order(self):
        actions = workflow.available_actions("quotation", "accepted")
        assert actions == [
            workflow.WorkflowAction(
                action=WorkflowActionName.CONVERT_TO_SALES_ORDER,
                label="Convert to Sales Order",
                short_label="Make Sale Order",
            )
        ]

    @pytest.mark.parametrize(
        "status", ["draft", "sent", "rejected", "expired", "confirmed", "bogus"]
    )
    def test_convert_to_sales_order_only_when_accepted(self, status):
        actions = workflow.available_actions("quotation", status)
        assert WorkflowActionName.CONVERT_TO_SALES_ORDER not in [
            a.action for a in actions
        ]

    def test_confirmed_sales_order_offers_invoice_and_delivery_note(self):
        actions = workflow.available_actions("sales_order", "confirmed")
        assert [a.action for a in actions] == [
            "convert_to_invoice",
            "create_delivery_note",
        ]
        assert [a.short_label for a in actions] == ["Make Invoice", "Create DNote"]

    @pytest.mark.parametrize(
        "document_type, status",
        [
            ("sales_order", "draft"),
            ("sales_order", "cancelled"),
            ("invoice", "paid"),
            ("invoice", "pending"),
            ("delivery_note", "pending"),
            ("unknown", "accepted"),
        ],
    )
    def test_no_actions(self, document_type, status):
        assert workflow.available_actions(document_type, status) == []


class TestConversions:
    def test_can_convert(self):
        assert workflow.can_convert("quotation", "sales_order", "accepted")
        assert workflow.can_convert("sales_order", "invoice", "confirmed")
        assert workflow.can_convert("sales_order", "delivery_note", "confirmed")

    def test_cannot_convert(self):
        assert not workflow.can_convert("quotation", "sales_order", "sent")
        assert not workflow.can_convert("quotation", "invoice", "accepted")
        assert not workflow.can_convert("sales_order", "invoice", "draft")
        assert not workflow.can_convert("invoice", "delivery_note", "paid")

    def test_next_document_types(self):
        assert workflow.next_document_types("quotation", "accepted") == ["sales_order"]
        assert workflow.next_document_types("sales_order", "confirmed") == [
            "invoice",
            "delivery_note",
        ]
        assert workflow.next_document_types("sales_order", "draft") == []
        assert workflow.next_document_types("delivery_note", "pending") == []


class TestWorkflowStatusMessage:
    @pytest.mark.parametrize(
        "document_type, status, expected",
        [
            ("quotation", "accepted", "Ready to convert to Sales Order"),
            ("quotation", "draft", "Accept quotation to enable conversion"),
            ("sales_order", "confirmed", "Ready to create Invoice and Delivery Note"),
            ("sales_order", "draft", "Confirm sales order to enable conversions"),
            ("invoice", "pending", ""),
            ("delivery_note", "pending", ""),
        ],
    )
    def test_message(self, document_type, status, expected):
        assert workflow.workflow_status_message(document_type, status) == expected

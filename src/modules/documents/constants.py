"""Sales document workflow constants.

The tables below are the single source of truth for the status workflow:
which statuses a document may move to, which business actions are exposed
at each status, and which document types can be produced from which.
"""

from django.db import models


class DocumentType(models.TextChoices):
    QUOTATION = "quotation", "Quotation"
    SALES_ORDER = "sales_order", "Sales Order"
    INVOICE = "invoice", "Invoice"
    DELIVERY_NOTE = "delivery_note", "Delivery Note"


class DocumentStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    SENT = "sent", "Sent"
    ACCEPTED = "accepted", "Accepted"
    REJECTED = "rejected", "Rejected"
    EXPIRED = "expired", "Expired"
    CONFIRMED = "confirmed", "Confirmed"
    CANCELLED = "cancelled", "Cancelled"
    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"
    OVERDUE = "overdue", "Overdue"


class WorkflowActionName(models.TextChoices):
    CONVERT_TO_SALES_ORDER = "convert_to_sales_order", "Convert to Sales Order"
    CONVERT_TO_INVOICE = "convert_to_invoice", "Convert to Invoice"
    CREATE_DELIVERY_NOTE = "create_delivery_note", "Create Delivery Note"


# Order of the targets is the order they are offered to the user.
STATUS_TRANSITIONS: dict[str, dict[str, tuple[str, ...]]] = {
    DocumentType.QUOTATION: {
        DocumentStatus.DRAFT: (DocumentStatus.SENT,),
        DocumentStatus.SENT: (
            DocumentStatus.ACCEPTED,
            DocumentStatus.REJECTED,
            DocumentStatus.EXPIRED,
        ),
        # Accepted quotations leave the status workflow; conversion takes over.
        DocumentStatus.ACCEPTED: (),
        DocumentStatus.REJECTED: (),
        DocumentStatus.EXPIRED: (),
    },
    DocumentType.SALES_ORDER: {
        DocumentStatus.DRAFT: (DocumentStatus.CONFIRMED, DocumentStatus.CANCELLED),
        DocumentStatus.CONFIRMED: (),
        DocumentStatus.CANCELLED: (),
    },
    DocumentType.INVOICE: {
        DocumentStatus.PENDING: (DocumentStatus.SENT, DocumentStatus.CANCELLED),
        DocumentStatus.SENT: (DocumentStatus.PAID, DocumentStatus.OVERDUE),
        DocumentStatus.PAID: (),
        DocumentStatus.OVERDUE: (DocumentStatus.PAID,),
        DocumentStatus.CANCELLED: (),
    },
}

INITIAL_STATUS: dict[str, str] = {
    DocumentType.QUOTATION: DocumentStatus.DRAFT,
    DocumentType.SALES_ORDER: DocumentStatus.DRAFT,
    DocumentType.INVOICE: DocumentStatus.PENDING,
    DocumentType.DELIVERY_NOTE: DocumentStatus.PENDING,
}

# (document_type, status) -> [(action, label, short label)]
WORKFLOW_ACTIONS: dict[tuple[str, str], list[tuple[str, str, str]]] = {
    (DocumentType.QUOTATION, DocumentStatus.ACCEPTED): [
        (
            WorkflowActionName.CONVERT_TO_SALES_ORDER,
            "Convert to Sales Order",
            "Make Sale Order",
        ),
    ],
    (DocumentType.SALES_ORDER, DocumentStatus.CONFIRMED): [
        (WorkflowActionName.CONVERT_TO_INVOICE, "Convert to Invoice", "Make Invoice"),
        (
            WorkflowActionName.CREATE_DELIVERY_NOTE,
            "Create Delivery Note",
            "Create DNote",
        ),
    ],
}

# source type -> target type -> statuses the source must be in
CONVERSIONS: dict[str, dict[str, tuple[str, ...]]] = {
    DocumentType.QUOTATION: {
        DocumentType.SALES_ORDER: (DocumentStatus.ACCEPTED,),
    },
    DocumentType.SALES_ORDER: {
        DocumentType.INVOICE: (DocumentStatus.CONFIRMED,),
        DocumentType.DELIVERY_NOTE: (DocumentStatus.CONFIRMED,),
    },
}

CONVERSION_TARGETS: dict[str, str] = {
    WorkflowActionName.CONVERT_TO_SALES_ORDER: DocumentType.SALES_ORDER,
    WorkflowActionName.CONVERT_TO_INVOICE: DocumentType.INVOICE,
    WorkflowActionName.CREATE_DELIVERY_NOTE: DocumentType.DELIVERY_NOTE,
}

DOCUMENT_NUMBER_PREFIXES: dict[str, str] = {
    DocumentType.QUOTATION: "QT",
    DocumentType.SALES_ORDER: "SO",
    DocumentType.INVOICE: "INV",
    DocumentType.DELIVERY_NOTE: "DN",
}

DOCUMENT_NUMBER_START = 1000
DOCUMENT_NUMBER_MAX_RETRIES = 5

DEFAULT_TAX_RATE = 16

"""Document, DocumentItem, DocumentStatusHistory and ConversionLink models.

- A document is created in the initial status of its type and only changes
  status through the workflow service.
- ``related_document`` is set once, when the document is produced by a
  conversion, and is never editable afterwards.
- History and conversion links are append-only audit records.
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Any

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import IntegrityError, models, transaction
from django.utils import timezone

from modules.core.models import BaseModel, SoftDeleteModel
from modules.documents import workflow
from modules.documents.constants import (
    DEFAULT_TAX_RATE,
    DOCUMENT_NUMBER_MAX_RETRIES,
    DOCUMENT_NUMBER_PREFIXES,
    DOCUMENT_NUMBER_START,
    DocumentStatus,
    DocumentType,
    WorkflowActionName,
)
from modules.documents.exceptions import DocumentNumberExhausted
from shared.domain.events import DomainEventMixin

TWO_PLACES = Decimal("0.01")


class Document(DomainEventMixin, SoftDeleteModel):
    """Sales document aggregate root (quotation, sales order, invoice, delivery note)."""

    document_type: models.CharField = models.CharField(
        max_length=20, choices=DocumentType.choices
    )
    document_number: models.CharField = models.CharField(
        max_length=20, unique=True, editable=False
    )
    status: models.CharField = models.CharField(
        max_length=20, choices=DocumentStatus.choices
    )
    customer_name: models.CharField = models.CharField(max_length=255)
    currency: models.CharField = models.CharField(max_length=3, default="KES")
    issue_date: models.DateField = models.DateField(default=timezone.localdate)
    due_date: models.DateField = models.DateField(null=True, blank=True)
    subtotal: models.DecimalField = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    tax_amount: models.DecimalField = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    total: models.DecimalField = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    paid_amount: models.DecimalField = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    notes: models.TextField = models.TextField(blank=True, default="")
    delivery_address: models.TextField = models.TextField(blank=True, default="")
    related_document: models.ForeignKey = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        editable=False,
        related_name="derived_documents",
    )

    class Meta:
        db_table = "documents"
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["document_type", "status"], name="documents_type_status_idx"
            ),
            models.Index(fields=["-created_at"], name="documents_created_idx"),
        ]
        permissions = [
            ("change_document_status", "Can change the status of a document"),
            ("convert_document", "Can convert a document into another document"),
        ]

    # ------------------------------------------------------------------
    # Workflow helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return workflow.is_terminal(self.document_type, self.status)

    @property
    def allowed_next_statuses(self) -> tuple[str, ...]:
        return workflow.allowed_next_statuses(self.document_type, self.status)

    @property
    def available_actions(self) -> list[workflow.WorkflowAction]:
        return workflow.available_actions(self.document_type, self.status)

    def can_transition_to(self, new_status: str) -> bool:
        return workflow.can_transition(self.document_type, self.status, new_status)

    @property
    def balance_amount(self) -> Decimal:
        return self.total - self.paid_amount

    # ------------------------------------------------------------------
    # Totals
    # ------------------------------------------------------------------

    def recalculate_totals(self) -> None:
        """Recompute subtotal/tax/total from the saved line items."""
        subtotal = Decimal("0.00")
        tax = Decimal("0.00")
        for item in self.items.all():
            subtotal += item.total
            tax += item.tax_amount
        self.subtotal = subtotal
        self.tax_amount = tax
        self.total = subtotal + tax

    # ------------------------------------------------------------------
    # Document number generation
    # ------------------------------------------------------------------

    @classmethod
    def highest_number(cls, document_type: str, year: int) -> int:
        """Highest ``NNNN`` already stored for the type and year (seeds the counter)."""
        prefix = f"{DOCUMENT_NUMBER_PREFIXES[document_type]}-{year}-"
        numbers = cls.objects.filter(document_number__startswith=prefix).values_list(
            "document_number", flat=True
        )
        pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")
        highest = DOCUMENT_NUMBER_START
        for number in numbers:
            match = pattern.match(number)
            if match:
                highest = max(highest, int(match.group(1)))
        return highest

    @classmethod
    def next_document_number(cls, document_type: str) -> str:
        """Next number in the ``PREFIX-YYYY-NNNN`` sequence for the local year."""
        year = timezone.localdate().year
        number = DocumentNumberSequence.allocate(document_type, year)
        return f"{DOCUMENT_NUMBER_PREFIXES[document_type]}-{year}-{number:04d}"

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.status:
            self.status = workflow.initial_status(self.document_type)
        if self.document_number:
            super().save(*args, **kwargs)
            return

        # The counter is advanced outside the savepoint so a rolled back
        # insert never hands out the same number twice.
        for _ in range(DOCUMENT_NUMBER_MAX_RETRIES):
            self.document_number = self.next_document_number(self.document_type)
            try:
                with transaction.atomic():
                    super().save(*args, **kwargs)
                return
            except IntegrityError:
                if not Document.objects.filter(
                    document_number=self.document_number
                ).exists():
                    self.document_number = ""
                    raise
        self.document_number = ""
        raise DocumentNumberExhausted(
            f"Failed to allocate a {self.document_type} number after "
            f"{DOCUMENT_NUMBER_MAX_RETRIES} attempts"
        )

    def __str__(self) -> str:
        return f"{self.document_number} ({self.status})"


class DocumentNumberSequence(BaseModel):
    """Per type and year counter behind document numbers.

    The row is locked with ``SELECT ... FOR UPDATE`` while it is advanced,
    so concurrent creates and conversions never compute the same number.
    """

    document_type: models.CharField = models.CharField(
        max_length=20, choices=DocumentType.choices
    )
    year: models.PositiveIntegerField = models.PositiveIntegerField()
    last_number: models.PositiveIntegerField = models.PositiveIntegerField(
        default=DOCUMENT_NUMBER_START
    )

    class Meta:
        db_table = "document_number_sequences"
        constraints = [
            models.UniqueConstraint(
                fields=["document_type", "year"],
                name="document_number_sequences_type_year_uniq",
            ),
        ]

    @classmethod
    def allocate(cls, document_type: str, year: int) -> int:
        with transaction.atomic():
            sequence, _ = cls.objects.select_for_update().get_or_create(
                document_type=document_type,
                year=year,
                defaults={
                    "last_number": lambda: Document.highest_number(document_type, year)
                },
            )
            sequence.last_number += 1
            sequence.save(update_fields=["last_number"])
        return sequence.last_number

    def __str__(self) -> str:
        return f"{self.document_type} {self.year}: {self.last_number}"


class DocumentItem(BaseModel):
    """Line item. ``total`` and ``tax_amount`` are recomputed on every save."""

    document: models.ForeignKey = models.ForeignKey(
        "documents.Document",
        on_delete=models.CASCADE,
        related_name="items",
    )
    item_code: models.CharField = models.CharField(max_length=64, blank=True, default="")
    description: models.CharField = models.CharField(max_length=255)
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        default=1, validators=[MinValueValidator(1)]
    )
    unit_price: models.DecimalField = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    tax_rate: models.DecimalField = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal(DEFAULT_TAX_RATE)
    )
    total: models.DecimalField = models.DecimalField(
        max_digits=12, decimal_places=2, editable=False
    )
    tax_amount: models.DecimalField = models.DecimalField(
        max_digits=12, decimal_places=2, editable=False
    )

    class Meta:
        db_table = "document_items"
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="document_items_quantity_positive",
            ),
        ]

    def save(self, *args: Any, **kwargs: Any) -> None:
        self.total = (Decimal(self.quantity) * Decimal(self.unit_price)).quantize(
            TWO_PLACES
        )
        self.tax_amount = (self.total * Decimal(self.tax_rate) / 100).quantize(
            TWO_PLACES
        )
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.description} x{self.quantity}"


class DocumentStatusHistory(BaseModel):
    """Append-only audit trail of status changes.

    ``user`` is ``None`` when the change was made by the system (e.g. a
    document created by a conversion without an acting user).
    """

    document: models.ForeignKey = models.ForeignKey(
        "documents.Document",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status: models.CharField = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=DocumentStatus.choices,
        null=True,
        blank=True,
    )
    new_status: models.CharField = models.CharField(
        max_length=20, choices=DocumentStatus.choices
    )
    user: models.ForeignKey = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
    )
    notes: models.TextField = models.TextField(blank=True, default="")

    class Meta:
        db_table = "document_status_history"
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["document", "-created_at"],
                name="dsh_document_created_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.document} : {self.old_status} -> {self.new_status}"


class ConversionLink(BaseModel):
    """Records that ``target`` was produced from ``source``. Never mutated."""

    source: models.ForeignKey = models.ForeignKey(
        "documents.Document",
        on_delete=models.PROTECT,
        related_name="conversions_out",
    )
    target: models.OneToOneField = models.OneToOneField(
        "documents.Document",
        on_delete=models.PROTECT,
        related_name="conversion_in",
    )
    action: models.CharField = models.CharField(
        max_length=40, choices=WorkflowActionName.choices
    )
    user: models.ForeignKey = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
    )

    class Meta:
        db_table = "document_conversion_links"
        ordering = ["created_at"]

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self._state.adding:
            raise ValueError("Conversion links are immutable.")
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.source} -> {self.target} ({self.action})"

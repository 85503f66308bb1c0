"""Document DRF serializers.

Input serializers validate request payloads before they become DTOs;
output serializers render the aggregate with its workflow block.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.documents.constants import DocumentType
from modules.documents.dtos import WorkflowDTO
from modules.documents.models import Document, DocumentItem, DocumentStatusHistory

# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------


class LineItemInputSerializer(serializers.Serializer):
    item_code = serializers.CharField(required=False, default="", allow_blank=True)
    description = serializers.CharField()
    quantity = serializers.IntegerField(min_value=1)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    tax_rate = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False
    )


class CreateDocumentSerializer(serializers.Serializer):
    customer_name = serializers.CharField()
    items = LineItemInputSerializer(many=True, allow_empty=False)
    currency = serializers.CharField(required=False, min_length=3, max_length=3)
    issue_date = serializers.DateField(required=False)
    due_date = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, default="", allow_blank=True)
    delivery_address = serializers.CharField(
        required=False, default="", allow_blank=True
    )


class StatusChangeSerializer(serializers.Serializer):
    status = serializers.CharField()
    notes = serializers.CharField(required=False, default="", allow_blank=True)


class StatusUpdateSerializer(serializers.Serializer):
    document_type = serializers.ChoiceField(choices=DocumentType.choices)
    document_id = serializers.UUIDField()
    new_status = serializers.CharField()
    notes = serializers.CharField(required=False, default="", allow_blank=True)


class TransitionQuerySerializer(serializers.Serializer):
    document_type = serializers.CharField()
    status = serializers.CharField()

    def validate_document_type(self, value: str) -> str:
        return value.lower()

    def validate_status(self, value: str) -> str:
        return value.lower()


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


class DocumentItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = DocumentItem
        fields = [
            "id",
            "item_code",
            "description",
            "quantity",
            "unit_price",
            "tax_rate",
            "tax_amount",
            "total",
        ]
        read_only_fields = fields


class StatusHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = DocumentStatusHistory
        fields = ["id", "old_status", "new_status", "notes", "created_at"]
        read_only_fields = fields


class DocumentSerializer(serializers.ModelSerializer):
    """Full document with items, history and the workflow block."""

    items = DocumentItemSerializer(many=True, read_only=True)
    status_history = StatusHistorySerializer(many=True, read_only=True)
    related_document_id = serializers.UUIDField(read_only=True)
    balance_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, read_only=True
    )
    workflow = serializers.SerializerMethodField()

    class Meta:
        model = Document
        fields = [
            "id",
            "document_type",
            "document_number",
            "status",
            "customer_name",
            "currency",
            "issue_date",
            "due_date",
            "subtotal",
            "tax_amount",
            "total",
            "paid_amount",
            "balance_amount",
            "notes",
            "delivery_address",
            "related_document_id",
            "created_at",
            "updated_at",
            "items",
            "status_history",
            "workflow",
        ]
        read_only_fields = fields

    def get_workflow(self, obj: Document) -> dict:
        return WorkflowDTO.resolve(obj.document_type, obj.status).model_dump()


class DocumentListSerializer(serializers.ModelSerializer):
    class Meta:
        model = Document
        fields = [
            "id",
            "document_type",
            "document_number",
            "status",
            "customer_name",
            "currency",
            "total",
            "issue_date",
            "related_document_id",
            "created_at",
        ]
        read_only_fields = fields

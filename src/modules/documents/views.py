"""Document workflow API views.

One ViewSet per document type exposes list/create/retrieve, status
changes and the conversions that type supports. Domain exceptions are
translated into DRF exceptions here; the response body format comes from
the project's exception handler.
"""

from __future__ import annotations

from typing import Any, Dict, Optional
from uuid import UUID

import pydantic
from django.conf import settings
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import APIException, NotFound, ValidationError
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet

from modules.core.pagination import StandardResultsSetPagination
from modules.documents.constants import DocumentType
from modules.documents.dtos import CreateDocumentDTO, StatusUpdateDTO, WorkflowDTO
from modules.documents.exceptions import DocumentNotFound, InvalidTransition
from modules.documents.filters import DocumentFilter
from modules.documents.models import Document
from modules.documents.permissions import DocumentWorkflowPermission
from modules.documents.repositories.django_repository import DocumentDjangoRepository
from modules.documents.serializers import (
    CreateDocumentSerializer,
    DocumentListSerializer,
    DocumentSerializer,
    StatusChangeSerializer,
    StatusUpdateSerializer,
    TransitionQuerySerializer,
)
from modules.documents.services import DocumentService


class TransitionNotAllowed(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "This status change is not allowed."
    default_code = "invalid_transition"


def _dto_validation_error(exc: pydantic.ValidationError) -> ValidationError:
    detail: Dict[str, Any] = {}
    for error in exc.errors():
        key = ".".join(str(part) for part in error["loc"]) or "non_field_errors"
        detail.setdefault(key, []).append(error["msg"])
    return ValidationError(detail)


def _parse_uuid(pk: Optional[str]) -> UUID:
    try:
        return UUID(str(pk))
    except ValueError as exc:
        raise NotFound("Document not found.") from exc


def _build_service() -> DocumentService:
    return DocumentService(document_repository=DocumentDjangoRepository())


class DocumentViewSet(GenericViewSet):
    """Shared behaviour for the per-type document endpoints."""

    document_type: str = ""
    queryset = Document.objects.none()
    permission_classes = [DocumentWorkflowPermission]
    filterset_class = DocumentFilter
    search_fields = ["document_number", "customer_name"]
    ordering_fields = ["created_at", "issue_date", "total", "status"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = _build_service()

    def get_queryset(self):
        return Document.objects.alive().filter(document_type=self.document_type)

    def _get_document(self, pk: Optional[str]) -> Document:
        try:
            return self._service.get_document(str(_parse_uuid(pk)), self.document_type)
        except DocumentNotFound as exc:
            raise NotFound(str(exc)) from exc

    # ------------------------------------------------------------------
    # Create / List / Retrieve
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        serializer = CreateDocumentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = {k: v for k, v in serializer.validated_data.items() if v is not None}
        data["items"] = [
            {k: v for k, v in item.items() if v is not None} for item in data["items"]
        ]
        data.setdefault("currency", settings.DEFAULT_CURRENCY)
        try:
            dto = CreateDocumentDTO(document_type=self.document_type, **data)
        except pydantic.ValidationError as exc:
            raise _dto_validation_error(exc) from exc

        document = self._service.create_document(dto, user=request.user)
        return Response(DocumentSerializer(document).data, status=status.HTTP_201_CREATED)

    def list(self, request: Request) -> Response:
        queryset = self.filter_queryset(self.get_queryset())
        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(queryset, request)
        serializer = DocumentListSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: Optional[str] = None) -> Response:
        return Response(DocumentSerializer(self._get_document(pk)).data)

    # ------------------------------------------------------------------
    # Status workflow
    # ------------------------------------------------------------------

    def partial_update(self, request: Request, pk: Optional[str] = None) -> Response:
        """PATCH ``{status, notes}``: move the document along the status table."""
        serializer = StatusChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            result = self._service.update_document_status(
                document_type=self.document_type,
                document_id=_parse_uuid(pk),
                new_status=serializer.validated_data["status"].strip().lower(),
                notes=serializer.validated_data["notes"],
                user=request.user,
            )
        except DocumentNotFound as exc:
            raise NotFound(str(exc)) from exc
        except InvalidTransition as exc:
            raise TransitionNotAllowed(str(exc)) from exc
        return Response(DocumentSerializer(result.document).data)

    @action(detail=True, methods=["get"])
    def workflow(self, request: Request, pk: Optional[str] = None) -> Response:
        """Allowed next statuses, actions and the hint for this document."""
        document = self._get_document(pk)
        return Response(self._service.get_workflow(document).model_dump())

    def _converted(self, convert, pk: Optional[str], request: Request) -> Response:
        try:
            document = convert(_parse_uuid(pk), user=request.user)
        except DocumentNotFound as exc:
            raise NotFound(str(exc)) from exc
        except InvalidTransition as exc:
            raise TransitionNotAllowed(str(exc)) from exc
        return Response(DocumentSerializer(document).data, status=status.HTTP_201_CREATED)


class QuotationViewSet(DocumentViewSet):
    document_type = DocumentType.QUOTATION

    @action(detail=True, methods=["post"], url_path="convert-to-sales-order")
    def convert_to_sales_order(self, request: Request, pk: Optional[str] = None) -> Response:
        return self._converted(
            self._service.convert_quotation_to_sales_order, pk, request
        )


class SalesOrderViewSet(DocumentViewSet):
    document_type = DocumentType.SALES_ORDER

    @action(detail=True, methods=["post"], url_path="convert-to-invoice")
    def convert_to_invoice(self, request: Request, pk: Optional[str] = None) -> Response:
        return self._converted(self._service.convert_sales_order_to_invoice, pk, request)

    @action(detail=True, methods=["post"], url_path="delivery-notes")
    def create_delivery_note(self, request: Request, pk: Optional[str] = None) -> Response:
        return self._converted(
            self._service.create_delivery_note_from_sales_order, pk, request
        )


class InvoiceViewSet(DocumentViewSet):
    document_type = DocumentType.INVOICE


class DeliveryNoteViewSet(DocumentViewSet):
    document_type = DocumentType.DELIVERY_NOTE


class DocumentStatusView(APIView):
    """POST ``documents/status/``: ``updateDocumentStatus(type, id, new_status)``."""

    action = "update_status"
    permission_classes = [DocumentWorkflowPermission]

    def post(self, request: Request) -> Response:
        serializer = StatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            dto = StatusUpdateDTO(**serializer.validated_data)
        except pydantic.ValidationError as exc:
            raise _dto_validation_error(exc) from exc

        try:
            result = _build_service().update_document_status(
                document_type=dto.document_type,
                document_id=dto.document_id,
                new_status=dto.new_status,
                notes=dto.notes,
                user=request.user,
            )
        except DocumentNotFound as exc:
            raise NotFound(str(exc)) from exc
        except InvalidTransition as exc:
            raise TransitionNotAllowed(str(exc)) from exc

        return Response(
            {
                "updated": result.updated,
                "available_actions": [
                    {
                        "action": str(a.action),
                        "label": a.label,
                        "short_label": a.short_label,
                    }
                    for a in result.available_actions
                ],
                "document": DocumentSerializer(result.document).data,
            }
        )


class TransitionLookupView(APIView):
    """GET ``workflow/transitions/?document_type=&status=``.

    Unknown pairs are not an error: they simply allow nothing.
    """

    def get(self, request: Request) -> Response:
        serializer = TransitionQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        lookup = WorkflowDTO.resolve(
            serializer.validated_data["document_type"],
            serializer.validated_data["status"],
        )
        return Response(lookup.model_dump())

from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Permission
from django.core.cache import cache
from rest_framework.test import APIClient

from modules.documents.constants import DocumentStatus, DocumentType
from modules.documents.dtos import CreateDocumentDTO, LineItemDTO
from modules.documents.repositories.django_repository import DocumentDjangoRepository
from modules.documents.services import DocumentService

User = get_user_model()


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    """Throttle counters live in the cache; start every test from zero."""
    cache.clear()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


@pytest.fixture()
def clerk():
    """Sales clerk allowed to create, move and convert documents."""
    user = User.objects.create_user(username="clerk", password="testpass123")
    user.user_permissions.add(
        *Permission.objects.filter(
            content_type__app_label="documents",
            codename__in=["add_document", "change_document_status", "convert_document"],
        )
    )
    return User.objects.get(pk=user.pk)


@pytest.fixture()
def auth_client(clerk):
    """APIClient force-authenticated as the sales clerk."""
    client = APIClient()
    client.force_authenticate(user=clerk)
    return client


@pytest.fixture()
def service():
    return DocumentService(document_repository=DocumentDjangoRepository())


@pytest.fixture()
def make_document(service):
    """Create a document through the service and walk it to ``status``."""

    def _make(
        document_type=DocumentType.QUOTATION,
        status=None,
        customer_name="Acme Traders Ltd",
        items=None,
        **extra,
    ):
        dto = CreateDocumentDTO(
            document_type=document_type,
            customer_name=customer_name,
            items=items
            or [
                LineItemDTO(
                    item_code="CEM-50",
                    description="Cement 50kg",
                    quantity=10,
                    unit_price=Decimal("850.00"),
                ),
                LineItemDTO(
                    item_code="NAIL-4",
                    description="Nails 4 inch (kg)",
                    quantity=3,
                    unit_price=Decimal("200.00"),
                    tax_rate=Decimal("0"),
                ),
            ],
            **extra,
        )
        document = service.create_document(dto)
        for step in WALKS.get((document_type, status), []):
            document = service.update_document_status(
                document_type, document.id, step
            ).document
        return document

    return _make


# Shortest legal path from the initial status to each reachable status.
WALKS = {
    (DocumentType.QUOTATION, DocumentStatus.SENT): [DocumentStatus.SENT],
    (DocumentType.QUOTATION, DocumentStatus.ACCEPTED): [
        DocumentStatus.SENT,
        DocumentStatus.ACCEPTED,
    ],
    (DocumentType.QUOTATION, DocumentStatus.REJECTED): [
        DocumentStatus.SENT,
        DocumentStatus.REJECTED,
    ],
    (DocumentType.SALES_ORDER, DocumentStatus.CONFIRMED): [DocumentStatus.CONFIRMED],
    (DocumentType.SALES_ORDER, DocumentStatus.CANCELLED): [DocumentStatus.CANCELLED],
    (DocumentType.INVOICE, DocumentStatus.SENT): [DocumentStatus.SENT],
    (DocumentType.INVOICE, DocumentStatus.OVERDUE): [
        DocumentStatus.SENT,
        DocumentStatus.OVERDUE,
    ],
    (DocumentType.INVOICE, DocumentStatus.PAID): [
        DocumentStatus.SENT,
        DocumentStatus.PAID,
    ],
}

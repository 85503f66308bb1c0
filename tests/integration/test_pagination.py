"""Integration tests for standardized pagination."""

from __future__ import annotations

import pytest

from modules.documents.constants import DocumentStatus, DocumentType
from modules.documents.models import Document

pytestmark = pytest.mark.integration


@pytest.fixture()
def invoice_batch():
    """Create a batch of invoices for pagination tests."""
    invoices = [
        Document(
            document_type=DocumentType.INVOICE,
            document_number=f"INV-2026-{1000 + idx}",
            status=DocumentStatus.PENDING,
            customer_name=f"Customer {idx:03d}",
        )
        for idx in range(1, 121)
    ]
    Document.objects.bulk_create(invoices)
    return invoices


class TestPagination:
    def test_default_page_size(self, auth_client, invoice_batch):
        response = auth_client.get("/api/v1/invoices/")
        assert response.status_code == 200
        assert response.data["count"] == 120
        assert len(response.data["results"]) == 20
        assert response.data["next"] is not None
        assert response.data["previous"] is None

    def test_custom_page_size(self, auth_client, invoice_batch):
        response = auth_client.get("/api/v1/invoices/?page_size=50")
        assert response.status_code == 200
        assert len(response.data["results"]) == 50

    def test_max_page_size(self, auth_client, invoice_batch):
        response = auth_client.get("/api/v1/invoices/?page_size=1000")
        assert response.status_code == 200
        assert len(response.data["results"]) == 100
        assert response.data["next"] is not None

    def test_page_out_of_range(self, auth_client, invoice_batch):
        response = auth_client.get("/api/v1/invoices/?page=99")
        assert response.status_code == 404

"""Document workflow URL configuration."""

from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from modules.documents.views import (
    DeliveryNoteViewSet,
    DocumentStatusView,
    InvoiceViewSet,
    QuotationViewSet,
    SalesOrderViewSet,
    TransitionLookupView,
)

router = DefaultRouter(trailing_slash=True)
router.register("quotations", QuotationViewSet, basename="quotation")
router.register("sales-orders", SalesOrderViewSet, basename="sales-order")
router.register("invoices", InvoiceViewSet, basename="invoice")
router.register("delivery-notes", DeliveryNoteViewSet, basename="delivery-note")

urlpatterns = [
    path("documents/status/", DocumentStatusView.as_view(), name="document-status"),
    path(
        "workflow/transitions/",
        TransitionLookupView.as_view(),
        name="workflow-transitions",
    ),
    *router.urls,
]

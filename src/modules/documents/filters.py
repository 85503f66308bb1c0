import django_filters

from modules.documents.models import Document


class DocumentFilter(django_filters.FilterSet):
    status = django_filters.CharFilter(field_name="status", lookup_expr="iexact")
    customer = django_filters.CharFilter(
        field_name="customer_name", lookup_expr="icontains"
    )
    related_document = django_filters.UUIDFilter(field_name="related_document_id")
    start_date = django_filters.DateFilter(field_name="issue_date", lookup_expr="gte")
    end_date = django_filters.DateFilter(field_name="issue_date", lookup_expr="lte")
    min_total = django_filters.NumberFilter(field_name="total", lookup_expr="gte")
    max_total = django_filters.NumberFilter(field_name="total", lookup_expr="lte")

    class Meta:
        model = Document
        fields = [
            "status",
            "customer",
            "related_document",
            "start_date",
            "end_date",
            "min_total",
            "max_total",
        ]

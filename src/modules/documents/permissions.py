"""Permission guard for document workflow endpoints.

Reading needs an authenticated user. Writes need the Django permission
mapped to the view action; superusers pass every check.
"""

from __future__ import annotations

from rest_framework.permissions import BasePermission

ACTION_PERMISSIONS: dict[str, str] = {
    "create": "documents.add_document",
    "partial_update": "documents.change_document_status",
    "update_status": "documents.change_document_status",
    "convert_to_sales_order": "documents.convert_document",
    "convert_to_invoice": "documents.convert_document",
    "create_delivery_note": "documents.convert_document",
}


class DocumentWorkflowPermission(BasePermission):
    message = "You do not have permission to perform this workflow action."

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not (user and user.is_authenticated):
            return False
        required = ACTION_PERMISSIONS.get(getattr(view, "action", None) or "")
        if required is None:
            return True
        if getattr(user, "is_superuser", False):
            return True
        has_perm = getattr(user, "has_perm", None)
        return bool(has_perm and has_perm(required))

"""Document workflow exceptions.

Raised by the workflow functions and the service layer; the API views
translate them into HTTP responses.
"""

from __future__ import annotations

from typing import Optional


class DocumentNotFound(Exception):
    """The document does not exist, is soft-deleted, or has another type."""


class InvalidTransition(Exception):
    """The requested status (or conversion) is not allowed from the current status."""

    def __init__(
        self,
        message: str,
        *,
        document_type: Optional[str] = None,
        current_status: Optional[str] = None,
        new_status: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.document_type = document_type
        self.current_status = current_status
        self.new_status = new_status


class DocumentNumberExhausted(Exception):
    """No free document number could be allocated."""

"""API error translation shared by every module.

Responses use the ``drf-standardized-errors`` body
(``{"type": ..., "errors": [{"code", "detail", "attr"}]}``). Backend
failures (the database being unreachable or erroring) are reported as
``503 backend_unavailable`` so clients can tell them apart from
validation and workflow errors.
"""

from __future__ import annotations

import structlog
from django.db import DatabaseError
from drf_standardized_errors.handler import ExceptionHandler
from rest_framework import status
from rest_framework.exceptions import APIException

logger = structlog.get_logger(__name__)


class BackendUnavailable(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "The document backend is unavailable. Please try again."
    default_code = "backend_unavailable"


class WorkflowExceptionHandler(ExceptionHandler):
    def convert_known_exceptions(self, exc: Exception) -> Exception:
        if isinstance(exc, DatabaseError):
            logger.error("backend.request_failed", error=str(exc))
            return BackendUnavailable()
        return super().convert_known_exceptions(exc)

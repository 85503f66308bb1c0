"""Document repositories package."""

from modules.documents.repositories.django_repository import DocumentDjangoRepository
from modules.documents.repositories.interfaces import IDocumentRepository

__all__ = ["DocumentDjangoRepository", "IDocumentRepository"]

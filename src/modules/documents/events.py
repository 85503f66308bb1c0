"""Domain events for the sales document workflow."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class DocumentCreated(DomainEvent):
    """Raised when a document is created (directly or by a conversion)."""


@dataclass(frozen=True)
class DocumentStatusChanged(DomainEvent):
    """Raised after a status transition; payload has ``old_status``/``new_status``."""


@dataclass(frozen=True)
class DocumentConverted(DomainEvent):
    """Raised on the source document when a new document is produced from it."""

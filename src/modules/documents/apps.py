from django.apps import AppConfig


class DocumentsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.documents"
    label = "documents"

    def ready(self) -> None:
        from modules.documents.events import (
            DocumentConverted,
            DocumentCreated,
            DocumentStatusChanged,
        )
        from modules.documents.handlers import (
            document_converted_handler,
            document_created_handler,
            document_status_changed_handler,
        )
        from shared.infrastructure.bus import event_bus

        event_bus.subscribe(DocumentCreated, document_created_handler)
        event_bus.subscribe(DocumentStatusChanged, document_status_changed_handler)
        event_bus.subscribe(DocumentConverted, document_converted_handler)

import logging

import pytest


class TestCorrelationIdMiddleware:
    def test_correlation_id_on_workflow_errors(self, api_client_with_correlation):
        client, cid = api_client_with_correlation
        response = client.get("/api/v1/quotations/")
        assert response.status_code == 401
        assert response["X-Request-ID"] == cid


class TestWorkflowLogging:
    def test_invalid_transition_is_logged(self, service, make_document, caplog):
        from modules.documents.exceptions import InvalidTransition

        quotation = make_document()
        with caplog.at_level(logging.WARNING, logger="modules.documents.services"):
            with pytest.raises(InvalidTransition):
                service.update_document_status("quotation", quotation.id, "paid")

        messages = [record.getMessage() for record in caplog.records]
        assert any("document.invalid_transition" in m for m in messages)

    def test_conversion_is_logged(self, service, make_document, caplog):
        quotation = make_document(status="accepted")
        with caplog.at_level(logging.INFO, logger="modules.documents.services"):
            service.convert_quotation_to_sales_order(quotation.id)

        messages = [record.getMessage() for record in caplog.records]
        assert any("document.converted" in m for m in messages)


class TestSensitiveDataMasking:
    def test_kra_pin_masked_in_log_output(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "customer": "Acme Ltd PIN P051234567Q"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "P051234567Q" not in result["customer"]
        assert "***MASKED***" in result["customer"]

    def test_tax_id_field_masked_in_log_output(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "data": "tax_id=12-3456789"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "12-3456789" not in result["data"]
        assert "***MASKED***" in result["data"]

    def test_password_masked_in_log_output(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "data": "password='s3cret123'"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "s3cret123" not in result["data"]
        assert "***MASKED***" in result["data"]

    def test_token_masked_in_log_output(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "header": "token=abc123xyz"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "abc123xyz" not in result["header"]
        assert "***MASKED***" in result["header"]

    def test_non_sensitive_data_unchanged(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "document.converted", "target_number": "INV-2026-1001"}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["target_number"] == "INV-2026-1001"
        assert result["event"] == "document.converted"

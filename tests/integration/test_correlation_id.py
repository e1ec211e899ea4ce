import logging

import pytest

pytestmark = pytest.mark.integration


class TestCorrelationIdOnApi:
    def test_request_id_echoed_on_api_response(self, manager_client):
        response = manager_client.get(
            "/api/v1/discount-codes/NOPE1/", HTTP_X_REQUEST_ID="api-cid-1"
        )
        assert response["X-Request-ID"] == "api-cid-1"

    def test_service_logs_carry_correlation_id(self, manager_client, caplog):
        with caplog.at_level(logging.INFO):
            manager_client.post(
                "/api/v1/discounts/",
                {"name": "Correlated", "discount_value": "5.00"},
                format="json",
                HTTP_X_REQUEST_ID="api-cid-2",
            )
        service_lines = [
            r.getMessage() for r in caplog.records if "discount.added" in r.getMessage()
        ]
        assert service_lines
        assert all("api-cid-2" in line for line in service_lines)

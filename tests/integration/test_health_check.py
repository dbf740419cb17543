import logging
import uuid
from unittest import mock

import pytest
from django.db import OperationalError

pytestmark = pytest.mark.integration


class TestHealthCheck:
    def test_health_check_returns_200(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data
        assert data["services"]["database"]["status"] == "up"
        assert "response_time_ms" in data["services"]["database"]

    def test_reports_engine_settings(self, client, settings):
        settings.STOCK_RESTORE_MODE = "read_modify_write"
        data = client.get("/health").json()
        assert data["engine"]["stock_restore_mode"] == "read_modify_write"

    def test_database_down_is_503(self, client):
        with mock.patch("modules.core.views.connections") as conns:
            conns.__getitem__.return_value.ensure_connection.side_effect = (
                OperationalError("could not connect")
            )
            response = client.get("/health")

        assert response.status_code == 503
        assert response.json()["services"]["database"]["status"] == "down"


class TestCorrelationIdMiddleware:
    def test_returns_provided_request_id(self, client):
        custom_id = "my-custom-request-id-123"
        response = client.get("/health", HTTP_X_REQUEST_ID=custom_id)
        assert response["X-Request-ID"] == custom_id

    def test_generates_uuid_when_no_request_id(self, client):
        request_id = client.get("/health")["X-Request-ID"]
        assert str(uuid.UUID(request_id, version=4)) == request_id

    def test_api_client_fixture_header_is_echoed(self, api_client_with_correlation):
        api_client, cid = api_client_with_correlation
        response = api_client.get(f"/api/v1/suppliers/{uuid.uuid4()}/orders/")
        assert response["X-Request-ID"] == cid

    def test_correlation_id_in_logs(self, client, caplog):
        custom_id = "log-test-correlation-456"
        with caplog.at_level(logging.INFO):
            client.get("/health", HTTP_X_REQUEST_ID=custom_id)
        found = any(custom_id in record.getMessage() for record in caplog.records)
        assert found, (
            f"correlation_id '{custom_id}' not found in log records: "
            f"{[r.getMessage() for r in caplog.records]}"
        )

from unittest.mock import patch

import pytest
from django.db import DatabaseError

pytestmark = pytest.mark.integration


class TestHealthCheck:
    def test_reports_healthy_services(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data
        assert data["services"]["database"]["status"] == "up"
        assert data["services"]["cache"]["status"] == "up"
        assert "response_time_ms" in data["services"]["database"]

    def test_needs_no_token(self, api_client):
        assert api_client.get("/health").status_code == 200

    def test_store_outage_returns_503(self, client):
        with patch(
            "modules.core.views._ping_store", side_effect=DatabaseError("down")
        ):
            response = client.get("/health")
        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["services"]["database"] == {"status": "down"}

    def test_cache_failure_returns_503(self, client):
        with patch(
            "modules.core.views._ping_cache", side_effect=ConnectionError("refused")
        ):
            response = client.get("/health")
        assert response.status_code == 503
        assert response.json()["services"]["cache"]["status"] == "down"

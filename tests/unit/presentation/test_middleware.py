"""Tests for request tracing, security headers and size limits."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from crosspost.main import app
from crosspost.presentation.api.v1 import health


@pytest.fixture
def client():
    return TestClient(app)


class TestSecurityHeaders:
    def test_headers_on_every_response(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert "default-src 'none'" in response.headers["Content-Security-Policy"]

    def test_api_responses_not_cached(self, client):
        response = client.post("/api/v1/publish", json={})
        assert response.headers["Cache-Control"] == "no-store"


class TestCorrelationId:
    def test_generated_when_absent(self, client):
        response = client.get("/health")
        assert len(response.headers["X-Request-ID"]) == 36

    def test_valid_id_is_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "req-123.abc"})
        assert response.headers["X-Request-ID"] == "req-123.abc"

    def test_correlation_header_accepted(self, client):
        response = client.get("/health", headers={"X-Correlation-ID": "trace-9"})
        assert response.headers["X-Request-ID"] == "trace-9"

    def test_unsafe_id_is_replaced(self, client):
        response = client.get("/health", headers={"X-Request-ID": "bad id */ DROP TABLE"})
        assert response.headers["X-Request-ID"] != "bad id */ DROP TABLE"


class TestRequestSizeLimit:
    def test_oversized_body_rejected(self, client):
        response = client.post(
            "/api/v1/publish",
            content=b"x" * (256 * 1024 + 1),
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 413
        assert response.json()["error"] == "payload_too_large"


class TestHealth:
    def test_ready_when_database_answers(self, client, monkeypatch):
        database = MagicMock()
        database.ping = AsyncMock(return_value=True)
        monkeypatch.setattr(health, "get_database", lambda: database)

        response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"
        assert response.json()["checks"]["database"]["status"] == "healthy"

    def test_degraded_when_database_fails(self, client, monkeypatch):
        database = MagicMock()
        database.ping = AsyncMock(side_effect=ConnectionRefusedError("db down"))
        monkeypatch.setattr(health, "get_database", lambda: database)

        response = client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "degraded"
        assert response.json()["checks"]["database"]["error"] == "ConnectionRefusedError"

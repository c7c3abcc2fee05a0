"""Tests for health endpoints."""

import pytest
from fastapi.testclient import TestClient

from src.core.database import DatabaseConnection
from src.core.schemas import ErrorResponse
from src.main import app


def test_liveness(client: TestClient) -> None:
    """Test the liveness endpoint."""
    response = client.get("/health/live")
    assert response.status_code == 200
    assert response.json() == {"status": "alive"}


def test_readiness(client: TestClient) -> None:
    """Test the readiness endpoint."""
    response = client.get("/health/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["environment"] == "testing"
    assert "debug" in data
    assert data["database"] is True


def test_readiness_without_database(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Readiness reports 503 while the database does not answer."""
    monkeypatch.setattr(DatabaseConnection, "ping", classmethod(lambda cls: False))

    response = client.get("/health/ready")

    assert response.status_code == 503
    assert response.json()["status"] == "unavailable"
    assert response.json()["database"] is False

    # Liveness does not depend on the database
    assert client.get("/health/live").status_code == 200


def test_health(client: TestClient) -> None:
    """Test the general health endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["app_name"] == "blog-api"
    assert "version" in data
    assert "environment" in data


def test_root(client: TestClient) -> None:
    """Test the root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert "message" in data
    assert "Blog API" in data["message"]
    assert "version" in data


def test_request_id_is_echoed(client: TestClient) -> None:
    """A client supplied X-Request-ID comes back on the response."""
    response = client.get("/health/live", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_error_envelope_is_documented() -> None:
    """Resource routes advertise the shared error envelope."""
    schema = app.openapi()
    responses = schema["paths"]["/v1/posts/{post_id}"]["get"]["responses"]

    for code in ("404", "422"):
        ref = responses[code]["content"]["application/json"]["schema"]["$ref"]
        assert ref.endswith(f"/{ErrorResponse.__name__}")

"""Tests for the health endpoint."""

from legal_assistant.core.config import settings


def test_health_returns_ok(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["app"] == settings.app_name


def test_health_needs_no_identity(client):
    response = client.get("/api/health", headers={"X-User-Email": ""})
    assert response.status_code == 200

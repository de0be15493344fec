"""Tests for the education and knowledge base endpoints."""

from conftest import KNOWLEDGE_JSON, USER_EMAIL
from legal_assistant.core.errors import CompletionServiceError


def test_initial_state(client):
    response = client.get("/api/education/state")
    assert response.status_code == 200
    data = response.json()
    assert data["agent_id"] == "rental"
    assert data["status"] == "idle"
    assert data["preview"] is None
    assert data["can_approve"] is False
    assert data["knowledge"] == []


def test_url_preview_then_approve(configured_client, provider):
    provider.text = KNOWLEDGE_JSON

    response = configured_client.post(
        "/api/education/url", json={"url": "https://example.com/act", "agent_id": "popia"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["agent_id"] == "popia"
    assert data["status"] == "completed"
    assert data["can_approve"] is True
    assert data["preview"]["summary"] == "s"
    assert configured_client.get("/api/knowledge/popia").json() == []

    response = configured_client.post("/api/education/approve")
    assert response.status_code == 200
    data = response.json()
    assert data["entry"]["url"] == "https://example.com/act"
    assert data["entry"]["approved_by"] == USER_EMAIL
    assert data["status"] == "idle"
    assert data["notice"]
    assert [e["url"] for e in data["knowledge"]] == ["https://example.com/act"]

    knowledge = configured_client.get("/api/knowledge/").json()
    assert [e["url"] for e in knowledge["popia"]] == ["https://example.com/act"]


def test_reject_discards_preview(configured_client, provider):
    provider.text = KNOWLEDGE_JSON
    configured_client.post("/api/education/url", json={"url": "https://example.com/act"})

    data = configured_client.post("/api/education/reject").json()
    assert data["status"] == "idle"
    assert data["preview"] is None
    assert configured_client.get("/api/knowledge/").json() == {}


def test_failed_processing_shows_error(configured_client, provider):
    provider.error = CompletionServiceError("The AI model is unavailable.")
    data = configured_client.post("/api/education/url", json={"url": "https://example.com/act"}).json()
    assert data["status"] == "failed"
    assert data["preview"] == {"error": "The AI model is unavailable."}

    assert configured_client.post("/api/education/approve").status_code == 400


def test_blank_url_is_rejected(configured_client):
    response = configured_client.post("/api/education/url", json={"url": ""})
    assert response.status_code == 400


def test_unknown_agent(configured_client):
    assert configured_client.post("/api/education/agent", json={"agent_id": "tax"}).status_code == 404
    response = configured_client.post("/api/education/url", json={"url": "https://a", "agent_id": "tax"})
    assert response.status_code == 404


def test_file_upload_uses_file_locator(configured_client, provider):
    provider.text = KNOWLEDGE_JSON
    response = configured_client.post(
        "/api/education/file",
        files={"file": ("lease.pdf", b"%PDF-1.4", "application/pdf")},
        data={"agent_id": "rental"},
    )
    assert response.status_code == 200
    assert response.json()["current"]["source"] == "file://lease.pdf"

    entry = configured_client.post("/api/education/approve").json()["entry"]
    assert entry["url"] == "file://lease.pdf"
    assert entry["agent_id"] == "rental"


def test_select_agent_loads_knowledge(configured_client, provider):
    provider.text = KNOWLEDGE_JSON
    configured_client.post("/api/education/url", json={"url": "https://a", "agent_id": "consumer"})
    configured_client.post("/api/education/approve")

    data = configured_client.post("/api/education/agent", json={"agent_id": "general"}).json()
    assert data["knowledge"] == []
    data = configured_client.post("/api/education/agent", json={"agent_id": "consumer"}).json()
    assert [e["url"] for e in data["knowledge"]] == ["https://a"]


def test_delete_knowledge_entry(configured_client, provider):
    provider.text = KNOWLEDGE_JSON
    configured_client.post("/api/education/url", json={"url": "https://a"})
    entry = configured_client.post("/api/education/approve").json()["entry"]

    response = configured_client.delete(f"/api/knowledge/rental/{entry['id']}")
    assert response.status_code == 200
    assert configured_client.get("/api/knowledge/rental").json() == []
    assert configured_client.get("/api/education/state").json()["knowledge"] == []

    # Deleting again is a no-op
    assert configured_client.delete(f"/api/knowledge/rental/{entry['id']}").status_code == 200


def test_workflow_is_shared_across_email_case(configured_client, provider):
    provider.text = KNOWLEDGE_JSON
    configured_client.post(
        "/api/education/url", json={"url": "https://a"}, headers={"X-User-Email": "A@B.COM"}
    )
    data = configured_client.get("/api/education/state").json()
    assert data["current"]["source"] == "https://a"
    assert data["can_approve"] is True

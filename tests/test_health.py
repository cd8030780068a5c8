"""Tests for the health endpoint."""

from fastapi.testclient import TestClient


def test_health_reports_service(client: TestClient):
    """GET /health identifies the service without touching Slack or the database."""
    response = client.get("/health")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    assert response.json() == {
        "status": "ok",
        "service": "incident-tracker",
        "version": "0.1.0",
    }


def test_health_needs_no_secret(client: TestClient):
    response = client.get("/health", headers={"X-Api-Secret": "anything"})
    assert response.status_code == 200


def test_health_rejects_post(client: TestClient):
    assert client.post("/health").status_code == 405

# tests/test_health.py
from fastapi.testclient import TestClient


def test_health_reports_status_and_timestamp(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert isinstance(data["timestamp"], int)


def test_root_responds(client: TestClient) -> None:
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["docs"] == "/docs"


def test_public_config_hides_secret(client: TestClient) -> None:
    response = client.get("/system/config")
    assert response.status_code == 200
    body = response.text
    assert "test-secret-key" not in body
    assert response.json()["auth"]["token_expires_in"] == "7d"

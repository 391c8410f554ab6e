from __future__ import annotations

import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from structlog.testing import capture_logs

sys.path.append(str(Path(__file__).resolve().parents[1]))

from itembatch.app import create_app
from itembatch.config import Settings
from itembatch.infrastructure import InMemoryItemRepository


@pytest.fixture()
def repository():
    return InMemoryItemRepository()


@pytest.fixture()
def client(repository):
    app = create_app(Settings(), repository=repository)
    with TestClient(app) as test_client:
        yield test_client


def _create(client: TestClient, name: str = "Test", email: str = "test@test.com", **extra) -> dict:
    response = client.post("/api/items", json={"name": name, "description": "Desc", "email": email, **extra})
    assert response.status_code == 201
    return response.json()


def test_item_crud_lifecycle(client):
    created = _create(client, status="PENDING")
    item_id = created["id"]
    assert created["status"] == "PENDING"

    response = client.get(f"/api/items/{item_id}")
    assert response.status_code == 200
    assert response.json()["name"] == "Test"

    response = client.put(
        f"/api/items/{item_id}",
        json={"name": "Renamed", "description": "Desc", "email": "new@test.com"},
    )
    assert response.status_code == 200
    assert response.json() == {
        "id": item_id,
        "name": "Renamed",
        "description": "Desc",
        "status": "NEW",
        "email": "new@test.com",
    }

    response = client.get("/api/items")
    assert [item["id"] for item in response.json()["items"]] == [item_id]

    response = client.delete(f"/api/items/{item_id}")
    assert response.status_code == 204

    assert client.get(f"/api/items/{item_id}").status_code == 404


def test_missing_items_return_404(client):
    assert client.get("/api/items/999").status_code == 404
    assert client.delete("/api/items/999").status_code == 404
    response = client.put("/api/items/999", json={"name": "X", "email": "x@test.com"})
    assert response.status_code == 404


def test_invalid_email_is_rejected_with_field_errors(client):
    response = client.post("/api/items", json={"name": "Test", "email": "invalid"})

    assert response.status_code == 400
    assert response.json() == {"detail": ["email: Invalid email format"]}


def test_update_validates_payload(client):
    item_id = _create(client)["id"]

    response = client.put(f"/api/items/{item_id}", json={"name": "", "email": "test@test.com"})

    assert response.status_code == 400
    assert any(message.startswith("name:") for message in response.json()["detail"])


def test_process_marks_every_item(client):
    ids = [_create(client, name=f"Item{index}")["id"] for index in range(3)]

    response = client.get("/api/items/process")

    assert response.status_code == 200
    body = response.json()
    assert body["processed"] == 3
    assert [item["id"] for item in body["items"]] == ids
    assert {item["status"] for item in body["items"]} == {"PROCESSED"}
    assert "message" not in body

    stored = client.get("/api/items").json()["items"]
    assert {item["status"] for item in stored} == {"PROCESSED"}


def test_process_without_items_reports_nothing_processed(client):
    response = client.get("/api/items/process")

    assert response.status_code == 200
    assert response.json() == {"items": [], "processed": 0, "message": "No items processed"}


def test_process_with_unusable_pool_returns_500(repository):
    executor = ThreadPoolExecutor(max_workers=1)
    executor.shutdown()
    app = create_app(Settings(), repository=repository, pool=executor)

    with TestClient(app) as client:
        _create(client)
        with capture_logs() as logs:
            response = client.get("/api/items/process")

    assert response.status_code == 500
    assert response.json()["detail"].startswith("Error: ")
    assert [entry["event"] for entry in logs if entry["log_level"] == "error"] == ["batch_aggregation_failed"]
    route_events = [entry for entry in logs if entry["event"] == "process_items_failed"]
    assert [entry["log_level"] for entry in route_events] == ["warning"]
    assert route_events[0]["status_code"] == 500


def test_root_landing_page(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["health"] == "/api/items"


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("ITEMBATCH_MAX_WORKERS", "4")
    monkeypatch.setenv("ITEMBATCH_LOG_FORMAT", "json")
    monkeypatch.setenv("API_CORS_ORIGINS", "https://a.example, https://b.example")

    settings = Settings.from_env()

    assert settings.max_workers == 4
    assert settings.log_format == "json"
    assert settings.log_level == "INFO"
    assert settings.cors_origins == ["https://a.example", "https://b.example"]


def test_settings_defaults(monkeypatch):
    for name in ("ITEMBATCH_MAX_WORKERS", "ITEMBATCH_LOG_FORMAT", "API_CORS_ORIGINS"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()

    assert settings.max_workers is None
    assert settings.cors_origins == ["http://localhost:3000", "http://127.0.0.1:3000"]

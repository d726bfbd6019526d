import pytest
from fastapi.testclient import TestClient

from marketoracle.api.v1 import resolution as resolution_api
from marketoracle.config import settings
from marketoracle.database import get_session
from marketoracle.main import app

SUMMARY = {
    "started_at": "2026-03-10T21:00:00+00:00",
    "finished_at": "2026-03-10T21:00:04+00:00",
    "lease_key": "resolution:1:2",
    "lease_acquired": True,
    "success": True,
    "picks_total": 3,
    "picks_processed": 3,
    "picks_closed": 1,
    "prices_updated": 3,
    "won": 1,
    "lost": 0,
    "expired": 0,
    "still_active": 2,
    "providers_updated": ["gpt-4"],
    "weeks_ranked": ["1/2"],
    "errors": [],
}


@pytest.fixture
def client(monkeypatch):
    calls: list[str] = []

    async def fake_pipeline():
        calls.append("run")
        return SUMMARY

    async def fake_session():
        yield None

    monkeypatch.setattr(resolution_api, "run_resolution_pipeline", fake_pipeline)
    monkeypatch.setattr(settings, "cron_secret", "s3cret")
    monkeypatch.setattr(settings, "resolution_allow_test_trigger", False)
    app.dependency_overrides[get_session] = fake_session
    test_client = TestClient(app)
    test_client.calls = calls
    yield test_client
    app.dependency_overrides.clear()


def test_run_requires_bearer_secret(client):
    assert client.post("/api/v1/resolution/run").status_code == 401
    assert client.post("/api/v1/resolution/run", headers={"Authorization": "Bearer wrong"}).status_code == 401
    assert client.calls == []


def test_run_with_secret_returns_summary(client):
    response = client.post("/api/v1/resolution/run", headers={"Authorization": "Bearer s3cret"})
    assert response.status_code == 200
    body = response.json()
    assert body["lease_key"] == "resolution:1:2"
    assert body["won"] == 1
    assert client.calls == ["run"]

    assert client.get("/api/v1/resolution/run", headers={"Authorization": "Bearer s3cret"}).status_code == 200


def test_missing_secret_refuses_trigger(client, monkeypatch):
    monkeypatch.setattr(settings, "cron_secret", "")
    response = client.post("/api/v1/resolution/run", headers={"Authorization": "Bearer "})
    assert response.status_code == 503
    assert client.calls == []


def test_test_flag_only_bypasses_auth_when_enabled(client, monkeypatch):
    assert client.post("/api/v1/resolution/run?test=true").status_code == 401

    monkeypatch.setattr(settings, "resolution_allow_test_trigger", True)
    assert client.post("/api/v1/resolution/run?test=true").status_code == 200
    assert client.calls == ["run"]


def test_force_resolve_unknown_pick_is_404(client, monkeypatch):
    async def fake_force(session, pick_id):
        return {"success": False, "error": "Pick not found"}

    monkeypatch.setattr(resolution_api, "force_resolve_pick", fake_force)
    response = client.post("/api/v1/resolution/picks/42/resolve", headers={"Authorization": "Bearer s3cret"})
    assert response.status_code == 404


def test_pending_status_is_public(client, monkeypatch):
    async def fake_pending(session):
        return {"pending_count": 2, "next_expiration": "2026-03-11", "symbols": ["MSFT", "AAPL"]}

    monkeypatch.setattr(resolution_api, "get_pending_status", fake_pending)
    response = client.get("/api/v1/resolution/pending")
    assert response.status_code == 200
    assert response.json() == {"pending_count": 2, "next_expiration": "2026-03-11", "symbols": ["MSFT", "AAPL"]}

"""HTTP surface: routes, owner auth and error mapping."""

import pytest
from fastapi.testclient import TestClient

from drm_engine.api.dependencies import build_services, get_services
from drm_engine.api.main import app
from drm_engine.config.settings import get_settings
from drm_engine.infrastructure.db.database import Database
from tests.fakes import GB_IP, US_IP, make_settings

OWNER = {"X-Owner-Key": "owner-secret"}


@pytest.fixture
def api_settings():
    return make_settings(trust_forwarded_for=True)


@pytest.fixture
def client(services, api_settings):
    app.dependency_overrides[get_services] = lambda: services
    app.dependency_overrides[get_settings] = lambda: api_settings
    yield TestClient(app)
    app.dependency_overrides.clear()


def save_settings(client, document_id, **fields):
    response = client.put(f"/api/v1/documents/{document_id}/drm-settings", json=fields, headers=OWNER)
    assert response.status_code == 200, response.text
    return response.json()


def new_session(client, document_id, ip=US_IP, **body):
    response = client.post(
        f"/api/v1/documents/{document_id}/sessions",
        json=body or None,
        headers={"X-Forwarded-For": f"{ip}, 10.0.0.1"},
    )
    assert response.status_code == 200, response.text
    return response.json()["session_token"]


def test_health(client):
    data = client.get("/health").json()
    assert data["status"] == "ok"
    assert data["database"] == "sqlite"
    assert data["geo_provider"] == "none"


@pytest.mark.parametrize("headers", [{}, {"X-Owner-Key": "wrong"}])
def test_owner_endpoints_need_key(client, headers):
    response = client.put("/api/v1/documents/doc/drm-settings", json={"max_views": 1}, headers=headers)
    assert response.status_code == 401
    assert client.get("/api/v1/documents/doc/stats", headers=headers).status_code == 401


def test_full_viewer_flow(client):
    settings = save_settings(client, "report", max_views=2, allowed_countries=["us"], require_watermark=True)
    assert settings["allowed_countries"] == ["US"]

    token = new_session(client, "report")
    verdict = client.get("/api/v1/documents/report/access", params={"session_token": token}).json()
    assert verdict["allowed"]
    assert verdict["remaining_views"] == 2
    assert verdict["watermark"]["text"].startswith("8.8.8.8 - ")
    assert verdict["protection"]["advisory"] is True

    admitted = [
        client.post("/api/v1/documents/report/admit", json={"session_token": token, "page_number": 1}).json()
        for _ in range(3)
    ]
    assert [v["allowed"] for v in admitted] == [True, True, False]
    assert [v["remaining_views"] for v in admitted] == [1, 0, 0]
    assert admitted[2]["reason_code"] == "VIEW_LIMIT_REACHED"
    assert admitted[2]["reason"] == "maximum view limit reached"


def test_denial_is_a_normal_response(client):
    save_settings(client, "report", allowed_countries=["US"])
    token = new_session(client, "report", ip=GB_IP)

    response = client.get("/api/v1/documents/report/access", params={"session_token": token})
    assert response.status_code == 200
    assert response.json()["reason_code"] == "LOCATION_NOT_ALLOWED"


def test_missing_token(client):
    save_settings(client, "report")
    data = client.get("/api/v1/documents/report/access").json()
    assert data == {
        "allowed": False,
        "reason_code": "SESSION_REQUIRED",
        "reason": "session token required",
        "remaining_views": None,
        "watermark": None,
        "protection": None,
        "session_token": None,
    }


def test_forwarded_for_ignored_unless_trusted(client, api_settings):
    api_settings.trust_forwarded_for = False
    save_settings(client, "report", allowed_countries=["GB"])
    token = new_session(client, "report", ip=US_IP)

    # Peer address is not public: no geolocation, geography checks skipped
    verdict = client.get("/api/v1/documents/report/access", params={"session_token": token}).json()
    assert verdict["allowed"]


def test_track_view_over_quota_is_conflict(client):
    save_settings(client, "report", max_views=1)
    token = new_session(client, "report")

    assert client.post(f"/api/v1/sessions/{token}/views", json={"page_number": 2}).json() == {"success": True}
    response = client.post(f"/api/v1/sessions/{token}/views")
    assert response.status_code == 409
    assert response.json()["reason_code"] == "VIEW_LIMIT_REACHED"
    assert response.json()["remaining_views"] == 0


def test_unknown_session_is_not_found(client):
    response = client.post("/api/v1/sessions/sess_missing/views")
    assert response.status_code == 404
    assert response.json()["detail"] == "invalid session"


def test_session_for_unknown_document(client):
    response = client.post("/api/v1/documents/ghost/sessions")
    assert response.status_code == 404
    assert response.json()["detail"] == "document not found"


def test_device_limit_is_forbidden(client):
    save_settings(client, "report", max_unique_devices=1)
    new_session(client, "report", device_fingerprint="laptop")

    response = client.post("/api/v1/documents/report/sessions", json={"device_fingerprint": "phone"})
    assert response.status_code == 403


def test_invalid_policy_is_unprocessable(client):
    response = client.put(
        "/api/v1/documents/report/drm-settings",
        json={"allowed_hours_start": 18, "allowed_hours_end": 9},
        headers=OWNER,
    )
    assert response.status_code == 422
    assert response.json()["detail"] == ["allowed_hours_start must not be after allowed_hours_end"]


def test_get_settings_and_toggle(client):
    save_settings(client, "report", max_views=7, allowed_days_of_week=[1, 2])
    data = client.get("/api/v1/documents/report/drm-settings", headers=OWNER).json()
    assert data["max_views"] == 7
    assert data["allowed_days_of_week"] == [1, 2]

    response = client.put("/api/v1/documents/report", json={"drm_enabled": False}, headers=OWNER)
    assert response.json()["drm_enabled"] is False
    assert client.get("/api/v1/documents/report/access").json()["allowed"]


def test_revoke_all_and_one(client):
    save_settings(client, "report")
    first = new_session(client, "report", device_fingerprint="a")
    second = new_session(client, "report", device_fingerprint="b")

    response = client.post(f"/api/v1/sessions/{first}/revoke", json={"reason": "lost laptop"}, headers=OWNER)
    assert response.json()["session"]["revoked_reason"] == "lost laptop"

    response = client.post("/api/v1/documents/report/revoke", headers=OWNER)
    assert response.json() == {"success": True, "revoked_sessions": 1}

    verdict = client.get("/api/v1/documents/report/access", params={"session_token": second}).json()
    assert verdict["reason_code"] == "SESSION_REVOKED"
    assert verdict["reason"] == "Access revoked by document owner"


def test_stats_and_violations(client):
    save_settings(client, "report", prevent_copy=True)
    token = new_session(client, "report", device_fingerprint="laptop")
    client.post("/api/v1/documents/report/admit", json={"session_token": token})
    assert client.post(f"/api/v1/sessions/{token}/violations", json={"violation_type": "copy"}).status_code == 200

    stats = client.get("/api/v1/documents/report/stats", headers=OWNER).json()
    assert stats["total_views"] == 1
    assert stats["unique_devices"] == 1
    assert stats["per_device"][0]["fingerprint"] == "laptop"
    assert stats["per_device"][0]["access_count"] == 1

    violations = client.get("/api/v1/documents/report/violations", headers=OWNER).json()
    assert [v["violation_type"] for v in violations] == ["copy"]


def test_unknown_violation_type_rejected(client):
    save_settings(client, "report")
    token = new_session(client, "report")
    response = client.post(f"/api/v1/sessions/{token}/violations", json={"violation_type": "photocopier"})
    assert response.status_code == 422


def test_storage_outage_is_service_unavailable(tmp_path, api_settings, geo, clock):
    broken = Database(f"sqlite:///{tmp_path}/missing-dir/engine.db")
    app.dependency_overrides[get_services] = lambda: build_services(api_settings, database=broken, geolocation=geo, clock=clock)
    app.dependency_overrides[get_settings] = lambda: api_settings
    try:
        response = TestClient(app).get("/api/v1/documents/report/access", params={"session_token": "sess_x"})
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 503
    assert response.json() == {"detail": "storage unavailable"}

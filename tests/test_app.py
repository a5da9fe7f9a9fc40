"""Health endpoints, middleware headers and error rendering"""

from core.config import settings
from middleware.security import has_path_traversal


def test_health(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Receipegram API is running!"
    assert body["status"] == "healthy"


def test_readiness_checks_database(client):
    res = client.get("/api/health/ready")
    assert res.status_code == 200
    assert res.json()["database"] == "connected"


def test_api_responses_carry_security_headers(client):
    res = client.get("/api/recipes")
    assert res.headers["x-content-type-options"] == "nosniff"
    assert res.headers["x-frame-options"] == "DENY"
    assert res.headers["cache-control"].startswith("no-store")
    assert res.headers["x-request-id"]
    assert "x-process-time" in res.headers


def test_request_id_is_echoed(client):
    res = client.get("/api/recipes", headers={"X-Request-ID": "abc-123"})
    assert res.headers["x-request-id"] == "abc-123"


def test_oversized_request_rejected(client, make_user, monkeypatch):
    alice = make_user("alice")
    monkeypatch.setattr(settings, "MAX_REQUEST_SIZE", 16)

    res = client.post(
        "/api/recipes",
        data={"title": "A long enough title", "ingredients": "i", "instructions": "s"},
        headers=alice["headers"],
    )
    assert res.status_code == 413
    assert res.json() == {"message": "Request too large"}


def test_path_traversal_detection():
    assert has_path_traversal("/uploads/../etc/passwd")
    assert has_path_traversal("/uploads/%2e%2e%2fsecret")
    assert not has_path_traversal("/uploads/3f1c.png")


def test_unknown_route_is_404(client):
    assert client.get("/api/nothing-here").status_code == 404

import structlog
from fastapi.testclient import TestClient

from app.main import app

client = TestClient(app)


def _capture_access_log(monkeypatch):
    captured = []

    def fake_log_request(method, path, status_code, duration_ms):
        captured.append(
            {
                "method": method,
                "path": path,
                "status_code": status_code,
                "context": structlog.contextvars.get_contextvars(),
            }
        )

    monkeypatch.setattr("app.main.log_request", fake_log_request)
    return captured


def test_access_log_carries_request_id(monkeypatch):
    captured = _capture_access_log(monkeypatch)

    response = client.get("/healthz", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"
    assert len(captured) == 1
    assert captured[0]["method"] == "GET"
    assert captured[0]["path"] == "/healthz"
    assert captured[0]["status_code"] == 200
    assert captured[0]["context"].get("request_id") == "req-123"


def test_access_log_uses_generated_request_id(monkeypatch):
    captured = _capture_access_log(monkeypatch)

    response = client.get("/healthz")

    assert captured[0]["context"].get("request_id") == response.headers["X-Request-ID"]

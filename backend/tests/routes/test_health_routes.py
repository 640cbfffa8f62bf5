from app.core.constants import API_VERSION


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.headers["cache-control"] == "no-store"
    body = resp.json()
    assert body["status"] == "ok"
    assert body["service"] == "edumarket-api"
    assert body["version"] == API_VERSION
    assert body["timestamp"].endswith("Z")


def test_root(client):
    body = client.get("/").json()
    assert body["message"] == "Welcome to EduMarket API"
    assert body["docs"] == "/docs"


def test_prometheus_exposition(client):
    client.get("/api/v1/courses")

    resp = client.get("/metrics/prometheus")

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/plain")
    assert "edumarket_http_requests_total" in resp.text
    assert "edumarket_service_operations_total" in resp.text


def test_unknown_route_is_problem_document(client):
    resp = client.get("/api/v1/nowhere")

    assert resp.status_code == 404
    assert resp.json()["instance"] == "/api/v1/nowhere"

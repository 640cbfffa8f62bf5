"""Problem documents for failures that escape the service layer."""

from fastapi.testclient import TestClient
import pytest
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from app.core.exceptions import is_db_pool_exhaustion
from app.main import app
from app.services.course_service import CourseService


@pytest.fixture
def lenient_client(client):
    """Client that returns 500/503 responses instead of re-raising server errors."""
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


class TestPoolExhaustion:
    def test_detects_queue_pool_timeout(self):
        exc = PoolTimeoutError("QueuePool limit of size 5 overflow 10 reached, connection timed out, timeout 5.00")
        assert is_db_pool_exhaustion(exc) is True
        assert is_db_pool_exhaustion(ValueError("bad input")) is False

    def test_answers_503_with_retry_after(self, lenient_client, monkeypatch):
        def exhausted(self, *args, **kwargs):
            raise PoolTimeoutError("QueuePool limit of size 5 overflow 10 reached, connection timed out")

        monkeypatch.setattr(CourseService, "list_published", exhausted)

        resp = lenient_client.get("/api/v1/courses")

        assert resp.status_code == 503
        assert resp.headers["retry-after"] == "2"
        assert resp.headers["content-type"].startswith("application/problem+json")
        assert resp.json()["code"] == "service_unavailable"

    def test_other_errors_stay_500(self, lenient_client, monkeypatch):
        def broken(self, *args, **kwargs):
            raise RuntimeError("unexpected")

        monkeypatch.setattr(CourseService, "list_published", broken)

        resp = lenient_client.get("/api/v1/courses")

        assert resp.status_code == 500
        assert resp.json()["code"] == "internal_server_error"

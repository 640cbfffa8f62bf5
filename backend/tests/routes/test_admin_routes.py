"""Back-office endpoints."""

import pytest

from app.core.enums import CourseStatus, TutoringStatus
from app.models.notification import Notification


class TestAccess:
    @pytest.mark.parametrize(
        "path", ["/api/v1/admin/dashboard/stats", "/api/v1/admin/users", "/api/v1/admin/reports/payments"]
    )
    def test_students_forbidden(self, client, student_headers, path):
        resp = client.get(path, headers=student_headers)
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Access forbidden"

    def test_teachers_forbidden(self, client, teacher_headers):
        assert client.get("/api/v1/admin/dashboard/stats", headers=teacher_headers).status_code == 403

    def test_anonymous(self, client):
        resp = client.get("/api/v1/admin/dashboard/stats")
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Not authenticated"


class TestDashboard:
    def test_stats(self, client, admin_headers, student, published_course):
        resp = client.get("/api/v1/admin/dashboard/stats", headers=admin_headers)

        assert resp.status_code == 200
        body = resp.json()
        assert body["users"]["total"] == 3
        assert body["courses"]["published"] == 1
        assert body["enrollments"]["total"] == 0

    def test_user_growth_period_validated(self, client, admin_headers):
        assert client.get("/api/v1/admin/dashboard/user-growth?period=year", headers=admin_headers).status_code == 200
        resp = client.get("/api/v1/admin/dashboard/user-growth?period=decade", headers=admin_headers)
        assert resp.status_code == 422
        assert resp.json()["code"] == "validation_error"


class TestModeration:
    def test_publish_course(self, client, db, admin_headers, teacher, make_course):
        draft = make_course(teacher, title="Statistics", status=CourseStatus.DRAFT.value)

        pending = client.get("/api/v1/admin/courses/pending", headers=admin_headers).json()
        assert [c["id"] for c in pending] == [draft.id]

        resp = client.patch(
            f"/api/v1/admin/courses/{draft.id}/status",
            json={"status": CourseStatus.PUBLISHED.value},
            headers=admin_headers,
        )

        assert resp.status_code == 200
        assert resp.json()["status"] == CourseStatus.PUBLISHED.value
        assert db.query(Notification).filter_by(user_id=teacher.id, title="Course Approved").count() == 1

    def test_bad_status(self, client, admin_headers, published_course):
        resp = client.patch(
            f"/api/v1/admin/courses/{published_course.id}/status",
            json={"status": "approved"},
            headers=admin_headers,
        )
        assert resp.status_code == 400

    def test_approve_and_reject_tutoring(self, client, admin_headers, teacher, make_session):
        first = make_session(teacher, status=TutoringStatus.PENDING.value)
        second = make_session(teacher, subject="Chemistry", status=TutoringStatus.PENDING.value)

        resp = client.post(f"/api/v1/admin/tutoring/{first.id}/approve", headers=admin_headers)
        assert resp.json()["status"] == TutoringStatus.APPROVED.value

        resp = client.post(
            f"/api/v1/admin/tutoring/{second.id}/reject", json={"reason": "Needs a syllabus"}, headers=admin_headers
        )
        assert resp.json()["status"] == TutoringStatus.REJECTED.value
        assert resp.json()["rejection_reason"] == "Needs a syllabus"

        assert client.get("/api/v1/admin/tutoring/pending", headers=admin_headers).json() == []


class TestPackages:
    def test_create_toggle_delete(self, client, admin_headers):
        resp = client.post(
            "/api/v1/admin/points-packages",
            json={"name": "Starter", "points": 100, "price": 9.99},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        package_id = resp.json()["id"]

        resp = client.patch(f"/api/v1/admin/points-packages/{package_id}/toggle", headers=admin_headers)
        assert resp.json()["is_active"] is False
        assert client.get("/api/v1/points/packages").json() == []

        resp = client.delete(f"/api/v1/admin/points-packages/{package_id}", headers=admin_headers)
        assert resp.status_code == 200


class TestUsers:
    def test_filter_by_role(self, client, admin_headers, student, teacher):
        resp = client.get("/api/v1/admin/users?role=teacher", headers=admin_headers)
        assert [u["id"] for u in resp.json()] == [teacher.id]

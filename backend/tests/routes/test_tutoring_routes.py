"""Tutoring listings, requests and message threads over HTTP."""

from app.core.enums import AppointmentStatus, TutoringStatus
from app.models.tutoring import TutoringAppointment


class TestSessions:
    def test_teacher_creates_pending_session(self, client, teacher_headers):
        payload = {
            "subject": "Calculus",
            "price_per_hour": 35,
            "location_type": "online",
            "availability": [{"day_of_week": 2, "start_time": "17:00", "end_time": "19:00"}],
        }

        resp = client.post("/api/v1/tutoring", json=payload, headers=teacher_headers)

        assert resp.status_code == 201
        body = resp.json()
        assert body["message"] == "Tutoring session created and pending approval"
        assert body["session"]["status"] == TutoringStatus.PENDING.value
        assert body["session"]["availability"][0]["start_time"] == "17:00"
        assert client.get("/api/v1/tutoring").json() == []

    def test_students_cannot_create(self, client, student_headers):
        resp = client.post("/api/v1/tutoring", json={"subject": "Art"}, headers=student_headers)
        assert resp.status_code == 403

    def test_bad_availability_is_request_validation(self, client, teacher_headers):
        payload = {
            "subject": "Calculus",
            "price_per_hour": 35,
            "location_type": "online",
            "availability": [{"day_of_week": 9, "start_time": "17:00", "end_time": "19:00"}],
        }
        resp = client.post("/api/v1/tutoring", json=payload, headers=teacher_headers)
        assert resp.status_code == 422

    def test_public_listing_and_detail(self, client, approved_session):
        listing = client.get("/api/v1/tutoring").json()
        assert [s["id"] for s in listing] == [approved_session.id]

        detail = client.get(f"/api/v1/tutoring/{approved_session.id}").json()
        assert detail["session"]["subject"] == "Algebra"
        assert detail["reviews"] == []


class TestRequests:
    def test_request_accept_and_chat(self, client, db, student_headers, teacher_headers, approved_session):
        resp = client.post(
            f"/api/v1/tutoring/{approved_session.id}/request",
            json={"message": "Could we cover integrals?"},
            headers=student_headers,
        )
        assert resp.status_code == 201
        assert resp.json()["message"] == "Tutoring request sent successfully"
        request_id = resp.json()["request"]["id"]

        resp = client.post(
            f"/api/v1/tutoring/requests/{request_id}/messages",
            json={"content": "I'm free on Mondays"},
            headers=student_headers,
        )
        assert resp.status_code == 201
        unread = client.get("/api/v1/tutoring/messages/unread-count", headers=teacher_headers).json()
        assert unread == {"unread_count": 1}

        resp = client.put(
            f"/api/v1/tutoring/requests/{request_id}/status",
            json={"status": "accepted", "scheduled_at": "2030-01-07T15:00:00Z", "duration": 60},
            headers=teacher_headers,
        )
        assert resp.json() == {"message": "Request accepted and appointment created"}

        appointment = db.query(TutoringAppointment).filter_by(request_id=request_id).one()
        assert appointment.status == AppointmentStatus.CONFIRMED.value
        assert appointment.price == 40.0

    def test_duplicate_pending_request(self, client, student_headers, approved_session):
        url = f"/api/v1/tutoring/{approved_session.id}/request"
        client.post(url, json={}, headers=student_headers)

        resp = client.post(url, json={}, headers=student_headers)

        assert resp.status_code == 400

    def test_student_cannot_decide(self, client, student_headers, approved_session):
        request_id = client.post(
            f"/api/v1/tutoring/{approved_session.id}/request", json={}, headers=student_headers
        ).json()["request"]["id"]

        resp = client.put(
            f"/api/v1/tutoring/requests/{request_id}/status", json={"status": "rejected"}, headers=student_headers
        )

        assert resp.status_code == 403

    def test_cancel(self, client, student_headers, approved_session):
        request_id = client.post(
            f"/api/v1/tutoring/{approved_session.id}/request", json={}, headers=student_headers
        ).json()["request"]["id"]

        resp = client.delete(f"/api/v1/tutoring/requests/{request_id}", headers=student_headers)

        assert resp.json() == {"message": "Request cancelled successfully"}
        assert client.get("/api/v1/tutoring/requests/my", headers=student_headers).json() == []

"""Tutoring sessions, the request lifecycle and request message threads."""

from datetime import datetime, timezone

import pytest

from app.core.enums import AppointmentStatus, NotificationType, TutoringRequestStatus, TutoringStatus
from app.core.exceptions import ForbiddenException, NotFoundException, ValidationException
from app.models.notification import Notification
from app.models.tutoring import TutoringAppointment, TutoringRequest, TutoringSession
from app.schemas.tutoring import (
    TutoringRequestCreate,
    TutoringRequestStatusUpdate,
    TutoringSessionCreate,
    TutoringSessionUpdate,
)
from app.services.tutoring_message_service import TutoringMessageService
from app.services.tutoring_request_service import TutoringRequestService
from app.services.tutoring_service import TutoringService

NEXT_WEEK = datetime(2030, 1, 7, 15, 0, tzinfo=timezone.utc)


def _accept(duration=90):
    return TutoringRequestStatusUpdate(status="accepted", scheduled_at=NEXT_WEEK, duration=duration)


class TestSessions:
    def test_new_session_pending_with_availability(self, db, teacher):
        session = TutoringService(db).create_session(
            teacher,
            TutoringSessionCreate(
                subject="Chemistry",
                price_per_hour=35,
                location_type="both",
                availability=[{"day_of_week": 1, "start_time": "09:00", "end_time": "11:00"}],
            ),
        )

        assert session.status == TutoringStatus.PENDING.value
        assert session.featured is False
        assert session.max_students == 1
        assert [(a.day_of_week, a.start_time) for a in session.availability] == [(1, "09:00")]

    @pytest.mark.parametrize(
        "payload",
        [
            {"price_per_hour": 20, "location_type": "online"},
            {"subject": "Maths", "location_type": "online"},
            {"subject": "Maths", "price_per_hour": 20},
        ],
    )
    def test_required_fields(self, db, teacher, payload):
        with pytest.raises(ValidationException):
            TutoringService(db).create_session(teacher, TutoringSessionCreate(**payload))

    def test_invalid_location_type(self, db, teacher):
        with pytest.raises(ValidationException) as exc:
            TutoringService(db).create_session(
                teacher, TutoringSessionCreate(subject="Maths", price_per_hour=20, location_type="moon")
            )
        assert exc.value.message == "Invalid location type"

    def test_only_approved_sessions_listed(self, db, teacher, make_session):
        make_session(teacher, subject="Physics")
        make_session(teacher, subject="Biology", status=TutoringStatus.PENDING.value)

        subjects = [s.subject for s in TutoringService(db).list_approved()]

        assert subjects == ["Physics"]

    def test_pending_session_hidden_from_others(self, db, teacher, student, make_session):
        pending = make_session(teacher, status=TutoringStatus.PENDING.value)
        service = TutoringService(db)

        with pytest.raises(ForbiddenException):
            service.get_session(pending.id, student)
        assert service.get_session(pending.id, teacher)["session"].id == pending.id

    def test_owner_cannot_self_approve_or_feature(self, db, teacher, make_session):
        pending = make_session(teacher, status=TutoringStatus.PENDING.value)

        updated = TutoringService(db).update_session(
            teacher, pending.id, TutoringSessionUpdate(status="approved", featured=True, price_per_hour=55)
        )

        assert updated.status == TutoringStatus.PENDING.value
        assert updated.featured is False
        assert updated.price_per_hour == 55

    def test_delete_blocked_by_confirmed_appointment(self, db, teacher, student, approved_session):
        request = TutoringRequestService(db).create_request(student, approved_session.id, TutoringRequestCreate())
        TutoringRequestService(db).update_status(teacher, request.id, _accept())

        with pytest.raises(ValidationException):
            TutoringService(db).delete_session(teacher, approved_session.id)

    def test_delete_removes_requests(self, db, teacher, student, approved_session):
        TutoringRequestService(db).create_request(student, approved_session.id, TutoringRequestCreate())
        session_id = approved_session.id

        TutoringService(db).delete_session(teacher, session_id)

        assert db.query(TutoringSession).filter_by(id=session_id).count() == 0
        assert db.query(TutoringRequest).filter_by(session_id=session_id).count() == 0

    def test_my_sessions_include_requests(self, db, teacher, student, approved_session):
        TutoringRequestService(db).create_request(student, approved_session.id, TutoringRequestCreate(message="Hi"))

        rows = TutoringService(db).get_my_sessions(teacher.id)

        assert len(rows) == 1
        assert [r.message for r in rows[0]["requests"]] == ["Hi"]


class TestRequests:
    def test_request_notifies_teacher(self, db, teacher, student, approved_session):
        request = TutoringRequestService(db).create_request(
            student, approved_session.id, TutoringRequestCreate(message="Can you help with exams?")
        )

        assert request.status == TutoringRequestStatus.PENDING.value
        notification = db.query(Notification).filter_by(user_id=teacher.id).one()
        assert notification.type == NotificationType.TUTORING_REQUEST.value
        assert student.name in notification.message

    def test_unapproved_session_rejected(self, db, teacher, student, make_session):
        pending = make_session(teacher, status=TutoringStatus.PENDING.value)
        with pytest.raises(ValidationException):
            TutoringRequestService(db).create_request(student, pending.id, TutoringRequestCreate())

    def test_teacher_cannot_request_own_session(self, db, teacher, approved_session):
        with pytest.raises(ValidationException):
            TutoringRequestService(db).create_request(teacher, approved_session.id, TutoringRequestCreate())

    def test_duplicate_pending_request(self, db, student, approved_session):
        service = TutoringRequestService(db)
        service.create_request(student, approved_session.id, TutoringRequestCreate())
        with pytest.raises(ValidationException) as exc:
            service.create_request(student, approved_session.id, TutoringRequestCreate())
        assert exc.value.message == "You already have a pending request for this session"

    def test_accept_books_appointment(self, db, teacher, student, approved_session):
        service = TutoringRequestService(db)
        request = service.create_request(student, approved_session.id, TutoringRequestCreate())

        message = service.update_status(teacher, request.id, _accept(duration=90))

        assert message == "Request accepted and appointment created"
        assert request.status == TutoringRequestStatus.ACCEPTED.value
        appointment = db.query(TutoringAppointment).one()
        assert appointment.status == AppointmentStatus.CONFIRMED.value
        assert appointment.price == pytest.approx(60.0)
        assert appointment.student_id == student.id
        assert db.query(Notification).filter_by(user_id=student.id).count() == 1

    def test_accept_requires_schedule(self, db, teacher, student, approved_session):
        service = TutoringRequestService(db)
        request = service.create_request(student, approved_session.id, TutoringRequestCreate())
        with pytest.raises(ValidationException):
            service.update_status(teacher, request.id, TutoringRequestStatusUpdate(status="accepted"))

    def test_reject_and_no_second_decision(self, db, teacher, student, approved_session):
        service = TutoringRequestService(db)
        request = service.create_request(student, approved_session.id, TutoringRequestCreate())

        assert service.update_status(teacher, request.id, TutoringRequestStatusUpdate(status="rejected")) == (
            "Request rejected"
        )
        with pytest.raises(ValidationException):
            service.update_status(teacher, request.id, _accept())
        assert db.query(TutoringAppointment).count() == 0

    def test_only_session_teacher_decides(self, db, make_user, student, approved_session):
        service = TutoringRequestService(db)
        request = service.create_request(student, approved_session.id, TutoringRequestCreate())
        with pytest.raises(ForbiddenException):
            service.update_status(make_user("teacher"), request.id, _accept())

    def test_invalid_status(self, db, teacher, student, approved_session):
        service = TutoringRequestService(db)
        request = service.create_request(student, approved_session.id, TutoringRequestCreate())
        with pytest.raises(ValidationException):
            service.update_status(teacher, request.id, TutoringRequestStatusUpdate(status="maybe"))

    def test_cancel_pending_only_by_student(self, db, other_student, student, approved_session):
        service = TutoringRequestService(db)
        request = service.create_request(student, approved_session.id, TutoringRequestCreate())

        with pytest.raises(ForbiddenException):
            service.cancel(other_student, request.id)
        service.cancel(student, request.id)

        with pytest.raises(NotFoundException):
            service.get_request_or_404(request.id)


class TestMessages:
    @pytest.fixture
    def request_row(self, db, student, approved_session):
        return TutoringRequestService(db).create_request(student, approved_session.id, TutoringRequestCreate())

    def test_thread_and_read_state(self, db, teacher, student, request_row):
        service = TutoringMessageService(db)
        service.send_message(student, request_row.id, "  Hello!  ")
        service.send_message(teacher, request_row.id, "Hi, when suits you?")

        assert service.unread_count(teacher) == {"unread_count": 1}
        messages = service.get_messages(teacher, request_row.id)

        assert [m.content for m in messages] == ["Hello!", "Hi, when suits you?"]
        assert service.unread_count(teacher) == {"unread_count": 0}
        assert service.unread_count(student) == {"unread_count": 1}

    def test_outsider_forbidden(self, db, other_student, request_row):
        with pytest.raises(ForbiddenException):
            TutoringMessageService(db).send_message(other_student, request_row.id, "Let me in")

    def test_blank_message(self, db, student, request_row):
        with pytest.raises(ValidationException):
            TutoringMessageService(db).send_message(student, request_row.id, "   ")

    def test_conversations_show_other_party(self, db, teacher, student, request_row):
        service = TutoringMessageService(db)
        service.send_message(student, request_row.id, "Hello")

        conversations = service.get_conversations(teacher)

        assert len(conversations) == 1
        assert conversations[0]["other_party"].id == student.id
        assert conversations[0]["last_message"].content == "Hello"
        assert conversations[0]["unread_count"] == 1

    def test_mark_read(self, db, teacher, student, request_row):
        service = TutoringMessageService(db)
        service.send_message(student, request_row.id, "Ping")

        service.mark_read(teacher, request_row.id)

        assert service.unread_count(teacher) == {"unread_count": 0}

"""AdminService: moderation with teacher notifications, packages and reports."""

import pytest

from app.core.enums import CourseStatus, NotificationType, PaymentStatus, TutoringStatus
from app.core.exceptions import NotFoundException, ValidationException
from app.models.notification import Notification
from app.schemas.points import PointsPackageCreate, PointsPackageUpdate
from app.services.admin_service import AdminService
from app.services.enrollment_service import EnrollmentService
from app.services.payment_service import PaymentService


class TestCourseModeration:
    def test_approve_notifies_teacher(self, db, teacher, make_course):
        draft = make_course(teacher, title="Geometry", status=CourseStatus.DRAFT.value)

        course = AdminService(db).update_course_status(draft.id, CourseStatus.PUBLISHED.value)

        assert course.status == CourseStatus.PUBLISHED.value
        notification = db.query(Notification).filter_by(user_id=teacher.id).one()
        assert notification.title == "Course Approved"
        assert notification.type == NotificationType.SUCCESS.value
        assert "Geometry" in notification.message

    def test_reject_is_a_warning(self, db, teacher, make_course):
        draft = make_course(teacher, status=CourseStatus.DRAFT.value)

        AdminService(db).update_course_status(draft.id, CourseStatus.REJECTED.value)

        notification = db.query(Notification).filter_by(user_id=teacher.id).one()
        assert notification.title == "Course Rejected"
        assert notification.type == NotificationType.WARNING.value

    def test_invalid_status(self, db, published_course):
        with pytest.raises(ValidationException):
            AdminService(db).update_course_status(published_course.id, "approved")

    def test_unknown_course(self, db):
        with pytest.raises(NotFoundException):
            AdminService(db).update_course_status("01HZZZZZZZZZZZZZZZZZZZZZZZ", CourseStatus.PUBLISHED.value)

    def test_list_by_status(self, db, teacher, make_course):
        make_course(teacher, title="Live")
        make_course(teacher, title="Waiting", status=CourseStatus.DRAFT.value)

        service = AdminService(db)

        assert [c.title for c in service.list_courses(CourseStatus.DRAFT.value)] == ["Waiting"]
        assert len(service.list_courses()) == 2


class TestTutoringModeration:
    def test_approve(self, db, teacher, make_session):
        pending = make_session(teacher, status=TutoringStatus.PENDING.value)

        session = AdminService(db).approve_tutoring(pending.id)

        assert session.status == TutoringStatus.APPROVED.value
        assert session.rejection_reason is None
        assert db.query(Notification).filter_by(user_id=teacher.id).count() == 1

    def test_reject_with_reason(self, db, teacher, make_session):
        pending = make_session(teacher, subject="Physics", status=TutoringStatus.PENDING.value)

        session = AdminService(db).reject_tutoring(pending.id, "Missing description")

        assert session.status == TutoringStatus.REJECTED.value
        assert session.rejection_reason == "Missing description"
        notification = db.query(Notification).filter_by(user_id=teacher.id).one()
        assert notification.message.endswith(" Reason: Missing description")

    def test_approval_clears_old_rejection(self, db, teacher, make_session):
        pending = make_session(teacher, status=TutoringStatus.PENDING.value)
        service = AdminService(db)
        service.reject_tutoring(pending.id, "Too short")

        session = service.update_tutoring_status(pending.id, TutoringStatus.APPROVED.value)

        assert session.rejection_reason is None

    def test_approval_queue(self, db, teacher, make_course, make_session):
        make_course(teacher, status=CourseStatus.DRAFT.value)
        make_session(teacher, status=TutoringStatus.PENDING.value)
        make_session(teacher, status=TutoringStatus.PENDING.value)

        summary = AdminService(db).get_approval_requests()["summary"]

        assert summary == {"pending_courses": 1, "pending_tutoring": 2, "total": 3}


class TestPointsPackages:
    def test_create_requires_fields(self, db):
        with pytest.raises(ValidationException):
            AdminService(db).create_points_package(PointsPackageCreate(name="Empty", points=0, price=5))

    def test_create_update_toggle_delete(self, db):
        service = AdminService(db)
        package = service.create_points_package(PointsPackageCreate(name="Mega", points=2000, price=149.99))
        assert package.is_active is True
        assert package.bonus_points == 0

        service.update_points_package(package.id, PointsPackageUpdate(bonus_points=300))
        assert package.bonus_points == 300
        assert service.toggle_points_package(package.id).is_active is False

        service.delete_points_package(package.id)
        with pytest.raises(NotFoundException):
            service.toggle_points_package(package.id)


class TestReports:
    def test_dashboard_counts(self, db, student, teacher, admin, published_course, make_course):
        make_course(teacher, status=CourseStatus.DRAFT.value)
        EnrollmentService(db).enroll(student, published_course.id)

        stats = AdminService(db).get_dashboard_stats()

        assert stats["users"]["total"] == 3
        assert stats["users"]["by_role"] == {"student": 1, "teacher": 1, "admin": 1}
        assert stats["courses"]["total"] == 2
        assert stats["courses"]["published"] == 1
        assert stats["enrollments"]["total"] == 1
        assert stats["enrollments"]["this_month"] == 1

    def test_payments_report(self, db, student):
        payments = PaymentService(db)
        settled = payments.create_payment_intent(2500, metadata={"user_id": student.id})
        payments.create_payment_intent(1000, metadata={"user_id": student.id})
        payments.confirm_payment_intent(settled["id"], "pm_card_visa")

        report = AdminService(db).get_payments_report()

        assert report["summary"]["total_payments"] == 2
        assert report["summary"]["total_amount"] == 25.0
        assert report["summary"]["count_by_status"] == {
            PaymentStatus.COMPLETED.value: 1,
            PaymentStatus.PENDING.value: 1,
        }
        assert report["summary"]["count_by_type"] == {"unknown": 2}

    def test_enrollment_stats(self, db, student, other_student, teacher, published_course, make_course):
        make_course(teacher, title="Nobody here")
        for user in (student, other_student):
            EnrollmentService(db).enroll(user, published_course.id)

        stats = AdminService(db).get_enrollment_stats()

        assert stats["total_enrollments"] == 2
        assert [row["course_id"] for row in stats["top_courses"]] == [published_course.id]
        assert stats["top_courses"][0]["teacher_name"] == "Tina Teacher"
        assert len(stats["monthly_stats"]) == 12
        assert stats["monthly_stats"][-1]["count"] == 2

    def test_user_search(self, db, student, teacher):
        users = AdminService(db).list_users(search="tina")
        assert [u.id for u in users] == [teacher.id]

"""EnrollmentService: enrollment rules and cleanup on unenroll."""

import pytest

from app.core.enums import CourseStatus, EnrollmentStatus
from app.core.exceptions import NotFoundException, ValidationException
from app.models.enrollment import LessonProgress
from app.services.course_progress_service import CourseProgressService
from app.services.enrollment_service import EnrollmentService
from tests.helpers import lesson_ids


class TestEnroll:
    def test_enroll_in_published_course(self, db, student, published_course):
        enrollment = EnrollmentService(db).enroll(student, published_course.id)

        assert enrollment.status == EnrollmentStatus.ACTIVE.value
        assert enrollment.completed is False
        assert EnrollmentService(db).get_status(student.id, published_course.id)["is_enrolled"] is True

    def test_draft_course_rejected(self, db, student, make_course, teacher):
        draft = make_course(teacher, status=CourseStatus.DRAFT.value)
        with pytest.raises(ValidationException):
            EnrollmentService(db).enroll(student, draft.id)

    def test_teacher_cannot_enroll_in_own_course(self, db, teacher, published_course):
        with pytest.raises(ValidationException) as exc:
            EnrollmentService(db).enroll(teacher, published_course.id)
        assert exc.value.message == "Teachers cannot enroll in their own courses"

    def test_double_enrollment_rejected(self, db, student, published_course):
        service = EnrollmentService(db)
        service.enroll(student, published_course.id)
        with pytest.raises(ValidationException):
            service.enroll(student, published_course.id)

    def test_missing_course(self, db, student):
        with pytest.raises(NotFoundException):
            EnrollmentService(db).enroll(student, "01HZZZZZZZZZZZZZZZZZZZZZZZ")


class TestUnenroll:
    def test_unenroll_removes_progress(self, db, student, published_course):
        EnrollmentService(db).enroll(student, published_course.id)
        first_lesson = lesson_ids(published_course)[0]
        CourseProgressService(db).mark_lesson_completed(student.id, published_course.id, first_lesson)

        EnrollmentService(db).unenroll(student.id, published_course.id)

        assert EnrollmentService(db).is_enrolled(student.id, published_course.id) is False
        assert db.query(LessonProgress).filter_by(user_id=student.id).count() == 0

    def test_unenroll_when_not_enrolled(self, db, student, published_course):
        with pytest.raises(NotFoundException):
            EnrollmentService(db).unenroll(student.id, published_course.id)


class TestComplete:
    def test_mark_completed_once(self, db, student, published_course):
        service = EnrollmentService(db)
        service.enroll(student, published_course.id)

        enrollment = service.mark_completed(student.id, published_course.id)

        assert enrollment.completed is True
        assert enrollment.completed_at is not None
        assert enrollment.status == EnrollmentStatus.COMPLETED.value
        with pytest.raises(ValidationException):
            service.mark_completed(student.id, published_course.id)

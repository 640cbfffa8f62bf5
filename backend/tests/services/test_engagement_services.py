"""Achievements, notifications, certificates, favorites and the personal calendar."""

from datetime import datetime, timezone

import pytest

from app.core.enums import CalendarEventType, CertificateType, PointsTransactionType
from app.core.exceptions import ForbiddenException, NotFoundException, ValidationException
from app.models.achievement import Achievement
from app.models.notification import Notification
from app.models.points import PointsTransaction
from app.schemas.calendar import CalendarEventCreate, CalendarEventUpdate
from app.services.achievement_service import AchievementService
from app.services.calendar_service import CalendarService
from app.services.certificate_service import CertificateService
from app.services.course_favorites_service import CourseFavoritesService
from app.services.enrollment_service import EnrollmentService
from app.services.notification_service import NotificationService


@pytest.fixture
def achievement(db):
    row = Achievement(name="Course Finisher", description="Finish a course", points_rewarded=100)
    db.add(row)
    db.commit()
    return row


class TestAchievements:
    def test_rows_created_lazily(self, db, student, achievement):
        rows = AchievementService(db).get_user_achievements(student.id)

        assert [(r.achievement_id, r.progress, r.completed) for r in rows] == [(achievement.id, 0, False)]
        assert AchievementService(db).initialize_for_user(student.id) == 0

    def test_progress_increments_and_caps(self, db, student, achievement):
        service = AchievementService(db)

        assert service.progress(student.id, achievement.id, 40).progress == 40
        row = service.progress(student.id, achievement.id, 80)

        assert row.progress == 100
        assert row.completed is True
        assert row.completed_at is not None

    def test_completion_rewards_once(self, db, student, achievement):
        service = AchievementService(db)

        service.complete(student.id, achievement.id)
        service.progress(student.id, achievement.id, 50, increment=False)

        db.refresh(student)
        assert student.points == 100
        assert db.query(PointsTransaction).filter_by(
            user_id=student.id, type=PointsTransactionType.ACHIEVEMENT.value
        ).count() == 1
        assert db.query(Notification).filter_by(user_id=student.id, title="Achievement Unlocked!").count() == 1

    def test_progress_value_required(self, db, student, achievement):
        with pytest.raises(ValidationException):
            AchievementService(db).progress(student.id, achievement.id, None)

    def test_unknown_achievement(self, db, student):
        with pytest.raises(NotFoundException):
            AchievementService(db).progress(student.id, 999, 10)


class TestNotifications:
    def test_read_state(self, db, student):
        service = NotificationService(db)
        with service.transaction():
            first = service.notify(student.id, "One", "First")
            service.notify(student.id, "Two", "Second")

        assert service.unread_count(student.id) == {"count": 2}
        service.mark_read(student.id, first.id)
        assert service.unread_count(student.id) == {"count": 1}
        assert service.mark_all_read(student.id) == 1
        assert service.unread_count(student.id) == {"count": 0}

    def test_cannot_read_someone_elses(self, db, student, other_student):
        service = NotificationService(db)
        with service.transaction():
            theirs = service.notify(other_student.id, "Private", "Not yours")
        with pytest.raises(NotFoundException):
            service.mark_read(student.id, theirs.id)

    def test_send_tutoring_request_requires_fields(self, db, teacher):
        service = NotificationService(db)
        with pytest.raises(ValidationException):
            service.send_tutoring_request(teacher.id, "")
        notification = service.send_tutoring_request(teacher.id, "Can we meet on Friday?")
        assert notification.user_id == teacher.id


class TestCertificates:
    def test_course_certificate_after_completion(self, db, student, published_course):
        enrollments = EnrollmentService(db)
        enrollments.enroll(student, published_course.id)
        enrollments.mark_completed(student.id, published_course.id)
        service = CertificateService(db)

        certificate = service.generate(student, course_id=published_course.id, badge="gold")
        again = service.generate(student, course_id=published_course.id)

        assert again.id == certificate.id
        assert certificate.type == CertificateType.COURSE_COMPLETION.value
        assert certificate.title == "Python Basics - Course Completion Certificate"
        assert certificate.certificate_metadata["badge"] == "gold"
        assert certificate.certificate_metadata["teacher_name"] == "Tina Teacher"
        assert [c.id for c in service.list_for_user(student.id)] == [certificate.id]

    def test_incomplete_course_rejected(self, db, student, published_course):
        EnrollmentService(db).enroll(student, published_course.id)
        with pytest.raises(ValidationException) as exc:
            CertificateService(db).generate(student, course_id=published_course.id)
        assert exc.value.message == "User has not completed this course"

    def test_exactly_one_target(self, db, student, published_course, approved_session):
        service = CertificateService(db)
        with pytest.raises(ValidationException):
            service.generate(student)
        with pytest.raises(ValidationException):
            service.generate(student, course_id=published_course.id, tutoring_id=approved_session.id)

    def test_missing_course(self, db, student):
        with pytest.raises(NotFoundException):
            CertificateService(db).generate(student, course_id="01HZZZZZZZZZZZZZZZZZZZZZZZ")

    def test_tutoring_needs_completed_appointment(self, db, student, approved_session):
        with pytest.raises(ValidationException):
            CertificateService(db).generate(student, tutoring_id=approved_session.id)


class TestFavorites:
    def test_toggle_saved(self, db, student, published_course):
        service = CourseFavoritesService(db)

        assert service.toggle_saved(student.id, published_course.id) == {"saved": True, "message": "Course saved"}
        assert service.saved_status(student.id, published_course.id)["is_saved"] is True
        assert service.toggle_saved(student.id, published_course.id)["saved"] is False
        assert service.saved_status(student.id, published_course.id) == {"is_saved": False, "saved_at": None}

    def test_liked_and_all(self, db, student, published_course):
        service = CourseFavoritesService(db)
        service.toggle_liked(student.id, published_course.id)

        favorites = service.get_all(student.id)

        assert favorites["liked_courses"] == [published_course.id]
        assert favorites["saved_courses"] == []
        assert published_course.id in favorites["liked_details"]

    def test_bulk_remove(self, db, student, teacher, make_course):
        courses = [make_course(teacher, title=f"Course {n}") for n in range(3)]
        service = CourseFavoritesService(db)
        for course in courses:
            service.toggle_saved(student.id, course.id)

        result = service.remove_bulk_saved(student.id, [courses[0].id, courses[1].id])

        assert result["removed_count"] == 2
        assert [row.course_id for row in service.get_saved(student.id)] == [courses[2].id]
        with pytest.raises(ValidationException):
            service.remove_bulk_saved(student.id, [])

    def test_unknown_course(self, db, student):
        with pytest.raises(NotFoundException):
            CourseFavoritesService(db).toggle_liked(student.id, "01HZZZZZZZZZZZZZZZZZZZZZZZ")


class TestCalendar:
    def _event(self, **overrides):
        data = {
            "title": "Revision",
            "type": CalendarEventType.EXAM.value,
            "start_time": datetime(2030, 3, 1, 9, 0, tzinfo=timezone.utc),
        }
        data.update(overrides)
        return CalendarEventCreate(**data)

    def test_create_and_range_filter(self, db, student):
        service = CalendarService(db)
        service.create_event(student.id, self._event(title="March"))
        may = datetime(2030, 5, 1, tzinfo=timezone.utc)
        service.create_event(student.id, self._event(title="May", start_time=may))

        events = service.list_events(
            student.id,
            start_date=datetime(2030, 4, 1, tzinfo=timezone.utc),
            end_date=datetime(2030, 6, 1, tzinfo=timezone.utc),
        )

        assert [e.title for e in events] == ["May"]

    def test_required_fields(self, db, student):
        with pytest.raises(ValidationException):
            CalendarService(db).create_event(student.id, CalendarEventCreate(title="No time"))

    def test_only_owner_changes(self, db, student, other_student):
        service = CalendarService(db)
        event = service.create_event(student.id, self._event())

        with pytest.raises(ForbiddenException):
            service.update_event(other_student.id, event.id, CalendarEventUpdate(title="Mine"))
        with pytest.raises(ForbiddenException):
            service.delete_event(other_student.id, event.id)

        assert service.update_event(student.id, event.id, CalendarEventUpdate(title="Mock exam")).title == "Mock exam"
        service.delete_event(student.id, event.id)
        assert service.list_events(student.id) == []

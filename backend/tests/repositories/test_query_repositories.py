"""Aggregations and filters that the admin and catalogue screens rely on."""

from app.core.enums import CourseStatus, EnrollmentStatus
from app.models.enrollment import Enrollment
from app.repositories.factory import RepositoryFactory


class TestUserRepository:
    def test_email_lookup_ignores_case(self, db, student):
        repo = RepositoryFactory.create_user_repository(db)
        assert repo.get_by_email(student.email.upper()).id == student.id

    def test_count_by_role_includes_empty_roles(self, db, student):
        counts = RepositoryFactory.create_user_repository(db).count_by_role()
        assert counts == {"student": 1, "teacher": 0, "admin": 0}

    def test_adjust_points(self, db, student):
        repo = RepositoryFactory.create_user_repository(db)
        assert repo.adjust_points(student, 30) is True
        repo.adjust_points(student, -10)
        assert student.points == 20

    def test_guarded_adjustment_never_goes_negative(self, db, student):
        repo = RepositoryFactory.create_user_repository(db)
        repo.adjust_points(student, 20)

        assert repo.adjust_points(student, -50, keep_non_negative=True) is False
        assert student.points == 20
        assert repo.adjust_points(student, -20, keep_non_negative=True) is True
        assert student.points == 0


class TestEnrollmentRepository:
    def test_top_courses(self, db, student, other_student, teacher, make_course):
        popular = make_course(teacher, title="Popular")
        quiet = make_course(teacher, title="Quiet")
        draft = make_course(teacher, title="Draft", status=CourseStatus.DRAFT.value)
        for user in (student, other_student):
            db.add(Enrollment(user_id=user.id, course_id=popular.id, status=EnrollmentStatus.ACTIVE.value))
        db.add(Enrollment(user_id=student.id, course_id=draft.id, status=EnrollmentStatus.ACTIVE.value))
        db.commit()

        repo = RepositoryFactory.create_enrollment_repository(db)
        top = [(course.title, count) for course, count in repo.top_courses(None, published_only=True)]

        assert top == [("Popular", 2), ("Quiet", 0)]
        assert repo.count_by_course([popular.id, quiet.id]) == {popular.id: 2}
        assert sorted(repo.distinct_students_for_courses([popular.id, draft.id])) == sorted(
            [student.id, other_student.id]
        )
        assert repo.enrolled_course_ids(student.id, [popular.id, quiet.id]) == [popular.id]

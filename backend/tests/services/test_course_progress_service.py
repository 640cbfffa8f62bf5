"""CourseProgressService: completion tracking, percentages and resume positions."""

import pytest

from app.core.exceptions import NotFoundException, ValidationException
from app.services.course_progress_service import CourseProgressService, percent
from tests.helpers import lesson_ids


class TestPercent:
    @pytest.mark.parametrize(
        "done,total,expected",
        [(0, 0, 0), (0, 4, 0), (1, 3, 33), (2, 3, 67), (1, 8, 13), (4, 4, 100)],
    )
    def test_rounds_halves_up(self, done, total, expected):
        assert percent(done, total) == expected


class TestCourseProgress:
    def test_progress_counts_completed_lessons(self, db, student, make_course, teacher):
        course = make_course(teacher, topics=2, lessons_per_topic=2)
        service = CourseProgressService(db)
        ids = lesson_ids(course)

        service.mark_lesson_completed(student.id, course.id, ids[0])
        progress = service.get_course_progress(student.id, course.id)

        assert progress["completed_lessons"] == [ids[0]]
        assert progress["total_lessons"] == 4
        assert progress["progress_percent"] == 25

    def test_marking_twice_keeps_one_row(self, db, student, published_course):
        service = CourseProgressService(db)
        lesson = lesson_ids(published_course)[0]

        service.mark_lesson_completed(student.id, published_course.id, lesson)
        service.mark_lesson_completed(student.id, published_course.id, lesson)

        assert service.get_course_progress(student.id, published_course.id)["completed_count"] == 1

    def test_incomplete_clears_completion(self, db, student, published_course):
        service = CourseProgressService(db)
        lesson = lesson_ids(published_course)[0]
        service.mark_lesson_completed(student.id, published_course.id, lesson)

        service.mark_lesson_incomplete(student.id, published_course.id, lesson)

        assert service.get_course_progress(student.id, published_course.id)["completed_lessons"] == []

    def test_lesson_from_other_course_rejected(self, db, student, make_course, teacher):
        first = make_course(teacher, title="First")
        second = make_course(teacher, title="Second")

        with pytest.raises(NotFoundException):
            CourseProgressService(db).mark_lesson_completed(student.id, first.id, lesson_ids(second)[0])

    def test_statistics_per_topic(self, db, student, make_course, teacher):
        course = make_course(teacher, topics=2, lessons_per_topic=1)
        service = CourseProgressService(db)
        service.mark_lesson_completed(student.id, course.id, lesson_ids(course)[0])

        stats = service.get_course_statistics(student.id, course.id)

        assert stats["overall_progress"] == 50
        assert [t["progress_percent"] for t in stats["topic_stats"]] == [100, 0]


class TestPositions:
    def test_default_progress_for_unopened_lesson(self, db, student, published_course):
        progress = CourseProgressService(db).get_lesson_progress(student.id, lesson_ids(published_course)[0])
        assert progress == {"completed": False, "completed_at": None, "last_position": 0}

    def test_position_is_stored_and_updated(self, db, student, published_course):
        service = CourseProgressService(db)
        lesson = lesson_ids(published_course)[0]

        service.update_position(student.id, lesson, 42)
        progress = service.update_position(student.id, lesson, 90.7)

        assert progress.last_position == 90
        assert progress.completed is False

    @pytest.mark.parametrize("position", [-1, "12", None, True])
    def test_invalid_position_rejected(self, db, student, published_course, position):
        with pytest.raises(ValidationException):
            CourseProgressService(db).update_position(student.id, lesson_ids(published_course)[0], position)

"""CourseService: authoring, content reconciliation, visibility and deletion."""

import pytest

from app.core.enums import CourseStatus, LessonType
from app.core.exceptions import ForbiddenException, NotFoundException, ValidationException
from app.models.course import Assignment, Course, Lesson, Question, Quiz, QuizAttempt, Topic
from app.models.enrollment import Enrollment
from app.schemas.course import CourseCreate, CourseUpdate
from app.services.course_service import CourseService
from app.services.enrollment_service import EnrollmentService


def _builder_payload() -> dict:
    return {
        "title": "Intro to SQL",
        "subject": "databases",
        "points_price": 150,
        "topics": [
            {
                "title": "Selecting",
                "lessons": [
                    {"title": "SELECT basics"},
                    {
                        "title": "Check yourself",
                        "type": LessonType.QUIZ.value,
                        "quiz": {
                            "questions": [
                                {"question_text": "Which keyword filters rows?", "options": ["WHERE", "FROM"], "correct_options": [0]},
                            ]
                        },
                    },
                ],
            },
            {"title": "Joining", "lessons": [{"title": "Inner joins"}]},
        ],
    }


class TestCreateCourse:
    def test_creates_draft_with_content_tree(self, db, teacher):
        course = CourseService(db).create_course(teacher, CourseCreate(**_builder_payload()))

        assert course.status == CourseStatus.DRAFT.value
        assert course.teacher_id == teacher.id
        assert [t.title for t in course.topics] == ["Selecting", "Joining"]
        assert [t.order_index for t in course.topics] == [0, 1]

        quiz_lesson = course.topics[0].lessons[1]
        assert quiz_lesson.type == LessonType.QUIZ.value
        assert quiz_lesson.quiz.title == "Check yourself"
        assert len(quiz_lesson.quiz.questions) == 1
        assert all(lesson.course_id == course.id for lesson in course.topics[0].lessons)

    def test_title_and_subject_required(self, db, teacher):
        with pytest.raises(ValidationException) as exc:
            CourseService(db).create_course(teacher, CourseCreate(title="No subject"))
        assert exc.value.message == "Title and subject are required"
        assert db.query(Course).count() == 0


class TestUpdateCourse:
    def test_reconciles_topics(self, db, teacher):
        service = CourseService(db)
        course = service.create_course(teacher, CourseCreate(**_builder_payload()))
        selecting, joining = course.topics
        kept_lesson = selecting.lessons[0]
        dropped_topic_id = joining.id

        updated = service.update_course(
            teacher,
            course.id,
            CourseUpdate(
                topics=[
                    {
                        "id": selecting.id,
                        "title": "Selecting rows",
                        "lessons": [{"id": kept_lesson.id, "title": "SELECT in depth"}],
                    },
                    {"title": "Grouping", "lessons": [{"title": "GROUP BY"}]},
                    {"id": "01HZZZZZZZZZZZZZZZZZZZZZZZ", "title": "Ghost topic"},
                ]
            ),
        )

        assert [t.title for t in updated.topics] == ["Selecting rows", "Grouping"]
        assert [lesson.title for lesson in updated.topics[0].lessons] == ["SELECT in depth"]
        assert updated.topics[0].lessons[0].id == kept_lesson.id
        assert db.query(Topic).filter_by(id=dropped_topic_id).count() == 0
        assert db.query(Lesson).filter_by(topic_id=dropped_topic_id).count() == 0
        # The quiz lesson was left out of the payload, so its quiz goes with it
        assert db.query(Quiz).count() == 0

    def _selecting_update(self, topic, lessons) -> CourseUpdate:
        return CourseUpdate(topics=[{"id": topic.id, "title": topic.title, "lessons": lessons}])

    def test_quiz_questions_are_replaced_in_place(self, db, teacher):
        service = CourseService(db)
        course = service.create_course(teacher, CourseCreate(**_builder_payload()))
        selecting = course.topics[0]
        quiz_lesson = selecting.lessons[1]
        quiz_id = quiz_lesson.quiz.id

        updated = service.update_course(
            teacher,
            course.id,
            self._selecting_update(
                selecting,
                [
                    {
                        "id": quiz_lesson.id,
                        "title": "Check yourself",
                        "type": LessonType.QUIZ.value,
                        "quiz": {
                            "title": "Checkpoint",
                            "questions": [
                                {"question_text": "Which clause sorts?", "options": ["ORDER BY", "GROUP BY"], "correct_options": [0]},
                                {"question_text": "Is SQL declarative?", "type": "true_false", "options": ["True", "False"], "correct_options": [0]},
                            ],
                        },
                    }
                ],
            ),
        )

        quiz = updated.topics[0].lessons[0].quiz
        assert quiz.id == quiz_id
        assert quiz.title == "Checkpoint"
        assert [q.question_text for q in quiz.questions] == ["Which clause sorts?", "Is SQL declarative?"]
        assert db.query(Question).count() == 2

    def test_leaving_quiz_type_drops_quiz_and_attempts(self, db, teacher, student):
        service = CourseService(db)
        course = service.create_course(teacher, CourseCreate(**_builder_payload()))
        selecting = course.topics[0]
        quiz_lesson = selecting.lessons[1]
        db.add(QuizAttempt(quiz_id=quiz_lesson.quiz.id, user_id=student.id, answers={"0": [0]}, score=100))
        db.commit()

        updated = service.update_course(
            teacher,
            course.id,
            self._selecting_update(selecting, [{"id": quiz_lesson.id, "title": "Now a reading"}]),
        )

        lesson = updated.topics[0].lessons[0]
        assert lesson.id == quiz_lesson.id
        assert lesson.type == LessonType.LESSON.value
        assert lesson.quiz is None
        assert db.query(Quiz).count() == 0
        assert db.query(Question).count() == 0
        assert db.query(QuizAttempt).count() == 0

    def test_assignment_created_then_updated_on_existing_lesson(self, db, teacher):
        service = CourseService(db)
        course = service.create_course(teacher, CourseCreate(**_builder_payload()))
        selecting = course.topics[0]
        lesson_id = selecting.lessons[0].id

        updated = service.update_course(
            teacher,
            course.id,
            self._selecting_update(
                selecting,
                [
                    {
                        "id": lesson_id,
                        "title": "SELECT basics",
                        "type": LessonType.ASSIGNMENT.value,
                        "assignment": {"title": "Write a query", "max_score": 50},
                    }
                ],
            ),
        )
        assignment = updated.topics[0].lessons[0].assignment
        assert assignment.title == "Write a query"
        assignment_id = assignment.id

        updated = service.update_course(
            teacher,
            course.id,
            self._selecting_update(
                selecting,
                [
                    {
                        "id": lesson_id,
                        "title": "SELECT basics",
                        "type": LessonType.ASSIGNMENT.value,
                        "assignment": {"description": "Filter with WHERE", "max_score": 20},
                    }
                ],
            ),
        )

        assignment = updated.topics[0].lessons[0].assignment
        assert assignment.id == assignment_id
        assert assignment.title == "Write a query"
        assert assignment.description == "Filter with WHERE"
        assert assignment.max_score == 20
        assert db.query(Assignment).count() == 1

    def test_partial_update_keeps_content(self, db, teacher, published_course):
        updated = CourseService(db).update_course(teacher, published_course.id, CourseUpdate(price=29.5))

        assert updated.price == 29.5
        assert len(updated.topics) == 1

    def test_non_owner_forbidden(self, db, make_user, published_course):
        stranger = make_user("teacher")
        with pytest.raises(ForbiddenException) as exc:
            CourseService(db).update_course(stranger, published_course.id, CourseUpdate(title="Mine now"))
        assert exc.value.message == "Not authorized to update this course"

    def test_admin_may_update(self, db, admin, published_course):
        updated = CourseService(db).update_course(admin, published_course.id, CourseUpdate(featured=True))
        assert updated.featured is True

    def test_invalid_status(self, db, teacher, published_course):
        with pytest.raises(ValidationException):
            CourseService(db).update_course(teacher, published_course.id, CourseUpdate(status="live"))


class TestVisibility:
    def test_draft_hidden_from_students(self, db, teacher, student, make_course):
        draft = make_course(teacher, status=CourseStatus.DRAFT.value)
        service = CourseService(db)

        with pytest.raises(ForbiddenException):
            service.get_course(draft.id, student)
        with pytest.raises(ForbiddenException):
            service.get_course(draft.id, None)
        assert service.get_course(draft.id, teacher)["course"].id == draft.id

    def test_get_course_counts(self, db, student, published_course):
        EnrollmentService(db).enroll(student, published_course.id)

        data = CourseService(db).get_course(published_course.id)

        assert data["enrollment_count"] == 1
        assert data["review_count"] == 0
        assert data["average_rating"] == 0

    def test_list_published_filters(self, db, teacher, make_course):
        make_course(teacher, title="Algebra", subject="math", featured=True)
        make_course(teacher, title="Poetry", subject="literature")
        make_course(teacher, title="Calculus draft", subject="math", status=CourseStatus.DRAFT.value)
        service = CourseService(db)

        titles = {course.title for course, _ in service.list_published(subject="math")}
        assert titles == {"Algebra"}
        assert [c.title for c, _ in service.list_published(search="poe")] == ["Poetry"]
        assert [c.title for c, _ in service.list_published(featured=True)] == ["Algebra"]

    def test_teacher_courses_for_public(self, db, teacher, make_course):
        make_course(teacher, title="Public")
        make_course(teacher, title="Private", status=CourseStatus.DRAFT.value)
        service = CourseService(db)

        assert [c.title for c, _ in service.get_teacher_courses(teacher.id)] == ["Public"]
        assert len(service.get_teacher_courses(teacher.id, teacher)) == 2


class TestDeleteCourse:
    def test_delete_removes_dependents(self, db, teacher, student, published_course):
        EnrollmentService(db).enroll(student, published_course.id)
        course_id = published_course.id

        CourseService(db).delete_course(teacher, course_id)

        assert db.query(Course).filter_by(id=course_id).count() == 0
        assert db.query(Enrollment).filter_by(course_id=course_id).count() == 0
        assert db.query(Lesson).filter_by(course_id=course_id).count() == 0

    def test_delete_by_student_forbidden(self, db, student, published_course):
        with pytest.raises(ForbiddenException):
            CourseService(db).delete_course(student, published_course.id)

    def test_delete_missing(self, db, teacher):
        with pytest.raises(NotFoundException):
            CourseService(db).delete_course(teacher, "01HZZZZZZZZZZZZZZZZZZZZZZZ")

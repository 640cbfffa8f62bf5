# backend/app/services/course_content_service.py
"""
Course Content Service for the EduMarket platform

Builds and reconciles the nested course content tree:

    Course -> Topic -> Lesson -> (Quiz -> Question | Assignment)

Reconciling walks a builder payload against the stored tree. Items that
carry the id of a stored row update it in place, items without an id are
created, and stored items missing from the payload are deleted together
with everything hanging off them. Ids that match nothing are skipped.

Tree rows are removed through the ORM relationship cascades. Learner
artefacts (quiz attempts, submissions, lesson progress, calendar events)
are not part of the tree and are purged with bulk deletes first.

This service never commits; callers own the transaction.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.enums import LessonType
from ..models.calendar_event import CalendarEvent
from ..models.course import Assignment, AssignmentSubmission, Course, Lesson, Question, Quiz, QuizAttempt, Topic
from ..models.enrollment import LessonProgress
from ..repositories.factory import RepositoryFactory
from ..schemas.course import AssignmentPayload, LessonPayload, QuizPayload, TopicPayload
from .base import BaseService

logger = logging.getLogger(__name__)


class CourseContentService(BaseService):
    """Creates, reconciles and deletes course content."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.quiz_repository = RepositoryFactory.create_quiz_repository(db)
        self.assignment_repository = RepositoryFactory.create_assignment_repository(db)
        self.quiz_attempt_repository = RepositoryFactory.create_quiz_attempt_repository(db)
        self.submission_repository = RepositoryFactory.create_assignment_submission_repository(db)
        self.progress_repository = RepositoryFactory.create_lesson_progress_repository(db)
        self.calendar_repository = RepositoryFactory.create_calendar_event_repository(db)

    # Building

    def build_topics(self, course: Course, topics: Sequence[TopicPayload]) -> None:
        """Attach freshly created topics to a course that already has an id."""
        for index, payload in enumerate(topics):
            course.topics.append(self._new_topic(course.id, payload, index))
        self.db.flush()

    def _new_topic(self, course_id: str, payload: TopicPayload, order_index: int) -> Topic:
        topic = Topic(title=payload.title, description=payload.description, order_index=order_index)
        for lesson_index, lesson_payload in enumerate(payload.lessons or []):
            topic.lessons.append(self._new_lesson(course_id, lesson_payload, lesson_index))
        return topic

    def _new_lesson(self, course_id: str, payload: LessonPayload, order_index: int) -> Lesson:
        lesson = Lesson(
            course_id=course_id,
            title=payload.title,
            description=payload.description,
            content=payload.content,
            video_url=payload.video_url,
            type=payload.type or LessonType.LESSON.value,
            duration=payload.duration or 0,
            order_index=order_index,
        )
        if lesson.type == LessonType.QUIZ.value and payload.quiz is not None:
            lesson.quiz = self._new_quiz(payload.quiz, default_title=payload.title)
        if lesson.type == LessonType.ASSIGNMENT.value and payload.assignment is not None:
            lesson.assignment = self._new_assignment(payload.assignment, default_title=payload.title)
        return lesson

    def _new_quiz(self, payload: QuizPayload, default_title: str) -> Quiz:
        quiz = Quiz(
            title=payload.title or default_title,
            description=payload.description,
            time_limit=payload.time_limit,
        )
        quiz.questions.extend(self._new_questions(payload))
        return quiz

    @staticmethod
    def _new_questions(payload: QuizPayload) -> List[Question]:
        return [
            Question(
                question_text=q.question_text,
                type=q.type,
                options=q.options,
                correct_options=list(q.correct_options),
                order_index=index,
            )
            for index, q in enumerate(payload.questions or [])
        ]

    @staticmethod
    def _new_assignment(payload: AssignmentPayload, default_title: str) -> Assignment:
        return Assignment(
            title=payload.title or default_title,
            description=payload.description,
            due_date=payload.due_date,
            max_score=payload.max_score,
            allow_file_upload=payload.allow_file_upload,
            allowed_file_types=list(payload.allowed_file_types),
            unit_tests=payload.unit_tests,
        )

    # Reconciling

    def reconcile_topics(self, course: Course, topics: Sequence[TopicPayload]) -> None:
        stored = {topic.id: topic for topic in course.topics}
        kept = set()

        for index, payload in enumerate(topics):
            if payload.id:
                topic = stored.get(payload.id)
                if topic is None:
                    self.logger.info(f"Skipping unknown topic {payload.id} on course {course.id}")
                    continue
                topic.title = payload.title
                topic.description = payload.description
                topic.order_index = index
                if payload.lessons is not None:
                    self.reconcile_lessons(course.id, topic, payload.lessons)
                kept.add(topic.id)
            else:
                course.topics.append(self._new_topic(course.id, payload, index))

        for topic_id, topic in stored.items():
            if topic_id not in kept:
                self.purge_lesson_artifacts(topic.lessons)
                course.topics.remove(topic)

        self.db.flush()

    def reconcile_lessons(self, course_id: str, topic: Topic, lessons: Sequence[LessonPayload]) -> None:
        stored = {lesson.id: lesson for lesson in topic.lessons}
        kept = set()

        for index, payload in enumerate(lessons):
            if payload.id:
                lesson = stored.get(payload.id)
                if lesson is None:
                    self.logger.info(f"Skipping unknown lesson {payload.id} in topic {topic.id}")
                    continue
                lesson.title = payload.title
                lesson.description = payload.description
                lesson.content = payload.content
                lesson.video_url = payload.video_url
                lesson.duration = payload.duration or 0
                lesson.type = payload.type or LessonType.LESSON.value
                lesson.order_index = index
                self.reconcile_lesson_content(lesson, payload)
                kept.add(lesson.id)
            else:
                topic.lessons.append(self._new_lesson(course_id, payload, index))

        for lesson_id, lesson in stored.items():
            if lesson_id not in kept:
                self.purge_lesson_artifacts([lesson])
                topic.lessons.remove(lesson)

    def reconcile_lesson_content(self, lesson: Lesson, payload: LessonPayload) -> None:
        if lesson.type == LessonType.QUIZ.value and payload.quiz is not None:
            if lesson.quiz is not None:
                quiz = lesson.quiz
                quiz.title = payload.quiz.title or quiz.title
                quiz.description = payload.quiz.description
                quiz.time_limit = payload.quiz.time_limit
                if payload.quiz.questions is not None:
                    quiz.questions.clear()
                    self.db.flush()
                    quiz.questions.extend(self._new_questions(payload.quiz))
            else:
                lesson.quiz = self._new_quiz(payload.quiz, default_title=lesson.title)
        elif lesson.quiz is not None:
            self.quiz_attempt_repository.delete_where(QuizAttempt.quiz_id == lesson.quiz.id)
            lesson.quiz = None

        if lesson.type == LessonType.ASSIGNMENT.value and payload.assignment is not None:
            if lesson.assignment is not None:
                assignment = lesson.assignment
                data = payload.assignment
                assignment.title = data.title or assignment.title
                assignment.description = data.description
                assignment.due_date = data.due_date
                assignment.max_score = data.max_score
                assignment.allow_file_upload = data.allow_file_upload
                assignment.allowed_file_types = list(data.allowed_file_types)
                assignment.unit_tests = data.unit_tests
            else:
                lesson.assignment = self._new_assignment(payload.assignment, default_title=lesson.title)
        elif lesson.assignment is not None:
            self.submission_repository.delete_where(AssignmentSubmission.assignment_id == lesson.assignment.id)
            lesson.assignment = None

        self.db.flush()

    # Deleting

    def purge_lesson_artifacts(self, lessons: Iterable[Lesson]) -> None:
        """
        Bulk delete learner rows attached to lessons that are about to go.

        Quiz attempts, submissions, lesson progress and calendar events
        pointing at the lessons are removed.
        """
        lesson_ids = [lesson.id for lesson in lessons]
        if not lesson_ids:
            return
        quiz_ids = self.quiz_repository.ids_for_lessons(lesson_ids)
        assignment_ids = self.assignment_repository.ids_for_lessons(lesson_ids)
        if quiz_ids:
            self.quiz_attempt_repository.delete_where(QuizAttempt.quiz_id.in_(quiz_ids))
        if assignment_ids:
            self.submission_repository.delete_where(AssignmentSubmission.assignment_id.in_(assignment_ids))
        self.progress_repository.delete_where(LessonProgress.lesson_id.in_(lesson_ids))
        self.calendar_repository.delete_where(CalendarEvent.lesson_id.in_(lesson_ids))

    def delete_content(self, course: Course) -> None:
        """Remove every topic of a loaded course, artefacts first."""
        for topic in list(course.topics):
            self.purge_lesson_artifacts(topic.lessons)
            course.topics.remove(topic)
        self.db.flush()

    def lesson_count(self, course: Course) -> int:
        return sum(len(topic.lessons) for topic in course.topics)

    def find_lesson(self, course: Course, lesson_id: str) -> Optional[Lesson]:
        for topic in course.topics:
            for lesson in topic.lessons:
                if lesson.id == lesson_id:
                    return lesson
        return None

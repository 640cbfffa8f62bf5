"""
Course Repository for the EduMarket platform.

Data access for courses and their content tree (topics, lessons, quizzes,
questions, assignments) plus the per-lesson learner artefacts that have to
be cleaned up when content is removed.
"""

from datetime import datetime
import logging
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, selectinload

from ..core.enums import CourseStatus
from ..core.exceptions import RepositoryException
from ..models.course import Assignment, AssignmentSubmission, Course, Lesson, Question, Quiz, QuizAttempt, Topic
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


def _content_tree_options():
    return (
        selectinload(Course.teacher),
        selectinload(Course.topics).selectinload(Topic.lessons).selectinload(Lesson.quiz).selectinload(Quiz.questions),
        selectinload(Course.topics).selectinload(Topic.lessons).selectinload(Lesson.assignment),
    )


class CourseRepository(BaseRepository[Course]):
    """Course queries. ``get_by_id`` eager loads the whole content tree."""

    def __init__(self, db: Session):
        super().__init__(db, Course)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(*_content_tree_options())

    def list_published(
        self,
        subject: Optional[str] = None,
        search: Optional[str] = None,
        featured: Optional[bool] = None,
    ) -> List[Course]:
        """Published courses, featured first then newest."""
        try:
            query = self.db.query(Course).filter(Course.status == CourseStatus.PUBLISHED.value)
            if subject:
                query = query.filter(Course.subject == subject)
            if search:
                pattern = f"%{search.lower()}%"
                query = query.filter(
                    or_(
                        func.lower(Course.title).like(pattern),
                        func.lower(func.coalesce(Course.description, "")).like(pattern),
                    )
                )
            if featured is not None:
                query = query.filter(Course.featured == featured)
            return (
                query.options(*_content_tree_options())
                .order_by(Course.featured.desc(), Course.created_at.desc())
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing published courses: {str(e)}")
            raise RepositoryException(f"Failed to list courses: {str(e)}")

    def list_by_teacher(self, teacher_id: str, published_only: bool = False) -> List[Course]:
        query = self.db.query(Course).filter(Course.teacher_id == teacher_id)
        if published_only:
            query = query.filter(Course.status == CourseStatus.PUBLISHED.value)
        return query.options(*_content_tree_options()).order_by(Course.created_at.desc()).all()

    def list_by_status(self, status: Optional[str] = None) -> List[Course]:
        query = self.db.query(Course).options(selectinload(Course.teacher))
        if status:
            query = query.filter(Course.status == status)
        return query.order_by(Course.created_at.desc()).all()

    def get_published_by_ids(self, course_ids: List[str]) -> List[Course]:
        if not course_ids:
            return []
        return (
            self.db.query(Course)
            .filter(Course.id.in_(course_ids), Course.status == CourseStatus.PUBLISHED.value)
            .all()
        )

    def ids_for_teacher(self, teacher_id: str) -> List[str]:
        return [row[0] for row in self.db.query(Course.id).filter(Course.teacher_id == teacher_id).all()]

    def count_by_status(self, teacher_id: Optional[str] = None) -> dict:
        query = self.db.query(Course.status, func.count(Course.id))
        if teacher_id:
            query = query.filter(Course.teacher_id == teacher_id)
        return {status: count for status, count in query.group_by(Course.status).all()}

    def count_created_since(self, since: datetime) -> int:
        return self.db.query(func.count(Course.id)).filter(Course.created_at >= since).scalar() or 0


class TopicRepository(BaseRepository[Topic]):
    def __init__(self, db: Session):
        super().__init__(db, Topic)

    def list_for_course(self, course_id: str) -> List[Topic]:
        return self.db.query(Topic).filter(Topic.course_id == course_id).order_by(Topic.order_index).all()


class LessonRepository(BaseRepository[Lesson]):
    def __init__(self, db: Session):
        super().__init__(db, Lesson)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(
            selectinload(Lesson.quiz).selectinload(Quiz.questions),
            selectinload(Lesson.assignment),
        )

    def get_in_course(self, lesson_id: str, course_id: str) -> Optional[Lesson]:
        return self.db.query(Lesson).filter(Lesson.id == lesson_id, Lesson.course_id == course_id).first()

    def ids_for_course(self, course_id: str) -> List[str]:
        return [row[0] for row in self.db.query(Lesson.id).filter(Lesson.course_id == course_id).all()]

    def list_for_course(self, course_id: str) -> List[Lesson]:
        return (
            self.db.query(Lesson)
            .join(Topic, Topic.id == Lesson.topic_id)
            .filter(Lesson.course_id == course_id)
            .order_by(Topic.order_index, Lesson.order_index)
            .all()
        )


class QuizRepository(BaseRepository[Quiz]):
    def __init__(self, db: Session):
        super().__init__(db, Quiz)

    def ids_for_lessons(self, lesson_ids: List[str]) -> List[str]:
        if not lesson_ids:
            return []
        return [row[0] for row in self.db.query(Quiz.id).filter(Quiz.lesson_id.in_(lesson_ids)).all()]


class QuestionRepository(BaseRepository[Question]):
    def __init__(self, db: Session):
        super().__init__(db, Question)


class AssignmentRepository(BaseRepository[Assignment]):
    def __init__(self, db: Session):
        super().__init__(db, Assignment)

    def ids_for_lessons(self, lesson_ids: List[str]) -> List[str]:
        if not lesson_ids:
            return []
        return [
            row[0] for row in self.db.query(Assignment.id).filter(Assignment.lesson_id.in_(lesson_ids)).all()
        ]


class QuizAttemptRepository(BaseRepository[QuizAttempt]):
    def __init__(self, db: Session):
        super().__init__(db, QuizAttempt)


class AssignmentSubmissionRepository(BaseRepository[AssignmentSubmission]):
    def __init__(self, db: Session):
        super().__init__(db, AssignmentSubmission)

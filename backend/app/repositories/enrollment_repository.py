"""Enrollment and lesson progress data access."""

from datetime import datetime
import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from ..core.enums import CourseStatus
from ..models.course import Course, Topic
from ..models.enrollment import Enrollment, LessonProgress
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class EnrollmentRepository(BaseRepository[Enrollment]):
    def __init__(self, db: Session):
        super().__init__(db, Enrollment)

    def get_for_user_course(self, user_id: str, course_id: str) -> Optional[Enrollment]:
        return (
            self.db.query(Enrollment)
            .filter(Enrollment.user_id == user_id, Enrollment.course_id == course_id)
            .first()
        )

    def enrolled_course_ids(self, user_id: str, course_ids: Optional[List[str]] = None) -> List[str]:
        query = self.db.query(Enrollment.course_id).filter(Enrollment.user_id == user_id)
        if course_ids is not None:
            query = query.filter(Enrollment.course_id.in_(course_ids))
        return [row[0] for row in query.all()]

    def list_for_user(self, user_id: str) -> List[Enrollment]:
        return (
            self.db.query(Enrollment)
            .options(
                selectinload(Enrollment.course).selectinload(Course.teacher),
                selectinload(Enrollment.course).selectinload(Course.topics).selectinload(Topic.lessons),
            )
            .filter(Enrollment.user_id == user_id)
            .order_by(Enrollment.enrolled_at.desc())
            .all()
        )

    def count_for_course(self, course_id: str) -> int:
        return self.db.query(func.count(Enrollment.id)).filter(Enrollment.course_id == course_id).scalar() or 0

    def count_by_course(self, course_ids: List[str]) -> Dict[str, int]:
        if not course_ids:
            return {}
        rows = (
            self.db.query(Enrollment.course_id, func.count(Enrollment.id))
            .filter(Enrollment.course_id.in_(course_ids))
            .group_by(Enrollment.course_id)
            .all()
        )
        return {course_id: count for course_id, count in rows}

    def distinct_students_for_courses(self, course_ids: List[str]) -> List[str]:
        if not course_ids:
            return []
        rows = self.db.query(Enrollment.user_id).filter(Enrollment.course_id.in_(course_ids)).distinct().all()
        return [row[0] for row in rows]

    def recent(self, limit: int, teacher_id: Optional[str] = None) -> List[Enrollment]:
        query = self.db.query(Enrollment).options(selectinload(Enrollment.user), selectinload(Enrollment.course))
        if teacher_id:
            query = query.join(Course, Course.id == Enrollment.course_id).filter(Course.teacher_id == teacher_id)
        return query.order_by(Enrollment.enrolled_at.desc()).limit(limit).all()

    def top_courses(self, limit: Optional[int], published_only: bool = False) -> List[Tuple[Course, int]]:
        """Courses with the most enrollments, highest first."""
        enrollment_count = func.count(Enrollment.id).label("enrollment_count")
        query = (
            self.db.query(Course, enrollment_count)
            .outerjoin(Enrollment, Enrollment.course_id == Course.id)
            .options(selectinload(Course.teacher))
        )
        if published_only:
            query = query.filter(Course.status == CourseStatus.PUBLISHED.value)
        return [
            (course, int(count))
            for course, count in query.group_by(Course.id).order_by(enrollment_count.desc()).limit(limit).all()
        ]

    def enrolled_since(self, since: datetime) -> List[datetime]:
        rows = (
            self.db.query(Enrollment.enrolled_at)
            .filter(Enrollment.enrolled_at >= since)
            .order_by(Enrollment.enrolled_at)
            .all()
        )
        return [row[0] for row in rows]

    def count_since(self, since: datetime) -> int:
        return self.db.query(func.count(Enrollment.id)).filter(Enrollment.enrolled_at >= since).scalar() or 0


class LessonProgressRepository(BaseRepository[LessonProgress]):
    def __init__(self, db: Session):
        super().__init__(db, LessonProgress)

    def get_for_user_lesson(self, user_id: str, lesson_id: str) -> Optional[LessonProgress]:
        return (
            self.db.query(LessonProgress)
            .filter(LessonProgress.user_id == user_id, LessonProgress.lesson_id == lesson_id)
            .first()
        )

    def completed_lesson_ids(self, user_id: str, lesson_ids: List[str]) -> List[str]:
        if not lesson_ids:
            return []
        rows = (
            self.db.query(LessonProgress.lesson_id)
            .filter(
                LessonProgress.user_id == user_id,
                LessonProgress.lesson_id.in_(lesson_ids),
                LessonProgress.completed.is_(True),
            )
            .all()
        )
        return [row[0] for row in rows]

    def upsert(self, user_id: str, lesson_id: str, **fields) -> LessonProgress:
        progress = self.get_for_user_lesson(user_id, lesson_id)
        if progress is None:
            return self.create(user_id=user_id, lesson_id=lesson_id, **fields)
        return self.update_entity(progress, **fields)

    def delete_for_user_lessons(self, user_id: str, lesson_ids: List[str]) -> int:
        if not lesson_ids:
            return 0
        return self.delete_where(LessonProgress.user_id == user_id, LessonProgress.lesson_id.in_(lesson_ids))

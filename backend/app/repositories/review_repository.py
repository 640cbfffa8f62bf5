"""Course and tutoring review data access."""

import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from ..models.course import Course
from ..models.review import CourseReview, TutoringReview
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class CourseReviewRepository(BaseRepository[CourseReview]):
    def __init__(self, db: Session):
        super().__init__(db, CourseReview)

    def list_for_course(self, course_id: str) -> List[CourseReview]:
        return (
            self.db.query(CourseReview)
            .options(selectinload(CourseReview.user))
            .filter(CourseReview.course_id == course_id)
            .order_by(CourseReview.created_at.desc())
            .all()
        )

    def find(self, user_id: str, course_id: str) -> Optional[CourseReview]:
        return (
            self.db.query(CourseReview)
            .filter(CourseReview.user_id == user_id, CourseReview.course_id == course_id)
            .first()
        )

    def summary_for_courses(self, course_ids: List[str]) -> Dict[str, Tuple[float, int]]:
        """Map course id to (average rating, review count)."""
        if not course_ids:
            return {}
        rows = (
            self.db.query(CourseReview.course_id, func.avg(CourseReview.rating), func.count(CourseReview.id))
            .filter(CourseReview.course_id.in_(course_ids))
            .group_by(CourseReview.course_id)
            .all()
        )
        return {course_id: (round(float(avg or 0), 2), int(count)) for course_id, avg, count in rows}

    def recent_for_teacher(self, teacher_id: str, limit: int) -> List[CourseReview]:
        return (
            self.db.query(CourseReview)
            .join(Course, Course.id == CourseReview.course_id)
            .options(selectinload(CourseReview.user))
            .filter(Course.teacher_id == teacher_id)
            .order_by(CourseReview.created_at.desc())
            .limit(limit)
            .all()
        )


class TutoringReviewRepository(BaseRepository[TutoringReview]):
    def __init__(self, db: Session):
        super().__init__(db, TutoringReview)

    def list_for_session(self, session_id: str) -> List[TutoringReview]:
        return (
            self.db.query(TutoringReview)
            .options(selectinload(TutoringReview.user))
            .filter(TutoringReview.session_id == session_id)
            .order_by(TutoringReview.created_at.desc())
            .all()
        )

    def find(self, user_id: str, session_id: str) -> Optional[TutoringReview]:
        return (
            self.db.query(TutoringReview)
            .filter(TutoringReview.user_id == user_id, TutoringReview.session_id == session_id)
            .first()
        )

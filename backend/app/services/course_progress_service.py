# backend/app/services/course_progress_service.py
"""
Course Progress Service for the EduMarket platform

Tracks lesson completion and video resume positions for learners.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException, ValidationException
from ..core.timezone_utils import utc_now
from ..models.course import Course
from ..models.enrollment import LessonProgress
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

DEFAULT_LESSON_PROGRESS = {"completed": False, "completed_at": None, "last_position": 0}


def percent(done: int, total: int) -> int:
    """Whole-number percentage, halves rounded up, 0 when there is nothing to do."""
    if total <= 0:
        return 0
    return int(done * 100 / total + 0.5)


class CourseProgressService(BaseService):
    """Service for per-lesson learner progress."""

    def __init__(self, db: Session, progress_repository=None):
        super().__init__(db)
        self.progress_repository = progress_repository or RepositoryFactory.create_lesson_progress_repository(db)
        self.course_repository = RepositoryFactory.create_course_repository(db)
        self.lesson_repository = RepositoryFactory.create_lesson_repository(db)

    def _get_course_or_404(self, course_id: str) -> Course:
        course = self.course_repository.get_by_id(course_id)
        if course is None:
            raise NotFoundException("Course not found")
        return course

    def _check_lesson_in_course(self, course_id: str, lesson_id: str) -> None:
        if self.lesson_repository.get_in_course(lesson_id, course_id) is None:
            raise NotFoundException("Lesson not found in this course")

    @BaseService.measure_operation("get_course_progress")
    def get_course_progress(self, user_id: str, course_id: str) -> Dict[str, Any]:
        course = self._get_course_or_404(course_id)
        lesson_ids = [lesson.id for topic in course.topics for lesson in topic.lessons]
        completed = self.progress_repository.completed_lesson_ids(user_id, lesson_ids)
        return {
            "completed_lessons": completed,
            "progress_percent": percent(len(completed), len(lesson_ids)),
            "total_lessons": len(lesson_ids),
            "completed_count": len(completed),
        }

    @BaseService.measure_operation("mark_lesson_completed")
    def mark_lesson_completed(self, user_id: str, course_id: str, lesson_id: str) -> LessonProgress:
        self._check_lesson_in_course(course_id, lesson_id)
        with self.transaction():
            progress = self.progress_repository.upsert(
                user_id, lesson_id, completed=True, completed_at=utc_now()
            )
        self.log_operation("mark_lesson_completed", user_id=user_id, lesson_id=lesson_id)
        return progress

    @BaseService.measure_operation("mark_lesson_incomplete")
    def mark_lesson_incomplete(self, user_id: str, course_id: str, lesson_id: str) -> None:
        """Clear completion; a lesson never started stays without a progress row."""
        self._check_lesson_in_course(course_id, lesson_id)
        progress = self.progress_repository.get_for_user_lesson(user_id, lesson_id)
        if progress is None:
            return
        with self.transaction():
            self.progress_repository.update_entity(progress, completed=False, completed_at=None)

    @BaseService.measure_operation("get_lesson_progress")
    def get_lesson_progress(self, user_id: str, lesson_id: str) -> Any:
        progress = self.progress_repository.get_for_user_lesson(user_id, lesson_id)
        return progress if progress is not None else dict(DEFAULT_LESSON_PROGRESS)

    @BaseService.measure_operation("update_lesson_position")
    def update_position(self, user_id: str, lesson_id: str, position: Optional[Any]) -> LessonProgress:
        """
        Store the resume position of a video lesson.

        Raises:
            ValidationException: If position is not a non-negative number
            NotFoundException: If the lesson does not exist
        """
        if isinstance(position, bool) or not isinstance(position, (int, float)) or position < 0:
            raise ValidationException("Invalid position value")
        if self.lesson_repository.get_by_id(lesson_id, load_relationships=False) is None:
            raise NotFoundException("Lesson not found")

        with self.transaction():
            progress = self.progress_repository.get_for_user_lesson(user_id, lesson_id)
            if progress is None:
                progress = self.progress_repository.create(
                    user_id=user_id, lesson_id=lesson_id, last_position=int(position), completed=False
                )
            else:
                self.progress_repository.update_entity(progress, last_position=int(position))
        return progress

    @BaseService.measure_operation("get_course_statistics")
    def get_course_statistics(self, user_id: str, course_id: str) -> Dict[str, Any]:
        """Completion per topic plus the overall figure."""
        course = self._get_course_or_404(course_id)
        lesson_ids = [lesson.id for topic in course.topics for lesson in topic.lessons]
        completed = set(self.progress_repository.completed_lesson_ids(user_id, lesson_ids))

        topic_stats = []
        for topic in course.topics:
            total = len(topic.lessons)
            done = sum(1 for lesson in topic.lessons if lesson.id in completed)
            topic_stats.append(
                {
                    "topic_id": topic.id,
                    "title": topic.title,
                    "total_lessons": total,
                    "completed_lessons": done,
                    "progress_percent": percent(done, total),
                }
            )

        return {
            "course_id": course.id,
            "course_title": course.title,
            "overall_progress": percent(len(completed), len(lesson_ids)),
            "total_lessons": len(lesson_ids),
            "completed_lessons": len(completed),
            "topic_stats": topic_stats,
        }

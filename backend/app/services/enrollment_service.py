# backend/app/services/enrollment_service.py
"""
Enrollment Service for the EduMarket platform

Handles joining and leaving courses, completion, and the learner's
"my learning" list.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.enums import EnrollmentStatus
from ..core.exceptions import NotFoundException, ValidationException
from ..core.timezone_utils import utc_now
from ..models.course import QuizAttempt
from ..models.enrollment import Enrollment
from ..models.user import User
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


class EnrollmentService(BaseService):
    """Service for course enrollment."""

    def __init__(self, db: Session, enrollment_repository=None):
        super().__init__(db)
        self.enrollment_repository = enrollment_repository or RepositoryFactory.create_enrollment_repository(db)
        self.course_repository = RepositoryFactory.create_course_repository(db)
        self.lesson_repository = RepositoryFactory.create_lesson_repository(db)
        self.quiz_repository = RepositoryFactory.create_quiz_repository(db)
        self.progress_repository = RepositoryFactory.create_lesson_progress_repository(db)
        self.quiz_attempt_repository = RepositoryFactory.create_quiz_attempt_repository(db)

    def _get_enrollment_or_404(self, user_id: str, course_id: str) -> Enrollment:
        enrollment = self.enrollment_repository.get_for_user_course(user_id, course_id)
        if enrollment is None:
            raise NotFoundException("Not enrolled in this course")
        return enrollment

    @BaseService.measure_operation("enroll")
    def enroll(self, user: User, course_id: str) -> Enrollment:
        """
        Enroll a user in a published course.

        Raises:
            NotFoundException: If the course does not exist
            ValidationException: If the course is unpublished, owned by the
                user, or the user is already enrolled
        """
        course = self.course_repository.get_by_id(course_id, load_relationships=False)
        if course is None:
            raise NotFoundException("Course not found")
        if not course.is_published:
            raise ValidationException("Course is not available for enrollment")
        if course.teacher_id == user.id:
            raise ValidationException("Teachers cannot enroll in their own courses")
        if self.enrollment_repository.get_for_user_course(user.id, course_id) is not None:
            raise ValidationException("Already enrolled in this course")

        with self.transaction():
            enrollment = self.enrollment_repository.create(
                user_id=user.id, course_id=course_id, status=EnrollmentStatus.ACTIVE.value
            )

        prometheus_metrics.inc_enrollment("direct")
        self.log_operation("enroll", user_id=user.id, course_id=course_id)
        return enrollment

    def enroll_many(self, user_id: str, course_ids: List[str], source: str) -> List[Enrollment]:
        """
        Enroll without the catalogue checks, skipping existing enrollments.

        Used after a purchase has been settled. The caller owns the
        transaction.
        """
        already = set(self.enrollment_repository.enrolled_course_ids(user_id, course_ids))
        created = []
        for course_id in course_ids:
            if course_id in already:
                continue
            created.append(
                self.enrollment_repository.create(
                    user_id=user_id, course_id=course_id, status=EnrollmentStatus.ACTIVE.value
                )
            )
            prometheus_metrics.inc_enrollment(source)
        return created

    @BaseService.measure_operation("unenroll")
    def unenroll(self, user_id: str, course_id: str) -> None:
        """Drop the enrollment together with the user's progress and quiz attempts in the course."""
        enrollment = self._get_enrollment_or_404(user_id, course_id)

        lesson_ids = self.lesson_repository.ids_for_course(course_id)
        quiz_ids = self.quiz_repository.ids_for_lessons(lesson_ids)

        with self.transaction():
            self.progress_repository.delete_for_user_lessons(user_id, lesson_ids)
            if quiz_ids:
                self.quiz_attempt_repository.delete_where(
                    QuizAttempt.user_id == user_id, QuizAttempt.quiz_id.in_(quiz_ids)
                )
            self.enrollment_repository.delete_entity(enrollment)

        self.log_operation("unenroll", user_id=user_id, course_id=course_id)

    @BaseService.measure_operation("enrollment_status")
    def get_status(self, user_id: str, course_id: str) -> Dict[str, Any]:
        enrollment = self.enrollment_repository.get_for_user_course(user_id, course_id)
        return {"is_enrolled": enrollment is not None, "enrollment": enrollment}

    @BaseService.measure_operation("complete_course")
    def mark_completed(self, user_id: str, course_id: str) -> Enrollment:
        enrollment = self._get_enrollment_or_404(user_id, course_id)
        if enrollment.completed:
            raise ValidationException("Course already completed")

        with self.transaction():
            self.enrollment_repository.update_entity(
                enrollment,
                completed=True,
                completed_at=utc_now(),
                status=EnrollmentStatus.COMPLETED.value,
            )

        self.log_operation("complete_course", user_id=user_id, course_id=course_id)
        return enrollment

    @BaseService.measure_operation("my_learning")
    def get_enrolled_courses(self, user_id: str) -> List[Enrollment]:
        """Enrollments newest first, each with its course, teacher and outline loaded."""
        return self.enrollment_repository.list_for_user(user_id)

    def is_enrolled(self, user_id: str, course_id: str) -> bool:
        return self.enrollment_repository.get_for_user_course(user_id, course_id) is not None

    def get_enrollment(self, user_id: str, course_id: str) -> Optional[Enrollment]:
        return self.enrollment_repository.get_for_user_course(user_id, course_id)

# backend/app/services/certificate_service.py
"""
Certificate Service for the EduMarket platform

Certificates are issued once per user and course (after the enrollment is
completed) or per user and tutoring session (after a completed
appointment). Issuing again returns the existing certificate.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.enums import CertificateType, NotificationType
from ..core.exceptions import NotFoundException, ValidationException
from ..models.certificate import Certificate
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .notification_service import NotificationService

logger = logging.getLogger(__name__)


class CertificateService(BaseService):
    """Service for issuing and reading certificates."""

    def __init__(
        self,
        db: Session,
        certificate_repository=None,
        notification_service: Optional[NotificationService] = None,
    ):
        super().__init__(db)
        self.certificate_repository = certificate_repository or RepositoryFactory.create_certificate_repository(db)
        self.course_repository = RepositoryFactory.create_course_repository(db)
        self.enrollment_repository = RepositoryFactory.create_enrollment_repository(db)
        self.session_repository = RepositoryFactory.create_tutoring_session_repository(db)
        self.appointment_repository = RepositoryFactory.create_tutoring_appointment_repository(db)
        self.notification_service = notification_service or NotificationService(db)

    @BaseService.measure_operation("list_user_certificates")
    def list_for_user(self, user_id: str) -> List[Certificate]:
        return self.certificate_repository.list_for_user(user_id)

    @BaseService.measure_operation("get_certificate")
    def get_certificate(self, certificate_id: str) -> Certificate:
        certificate = self.certificate_repository.get_by_id(certificate_id, load_relationships=False)
        if certificate is None:
            raise NotFoundException("Certificate not found")
        return certificate

    @BaseService.measure_operation("generate_certificate")
    def generate(
        self,
        user: User,
        course_id: Optional[str] = None,
        tutoring_id: Optional[str] = None,
        custom_message: Optional[str] = None,
        badge: Optional[str] = None,
    ) -> Certificate:
        """
        Issue a certificate for exactly one of a course or a tutoring session.

        Raises:
            ValidationException: Neither or both targets given, or the user
                has not completed the course or session
            NotFoundException: The course or session does not exist
        """
        if not course_id and not tutoring_id:
            raise ValidationException("Either course_id or tutoring_id must be provided")
        if course_id and tutoring_id:
            raise ValidationException("Cannot generate certificate for both course and tutoring at the same time")

        extra = {"custom_message": custom_message, "badge": badge}
        if course_id:
            return self._generate_for_course(user, course_id, extra)
        return self._generate_for_tutoring(user, tutoring_id, extra)

    def _generate_for_course(self, user: User, course_id: str, extra: Dict[str, Any]) -> Certificate:
        course = self.course_repository.get_by_id(course_id, load_relationships=False)
        if course is None:
            raise NotFoundException("Course not found")
        enrollment = self.enrollment_repository.get_for_user_course(user.id, course.id)
        if enrollment is None or not enrollment.completed:
            raise ValidationException("User has not completed this course")

        existing = self.certificate_repository.find_for_course(user.id, course.id)
        if existing is not None:
            return existing

        with self.transaction():
            certificate = self.certificate_repository.create(
                user_id=user.id,
                course_id=course.id,
                title=f"{course.title} - Course Completion Certificate",
                type=CertificateType.COURSE_COMPLETION.value,
                image_url=f"/certificates/course-{course.id}-{user.id}.png",
                certificate_metadata={
                    "course_name": course.title,
                    "teacher_id": course.teacher_id,
                    "teacher_name": course.teacher.name if course.teacher else None,
                    **extra,
                },
            )
            self.notification_service.notify(
                user.id,
                "New Certificate",
                f"You've earned a certificate for completing \"{course.title}\"",
                NotificationType.SUCCESS.value,
                f"/certificates/{certificate.id}",
            )

        self.log_operation("generate_course_certificate", user_id=user.id, course_id=course.id)
        return certificate

    def _generate_for_tutoring(self, user: User, session_id: str, extra: Dict[str, Any]) -> Certificate:
        session = self.session_repository.get_by_id(session_id, load_relationships=False)
        if session is None:
            raise NotFoundException("Tutoring session not found")
        if self.appointment_repository.find_completed(session.id, user.id) is None:
            raise ValidationException("User has not completed this tutoring session")

        existing = self.certificate_repository.find_for_tutoring(user.id, session.id)
        if existing is not None:
            return existing

        with self.transaction():
            certificate = self.certificate_repository.create(
                user_id=user.id,
                tutoring_session_id=session.id,
                title=f"{session.subject} - Tutoring Certificate",
                type=CertificateType.TUTORING_COMPLETION.value,
                image_url=f"/certificates/tutoring-{session.id}-{user.id}.png",
                certificate_metadata={
                    "tutoring_subject": session.subject,
                    "teacher_id": session.teacher_id,
                    "teacher_name": session.teacher.name if session.teacher else None,
                    **extra,
                },
            )
            self.notification_service.notify(
                user.id,
                "New Certificate",
                f"You've earned a certificate for completing tutoring in \"{session.subject}\"",
                NotificationType.SUCCESS.value,
                f"/certificates/{certificate.id}",
            )

        self.log_operation("generate_tutoring_certificate", user_id=user.id, session_id=session.id)
        return certificate

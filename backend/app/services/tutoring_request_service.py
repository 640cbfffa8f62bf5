# backend/app/services/tutoring_request_service.py
"""
Tutoring Request Service for the EduMarket platform

Students ask for tutoring on an approved session; the session's teacher
accepts (which books a confirmed appointment) or rejects. Each decision
notifies the other party.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.enums import AppointmentStatus, NotificationType, TutoringRequestStatus
from ..core.exceptions import ForbiddenException, NotFoundException, ValidationException
from ..models.tutoring import TutoringRequest
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..schemas.tutoring import TutoringRequestCreate, TutoringRequestStatusUpdate
from .base import BaseService
from .notification_service import TUTORING_REQUESTS_LINK, NotificationService

logger = logging.getLogger(__name__)

STUDENT_REQUESTS_LINK = "/student/tutoring/requests"


class TutoringRequestService(BaseService):
    """Service for the tutoring request lifecycle."""

    def __init__(self, db: Session, notification_service: Optional[NotificationService] = None):
        super().__init__(db)
        self.request_repository = RepositoryFactory.create_tutoring_request_repository(db)
        self.session_repository = RepositoryFactory.create_tutoring_session_repository(db)
        self.appointment_repository = RepositoryFactory.create_tutoring_appointment_repository(db)
        self.notification_service = notification_service or NotificationService(db)

    def get_request_or_404(self, request_id: str) -> TutoringRequest:
        request = self.request_repository.get_by_id(request_id)
        if request is None:
            raise NotFoundException("Request not found")
        return request

    @BaseService.measure_operation("create_tutoring_request")
    def create_request(self, student: User, session_id: str, data: TutoringRequestCreate) -> TutoringRequest:
        """
        Ask for tutoring on a session and notify its teacher.

        Raises:
            NotFoundException: If the session does not exist
            ValidationException: If it is unapproved, owned by the student,
                or the student already has a pending request for it
        """
        session = self.session_repository.get_by_id(session_id, load_relationships=False)
        if session is None:
            raise NotFoundException("Tutoring session not found")
        if not session.is_approved:
            raise ValidationException("Cannot request tutoring for unapproved sessions")
        if session.teacher_id == student.id:
            raise ValidationException("Teachers cannot request their own tutoring sessions")
        if self.request_repository.find_pending(session.id, student.id) is not None:
            raise ValidationException("You already have a pending request for this session")

        with self.transaction():
            request = self.request_repository.create(
                session_id=session.id,
                student_id=student.id,
                message=data.message,
                preferred_date=data.preferred_date,
                status=TutoringRequestStatus.PENDING.value,
            )
            self.notification_service.notify(
                session.teacher_id,
                "New tutoring request",
                f"{student.name} requested tutoring for {session.subject}",
                NotificationType.TUTORING_REQUEST.value,
                TUTORING_REQUESTS_LINK,
            )

        self.log_operation("create_tutoring_request", request_id=request.id, session_id=session.id)
        return request

    @BaseService.measure_operation("get_session_requests")
    def get_session_requests(self, user: User, session_id: str) -> List[TutoringRequest]:
        session = self.session_repository.get_by_id(session_id, load_relationships=False)
        if session is None:
            raise NotFoundException("Session not found")
        if session.teacher_id != user.id and not user.is_admin:
            raise ForbiddenException("Not authorized to view these requests")
        return self.request_repository.list_for_session(session.id)

    @BaseService.measure_operation("get_my_tutoring_requests")
    def get_my_requests(self, student_id: str) -> List[TutoringRequest]:
        return self.request_repository.list_for_student(student_id)

    @BaseService.measure_operation("update_tutoring_request_status")
    def update_status(self, user: User, request_id: str, data: TutoringRequestStatusUpdate) -> str:
        """
        Accept or reject a pending request.

        Accepting books a confirmed appointment priced at
        ``price_per_hour * duration / 60`` in the same transaction.

        Returns:
            The response message
        """
        if data.status not in (TutoringRequestStatus.ACCEPTED.value, TutoringRequestStatus.REJECTED.value):
            raise ValidationException("Invalid status. Must be accepted or rejected")

        request = self.get_request_or_404(request_id)
        session = request.session
        if session.teacher_id != user.id:
            raise ForbiddenException("Not authorized to update this request")
        if request.status != TutoringRequestStatus.PENDING.value:
            raise ValidationException("Can only update pending requests")

        accepted = data.status == TutoringRequestStatus.ACCEPTED.value
        if accepted and (not data.scheduled_at or not data.duration):
            raise ValidationException("Scheduled time and duration are required for acceptance")

        with self.transaction():
            self.request_repository.update_entity(request, status=data.status)
            if accepted:
                self.appointment_repository.create(
                    request_id=request.id,
                    session_id=session.id,
                    teacher_id=session.teacher_id,
                    student_id=request.student_id,
                    scheduled_at=data.scheduled_at,
                    duration=data.duration,
                    price=session.price_per_hour * data.duration / 60,
                    status=AppointmentStatus.CONFIRMED.value,
                )
            self.notification_service.notify(
                request.student_id,
                "Tutoring request accepted" if accepted else "Tutoring request rejected",
                f"Your request for {session.subject} was {data.status}",
                NotificationType.TUTORING_RESPONSE.value,
                STUDENT_REQUESTS_LINK,
            )

        self.log_operation("update_tutoring_request_status", request_id=request_id, status=data.status)
        return "Request accepted and appointment created" if accepted else "Request rejected"

    @BaseService.measure_operation("cancel_tutoring_request")
    def cancel(self, user: User, request_id: str) -> None:
        request = self.get_request_or_404(request_id)
        if request.student_id != user.id:
            raise ForbiddenException("Not authorized to cancel this request")
        if request.status != TutoringRequestStatus.PENDING.value:
            raise ValidationException("Can only cancel pending requests")

        with self.transaction():
            self.request_repository.delete_entity(request)

        self.log_operation("cancel_tutoring_request", request_id=request_id)

# backend/app/services/tutoring_service.py
"""
Tutoring Service for the EduMarket platform

Tutoring session offers: browsing, authoring and deletion. Sessions are
created pending and become visible in the marketplace once an admin
approves them.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.enums import LocationType, TutoringStatus
from ..core.exceptions import ForbiddenException, NotFoundException, ValidationException
from ..models.certificate import Certificate
from ..models.review import TutoringReview
from ..models.tutoring import TutoringAppointment, TutoringAvailability, TutoringMessage, TutoringRequest, TutoringSession
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..schemas.tutoring import TutoringSessionCreate, TutoringSessionUpdate
from ..schemas.user import AvailabilitySlot
from .base import BaseService

logger = logging.getLogger(__name__)


class TutoringService(BaseService):
    """Service for tutoring session offers."""

    def __init__(self, db: Session, session_repository=None):
        super().__init__(db)
        self.session_repository = session_repository or RepositoryFactory.create_tutoring_session_repository(db)
        self.request_repository = RepositoryFactory.create_tutoring_request_repository(db)
        self.appointment_repository = RepositoryFactory.create_tutoring_appointment_repository(db)
        self.message_repository = RepositoryFactory.create_tutoring_message_repository(db)
        self.review_repository = RepositoryFactory.create_tutoring_review_repository(db)
        self.certificate_repository = RepositoryFactory.create_certificate_repository(db)

    def get_session_or_404(self, session_id: str) -> TutoringSession:
        session = self.session_repository.get_by_id(session_id)
        if session is None:
            raise NotFoundException("Tutoring session not found")
        return session

    @staticmethod
    def _check_owner(session: TutoringSession, user: User, action: str) -> None:
        if session.teacher_id != user.id and not user.is_admin:
            raise ForbiddenException(f"Not authorized to {action} this tutoring session")

    @staticmethod
    def _availability(slots: Sequence[AvailabilitySlot]) -> List[TutoringAvailability]:
        return [
            TutoringAvailability(day_of_week=slot.day_of_week, start_time=slot.start_time, end_time=slot.end_time)
            for slot in slots
        ]

    # Browsing

    @BaseService.measure_operation("list_tutoring_sessions")
    def list_approved(
        self,
        subject: Optional[str] = None,
        location_type: Optional[str] = None,
        featured: Optional[bool] = None,
    ) -> List[TutoringSession]:
        return self.session_repository.list_approved(subject=subject, location_type=location_type, featured=featured)

    @BaseService.measure_operation("get_tutoring_session")
    def get_session(self, session_id: str, viewer: Optional[User] = None) -> Dict[str, Any]:
        """Session with its reviews; unapproved ones are visible to the owner and admins only."""
        session = self.get_session_or_404(session_id)
        if not session.is_approved:
            if viewer is None or (viewer.id != session.teacher_id and not viewer.is_admin):
                raise ForbiddenException("Tutoring session not available")
        return {"session": session, "reviews": self.review_repository.list_for_session(session.id)}

    @BaseService.measure_operation("get_teacher_tutoring_sessions")
    def get_teacher_sessions(self, teacher_id: str) -> List[TutoringSession]:
        return self.session_repository.list_approved(teacher_id=teacher_id)

    @BaseService.measure_operation("get_my_tutoring_sessions")
    def get_my_sessions(self, teacher_id: str) -> List[Dict[str, Any]]:
        """All of the teacher's sessions, each with the requests received for it."""
        sessions = self.session_repository.list_by_teacher(teacher_id)
        requests = self.request_repository.list_for_sessions([s.id for s in sessions])
        by_session: Dict[str, List[TutoringRequest]] = {}
        for request in requests:
            by_session.setdefault(request.session_id, []).append(request)
        return [{"session": session, "requests": by_session.get(session.id, [])} for session in sessions]

    # Authoring

    @BaseService.measure_operation("create_tutoring_session")
    def create_session(self, teacher: User, data: TutoringSessionCreate) -> TutoringSession:
        if not data.subject or not data.price_per_hour or not data.location_type:
            raise ValidationException("Subject, price per hour, and location type are required")
        if data.location_type not in {t.value for t in LocationType}:
            raise ValidationException("Invalid location type")

        with self.transaction():
            session = TutoringSession(
                teacher_id=teacher.id,
                subject=data.subject,
                description=data.description,
                price_per_hour=data.price_per_hour,
                location_type=data.location_type,
                location=data.location,
                max_students=data.max_students or 1,
                prerequisites=list(data.prerequisites or []),
                level=data.level,
                tags=list(data.tags or []),
                featured=False,
                status=TutoringStatus.PENDING.value,
            )
            session.availability = self._availability(data.availability or [])
            self.db.add(session)
            self.db.flush()

        self.log_operation("create_tutoring_session", session_id=session.id, teacher_id=teacher.id)
        return session

    @BaseService.measure_operation("update_tutoring_session")
    def update_session(self, user: User, session_id: str, data: TutoringSessionUpdate) -> TutoringSession:
        """Partial update; a given ``availability`` list replaces the stored slots."""
        session = self.get_session_or_404(session_id)
        self._check_owner(session, user, "update")

        fields = data.model_dump(exclude_unset=True, exclude={"availability"})
        fields = {k: v for k, v in fields.items() if v is not None}
        if "location_type" in fields and fields["location_type"] not in {t.value for t in LocationType}:
            raise ValidationException("Invalid location type")
        if "status" in fields:
            if fields["status"] not in {s.value for s in TutoringStatus}:
                raise ValidationException("Invalid tutoring status")
            if not user.is_admin:
                fields.pop("status")
        if "featured" in fields and not user.is_admin:
            fields.pop("featured")

        with self.transaction():
            self.session_repository.update_entity(session, **fields)
            if data.availability is not None:
                session.availability = self._availability(data.availability)
                self.db.flush()

        self.log_operation("update_tutoring_session", session_id=session_id, fields=sorted(fields))
        return session

    @BaseService.measure_operation("delete_tutoring_session")
    def delete_session(self, user: User, session_id: str) -> None:
        """
        Delete a session that has no confirmed or completed appointments.

        Messages, appointments, requests, reviews and certificates that point
        at the session go first; availability follows the session.
        """
        session = self.get_session_or_404(session_id)
        self._check_owner(session, user, "delete")
        if self.appointment_repository.count_blocking_for_session(session.id):
            raise ValidationException("Cannot delete a tutoring session with confirmed or completed appointments")

        request_ids = [r.id for r in self.request_repository.find_by(session_id=session.id)]
        with self.transaction():
            if request_ids:
                self.message_repository.delete_where(TutoringMessage.request_id.in_(request_ids))
            self.appointment_repository.delete_where(TutoringAppointment.session_id == session.id)
            self.request_repository.delete_where(TutoringRequest.session_id == session.id)
            self.review_repository.delete_where(TutoringReview.session_id == session.id)
            self.certificate_repository.delete_where(Certificate.tutoring_session_id == session.id)
            self.session_repository.delete_entity(session)

        self.log_operation("delete_tutoring_session", session_id=session_id, deleted_by=user.id)

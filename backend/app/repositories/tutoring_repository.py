"""
Tutoring Repository for the EduMarket platform.

Data access for tutoring sessions, their weekly availability, student
requests, appointments and request message threads.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Query, Session, selectinload

from ..core.enums import AppointmentStatus, TutoringRequestStatus, TutoringStatus
from ..models.tutoring import (
    TutoringAppointment,
    TutoringAvailability,
    TutoringMessage,
    TutoringRequest,
    TutoringSession,
)
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class TutoringSessionRepository(BaseRepository[TutoringSession]):
    def __init__(self, db: Session):
        super().__init__(db, TutoringSession)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(selectinload(TutoringSession.teacher), selectinload(TutoringSession.availability))

    def list_approved(
        self,
        subject: Optional[str] = None,
        location_type: Optional[str] = None,
        featured: Optional[bool] = None,
        teacher_id: Optional[str] = None,
    ) -> List[TutoringSession]:
        query = self._apply_eager_loading(
            self.db.query(TutoringSession).filter(TutoringSession.status == TutoringStatus.APPROVED.value)
        )
        if subject:
            query = query.filter(TutoringSession.subject == subject)
        if location_type:
            query = query.filter(TutoringSession.location_type == location_type)
        if featured is not None:
            query = query.filter(TutoringSession.featured == featured)
        if teacher_id:
            query = query.filter(TutoringSession.teacher_id == teacher_id)
        return query.order_by(TutoringSession.featured.desc(), TutoringSession.created_at.desc()).all()

    def list_by_teacher(self, teacher_id: str) -> List[TutoringSession]:
        return (
            self._apply_eager_loading(self.db.query(TutoringSession))
            .filter(TutoringSession.teacher_id == teacher_id)
            .order_by(TutoringSession.created_at.desc())
            .all()
        )

    def list_by_status(self, status: Optional[str] = None) -> List[TutoringSession]:
        query = self._apply_eager_loading(self.db.query(TutoringSession))
        if status:
            query = query.filter(TutoringSession.status == status)
        return query.order_by(TutoringSession.created_at.desc()).all()

    def count_by_status(self, teacher_id: Optional[str] = None) -> Dict[str, int]:
        query = self.db.query(TutoringSession.status, func.count(TutoringSession.id))
        if teacher_id:
            query = query.filter(TutoringSession.teacher_id == teacher_id)
        return {status: count for status, count in query.group_by(TutoringSession.status).all()}


class TutoringAvailabilityRepository(BaseRepository[TutoringAvailability]):
    def __init__(self, db: Session):
        super().__init__(db, TutoringAvailability)

    def replace_for_session(self, session_id: str, slots: List[Dict]) -> None:
        self.delete_where(TutoringAvailability.session_id == session_id)
        self.bulk_create([{"session_id": session_id, **slot} for slot in slots])


class TutoringRequestRepository(BaseRepository[TutoringRequest]):
    def __init__(self, db: Session):
        super().__init__(db, TutoringRequest)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(
            selectinload(TutoringRequest.session).selectinload(TutoringSession.teacher),
            selectinload(TutoringRequest.student),
            selectinload(TutoringRequest.appointment),
        )

    def find_pending(self, session_id: str, student_id: str) -> Optional[TutoringRequest]:
        return (
            self.db.query(TutoringRequest)
            .filter(
                TutoringRequest.session_id == session_id,
                TutoringRequest.student_id == student_id,
                TutoringRequest.status == TutoringRequestStatus.PENDING.value,
            )
            .first()
        )

    def list_for_session(self, session_id: str) -> List[TutoringRequest]:
        return (
            self._apply_eager_loading(self.db.query(TutoringRequest))
            .filter(TutoringRequest.session_id == session_id)
            .order_by(TutoringRequest.created_at.desc())
            .all()
        )

    def list_for_sessions(self, session_ids: List[str]) -> List[TutoringRequest]:
        if not session_ids:
            return []
        return (
            self._apply_eager_loading(self.db.query(TutoringRequest))
            .filter(TutoringRequest.session_id.in_(session_ids))
            .order_by(TutoringRequest.created_at.desc())
            .all()
        )

    def list_for_student(self, student_id: str) -> List[TutoringRequest]:
        return (
            self._apply_eager_loading(self.db.query(TutoringRequest))
            .filter(TutoringRequest.student_id == student_id)
            .order_by(TutoringRequest.created_at.desc())
            .all()
        )

    def list_for_participant(self, user_id: str) -> List[TutoringRequest]:
        """Requests where the user is either the student or the session's teacher."""
        return (
            self._apply_eager_loading(self.db.query(TutoringRequest))
            .join(TutoringSession, TutoringSession.id == TutoringRequest.session_id)
            .filter(or_(TutoringRequest.student_id == user_id, TutoringSession.teacher_id == user_id))
            .order_by(TutoringRequest.updated_at.desc())
            .all()
        )

    def recent_for_teacher(self, teacher_id: str, limit: int) -> List[TutoringRequest]:
        return (
            self._apply_eager_loading(self.db.query(TutoringRequest))
            .join(TutoringSession, TutoringSession.id == TutoringRequest.session_id)
            .filter(TutoringSession.teacher_id == teacher_id)
            .order_by(TutoringRequest.created_at.desc())
            .limit(limit)
            .all()
        )

    def count_for_teacher(self, teacher_id: str, status: str) -> int:
        return (
            self.db.query(func.count(TutoringRequest.id))
            .join(TutoringSession, TutoringSession.id == TutoringRequest.session_id)
            .filter(TutoringSession.teacher_id == teacher_id, TutoringRequest.status == status)
            .scalar()
            or 0
        )

    def accepted_student_ids_for_teacher(self, teacher_id: str) -> List[str]:
        rows = (
            self.db.query(TutoringRequest.student_id)
            .join(TutoringSession, TutoringSession.id == TutoringRequest.session_id)
            .filter(
                TutoringSession.teacher_id == teacher_id,
                TutoringRequest.status == TutoringRequestStatus.ACCEPTED.value,
            )
            .distinct()
            .all()
        )
        return [row[0] for row in rows]

    def has_accepted(self, session_id: str, student_id: str) -> bool:
        return (
            self.db.query(TutoringRequest.id)
            .filter(
                TutoringRequest.session_id == session_id,
                TutoringRequest.student_id == student_id,
                TutoringRequest.status == TutoringRequestStatus.ACCEPTED.value,
            )
            .first()
            is not None
        )


class TutoringAppointmentRepository(BaseRepository[TutoringAppointment]):
    def __init__(self, db: Session):
        super().__init__(db, TutoringAppointment)

    def count_blocking_for_session(self, session_id: str) -> int:
        """Appointments that prevent a session from being deleted."""
        return (
            self.db.query(func.count(TutoringAppointment.id))
            .filter(
                TutoringAppointment.session_id == session_id,
                TutoringAppointment.status.in_(
                    [AppointmentStatus.CONFIRMED.value, AppointmentStatus.COMPLETED.value]
                ),
            )
            .scalar()
            or 0
        )

    def find_completed(self, session_id: str, student_id: str) -> Optional[TutoringAppointment]:
        return (
            self.db.query(TutoringAppointment)
            .filter(
                TutoringAppointment.session_id == session_id,
                TutoringAppointment.student_id == student_id,
                TutoringAppointment.status == AppointmentStatus.COMPLETED.value,
            )
            .first()
        )


class TutoringMessageRepository(BaseRepository[TutoringMessage]):
    def __init__(self, db: Session):
        super().__init__(db, TutoringMessage)

    def list_for_request(self, request_id: str) -> List[TutoringMessage]:
        return (
            self.db.query(TutoringMessage)
            .options(selectinload(TutoringMessage.sender))
            .filter(TutoringMessage.request_id == request_id)
            .order_by(TutoringMessage.created_at.asc())
            .all()
        )

    def latest_for_request(self, request_id: str) -> Optional[TutoringMessage]:
        return (
            self.db.query(TutoringMessage)
            .filter(TutoringMessage.request_id == request_id)
            .order_by(TutoringMessage.created_at.desc())
            .first()
        )

    def mark_read_from_others(self, request_id: str, reader_id: str) -> int:
        """Mark every unread message in the thread not sent by ``reader_id`` as read."""
        return (
            self.db.query(TutoringMessage)
            .filter(
                TutoringMessage.request_id == request_id,
                TutoringMessage.sender_id != reader_id,
                TutoringMessage.read.is_(False),
            )
            .update({TutoringMessage.read: True}, synchronize_session=False)
        )

    def count_unread_from_others(self, request_ids: List[str], reader_id: str) -> int:
        if not request_ids:
            return 0
        return (
            self.db.query(func.count(TutoringMessage.id))
            .filter(
                TutoringMessage.request_id.in_(request_ids),
                TutoringMessage.sender_id != reader_id,
                TutoringMessage.read.is_(False),
            )
            .scalar()
            or 0
        )

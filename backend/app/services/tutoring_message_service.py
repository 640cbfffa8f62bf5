# backend/app/services/tutoring_message_service.py
"""
Tutoring Message Service for the EduMarket platform

Each tutoring request carries a two-party thread between the student and
the session's teacher.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.enums import RoleName
from ..core.exceptions import ForbiddenException, NotFoundException, ValidationException
from ..models.tutoring import TutoringMessage, TutoringRequest
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


class TutoringMessageService(BaseService):
    """Service for tutoring request threads."""

    def __init__(self, db: Session, message_repository=None):
        super().__init__(db)
        self.message_repository = message_repository or RepositoryFactory.create_tutoring_message_repository(db)
        self.request_repository = RepositoryFactory.create_tutoring_request_repository(db)

    def _get_participant_request(self, user: User, request_id: str, action: str) -> TutoringRequest:
        request = self.request_repository.get_by_id(request_id)
        if request is None:
            raise NotFoundException("Request not found")
        if user.id not in (request.student_id, request.session.teacher_id):
            raise ForbiddenException(f"Not authorized to {action}")
        return request

    @BaseService.measure_operation("send_tutoring_message")
    def send_message(self, user: User, request_id: str, content: Optional[str]) -> TutoringMessage:
        if not content or not content.strip():
            raise ValidationException("Message content is required")
        request = self._get_participant_request(user, request_id, "send messages in this request")

        with self.transaction():
            message = self.message_repository.create(
                request_id=request.id, sender_id=user.id, content=content.strip(), read=False
            )
            # Keeps the thread at the top of both parties' conversation lists
            self.request_repository.update_entity(request, updated_at=message.created_at)

        self.log_operation("send_tutoring_message", request_id=request_id, sender_id=user.id)
        return message

    @BaseService.measure_operation("get_tutoring_messages")
    def get_messages(self, user: User, request_id: str) -> List[TutoringMessage]:
        """The whole thread, oldest first; the other party's messages become read."""
        request = self._get_participant_request(user, request_id, "view messages in this request")
        messages = self.message_repository.list_for_request(request.id)
        with self.transaction():
            self.message_repository.mark_read_from_others(request.id, user.id)
        return messages

    def _requests_for(self, user: User) -> List[TutoringRequest]:
        if user.role == RoleName.STUDENT.value:
            return self.request_repository.list_for_student(user.id)
        if user.role == RoleName.TEACHER.value:
            return [
                r for r in self.request_repository.list_for_participant(user.id) if r.session.teacher_id == user.id
            ]
        return []

    @BaseService.measure_operation("unread_tutoring_message_count")
    def unread_count(self, user: User) -> Dict[str, int]:
        """Unread messages across the user's threads: as a student, or as a teacher; admins have none."""
        request_ids = [r.id for r in self._requests_for(user)]
        return {"unread_count": self.message_repository.count_unread_from_others(request_ids, user.id)}

    @BaseService.measure_operation("get_tutoring_conversations")
    def get_conversations(self, user: User) -> List[Dict[str, Any]]:
        requests = sorted(self._requests_for(user), key=lambda r: r.updated_at, reverse=True)
        conversations = []
        for request in requests:
            other_party = request.session.teacher if user.id == request.student_id else request.student
            conversations.append(
                {
                    "request_id": request.id,
                    "session_id": request.session_id,
                    "status": request.status,
                    "subject": request.session.subject,
                    "other_party": other_party,
                    "last_message": self.message_repository.latest_for_request(request.id),
                    "unread_count": self.message_repository.count_unread_from_others([request.id], user.id),
                }
            )
        return conversations

    @BaseService.measure_operation("mark_tutoring_messages_read")
    def mark_read(self, user: User, request_id: str) -> None:
        request = self._get_participant_request(user, request_id, "mark messages as read")
        with self.transaction():
            self.message_repository.mark_read_from_others(request.id, user.id)

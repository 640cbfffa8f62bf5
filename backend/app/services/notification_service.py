# backend/app/services/notification_service.py
"""
Notification Service for the EduMarket platform

In-app notifications. Other services call ``notify`` inside their own
transaction so a notification is stored only if the action behind it is.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.constants import NOTIFICATIONS_PAGE_SIZE
from ..core.enums import NotificationType
from ..core.exceptions import NotFoundException, ValidationException
from ..models.notification import Notification
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


TUTORING_REQUESTS_LINK = "/teacher/tutoring/requests"


class NotificationService(BaseService):
    """Service for creating and reading in-app notifications."""

    def __init__(self, db: Session, notification_repository=None):
        super().__init__(db)
        self.notification_repository = notification_repository or RepositoryFactory.create_notification_repository(
            db
        )

    def notify(
        self,
        user_id: str,
        title: str,
        message: str,
        type_: str = NotificationType.INFO.value,
        link: Optional[str] = None,
    ) -> Notification:
        """Queue a notification in the current transaction; the caller commits."""
        return self.notification_repository.create(
            user_id=user_id, title=title, message=message, type=type_, link=link
        )

    @BaseService.measure_operation("list_notifications")
    def list_for_user(self, user_id: str) -> List[Notification]:
        return self.notification_repository.list_for_user(user_id, limit=NOTIFICATIONS_PAGE_SIZE)

    @BaseService.measure_operation("mark_notification_read")
    def mark_read(self, user_id: str, notification_id: str) -> None:
        notification = self.notification_repository.get_for_user(notification_id, user_id)
        if notification is None:
            raise NotFoundException("Notification not found")
        with self.transaction():
            self.notification_repository.update_entity(notification, read=True)

    @BaseService.measure_operation("mark_all_notifications_read")
    def mark_all_read(self, user_id: str) -> int:
        with self.transaction():
            updated = self.notification_repository.mark_all_read(user_id)
        self.log_operation("mark_all_notifications_read", user_id=user_id, updated=updated)
        return updated

    @BaseService.measure_operation("unread_notification_count")
    def unread_count(self, user_id: str) -> Dict[str, int]:
        return {"count": self.notification_repository.unread_count(user_id)}

    @BaseService.measure_operation("send_tutoring_request_notification")
    def send_tutoring_request(self, teacher_id: Optional[str], message: Optional[str]) -> Notification:
        if not teacher_id or not message:
            raise ValidationException("Teacher ID and message are required")
        with self.transaction():
            notification = self.notify(
                teacher_id,
                "New tutoring request",
                message,
                NotificationType.TUTORING_REQUEST.value,
                TUTORING_REQUESTS_LINK,
            )
        return notification

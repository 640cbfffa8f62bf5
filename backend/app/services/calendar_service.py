# backend/app/services/calendar_service.py
"""
Calendar Service for the EduMarket platform

Personal calendar events. Users only ever see and change their own.
"""

from datetime import datetime
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import ForbiddenException, NotFoundException, ValidationException
from ..models.calendar_event import CalendarEvent
from ..repositories.factory import RepositoryFactory
from ..schemas.calendar import CalendarEventCreate, CalendarEventUpdate
from .base import BaseService

logger = logging.getLogger(__name__)


class CalendarService(BaseService):
    def __init__(self, db: Session, event_repository=None):
        super().__init__(db)
        self.event_repository = event_repository or RepositoryFactory.create_calendar_event_repository(db)

    @BaseService.measure_operation("list_calendar_events")
    def list_events(
        self,
        user_id: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[CalendarEvent]:
        return self.event_repository.list_for_user(user_id, start_date=start_date, end_date=end_date)

    @BaseService.measure_operation("create_calendar_event")
    def create_event(self, user_id: str, data: CalendarEventCreate) -> CalendarEvent:
        if not data.title or not data.type or not data.start_time:
            raise ValidationException("Title, type, and start_time are required fields")

        with self.transaction():
            event = self.event_repository.create(user_id=user_id, **data.model_dump())

        self.log_operation("create_calendar_event", event_id=event.id, user_id=user_id)
        return event

    def _get_own_event(self, user_id: str, event_id: str, action: str) -> CalendarEvent:
        event = self.event_repository.get_by_id(event_id, load_relationships=False)
        if event is None:
            raise NotFoundException("Calendar event not found")
        if event.user_id != user_id:
            raise ForbiddenException(f"Cannot {action} an event that does not belong to you")
        return event

    @BaseService.measure_operation("update_calendar_event")
    def update_event(self, user_id: str, event_id: str, data: CalendarEventUpdate) -> CalendarEvent:
        event = self._get_own_event(user_id, event_id, "update")
        fields = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        with self.transaction():
            self.event_repository.update_entity(event, **fields)
        return event

    @BaseService.measure_operation("delete_calendar_event")
    def delete_event(self, user_id: str, event_id: str) -> None:
        event = self._get_own_event(user_id, event_id, "delete")
        with self.transaction():
            self.event_repository.delete_entity(event)
        self.log_operation("delete_calendar_event", event_id=event_id, user_id=user_id)

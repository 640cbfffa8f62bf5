"""Calendar event data access."""

from datetime import datetime
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.calendar_event import CalendarEvent
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class CalendarEventRepository(BaseRepository[CalendarEvent]):
    def __init__(self, db: Session):
        super().__init__(db, CalendarEvent)

    def list_for_user(
        self,
        user_id: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[CalendarEvent]:
        query = self.db.query(CalendarEvent).filter(CalendarEvent.user_id == user_id)
        if start_date:
            query = query.filter(CalendarEvent.start_time >= start_date)
        if end_date:
            query = query.filter(CalendarEvent.start_time <= end_date)
        return query.order_by(CalendarEvent.start_time.asc()).all()

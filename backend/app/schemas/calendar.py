"""Pydantic schemas for personal calendar events."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from .base import ORMModel


class CalendarEventCreate(BaseModel):
    # title, type and start_time are checked by CalendarService
    title: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    course_id: Optional[str] = None
    lesson_id: Optional[str] = None
    teacher_id: Optional[str] = None
    student_id: Optional[str] = None
    location: Optional[str] = None


class CalendarEventUpdate(CalendarEventCreate):
    pass


class CalendarEventResponse(ORMModel):
    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    type: str
    start_time: datetime
    end_time: Optional[datetime] = None
    course_id: Optional[str] = None
    lesson_id: Optional[str] = None
    teacher_id: Optional[str] = None
    student_id: Optional[str] = None
    location: Optional[str] = None
    created_at: datetime

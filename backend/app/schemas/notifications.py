# backend/app/schemas/notifications.py
"""Schemas for notification inbox endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .base import ORMModel, StandardizedModel


class NotificationResponse(ORMModel):
    """Notification inbox entry."""

    id: str
    user_id: str
    title: str
    message: str
    type: str
    link: Optional[str] = None
    read: bool
    created_at: datetime


class NotificationUnreadCountResponse(StandardizedModel):
    """Unread notification count response."""

    count: int = Field(..., ge=0)


class TutoringRequestNotificationCreate(BaseModel):
    teacher_id: Optional[str] = None
    message: Optional[str] = None

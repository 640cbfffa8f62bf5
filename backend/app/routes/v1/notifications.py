# backend/app/routes/v1/notifications.py
"""
Notification routes - API v1

Versioned in-app notification endpoints under /api/v1/notifications.

Endpoints:
    GET /                             → Latest notifications
    GET /unread-count                 → Unread notification count
    PATCH /mark-all-read              → Mark every notification read
    POST /tutoring-request            → Notify a teacher about a tutoring request
    PATCH /{notification_id}/read     → Mark one notification read
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends, status

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.services import get_notification_service
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.base import MessageResponse
from ...schemas.notifications import (
    NotificationResponse,
    NotificationUnreadCountResponse,
    TutoringRequestNotificationCreate,
)
from ...services.notification_service import NotificationService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["notifications-v1"])


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
) -> List[NotificationResponse]:
    notifications = await asyncio.to_thread(notification_service.list_for_user, current_user.id)
    return [NotificationResponse.model_validate(n) for n in notifications]


@router.get("/unread-count", response_model=NotificationUnreadCountResponse)
async def unread_count(
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
) -> NotificationUnreadCountResponse:
    data = await asyncio.to_thread(notification_service.unread_count, current_user.id)
    return NotificationUnreadCountResponse(**data)


@router.patch("/mark-all-read", response_model=MessageResponse)
async def mark_all_read(
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
) -> MessageResponse:
    await asyncio.to_thread(notification_service.mark_all_read, current_user.id)
    return MessageResponse(message="All notifications marked as read")


@router.post(
    "/tutoring-request",
    response_model=NotificationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def notify_tutoring_request(
    payload: TutoringRequestNotificationCreate,
    _: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
) -> NotificationResponse:
    try:
        notification = await asyncio.to_thread(
            notification_service.send_tutoring_request, payload.teacher_id, payload.message
        )
    except DomainException as e:
        raise e.to_http_exception()
    return NotificationResponse.model_validate(notification)


@router.patch("/{notification_id}/read", response_model=MessageResponse)
async def mark_read(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
) -> MessageResponse:
    """Only the owner's notifications are found; anything else is a 404."""
    try:
        await asyncio.to_thread(notification_service.mark_read, current_user.id, notification_id)
    except DomainException as e:
        raise e.to_http_exception()
    return MessageResponse(message="Notification marked as read")

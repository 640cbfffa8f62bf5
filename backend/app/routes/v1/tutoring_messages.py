# backend/app/routes/v1/tutoring_messages.py
"""
Tutoring message routes - API v1

Message threads attached to tutoring requests, mounted under /api/v1/tutoring.
Only the requesting student and the session's teacher take part in a thread.

Endpoints:
    GET /conversations/my                        → Own threads with last message and unread count
    GET /messages/unread-count                   → Unread messages across own threads
    POST /requests/{request_id}/messages         → Send a message
    GET /requests/{request_id}/messages          → Thread, oldest first; marks incoming read
    PUT /requests/{request_id}/messages/read     → Mark incoming messages read
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends, status

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.services import get_tutoring_message_service
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.base import MessageResponse
from ...schemas.tutoring import (
    TutoringConversationResponse,
    TutoringMessageCreate,
    TutoringMessageResponse,
    UnreadMessageCountResponse,
)
from ...services.tutoring_message_service import TutoringMessageService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["tutoring-messages-v1"])


@router.get("/conversations/my", response_model=List[TutoringConversationResponse])
async def my_conversations(
    current_user: User = Depends(get_current_user),
    message_service: TutoringMessageService = Depends(get_tutoring_message_service),
) -> List[TutoringConversationResponse]:
    rows = await asyncio.to_thread(message_service.get_conversations, current_user)
    return [TutoringConversationResponse.model_validate(row) for row in rows]


@router.get("/messages/unread-count", response_model=UnreadMessageCountResponse)
async def unread_count(
    current_user: User = Depends(get_current_user),
    message_service: TutoringMessageService = Depends(get_tutoring_message_service),
) -> UnreadMessageCountResponse:
    data = await asyncio.to_thread(message_service.unread_count, current_user)
    return UnreadMessageCountResponse(**data)


@router.post(
    "/requests/{request_id}/messages",
    response_model=TutoringMessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    request_id: str,
    payload: TutoringMessageCreate,
    current_user: User = Depends(get_current_user),
    message_service: TutoringMessageService = Depends(get_tutoring_message_service),
) -> TutoringMessageResponse:
    try:
        message = await asyncio.to_thread(message_service.send_message, current_user, request_id, payload.content)
    except DomainException as e:
        raise e.to_http_exception()
    return TutoringMessageResponse.model_validate(message)


@router.get("/requests/{request_id}/messages", response_model=List[TutoringMessageResponse])
async def get_messages(
    request_id: str,
    current_user: User = Depends(get_current_user),
    message_service: TutoringMessageService = Depends(get_tutoring_message_service),
) -> List[TutoringMessageResponse]:
    try:
        messages = await asyncio.to_thread(message_service.get_messages, current_user, request_id)
    except DomainException as e:
        raise e.to_http_exception()
    return [TutoringMessageResponse.model_validate(m) for m in messages]


@router.put("/requests/{request_id}/messages/read", response_model=MessageResponse)
async def mark_messages_read(
    request_id: str,
    current_user: User = Depends(get_current_user),
    message_service: TutoringMessageService = Depends(get_tutoring_message_service),
) -> MessageResponse:
    try:
        await asyncio.to_thread(message_service.mark_read, current_user, request_id)
    except DomainException as e:
        raise e.to_http_exception()
    return MessageResponse(message="Messages marked as read")

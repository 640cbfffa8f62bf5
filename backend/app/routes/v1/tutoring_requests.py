# backend/app/routes/v1/tutoring_requests.py
"""
Tutoring request routes - API v1

Mounted under /api/v1/tutoring.

Endpoints:
    GET /requests/my                      → Own requests with their sessions (student)
    PUT /requests/{request_id}/status     → Accept or reject a pending request (teacher)
    DELETE /requests/{request_id}         → Cancel a pending request (student)
    POST /{session_id}/request            → Request tutoring on a session
    GET /{session_id}/requests            → Requests received for a session (owner/admin)
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends, status

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.services import get_tutoring_request_service
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.base import MessageResponse
from ...schemas.tutoring import (
    StudentTutoringRequestResponse,
    TutoringRequestCreate,
    TutoringRequestCreatedResponse,
    TutoringRequestResponse,
    TutoringRequestStatusUpdate,
)
from ...services.tutoring_request_service import TutoringRequestService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["tutoring-requests-v1"])


@router.get("/requests/my", response_model=List[StudentTutoringRequestResponse])
async def my_requests(
    current_user: User = Depends(get_current_user),
    request_service: TutoringRequestService = Depends(get_tutoring_request_service),
) -> List[StudentTutoringRequestResponse]:
    requests = await asyncio.to_thread(request_service.get_my_requests, current_user.id)
    return [StudentTutoringRequestResponse.model_validate(r) for r in requests]


@router.put("/requests/{request_id}/status", response_model=MessageResponse)
async def update_request_status(
    request_id: str,
    payload: TutoringRequestStatusUpdate,
    current_user: User = Depends(get_current_user),
    request_service: TutoringRequestService = Depends(get_tutoring_request_service),
) -> MessageResponse:
    """
    Accept or reject a request on one of the caller's sessions.

    Accepting needs ``scheduled_at`` and ``duration`` and books a confirmed
    appointment. The student is notified either way.
    """
    try:
        message = await asyncio.to_thread(request_service.update_status, current_user, request_id, payload)
    except DomainException as e:
        raise e.to_http_exception()
    return MessageResponse(message=message)


@router.delete("/requests/{request_id}", response_model=MessageResponse)
async def cancel_request(
    request_id: str,
    current_user: User = Depends(get_current_user),
    request_service: TutoringRequestService = Depends(get_tutoring_request_service),
) -> MessageResponse:
    try:
        await asyncio.to_thread(request_service.cancel, current_user, request_id)
    except DomainException as e:
        raise e.to_http_exception()
    return MessageResponse(message="Request cancelled successfully")


@router.post(
    "/{session_id}/request",
    response_model=TutoringRequestCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_request(
    session_id: str,
    payload: TutoringRequestCreate,
    current_user: User = Depends(get_current_user),
    request_service: TutoringRequestService = Depends(get_tutoring_request_service),
) -> TutoringRequestCreatedResponse:
    try:
        request = await asyncio.to_thread(request_service.create_request, current_user, session_id, payload)
    except DomainException as e:
        raise e.to_http_exception()
    return TutoringRequestCreatedResponse(
        message="Tutoring request sent successfully",
        request=TutoringRequestResponse.model_validate(request),
    )


@router.get("/{session_id}/requests", response_model=List[TutoringRequestResponse])
async def session_requests(
    session_id: str,
    current_user: User = Depends(get_current_user),
    request_service: TutoringRequestService = Depends(get_tutoring_request_service),
) -> List[TutoringRequestResponse]:
    try:
        requests = await asyncio.to_thread(request_service.get_session_requests, current_user, session_id)
    except DomainException as e:
        raise e.to_http_exception()
    return [TutoringRequestResponse.model_validate(r) for r in requests]

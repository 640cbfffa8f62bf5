# backend/app/routes/v1/tutoring.py
"""
Tutoring session routes - API v1

Versioned tutoring session endpoints under /api/v1/tutoring.
Requests and message threads live in their own modules under the same prefix.

Endpoints:
    GET /                                → Approved sessions (subject, location_type, featured filters)
    GET /my/teaching                     → Own sessions with their requests (teacher)
    GET /teacher/{teacher_id}            → Approved sessions of a teacher
    GET /{session_id}                    → Session with reviews
    POST /                               → Create a session pending approval (teacher)
    PUT /{session_id}                    → Update a session (owner/admin)
    DELETE /{session_id}                 → Delete a session (owner/admin)
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ...api.dependencies.auth import get_current_teacher, get_current_user, get_current_user_optional
from ...api.dependencies.services import get_tutoring_service
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.base import MessageResponse
from ...schemas.tutoring import (
    TeacherSessionWithRequests,
    TutoringSessionCreate,
    TutoringSessionCreatedResponse,
    TutoringSessionDetailResponse,
    TutoringSessionResponse,
    TutoringSessionUpdate,
)
from ...services.tutoring_service import TutoringService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["tutoring-v1"])


@router.get("", response_model=List[TutoringSessionResponse])
async def list_sessions(
    subject: Optional[str] = Query(None),
    location_type: Optional[str] = Query(None),
    featured: Optional[bool] = Query(None),
    tutoring_service: TutoringService = Depends(get_tutoring_service),
) -> List[TutoringSessionResponse]:
    """Approved sessions, featured first then newest."""
    sessions = await asyncio.to_thread(tutoring_service.list_approved, subject, location_type, featured)
    return [TutoringSessionResponse.model_validate(s) for s in sessions]


@router.get("/my/teaching", response_model=List[TeacherSessionWithRequests])
async def my_teaching_sessions(
    current_user: User = Depends(get_current_teacher),
    tutoring_service: TutoringService = Depends(get_tutoring_service),
) -> List[TeacherSessionWithRequests]:
    rows = await asyncio.to_thread(tutoring_service.get_my_sessions, current_user.id)
    return [TeacherSessionWithRequests.model_validate(row) for row in rows]


@router.post("", response_model=TutoringSessionCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    payload: TutoringSessionCreate,
    current_user: User = Depends(get_current_teacher),
    tutoring_service: TutoringService = Depends(get_tutoring_service),
) -> TutoringSessionCreatedResponse:
    try:
        session = await asyncio.to_thread(tutoring_service.create_session, current_user, payload)
    except DomainException as e:
        raise e.to_http_exception()
    return TutoringSessionCreatedResponse(
        message="Tutoring session created and pending approval",
        session=TutoringSessionResponse.model_validate(session),
    )


@router.get("/teacher/{teacher_id}", response_model=List[TutoringSessionResponse])
async def teacher_sessions(
    teacher_id: str,
    tutoring_service: TutoringService = Depends(get_tutoring_service),
) -> List[TutoringSessionResponse]:
    sessions = await asyncio.to_thread(tutoring_service.get_teacher_sessions, teacher_id)
    return [TutoringSessionResponse.model_validate(s) for s in sessions]


@router.get("/{session_id}", response_model=TutoringSessionDetailResponse)
async def get_session(
    session_id: str,
    current_user: Optional[User] = Depends(get_current_user_optional),
    tutoring_service: TutoringService = Depends(get_tutoring_service),
) -> TutoringSessionDetailResponse:
    """Unapproved sessions are visible to their teacher and admins only."""
    try:
        data = await asyncio.to_thread(tutoring_service.get_session, session_id, current_user)
    except DomainException as e:
        raise e.to_http_exception()
    return TutoringSessionDetailResponse.model_validate(data)


@router.put("/{session_id}", response_model=TutoringSessionResponse)
async def update_session(
    session_id: str,
    payload: TutoringSessionUpdate,
    current_user: User = Depends(get_current_user),
    tutoring_service: TutoringService = Depends(get_tutoring_service),
) -> TutoringSessionResponse:
    try:
        session = await asyncio.to_thread(tutoring_service.update_session, current_user, session_id, payload)
    except DomainException as e:
        raise e.to_http_exception()
    return TutoringSessionResponse.model_validate(session)


@router.delete("/{session_id}", response_model=MessageResponse)
async def delete_session(
    session_id: str,
    current_user: User = Depends(get_current_user),
    tutoring_service: TutoringService = Depends(get_tutoring_service),
) -> MessageResponse:
    try:
        await asyncio.to_thread(tutoring_service.delete_session, current_user, session_id)
    except DomainException as e:
        raise e.to_http_exception()
    return MessageResponse(message="Tutoring session deleted successfully")

# backend/app/routes/v1/course_progress.py
"""
Learner progress routes - API v1

Mounted under /api/v1/courses.

Endpoints:
    GET /lessons/{lesson_id}/progress                      → Progress on one lesson
    PUT /lessons/{lesson_id}/position                      → Store the resume position
    GET /{course_id}/progress                              → Completed lessons and percentage
    GET /{course_id}/statistics                            → Per-topic completion
    POST /{course_id}/lessons/{lesson_id}/completion       → Mark a lesson completed
    DELETE /{course_id}/lessons/{lesson_id}/completion     → Clear a lesson's completion
"""

import asyncio
import logging

from fastapi import APIRouter, Depends

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.services import get_course_progress_service
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.base import MessageResponse
from ...schemas.enrollment import (
    CourseProgressResponse,
    CourseStatisticsResponse,
    LessonPositionUpdate,
    LessonProgressResponse,
)
from ...services.course_progress_service import CourseProgressService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["course-progress-v1"])


@router.get("/lessons/{lesson_id}/progress", response_model=LessonProgressResponse)
async def get_lesson_progress(
    lesson_id: str,
    current_user: User = Depends(get_current_user),
    progress_service: CourseProgressService = Depends(get_course_progress_service),
) -> LessonProgressResponse:
    """Defaults to not completed at position 0 when the lesson was never opened."""
    progress = await asyncio.to_thread(progress_service.get_lesson_progress, current_user.id, lesson_id)
    return LessonProgressResponse.model_validate(progress)


@router.put("/lessons/{lesson_id}/position", response_model=LessonProgressResponse)
async def update_lesson_position(
    lesson_id: str,
    payload: LessonPositionUpdate,
    current_user: User = Depends(get_current_user),
    progress_service: CourseProgressService = Depends(get_course_progress_service),
) -> LessonProgressResponse:
    try:
        progress = await asyncio.to_thread(
            progress_service.update_position, current_user.id, lesson_id, payload.position
        )
    except DomainException as e:
        raise e.to_http_exception()
    return LessonProgressResponse.model_validate(progress)


@router.get("/{course_id}/progress", response_model=CourseProgressResponse)
async def get_course_progress(
    course_id: str,
    current_user: User = Depends(get_current_user),
    progress_service: CourseProgressService = Depends(get_course_progress_service),
) -> CourseProgressResponse:
    try:
        data = await asyncio.to_thread(progress_service.get_course_progress, current_user.id, course_id)
    except DomainException as e:
        raise e.to_http_exception()
    return CourseProgressResponse(**data)


@router.get("/{course_id}/statistics", response_model=CourseStatisticsResponse)
async def get_course_statistics(
    course_id: str,
    current_user: User = Depends(get_current_user),
    progress_service: CourseProgressService = Depends(get_course_progress_service),
) -> CourseStatisticsResponse:
    try:
        data = await asyncio.to_thread(progress_service.get_course_statistics, current_user.id, course_id)
    except DomainException as e:
        raise e.to_http_exception()
    return CourseStatisticsResponse.model_validate(data)


@router.post("/{course_id}/lessons/{lesson_id}/completion", response_model=LessonProgressResponse)
async def mark_lesson_completed(
    course_id: str,
    lesson_id: str,
    current_user: User = Depends(get_current_user),
    progress_service: CourseProgressService = Depends(get_course_progress_service),
) -> LessonProgressResponse:
    try:
        progress = await asyncio.to_thread(
            progress_service.mark_lesson_completed, current_user.id, course_id, lesson_id
        )
    except DomainException as e:
        raise e.to_http_exception()
    return LessonProgressResponse.model_validate(progress)


@router.delete("/{course_id}/lessons/{lesson_id}/completion", response_model=MessageResponse)
async def mark_lesson_incomplete(
    course_id: str,
    lesson_id: str,
    current_user: User = Depends(get_current_user),
    progress_service: CourseProgressService = Depends(get_course_progress_service),
) -> MessageResponse:
    try:
        await asyncio.to_thread(progress_service.mark_lesson_incomplete, current_user.id, course_id, lesson_id)
    except DomainException as e:
        raise e.to_http_exception()
    return MessageResponse(message="Lesson marked as incomplete")

# backend/app/routes/v1/favorites.py
"""
Favorites routes - API v1

Saved and liked courses, mounted under /api/v1/courses.
All business logic delegated to CourseFavoritesService.

Endpoints:
    GET /my/saved                      → Saved courses, newest first
    GET /my/liked                      → Liked courses, newest first
    GET /my/favorites                  → Ids of both lists with timestamps
    DELETE /saved/bulk                 → Remove several saved courses
    POST /{course_id}/save             → Toggle saved
    POST /{course_id}/like             → Toggle liked
    GET /{course_id}/saved-status      → Whether the course is saved
    GET /{course_id}/liked-status      → Whether the course is liked
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends

from ...api.dependencies import get_current_user
from ...api.dependencies.services import get_course_favorites_service
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.course import CourseSummaryResponse
from ...schemas.favorites import (
    BulkRemoveSavedRequest,
    BulkRemoveSavedResponse,
    FavoritesResponse,
    LikedCourseResponse,
    LikedStatusResponse,
    LikeToggleResponse,
    SavedCourseResponse,
    SavedStatusResponse,
    SaveToggleResponse,
)
from ...services.course_favorites_service import CourseFavoritesService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["favorites-v1"])


# =============================================================================
# Static routes first (before dynamic routes with path parameters)
# =============================================================================


@router.get("/my/saved", response_model=List[SavedCourseResponse])
async def get_saved_courses(
    current_user: User = Depends(get_current_user),
    favorites_service: CourseFavoritesService = Depends(get_course_favorites_service),
) -> List[SavedCourseResponse]:
    rows = await asyncio.to_thread(favorites_service.get_saved, current_user.id)
    return [
        SavedCourseResponse(**CourseSummaryResponse.model_validate(row.course).model_dump(), saved_at=row.saved_at)
        for row in rows
    ]


@router.get("/my/liked", response_model=List[LikedCourseResponse])
async def get_liked_courses(
    current_user: User = Depends(get_current_user),
    favorites_service: CourseFavoritesService = Depends(get_course_favorites_service),
) -> List[LikedCourseResponse]:
    rows = await asyncio.to_thread(favorites_service.get_liked, current_user.id)
    return [
        LikedCourseResponse(**CourseSummaryResponse.model_validate(row.course).model_dump(), liked_at=row.liked_at)
        for row in rows
    ]


@router.get("/my/favorites", response_model=FavoritesResponse)
async def get_favorites(
    current_user: User = Depends(get_current_user),
    favorites_service: CourseFavoritesService = Depends(get_course_favorites_service),
) -> FavoritesResponse:
    data = await asyncio.to_thread(favorites_service.get_all, current_user.id)
    return FavoritesResponse(**data)


@router.delete("/saved/bulk", response_model=BulkRemoveSavedResponse)
async def remove_bulk_saved(
    payload: BulkRemoveSavedRequest,
    current_user: User = Depends(get_current_user),
    favorites_service: CourseFavoritesService = Depends(get_course_favorites_service),
) -> BulkRemoveSavedResponse:
    try:
        data = await asyncio.to_thread(favorites_service.remove_bulk_saved, current_user.id, payload.course_ids)
    except DomainException as e:
        raise e.to_http_exception()
    return BulkRemoveSavedResponse(**data)


# =============================================================================
# Dynamic routes
# =============================================================================


@router.post("/{course_id}/save", response_model=SaveToggleResponse)
async def toggle_save(
    course_id: str,
    current_user: User = Depends(get_current_user),
    favorites_service: CourseFavoritesService = Depends(get_course_favorites_service),
) -> SaveToggleResponse:
    """
    Save the course, or unsave it when it is already saved.

    Raises:
        HTTPException: 404 if the course does not exist
    """
    try:
        result = await asyncio.to_thread(favorites_service.toggle_saved, current_user.id, course_id)
    except DomainException as e:
        raise e.to_http_exception()
    return SaveToggleResponse(**result)


@router.post("/{course_id}/like", response_model=LikeToggleResponse)
async def toggle_like(
    course_id: str,
    current_user: User = Depends(get_current_user),
    favorites_service: CourseFavoritesService = Depends(get_course_favorites_service),
) -> LikeToggleResponse:
    try:
        result = await asyncio.to_thread(favorites_service.toggle_liked, current_user.id, course_id)
    except DomainException as e:
        raise e.to_http_exception()
    return LikeToggleResponse(**result)


@router.get("/{course_id}/saved-status", response_model=SavedStatusResponse)
async def saved_status(
    course_id: str,
    current_user: User = Depends(get_current_user),
    favorites_service: CourseFavoritesService = Depends(get_course_favorites_service),
) -> SavedStatusResponse:
    result = await asyncio.to_thread(favorites_service.saved_status, current_user.id, course_id)
    return SavedStatusResponse(**result)


@router.get("/{course_id}/liked-status", response_model=LikedStatusResponse)
async def liked_status(
    course_id: str,
    current_user: User = Depends(get_current_user),
    favorites_service: CourseFavoritesService = Depends(get_course_favorites_service),
) -> LikedStatusResponse:
    result = await asyncio.to_thread(favorites_service.liked_status, current_user.id, course_id)
    return LikedStatusResponse(**result)

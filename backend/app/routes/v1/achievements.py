# backend/app/routes/v1/achievements.py
"""
Achievement routes - API v1

Versioned achievement endpoints under /api/v1/achievements.

Endpoints:
    GET /                                 → Achievement catalog
    GET /user/{user_id}                   → A user's progress on every achievement
    POST /{achievement_id}/progress       → Move the caller's progress
    POST /{achievement_id}/complete       → Complete an achievement for the caller
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.services import get_achievement_service
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.achievement import AchievementProgressRequest, AchievementResponse, UserAchievementResponse
from ...services.achievement_service import AchievementService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["achievements-v1"])


@router.get("", response_model=List[AchievementResponse])
async def list_achievements(
    achievement_service: AchievementService = Depends(get_achievement_service),
) -> List[AchievementResponse]:
    achievements = await asyncio.to_thread(achievement_service.list_achievements)
    return [AchievementResponse.model_validate(a) for a in achievements]


@router.get("/user/{user_id}", response_model=List[UserAchievementResponse])
async def user_achievements(
    user_id: str,
    _: User = Depends(get_current_user),
    achievement_service: AchievementService = Depends(get_achievement_service),
) -> List[UserAchievementResponse]:
    """Missing rows are created at 0% first; completed achievements come first."""
    rows = await asyncio.to_thread(achievement_service.get_user_achievements, user_id)
    return [UserAchievementResponse.model_validate(row) for row in rows]


@router.post("/{achievement_id}/progress", response_model=UserAchievementResponse)
async def update_progress(
    achievement_id: int,
    payload: AchievementProgressRequest,
    current_user: User = Depends(get_current_user),
    achievement_service: AchievementService = Depends(get_achievement_service),
) -> UserAchievementResponse:
    """
    Add to the caller's progress, or set it when ``increment`` is false.

    Reaching 100 completes the achievement, awards its points and sends a
    notification.
    """
    try:
        row = await asyncio.to_thread(
            achievement_service.progress, current_user.id, achievement_id, payload.progress, payload.increment
        )
    except DomainException as e:
        raise e.to_http_exception()
    return UserAchievementResponse.model_validate(row)


@router.post("/{achievement_id}/complete", response_model=UserAchievementResponse)
async def complete_achievement(
    achievement_id: int,
    current_user: User = Depends(get_current_user),
    achievement_service: AchievementService = Depends(get_achievement_service),
) -> UserAchievementResponse:
    try:
        row = await asyncio.to_thread(achievement_service.complete, current_user.id, achievement_id)
    except DomainException as e:
        raise e.to_http_exception()
    return UserAchievementResponse.model_validate(row)

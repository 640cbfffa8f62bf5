# backend/app/routes/v1/users.py
"""
User routes - API v1

Versioned user, teacher profile and availability endpoints under /api/v1/users.

Endpoints:
    GET /                                    → List users (admin)
    GET /points/transactions                 → Current user's points history
    GET /teacher/profile                     → Own teacher profile (teacher)
    PUT /teacher/profile                     → Create or update own teacher profile (teacher)
    GET /teacher/dashboard                   → Teacher dashboard summary (teacher)
    GET /teacher/dashboard/stats             → Teacher totals (teacher)
    GET /teacher/dashboard/courses           → Own courses with counts (teacher)
    GET /teacher/dashboard/activities        → Recent activity feed (teacher)
    GET /teacher/dashboard/reviews           → Recent reviews on own courses (teacher)
    GET /teacher/{teacher_id}                → Public teacher profile
    POST /teacher/{teacher_id}/update-stats  → Recount distinct students
    POST /availability                       → Replace own weekly availability
    GET /availability/{user_id}              → Weekly availability of a user
    PUT /me                                  → Update current user
    GET /{user_id}                           → User with recent certificates
    PUT /{user_id}                           → Admin user update (admin)
    DELETE /{user_id}                        → Delete user (admin)
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ...api.dependencies.auth import get_current_admin, get_current_teacher, get_current_user
from ...api.dependencies.services import get_user_service
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.auth import PointsTransactionBrief
from ...schemas.base import MessageResponse
from ...schemas.review import CourseReviewResponse
from ...schemas.user import (
    AdminUserUpdate,
    AvailabilitySlotResponse,
    AvailabilityUpdate,
    TeacherActivity,
    TeacherCourseStats,
    TeacherDashboardResponse,
    TeacherProfileResponse,
    TeacherProfileUpdate,
    TeacherPublicProfileResponse,
    TeacherStatsResponse,
    TeacherStatsUpdateResponse,
    UserDetailResponse,
    UserResponse,
    UserUpdate,
    UserWithProfileResponse,
)
from ...services.user_service import UserService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["users-v1"])


# =============================================================================
# Static routes first (before dynamic routes with path parameters)
# =============================================================================


@router.get("", response_model=List[UserResponse])
async def list_users(
    role: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    _: User = Depends(get_current_admin),
    user_service: UserService = Depends(get_user_service),
) -> List[UserResponse]:
    users = await asyncio.to_thread(user_service.list_users, role, search)
    return [UserResponse.model_validate(u) for u in users]


@router.get("/points/transactions", response_model=List[PointsTransactionBrief])
async def my_points_transactions(
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> List[PointsTransactionBrief]:
    transactions = await asyncio.to_thread(user_service.get_points_transactions, current_user.id)
    return [PointsTransactionBrief.model_validate(t) for t in transactions]


@router.get("/teacher/profile", response_model=TeacherProfileResponse)
async def get_my_teacher_profile(
    current_user: User = Depends(get_current_teacher),
    user_service: UserService = Depends(get_user_service),
) -> TeacherProfileResponse:
    try:
        profile = await asyncio.to_thread(user_service.get_my_teacher_profile, current_user.id)
    except DomainException as e:
        raise e.to_http_exception()
    return TeacherProfileResponse.model_validate(profile)


@router.put("/teacher/profile", response_model=TeacherProfileResponse)
async def update_my_teacher_profile(
    payload: TeacherProfileUpdate,
    current_user: User = Depends(get_current_teacher),
    user_service: UserService = Depends(get_user_service),
) -> TeacherProfileResponse:
    try:
        profile = await asyncio.to_thread(
            lambda: user_service.update_teacher_profile(current_user, **payload.model_dump(exclude_unset=True))
        )
    except DomainException as e:
        raise e.to_http_exception()
    return TeacherProfileResponse.model_validate(profile)


@router.get("/teacher/dashboard", response_model=TeacherDashboardResponse)
async def get_teacher_dashboard(
    current_user: User = Depends(get_current_teacher),
    user_service: UserService = Depends(get_user_service),
) -> TeacherDashboardResponse:
    """Profile, per-status course and tutoring counts, and the latest enrollments and requests."""
    try:
        dashboard = await asyncio.to_thread(user_service.get_teacher_dashboard, current_user.id)
    except DomainException as e:
        raise e.to_http_exception()
    return TeacherDashboardResponse.model_validate(dashboard)


@router.get("/teacher/dashboard/stats", response_model=TeacherStatsResponse)
async def get_teacher_stats(
    current_user: User = Depends(get_current_teacher),
    user_service: UserService = Depends(get_user_service),
) -> TeacherStatsResponse:
    stats = await asyncio.to_thread(user_service.get_teacher_stats, current_user.id)
    return TeacherStatsResponse(**stats)


@router.get("/teacher/dashboard/courses", response_model=List[TeacherCourseStats])
async def get_teacher_dashboard_courses(
    current_user: User = Depends(get_current_teacher),
    user_service: UserService = Depends(get_user_service),
) -> List[TeacherCourseStats]:
    rows = await asyncio.to_thread(user_service.get_teacher_courses, current_user.id)
    return [TeacherCourseStats.model_validate(row) for row in rows]


@router.get("/teacher/dashboard/activities", response_model=List[TeacherActivity])
async def get_teacher_activities(
    current_user: User = Depends(get_current_teacher),
    user_service: UserService = Depends(get_user_service),
) -> List[TeacherActivity]:
    rows = await asyncio.to_thread(user_service.get_teacher_activities, current_user.id)
    return [TeacherActivity(**row) for row in rows]


@router.get("/teacher/dashboard/reviews", response_model=List[CourseReviewResponse])
async def get_teacher_reviews(
    current_user: User = Depends(get_current_teacher),
    user_service: UserService = Depends(get_user_service),
) -> List[CourseReviewResponse]:
    reviews = await asyncio.to_thread(user_service.get_teacher_reviews, current_user.id)
    return [CourseReviewResponse.model_validate(r) for r in reviews]


@router.post("/availability", response_model=List[AvailabilitySlotResponse])
async def set_my_availability(
    payload: AvailabilityUpdate,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> List[AvailabilitySlotResponse]:
    """Replace the caller's whole weekly availability."""
    try:
        slots = await asyncio.to_thread(user_service.set_availability, current_user.id, payload.availability)
    except DomainException as e:
        raise e.to_http_exception()
    return [AvailabilitySlotResponse.model_validate(s) for s in slots]


@router.put("/me", response_model=UserWithProfileResponse)
async def update_me(
    payload: UserUpdate,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> UserWithProfileResponse:
    try:
        user = await asyncio.to_thread(
            lambda: user_service.update_current_user(current_user.id, **payload.model_dump(exclude_unset=True))
        )
    except DomainException as e:
        raise e.to_http_exception()
    return UserWithProfileResponse.model_validate(user)


# =============================================================================
# Dynamic routes
# =============================================================================


@router.get("/teacher/{teacher_id}", response_model=TeacherPublicProfileResponse)
async def get_teacher_public_profile(
    teacher_id: str,
    user_service: UserService = Depends(get_user_service),
) -> TeacherPublicProfileResponse:
    """Public profile with published courses. Only teachers have one."""
    try:
        data = await asyncio.to_thread(user_service.get_teacher_public_profile, teacher_id)
    except DomainException as e:
        raise e.to_http_exception()
    return TeacherPublicProfileResponse.model_validate(data)


@router.post("/teacher/{teacher_id}/update-stats", response_model=TeacherStatsUpdateResponse)
async def update_teacher_stats(
    teacher_id: str,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> TeacherStatsUpdateResponse:
    try:
        students = await asyncio.to_thread(user_service.update_teacher_stats, current_user, teacher_id)
    except DomainException as e:
        raise e.to_http_exception()
    return TeacherStatsUpdateResponse(message="Teacher stats updated", students=students)


@router.get("/availability/{user_id}", response_model=List[AvailabilitySlotResponse])
async def get_availability(
    user_id: str,
    user_service: UserService = Depends(get_user_service),
) -> List[AvailabilitySlotResponse]:
    slots = await asyncio.to_thread(user_service.get_availability, user_id)
    return [AvailabilitySlotResponse.model_validate(s) for s in slots]


@router.get("/{user_id}", response_model=UserDetailResponse)
async def get_user(
    user_id: str,
    _: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> UserDetailResponse:
    try:
        data = await asyncio.to_thread(user_service.get_user, user_id)
    except DomainException as e:
        raise e.to_http_exception()
    return UserDetailResponse.model_validate(data)


@router.put("/{user_id}", response_model=UserWithProfileResponse)
async def admin_update_user(
    user_id: str,
    payload: AdminUserUpdate,
    _: User = Depends(get_current_admin),
    user_service: UserService = Depends(get_user_service),
) -> UserWithProfileResponse:
    try:
        user = await asyncio.to_thread(
            lambda: user_service.admin_update_user(user_id, **payload.model_dump(exclude_unset=True))
        )
    except DomainException as e:
        raise e.to_http_exception()
    return UserWithProfileResponse.model_validate(user)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    _: User = Depends(get_current_admin),
    user_service: UserService = Depends(get_user_service),
) -> MessageResponse:
    try:
        await asyncio.to_thread(user_service.delete_user, user_id)
    except DomainException as e:
        raise e.to_http_exception()
    return MessageResponse(message="User deleted successfully")

# backend/app/routes/v1/courses.py
"""
Course routes - API v1

Versioned course catalog and authoring endpoints under /api/v1/courses.
Enrollment, progress and favorites live in their own modules under the
same prefix.

Endpoints:
    GET /                                → Published courses (subject, search, featured filters)
    GET /my/teaching                     → Own courses in every status (teacher)
    GET /teacher/{teacher_id}            → Courses of a teacher
    GET /{course_id}                     → Course with its whole content tree
    POST /                               → Create a draft course (teacher)
    PUT /{course_id}                     → Update a course and reconcile its content (owner/admin)
    DELETE /{course_id}                  → Delete a course and everything referencing it (owner/admin)
"""

import asyncio
import logging
from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, Query, status

from ...api.dependencies.auth import get_current_teacher, get_current_user, get_current_user_optional
from ...api.dependencies.services import get_course_service
from ...core.exceptions import DomainException
from ...models.course import Course
from ...models.user import User
from ...schemas.base import MessageResponse
from ...schemas.course import (
    CourseCreate,
    CourseCreatedResponse,
    CourseDetailResponse,
    CourseListItem,
    CourseUpdate,
)
from ...services.course_service import CourseService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["courses-v1"])


def course_list_item(course: Course, rating: Tuple[float, int]) -> CourseListItem:
    """Catalog entry with its rating summary merged in."""
    average, count = rating
    return CourseListItem.model_validate(course).model_copy(
        update={"average_rating": average, "review_count": count}
    )


# =============================================================================
# Static routes first (before dynamic routes with path parameters)
# =============================================================================


@router.get("", response_model=List[CourseListItem])
async def list_courses(
    subject: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Case-insensitive match on title or description"),
    featured: Optional[bool] = Query(None),
    course_service: CourseService = Depends(get_course_service),
) -> List[CourseListItem]:
    """Published courses, featured first then newest."""
    rows = await asyncio.to_thread(course_service.list_published, subject, search, featured)
    return [course_list_item(course, rating) for course, rating in rows]


@router.get("/my/teaching", response_model=List[CourseListItem])
async def my_teaching_courses(
    current_user: User = Depends(get_current_teacher),
    course_service: CourseService = Depends(get_course_service),
) -> List[CourseListItem]:
    rows = await asyncio.to_thread(course_service.get_my_courses, current_user.id)
    return [course_list_item(course, rating) for course, rating in rows]


@router.post("", response_model=CourseCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_course(
    payload: CourseCreate,
    current_user: User = Depends(get_current_teacher),
    course_service: CourseService = Depends(get_course_service),
) -> CourseCreatedResponse:
    """
    Create a draft course.

    Nested topics and lessons are created in list order; quizzes and
    assignments only for lessons of the matching type.
    """
    try:
        course = await asyncio.to_thread(course_service.create_course, current_user, payload)
    except DomainException as e:
        raise e.to_http_exception()
    return CourseCreatedResponse(message="Course created successfully", course_id=course.id)


# =============================================================================
# Dynamic routes
# =============================================================================


@router.get("/teacher/{teacher_id}", response_model=List[CourseListItem])
async def teacher_courses(
    teacher_id: str,
    current_user: Optional[User] = Depends(get_current_user_optional),
    course_service: CourseService = Depends(get_course_service),
) -> List[CourseListItem]:
    """Published courses only, unless the caller is the teacher or an admin."""
    rows = await asyncio.to_thread(course_service.get_teacher_courses, teacher_id, current_user)
    return [course_list_item(course, rating) for course, rating in rows]


@router.get("/{course_id}", response_model=CourseDetailResponse)
async def get_course(
    course_id: str,
    current_user: Optional[User] = Depends(get_current_user_optional),
    course_service: CourseService = Depends(get_course_service),
) -> CourseDetailResponse:
    try:
        data = await asyncio.to_thread(course_service.get_course, course_id, current_user)
    except DomainException as e:
        raise e.to_http_exception()

    course = data.pop("course")
    return CourseDetailResponse.model_validate(course).model_copy(update=data)


@router.put("/{course_id}", response_model=CourseDetailResponse)
async def update_course(
    course_id: str,
    payload: CourseUpdate,
    current_user: User = Depends(get_current_user),
    course_service: CourseService = Depends(get_course_service),
) -> CourseDetailResponse:
    try:
        course = await asyncio.to_thread(course_service.update_course, current_user, course_id, payload)
        data = await asyncio.to_thread(course_service.get_course, course.id, current_user)
    except DomainException as e:
        raise e.to_http_exception()

    course = data.pop("course")
    return CourseDetailResponse.model_validate(course).model_copy(update=data)


@router.delete("/{course_id}", response_model=MessageResponse)
async def delete_course(
    course_id: str,
    current_user: User = Depends(get_current_user),
    course_service: CourseService = Depends(get_course_service),
) -> MessageResponse:
    try:
        await asyncio.to_thread(course_service.delete_course, current_user, course_id)
    except DomainException as e:
        raise e.to_http_exception()
    return MessageResponse(message="Course deleted successfully")

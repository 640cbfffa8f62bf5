# backend/app/routes/v1/enrollments.py
"""
Enrollment routes - API v1

Mounted under /api/v1/courses next to the catalog routes.

Endpoints:
    GET /my/learning                      → Enrolled courses with enrollment details
    POST /{course_id}/enroll              → Enroll in a published course
    DELETE /{course_id}/enroll            → Unenroll, dropping progress and quiz attempts
    GET /{course_id}/enrollment-status    → Whether the caller is enrolled
    POST /{course_id}/complete            → Mark the course completed
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends, status

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.services import get_course_service, get_enrollment_service
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.base import MessageResponse
from ...schemas.course import CourseListItem
from ...schemas.enrollment import EnrolledCourseResponse, EnrollmentResponse, EnrollmentStatusResponse
from ...services.course_service import CourseService
from ...services.enrollment_service import EnrollmentService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["enrollments-v1"])


@router.get("/my/learning", response_model=List[EnrolledCourseResponse])
async def my_learning(
    current_user: User = Depends(get_current_user),
    enrollment_service: EnrollmentService = Depends(get_enrollment_service),
    course_service: CourseService = Depends(get_course_service),
) -> List[EnrolledCourseResponse]:
    """Courses the caller is enrolled in, newest enrollment first."""
    enrollments = await asyncio.to_thread(enrollment_service.get_enrolled_courses, current_user.id)
    ratings = await asyncio.to_thread(course_service.with_ratings, [e.course for e in enrollments])

    return [
        EnrolledCourseResponse.model_validate(
            {
                **CourseListItem.model_validate(enrollment.course).model_dump(),
                "average_rating": average,
                "review_count": count,
                "enrolled_at": enrollment.enrolled_at,
                "completed": enrollment.completed,
                "completed_at": enrollment.completed_at,
            }
        )
        for enrollment, (_, (average, count)) in zip(enrollments, ratings)
    ]


@router.post("/{course_id}/enroll", response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED)
async def enroll(
    course_id: str,
    current_user: User = Depends(get_current_user),
    enrollment_service: EnrollmentService = Depends(get_enrollment_service),
) -> EnrollmentResponse:
    try:
        enrollment = await asyncio.to_thread(enrollment_service.enroll, current_user, course_id)
    except DomainException as e:
        raise e.to_http_exception()
    return EnrollmentResponse.model_validate(enrollment)


@router.delete("/{course_id}/enroll", response_model=MessageResponse)
async def unenroll(
    course_id: str,
    current_user: User = Depends(get_current_user),
    enrollment_service: EnrollmentService = Depends(get_enrollment_service),
) -> MessageResponse:
    try:
        await asyncio.to_thread(enrollment_service.unenroll, current_user.id, course_id)
    except DomainException as e:
        raise e.to_http_exception()
    return MessageResponse(message="Successfully unenrolled from course")


@router.get("/{course_id}/enrollment-status", response_model=EnrollmentStatusResponse)
async def enrollment_status(
    course_id: str,
    current_user: User = Depends(get_current_user),
    enrollment_service: EnrollmentService = Depends(get_enrollment_service),
) -> EnrollmentStatusResponse:
    data = await asyncio.to_thread(enrollment_service.get_status, current_user.id, course_id)
    return EnrollmentStatusResponse.model_validate(data)


@router.post("/{course_id}/complete", response_model=EnrollmentResponse)
async def complete_course(
    course_id: str,
    current_user: User = Depends(get_current_user),
    enrollment_service: EnrollmentService = Depends(get_enrollment_service),
) -> EnrollmentResponse:
    try:
        enrollment = await asyncio.to_thread(enrollment_service.mark_completed, current_user.id, course_id)
    except DomainException as e:
        raise e.to_http_exception()
    return EnrollmentResponse.model_validate(enrollment)

# backend/app/routes/v1/reviews.py
"""
Reviews routes - API v1

Versioned review endpoints under /api/v1/reviews.
All business logic delegated to ReviewService.

Endpoints:
    GET /course/{course_id}               → Course reviews with the average rating (public)
    POST /course/{course_id}              → Create or update own course review (enrolled users)
    DELETE /course/{course_id}            → Delete own course review
    GET /tutoring/{session_id}            → Tutoring session reviews with the average rating (public)
    POST /tutoring/{session_id}           → Create or update own session review (taught students)
    DELETE /tutoring/{session_id}         → Delete own session review
"""

import asyncio
import logging

from fastapi import APIRouter, Depends

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.services import get_review_service
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.base import MessageResponse
from ...schemas.review import (
    CourseReviewListResponse,
    CourseReviewResponse,
    ReviewSubmitRequest,
    TutoringReviewListResponse,
    TutoringReviewResponse,
)
from ...services.review_service import ReviewService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["reviews-v1"])


# Course reviews


@router.get("/course/{course_id}", response_model=CourseReviewListResponse)
async def list_course_reviews(
    course_id: str,
    review_service: ReviewService = Depends(get_review_service),
) -> CourseReviewListResponse:
    try:
        data = await asyncio.to_thread(review_service.list_course_reviews, course_id)
    except DomainException as e:
        raise e.to_http_exception()
    return CourseReviewListResponse.model_validate(data)


@router.post("/course/{course_id}", response_model=CourseReviewResponse)
async def submit_course_review(
    course_id: str,
    payload: ReviewSubmitRequest,
    current_user: User = Depends(get_current_user),
    review_service: ReviewService = Depends(get_review_service),
) -> CourseReviewResponse:
    """Submitting again replaces the caller's earlier rating and comment."""
    try:
        review = await asyncio.to_thread(
            review_service.submit_course_review, current_user, course_id, payload.rating, payload.comment
        )
    except DomainException as e:
        raise e.to_http_exception()
    return CourseReviewResponse.model_validate(review)


@router.delete("/course/{course_id}", response_model=MessageResponse)
async def delete_course_review(
    course_id: str,
    current_user: User = Depends(get_current_user),
    review_service: ReviewService = Depends(get_review_service),
) -> MessageResponse:
    try:
        await asyncio.to_thread(review_service.delete_course_review, current_user, course_id)
    except DomainException as e:
        raise e.to_http_exception()
    return MessageResponse(message="Review deleted successfully")


# Tutoring reviews


@router.get("/tutoring/{session_id}", response_model=TutoringReviewListResponse)
async def list_tutoring_reviews(
    session_id: str,
    review_service: ReviewService = Depends(get_review_service),
) -> TutoringReviewListResponse:
    try:
        data = await asyncio.to_thread(review_service.list_tutoring_reviews, session_id)
    except DomainException as e:
        raise e.to_http_exception()
    return TutoringReviewListResponse.model_validate(data)


@router.post("/tutoring/{session_id}", response_model=TutoringReviewResponse)
async def submit_tutoring_review(
    session_id: str,
    payload: ReviewSubmitRequest,
    current_user: User = Depends(get_current_user),
    review_service: ReviewService = Depends(get_review_service),
) -> TutoringReviewResponse:
    try:
        review = await asyncio.to_thread(
            review_service.submit_tutoring_review, current_user, session_id, payload.rating, payload.comment
        )
    except DomainException as e:
        raise e.to_http_exception()
    return TutoringReviewResponse.model_validate(review)


@router.delete("/tutoring/{session_id}", response_model=MessageResponse)
async def delete_tutoring_review(
    session_id: str,
    current_user: User = Depends(get_current_user),
    review_service: ReviewService = Depends(get_review_service),
) -> MessageResponse:
    try:
        await asyncio.to_thread(review_service.delete_tutoring_review, current_user, session_id)
    except DomainException as e:
        raise e.to_http_exception()
    return MessageResponse(message="Review deleted successfully")

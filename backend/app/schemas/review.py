"""
Pydantic schemas for course and tutoring reviews.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from .base import ORMModel, StandardizedModel
from .course import TeacherBrief


class ReviewSubmitRequest(BaseModel):
    # Loosely typed so an out-of-range or non-integer rating maps to 400
    rating: Any = Field(None, description="Integer from 1 to 5")
    comment: Optional[str] = None


class ReviewResponse(ORMModel):
    id: str
    user_id: str
    user: Optional[TeacherBrief] = None
    rating: int
    comment: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class CourseReviewResponse(ReviewResponse):
    course_id: str


class TutoringReviewResponse(ReviewResponse):
    session_id: str


class CourseReviewListResponse(StandardizedModel):
    reviews: List[CourseReviewResponse] = []
    average_rating: float
    total_reviews: int


class TutoringReviewListResponse(StandardizedModel):
    reviews: List[TutoringReviewResponse] = []
    average_rating: float
    total_reviews: int

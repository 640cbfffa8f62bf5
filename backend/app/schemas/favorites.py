"""
Pydantic schemas for saved and liked courses.

Defines request and response models for the course favorites endpoints.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .base import StandardizedModel
from .course import CourseSummaryResponse


class SaveToggleResponse(StandardizedModel):
    saved: bool = Field(..., description="True when the course is now saved")
    message: str


class LikeToggleResponse(StandardizedModel):
    liked: bool = Field(..., description="True when the course is now liked")
    message: str


class SavedCourseResponse(CourseSummaryResponse):
    saved_at: datetime


class LikedCourseResponse(CourseSummaryResponse):
    liked_at: datetime


class SavedStatusResponse(StandardizedModel):
    is_saved: bool
    saved_at: Optional[datetime] = None


class LikedStatusResponse(StandardizedModel):
    is_liked: bool
    liked_at: Optional[datetime] = None


class FavoritesResponse(StandardizedModel):
    """Both lists as course ids, plus a per-course timestamp lookup."""

    saved_courses: List[str] = []
    liked_courses: List[str] = []
    saved_details: Dict[str, Dict[str, datetime]] = {}
    liked_details: Dict[str, Dict[str, datetime]] = {}


class BulkRemoveSavedRequest(BaseModel):
    course_ids: Optional[List[str]] = None


class BulkRemoveSavedResponse(StandardizedModel):
    message: str
    removed_count: int

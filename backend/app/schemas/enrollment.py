"""
Pydantic schemas for enrollments and per-lesson learner progress.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from .base import ORMModel, StandardizedModel
from .course import CourseListItem


class EnrollmentResponse(ORMModel):
    id: str
    user_id: str
    course_id: str
    status: str
    completed: bool
    completed_at: Optional[datetime] = None
    enrolled_at: datetime


class EnrollmentStatusResponse(StandardizedModel):
    is_enrolled: bool
    enrollment: Optional[EnrollmentResponse] = None


class EnrolledCourseResponse(CourseListItem):
    """A course as seen from the learner's side, with their enrollment details merged in."""

    enrolled_at: datetime
    completed: bool = False
    completed_at: Optional[datetime] = None


class CourseProgressResponse(StandardizedModel):
    completed_lessons: List[str] = []
    progress_percent: int
    total_lessons: int
    completed_count: int


class LessonProgressResponse(ORMModel):
    completed: bool = False
    completed_at: Optional[datetime] = None
    last_position: int = 0


class LessonPositionUpdate(BaseModel):
    # Loosely typed so non-numeric values reach the service and map to 400
    position: Any = Field(None, description="Playback position in seconds")


class TopicStatistics(StandardizedModel):
    topic_id: str
    title: str
    total_lessons: int
    completed_lessons: int
    progress_percent: int


class CourseStatisticsResponse(StandardizedModel):
    course_id: str
    course_title: str
    overall_progress: int
    total_lessons: int
    completed_lessons: int
    topic_stats: List[TopicStatistics] = []

"""
Pydantic schemas for users, teacher profiles and weekly availability.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .base import ORMModel, StandardizedModel
from .certificate import CertificateResponse
from .course import CourseSummaryResponse


class TeacherProfileResponse(ORMModel):
    id: str
    user_id: str
    specialization: List[str] = []
    education: Optional[str] = None
    experience: Optional[str] = None
    certificates: List[str] = []
    students: int = 0


class UserResponse(ORMModel):
    """Public view of a user; never carries the password hash."""

    id: str
    name: str
    email: str
    role: str
    bio: Optional[str] = None
    avatar: Optional[str] = None
    points: int = 0
    referral_code: Optional[str] = None
    last_login: Optional[datetime] = None
    created_at: datetime


class UserWithProfileResponse(UserResponse):
    teacher_profile: Optional[TeacherProfileResponse] = None


class UserUpdate(BaseModel):
    name: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None
    password: Optional[str] = None


class AdminUserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None
    points: Optional[int] = Field(None, ge=0)


class TeacherProfileUpdate(BaseModel):
    specialization: Optional[List[str]] = None
    education: Optional[str] = None
    experience: Optional[str] = None
    certificates: Optional[List[str]] = None


class AvailabilitySlot(StandardizedModel):
    day_of_week: int = Field(..., ge=0, le=6, description="0 = Sunday")
    start_time: str = Field(..., pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    end_time: str = Field(..., pattern=r"^([01]\d|2[0-3]):[0-5]\d$")


class AvailabilitySlotResponse(ORMModel, AvailabilitySlot):
    id: str


class AvailabilityUpdate(BaseModel):
    # Typed loosely so a non-list payload reaches the service and gets a 400
    availability: Any = None


class TeacherPublicProfileResponse(StandardizedModel):
    teacher: UserWithProfileResponse
    courses: List[CourseSummaryResponse] = []
    courses_count: int = 0


class UserDetailResponse(StandardizedModel):
    user: UserWithProfileResponse
    certificates: List[CertificateResponse] = []


class TeacherStatsUpdateResponse(StandardizedModel):
    message: str
    students: int


# Teacher dashboard


class TeacherDashboardResponse(StandardizedModel):
    profile: TeacherProfileResponse
    course_stats: Dict[str, int] = {}
    tutoring_stats: Dict[str, int] = {}
    recent_enrollments: List[Dict[str, Any]] = []
    recent_requests: List[Dict[str, Any]] = []


class TeacherStatsResponse(StandardizedModel):
    total_courses: int
    published_courses: int
    total_enrollments: int
    total_students: int
    average_rating: float
    total_reviews: int
    tutoring_sessions: int
    pending_requests: int


class TeacherCourseStats(StandardizedModel):
    course: CourseSummaryResponse
    enrollment_count: int = 0
    average_rating: float = 0
    review_count: int = 0


class TeacherActivity(StandardizedModel):
    type: str
    message: str
    timestamp: datetime

"""
Pydantic schemas for the admin back office: dashboard figures, charts,
moderation payloads and reports.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel

from .base import StandardizedModel
from .course import CourseSummaryResponse
from .enrollment import EnrollmentResponse
from .payment_schemas import PaymentResponse
from .tutoring import TutoringSessionResponse
from .user import TeacherProfileResponse, UserResponse

# ========== Dashboard ==========


class UserCounts(StandardizedModel):
    total: int
    by_role: Dict[str, int] = {}


class CourseCounts(StandardizedModel):
    total: int
    published: int
    this_month: int


class TutoringCounts(StandardizedModel):
    total: int
    active: int


class EnrollmentCounts(StandardizedModel):
    total: int
    this_month: int


class PaymentCounts(StandardizedModel):
    total: int
    completed: int
    total_revenue: float


class RecentActivity(StandardizedModel):
    enrollments: List[EnrollmentResponse] = []
    payments: List[PaymentResponse] = []


class DashboardStatsResponse(StandardizedModel):
    users: UserCounts
    courses: CourseCounts
    tutoring: TutoringCounts
    enrollments: EnrollmentCounts
    payments: PaymentCounts
    recent_activity: RecentActivity


class UserGrowthPoint(StandardizedModel):
    date: str
    users: int


class CoursePerformanceItem(StandardizedModel):
    course_id: str
    title: str
    enrollments: int


class ApprovalSummary(StandardizedModel):
    pending_courses: int
    pending_tutoring: int
    total: int


class PendingRequests(StandardizedModel):
    courses: List[CourseSummaryResponse] = []
    tutoring: List[TutoringSessionResponse] = []


class ApprovalRequestsResponse(StandardizedModel):
    summary: ApprovalSummary
    recent_requests: PendingRequests


# ========== Moderation ==========


class StatusUpdateRequest(BaseModel):
    status: Optional[str] = None


class TutoringRejectRequest(BaseModel):
    reason: Optional[str] = None


# ========== Reports ==========


class PaymentsReportSummary(StandardizedModel):
    total_payments: int
    total_amount: float
    count_by_status: Dict[str, int] = {}
    count_by_type: Dict[str, int] = {}


class PaymentsReportResponse(StandardizedModel):
    payments: List[PaymentResponse] = []
    summary: PaymentsReportSummary


class TopCourseItem(StandardizedModel):
    course_id: str
    course_title: str
    teacher_name: str
    enrollment_count: int


class MonthlyEnrollmentCount(StandardizedModel):
    month: str
    year: int
    count: int


class EnrollmentStatsResponse(StandardizedModel):
    total_enrollments: int
    top_courses: List[TopCourseItem] = []
    monthly_stats: List[MonthlyEnrollmentCount] = []


# ========== Users ==========


class PendingTeacherResponse(TeacherProfileResponse):
    """Teacher profile still missing specialization, education or experience."""

    user: UserResponse

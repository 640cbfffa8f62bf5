# backend/app/routes/v1/admin.py
"""
Admin routes - API v1

Back-office endpoints under /api/v1/admin. Every route requires an admin.
Referral codes and blog taxonomy are administered through the admin
routers of referrals.py and blog.py.

Endpoints:
    GET /dashboard/stats                      → Platform totals and recent activity
    GET /dashboard/user-growth                → Sign-ups per day (period=month|year)
    GET /dashboard/course-performance         → Top published courses by enrollments
    GET /dashboard/approval-requests          → Draft courses and pending tutoring sessions
    GET /courses                              → Courses, optionally by status
    GET /courses/pending                      → Draft courses
    PATCH /courses/{course_id}/status         → Set a course's status and notify its teacher
    GET /tutoring                             → Tutoring sessions, optionally by status
    GET /tutoring/pending                     → Sessions awaiting approval
    PATCH /tutoring/{session_id}/status       → Set a session's status
    POST /tutoring/{session_id}/approve       → Approve a session
    POST /tutoring/{session_id}/reject        → Reject a session with an optional reason
    GET /users                                → Users (role filter, search)
    GET /teachers/pending                     → Teachers with incomplete profiles
    GET|POST /subscription-plans              → List or upsert plans
    DELETE /subscription-plans/{plan_id}      → Delete a plan without subscribers
    GET|POST /course-bundles                  → List or upsert bundles
    DELETE /course-bundles/{bundle_id}        → Delete a bundle nobody owns
    GET|POST /points-packages                 → List or create points packages
    PUT|DELETE /points-packages/{package_id}  → Update or delete a package
    PATCH /points-packages/{package_id}/toggle → Flip a package's active flag
    GET /reports/payments                     → Payments with summary (start_date, end_date, status)
    GET /reports/enrollments                  → Enrollment totals, top courses and monthly counts
"""

import asyncio
from datetime import datetime
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ...api.dependencies.auth import get_current_admin
from ...api.dependencies.services import get_admin_service, get_subscription_service
from ...core.enums import CourseStatus, TutoringStatus
from ...core.exceptions import DomainException
from ...schemas.admin import (
    ApprovalRequestsResponse,
    CoursePerformanceItem,
    DashboardStatsResponse,
    EnrollmentStatsResponse,
    PaymentsReportResponse,
    PendingTeacherResponse,
    StatusUpdateRequest,
    TutoringRejectRequest,
    UserGrowthPoint,
)
from ...schemas.base import MessageResponse
from ...schemas.course import CourseSummaryResponse
from ...schemas.points import PointsPackageCreate, PointsPackageResponse, PointsPackageUpdate
from ...schemas.subscription import (
    CourseBundleResponse,
    CourseBundleSaveResponse,
    CourseBundleUpsert,
    SubscriptionPlanResponse,
    SubscriptionPlanSaveResponse,
    SubscriptionPlanUpsert,
)
from ...schemas.tutoring import TutoringSessionResponse
from ...schemas.user import UserResponse
from ...services.admin_service import AdminService
from ...services.subscription_service import SubscriptionService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["admin-v1"], dependencies=[Depends(get_current_admin)])


# =============================================================================
# Dashboard
# =============================================================================


@router.get("/dashboard/stats", response_model=DashboardStatsResponse)
async def dashboard_stats(
    admin_service: AdminService = Depends(get_admin_service),
) -> DashboardStatsResponse:
    stats = await asyncio.to_thread(admin_service.get_dashboard_stats)
    return DashboardStatsResponse.model_validate(stats)


@router.get("/dashboard/user-growth", response_model=List[UserGrowthPoint])
async def user_growth(
    period: str = Query("month", pattern="^(month|year)$"),
    admin_service: AdminService = Depends(get_admin_service),
) -> List[UserGrowthPoint]:
    points = await asyncio.to_thread(admin_service.get_user_growth, period)
    return [UserGrowthPoint(**p) for p in points]


@router.get("/dashboard/course-performance", response_model=List[CoursePerformanceItem])
async def course_performance(
    admin_service: AdminService = Depends(get_admin_service),
) -> List[CoursePerformanceItem]:
    rows = await asyncio.to_thread(admin_service.get_course_performance)
    return [CoursePerformanceItem(**row) for row in rows]


@router.get("/dashboard/approval-requests", response_model=ApprovalRequestsResponse)
async def approval_requests(
    admin_service: AdminService = Depends(get_admin_service),
) -> ApprovalRequestsResponse:
    data = await asyncio.to_thread(admin_service.get_approval_requests)
    return ApprovalRequestsResponse.model_validate(data)


# =============================================================================
# Courses
# =============================================================================


@router.get("/courses", response_model=List[CourseSummaryResponse])
async def list_courses(
    status_filter: Optional[str] = Query(None, alias="status"),
    admin_service: AdminService = Depends(get_admin_service),
) -> List[CourseSummaryResponse]:
    courses = await asyncio.to_thread(admin_service.list_courses, status_filter)
    return [CourseSummaryResponse.model_validate(c) for c in courses]


@router.get("/courses/pending", response_model=List[CourseSummaryResponse])
async def pending_courses(
    admin_service: AdminService = Depends(get_admin_service),
) -> List[CourseSummaryResponse]:
    courses = await asyncio.to_thread(admin_service.list_courses, CourseStatus.DRAFT.value)
    return [CourseSummaryResponse.model_validate(c) for c in courses]


@router.patch("/courses/{course_id}/status", response_model=CourseSummaryResponse)
async def update_course_status(
    course_id: str,
    payload: StatusUpdateRequest,
    admin_service: AdminService = Depends(get_admin_service),
) -> CourseSummaryResponse:
    """Publishing tells the teacher the course was approved; any other status that it was rejected."""
    try:
        course = await asyncio.to_thread(admin_service.update_course_status, course_id, payload.status)
    except DomainException as e:
        raise e.to_http_exception()
    return CourseSummaryResponse.model_validate(course)


# =============================================================================
# Tutoring
# =============================================================================


@router.get("/tutoring", response_model=List[TutoringSessionResponse])
async def list_tutoring_sessions(
    status_filter: Optional[str] = Query(None, alias="status"),
    admin_service: AdminService = Depends(get_admin_service),
) -> List[TutoringSessionResponse]:
    sessions = await asyncio.to_thread(admin_service.list_tutoring_sessions, status_filter)
    return [TutoringSessionResponse.model_validate(s) for s in sessions]


@router.get("/tutoring/pending", response_model=List[TutoringSessionResponse])
async def pending_tutoring_sessions(
    admin_service: AdminService = Depends(get_admin_service),
) -> List[TutoringSessionResponse]:
    sessions = await asyncio.to_thread(admin_service.list_tutoring_sessions, TutoringStatus.PENDING.value)
    return [TutoringSessionResponse.model_validate(s) for s in sessions]


@router.patch("/tutoring/{session_id}/status", response_model=TutoringSessionResponse)
async def update_tutoring_status(
    session_id: str,
    payload: StatusUpdateRequest,
    admin_service: AdminService = Depends(get_admin_service),
) -> TutoringSessionResponse:
    try:
        session = await asyncio.to_thread(admin_service.update_tutoring_status, session_id, payload.status)
    except DomainException as e:
        raise e.to_http_exception()
    return TutoringSessionResponse.model_validate(session)


@router.post("/tutoring/{session_id}/approve", response_model=TutoringSessionResponse)
async def approve_tutoring(
    session_id: str,
    admin_service: AdminService = Depends(get_admin_service),
) -> TutoringSessionResponse:
    try:
        session = await asyncio.to_thread(admin_service.approve_tutoring, session_id)
    except DomainException as e:
        raise e.to_http_exception()
    return TutoringSessionResponse.model_validate(session)


@router.post("/tutoring/{session_id}/reject", response_model=TutoringSessionResponse)
async def reject_tutoring(
    session_id: str,
    payload: TutoringRejectRequest,
    admin_service: AdminService = Depends(get_admin_service),
) -> TutoringSessionResponse:
    try:
        session = await asyncio.to_thread(admin_service.reject_tutoring, session_id, payload.reason)
    except DomainException as e:
        raise e.to_http_exception()
    return TutoringSessionResponse.model_validate(session)


# =============================================================================
# Users
# =============================================================================


@router.get("/users", response_model=List[UserResponse])
async def list_users(
    role: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    admin_service: AdminService = Depends(get_admin_service),
) -> List[UserResponse]:
    users = await asyncio.to_thread(admin_service.list_users, role, search)
    return [UserResponse.model_validate(u) for u in users]


@router.get("/teachers/pending", response_model=List[PendingTeacherResponse])
async def pending_teachers(
    admin_service: AdminService = Depends(get_admin_service),
) -> List[PendingTeacherResponse]:
    profiles = await asyncio.to_thread(admin_service.list_pending_teachers)
    return [PendingTeacherResponse.model_validate(p) for p in profiles]


# =============================================================================
# Subscription plans and course bundles
# =============================================================================


@router.get("/subscription-plans", response_model=List[SubscriptionPlanResponse])
async def list_subscription_plans(
    subscription_service: SubscriptionService = Depends(get_subscription_service),
) -> List[SubscriptionPlanResponse]:
    plans = await asyncio.to_thread(subscription_service.list_plans, False)
    return [SubscriptionPlanResponse.model_validate(p) for p in plans]


@router.post("/subscription-plans", response_model=SubscriptionPlanSaveResponse)
async def save_subscription_plan(
    payload: SubscriptionPlanUpsert,
    subscription_service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionPlanSaveResponse:
    """Updates the plan named by ``id``; creates a new one without it."""
    try:
        data = await asyncio.to_thread(subscription_service.upsert_plan, payload)
    except DomainException as e:
        raise e.to_http_exception()
    return SubscriptionPlanSaveResponse.model_validate(data)


@router.delete("/subscription-plans/{plan_id}", response_model=MessageResponse)
async def delete_subscription_plan(
    plan_id: str,
    subscription_service: SubscriptionService = Depends(get_subscription_service),
) -> MessageResponse:
    try:
        await asyncio.to_thread(subscription_service.delete_plan, plan_id)
    except DomainException as e:
        raise e.to_http_exception()
    return MessageResponse(message="Subscription plan deleted")


@router.get("/course-bundles", response_model=List[CourseBundleResponse])
async def list_course_bundles(
    subscription_service: SubscriptionService = Depends(get_subscription_service),
) -> List[CourseBundleResponse]:
    bundles = await asyncio.to_thread(subscription_service.list_bundles, False)
    return [CourseBundleResponse.model_validate(b) for b in bundles]


@router.post("/course-bundles", response_model=CourseBundleSaveResponse)
async def save_course_bundle(
    payload: CourseBundleUpsert,
    subscription_service: SubscriptionService = Depends(get_subscription_service),
) -> CourseBundleSaveResponse:
    try:
        data = await asyncio.to_thread(subscription_service.upsert_bundle, payload)
    except DomainException as e:
        raise e.to_http_exception()
    return CourseBundleSaveResponse.model_validate(data)


@router.delete("/course-bundles/{bundle_id}", response_model=MessageResponse)
async def delete_course_bundle(
    bundle_id: str,
    subscription_service: SubscriptionService = Depends(get_subscription_service),
) -> MessageResponse:
    try:
        await asyncio.to_thread(subscription_service.delete_bundle, bundle_id)
    except DomainException as e:
        raise e.to_http_exception()
    return MessageResponse(message="Course bundle deleted")


# =============================================================================
# Points packages
# =============================================================================


@router.get("/points-packages", response_model=List[PointsPackageResponse])
async def list_points_packages(
    admin_service: AdminService = Depends(get_admin_service),
) -> List[PointsPackageResponse]:
    packages = await asyncio.to_thread(admin_service.list_points_packages)
    return [PointsPackageResponse.model_validate(p) for p in packages]


@router.post("/points-packages", response_model=PointsPackageResponse, status_code=status.HTTP_201_CREATED)
async def create_points_package(
    payload: PointsPackageCreate,
    admin_service: AdminService = Depends(get_admin_service),
) -> PointsPackageResponse:
    try:
        package = await asyncio.to_thread(admin_service.create_points_package, payload)
    except DomainException as e:
        raise e.to_http_exception()
    return PointsPackageResponse.model_validate(package)


@router.put("/points-packages/{package_id}", response_model=PointsPackageResponse)
async def update_points_package(
    package_id: str,
    payload: PointsPackageUpdate,
    admin_service: AdminService = Depends(get_admin_service),
) -> PointsPackageResponse:
    try:
        package = await asyncio.to_thread(admin_service.update_points_package, package_id, payload)
    except DomainException as e:
        raise e.to_http_exception()
    return PointsPackageResponse.model_validate(package)


@router.delete("/points-packages/{package_id}", response_model=MessageResponse)
async def delete_points_package(
    package_id: str,
    admin_service: AdminService = Depends(get_admin_service),
) -> MessageResponse:
    try:
        await asyncio.to_thread(admin_service.delete_points_package, package_id)
    except DomainException as e:
        raise e.to_http_exception()
    return MessageResponse(message="Points package deleted")


@router.patch("/points-packages/{package_id}/toggle", response_model=PointsPackageResponse)
async def toggle_points_package(
    package_id: str,
    admin_service: AdminService = Depends(get_admin_service),
) -> PointsPackageResponse:
    try:
        package = await asyncio.to_thread(admin_service.toggle_points_package, package_id)
    except DomainException as e:
        raise e.to_http_exception()
    return PointsPackageResponse.model_validate(package)


# =============================================================================
# Reports
# =============================================================================


@router.get("/reports/payments", response_model=PaymentsReportResponse)
async def payments_report(
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    admin_service: AdminService = Depends(get_admin_service),
) -> PaymentsReportResponse:
    data = await asyncio.to_thread(admin_service.get_payments_report, start_date, end_date, status_filter)
    return PaymentsReportResponse.model_validate(data)


@router.get("/reports/enrollments", response_model=EnrollmentStatsResponse)
async def enrollment_stats(
    admin_service: AdminService = Depends(get_admin_service),
) -> EnrollmentStatsResponse:
    data = await asyncio.to_thread(admin_service.get_enrollment_stats)
    return EnrollmentStatsResponse.model_validate(data)

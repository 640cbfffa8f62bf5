# backend/app/services/admin_service.py
"""
Admin Service for the EduMarket platform

Back-office reads (dashboard, charts, reports) and moderation of courses,
tutoring sessions and points packages. Plan, bundle and referral code
administration live in their own services.
"""

import calendar
from collections import Counter
from datetime import datetime
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.constants import APPROVAL_PREVIEW_ITEMS, DASHBOARD_RECENT_ITEMS, TOP_COURSES_LIMIT
from ..core.enums import CourseStatus, NotificationType, PaymentStatus, TutoringStatus
from ..core.exceptions import NotFoundException, ValidationException
from ..core.timezone_utils import ensure_utc, start_of_month, utc_now
from ..models.course import Course
from ..models.points import PointsPackage
from ..models.tutoring import TutoringSession
from ..models.user import TeacherProfile, User
from ..repositories.factory import RepositoryFactory
from ..schemas.points import PointsPackageCreate, PointsPackageUpdate
from .base import BaseService
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

STATS_MONTHS = 12


def months_ago(now: datetime, months: int) -> datetime:
    """Same day ``months`` calendar months earlier, clamped to the month's length."""
    month_index = now.year * 12 + now.month - 1 - months
    year, month = divmod(month_index, 12)
    day = min(now.day, calendar.monthrange(year, month + 1)[1])
    return now.replace(year=year, month=month + 1, day=day)


class AdminService(BaseService):
    """Service for admin dashboards, reports and moderation."""

    def __init__(self, db: Session, notification_service: Optional[NotificationService] = None):
        super().__init__(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.teacher_profile_repository = RepositoryFactory.create_teacher_profile_repository(db)
        self.course_repository = RepositoryFactory.create_course_repository(db)
        self.session_repository = RepositoryFactory.create_tutoring_session_repository(db)
        self.enrollment_repository = RepositoryFactory.create_enrollment_repository(db)
        self.payment_repository = RepositoryFactory.create_payment_repository(db)
        self.package_repository = RepositoryFactory.create_points_package_repository(db)
        self.notification_service = notification_service or NotificationService(db)

    # Dashboard

    @BaseService.measure_operation("admin_dashboard_stats")
    def get_dashboard_stats(self) -> Dict[str, Any]:
        month_start = start_of_month()
        courses_by_status = self.course_repository.count_by_status()
        sessions_by_status = self.session_repository.count_by_status()
        users_by_role = self.user_repository.count_by_role()
        payment_totals = self.payment_repository.totals()

        return {
            "users": {"total": sum(users_by_role.values()), "by_role": users_by_role},
            "courses": {
                "total": sum(courses_by_status.values()),
                "published": courses_by_status.get(CourseStatus.PUBLISHED.value, 0),
                "this_month": self.course_repository.count_created_since(month_start),
            },
            "tutoring": {
                "total": sum(sessions_by_status.values()),
                "active": sessions_by_status.get(TutoringStatus.APPROVED.value, 0),
            },
            "enrollments": {
                "total": self.enrollment_repository.count(),
                "this_month": self.enrollment_repository.count_since(month_start),
            },
            "payments": {
                "total": payment_totals["total"],
                "completed": payment_totals["completed"],
                "total_revenue": payment_totals["revenue"],
            },
            "recent_activity": {
                "enrollments": self.enrollment_repository.recent(DASHBOARD_RECENT_ITEMS),
                "payments": self.payment_repository.recent(DASHBOARD_RECENT_ITEMS),
            },
        }

    @BaseService.measure_operation("admin_user_growth")
    def get_user_growth(self, period: str = "month") -> List[Dict[str, Any]]:
        """Sign-ups per day over the last month, or the last year for ``period=year``."""
        now = utc_now()
        since = months_ago(now, 12 if period == "year" else 1)
        created = self.user_repository.created_since(since)
        per_day = Counter(ensure_utc(value).date().isoformat() for value in created)
        return [{"date": day, "users": count} for day, count in sorted(per_day.items())]

    @BaseService.measure_operation("admin_course_performance")
    def get_course_performance(self) -> List[Dict[str, Any]]:
        return [
            {"course_id": course.id, "title": course.title, "enrollments": count}
            for course, count in self.enrollment_repository.top_courses(TOP_COURSES_LIMIT, published_only=True)
        ]

    @BaseService.measure_operation("admin_approval_requests")
    def get_approval_requests(self) -> Dict[str, Any]:
        """Draft courses and pending tutoring sessions awaiting review."""
        courses = self.course_repository.list_by_status(CourseStatus.DRAFT.value)
        sessions = self.session_repository.list_by_status(TutoringStatus.PENDING.value)
        return {
            "summary": {
                "pending_courses": len(courses),
                "pending_tutoring": len(sessions),
                "total": len(courses) + len(sessions),
            },
            "recent_requests": {
                "courses": courses[:APPROVAL_PREVIEW_ITEMS],
                "tutoring": sessions[:APPROVAL_PREVIEW_ITEMS],
            },
        }

    # Course moderation

    @BaseService.measure_operation("admin_list_courses")
    def list_courses(self, status: Optional[str] = None) -> List[Course]:
        return self.course_repository.list_by_status(status)

    @BaseService.measure_operation("admin_update_course_status")
    def update_course_status(self, course_id: str, status: Optional[str]) -> Course:
        """Set a course's status and tell its teacher whether it was approved."""
        if status not in {s.value for s in CourseStatus}:
            raise ValidationException("Invalid course status")
        course = self.course_repository.get_by_id(course_id, load_relationships=False)
        if course is None:
            raise NotFoundException("Course not found")

        approved = status == CourseStatus.PUBLISHED.value
        with self.transaction():
            self.course_repository.update_entity(course, status=status)
            self.notification_service.notify(
                course.teacher_id,
                f"Course {'Approved' if approved else 'Rejected'}",
                f"Your course \"{course.title}\" has been {'approved' if approved else 'rejected'}.",
                NotificationType.SUCCESS.value if approved else NotificationType.WARNING.value,
                f"/teacher/courses/{course.id}",
            )

        self.log_operation("admin_update_course_status", course_id=course_id, status=status)
        return course

    # Tutoring moderation

    def _get_session_or_404(self, session_id: str) -> TutoringSession:
        session = self.session_repository.get_by_id(session_id)
        if session is None:
            raise NotFoundException("Tutoring session not found")
        return session

    @BaseService.measure_operation("admin_list_tutoring_sessions")
    def list_tutoring_sessions(self, status: Optional[str] = None) -> List[TutoringSession]:
        return self.session_repository.list_by_status(status)

    def _set_tutoring_status(
        self,
        session: TutoringSession,
        status: str,
        title: str,
        message: str,
        rejection_reason: Optional[str] = None,
    ) -> TutoringSession:
        approved = status == TutoringStatus.APPROVED.value
        with self.transaction():
            self.session_repository.update_entity(
                session, status=status, rejection_reason=None if approved else rejection_reason
            )
            self.notification_service.notify(
                session.teacher_id,
                title,
                message,
                NotificationType.SUCCESS.value if approved else NotificationType.WARNING.value,
                f"/teacher/tutoring/{session.id}",
            )
        self.log_operation("admin_set_tutoring_status", session_id=session.id, status=status)
        return session

    @BaseService.measure_operation("admin_update_tutoring_status")
    def update_tutoring_status(self, session_id: str, status: Optional[str]) -> TutoringSession:
        if status not in {s.value for s in TutoringStatus}:
            raise ValidationException("Invalid tutoring status")
        session = self._get_session_or_404(session_id)
        approved = status == TutoringStatus.APPROVED.value
        verdict = "approved" if approved else "rejected"
        return self._set_tutoring_status(
            session,
            status,
            f"Tutoring Session {verdict.capitalize()}",
            f"Your tutoring session for \"{session.subject}\" has been {verdict}.",
        )

    @BaseService.measure_operation("admin_approve_tutoring")
    def approve_tutoring(self, session_id: str) -> TutoringSession:
        session = self._get_session_or_404(session_id)
        return self._set_tutoring_status(
            session,
            TutoringStatus.APPROVED.value,
            "Tutoring session approved",
            f"Your tutoring session for \"{session.subject}\" has been approved and is now available to students.",
        )

    @BaseService.measure_operation("admin_reject_tutoring")
    def reject_tutoring(self, session_id: str, reason: Optional[str] = None) -> TutoringSession:
        session = self._get_session_or_404(session_id)
        message = f"Your tutoring session for \"{session.subject}\" has been rejected."
        if reason:
            message += f" Reason: {reason}"
        return self._set_tutoring_status(
            session, TutoringStatus.REJECTED.value, "Tutoring session rejected", message, rejection_reason=reason
        )

    # Users

    @BaseService.measure_operation("admin_list_users")
    def list_users(self, role: Optional[str] = None, search: Optional[str] = None) -> List[User]:
        return self.user_repository.list_users(role=role, search=search)

    @BaseService.measure_operation("admin_pending_teachers")
    def list_pending_teachers(self) -> List[TeacherProfile]:
        """Teachers whose profile lacks a specialization, education or experience."""
        return self.teacher_profile_repository.list_incomplete()

    # Points packages

    def _get_package_or_404(self, package_id: str) -> PointsPackage:
        package = self.package_repository.get_by_id(package_id, load_relationships=False)
        if package is None:
            raise NotFoundException("Points package not found")
        return package

    @BaseService.measure_operation("admin_list_points_packages")
    def list_points_packages(self) -> List[PointsPackage]:
        return self.package_repository.list_all()

    @BaseService.measure_operation("admin_create_points_package")
    def create_points_package(self, data: PointsPackageCreate) -> PointsPackage:
        if not data.name or not data.points or not data.price:
            raise ValidationException("Name, points, and price are required")
        with self.transaction():
            package = self.package_repository.create(
                name=data.name,
                description=data.description,
                points=data.points,
                price=data.price,
                bonus_points=data.bonus_points or 0,
                is_active=True if data.is_active is None else data.is_active,
            )
        self.log_operation("admin_create_points_package", package_id=package.id)
        return package

    @BaseService.measure_operation("admin_update_points_package")
    def update_points_package(self, package_id: str, data: PointsPackageUpdate) -> PointsPackage:
        package = self._get_package_or_404(package_id)
        fields = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        with self.transaction():
            self.package_repository.update_entity(package, **fields)
        return package

    @BaseService.measure_operation("admin_delete_points_package")
    def delete_points_package(self, package_id: str) -> None:
        package = self._get_package_or_404(package_id)
        with self.transaction():
            self.package_repository.delete_entity(package)
        self.log_operation("admin_delete_points_package", package_id=package_id)

    @BaseService.measure_operation("admin_toggle_points_package")
    def toggle_points_package(self, package_id: str) -> PointsPackage:
        package = self._get_package_or_404(package_id)
        with self.transaction():
            self.package_repository.update_entity(package, is_active=not package.is_active)
        return package

    # Reports

    @BaseService.measure_operation("admin_payments_report")
    def get_payments_report(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        status: Optional[str] = None,
    ) -> Dict[str, Any]:
        payments = self.payment_repository.search(start=start_date, end=end_date, status=status)
        completed_total = sum(p.amount or 0 for p in payments if p.status == PaymentStatus.COMPLETED.value)
        return {
            "payments": payments,
            "summary": {
                "total_payments": len(payments),
                "total_amount": round(completed_total, 2),
                "count_by_status": dict(Counter(p.status for p in payments)),
                "count_by_type": dict(Counter(p.reference_type or "unknown" for p in payments)),
            },
        }

    @BaseService.measure_operation("admin_enrollment_stats")
    def get_enrollment_stats(self) -> Dict[str, Any]:
        """Totals, every enrolled course by popularity, and the last twelve months oldest first."""
        month_start = start_of_month()
        oldest = months_ago(month_start, STATS_MONTHS - 1)
        per_month = Counter(
            (ensure_utc(enrolled).year, ensure_utc(enrolled).month)
            for enrolled in self.enrollment_repository.enrolled_since(oldest)
        )

        monthly_stats = []
        for offset in range(STATS_MONTHS - 1, -1, -1):
            month = months_ago(month_start, offset)
            monthly_stats.append(
                {
                    "month": calendar.month_name[month.month],
                    "year": month.year,
                    "count": per_month.get((month.year, month.month), 0),
                }
            )

        top_courses = [
            {
                "course_id": course.id,
                "course_title": course.title,
                "teacher_name": course.teacher.name if course.teacher else "Unknown Teacher",
                "enrollment_count": count,
            }
            for course, count in self.enrollment_repository.top_courses(limit=None)
            if count
        ]
        return {
            "total_enrollments": self.enrollment_repository.count(),
            "top_courses": top_courses,
            "monthly_stats": monthly_stats,
        }

# backend/app/services/user_service.py
"""
User Service for the EduMarket platform

Profiles, teacher profiles and dashboards, weekly availability and the
admin user management operations.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..auth import get_password_hash
from ..core.constants import (
    DASHBOARD_RECENT_ITEMS,
    MIN_PASSWORD_LENGTH,
    POINTS_TRANSACTIONS_HISTORY,
    RECENT_CERTIFICATES,
    TIME_SLOT_PATTERN,
)
from ..core.enums import CourseStatus, RoleName, TutoringRequestStatus, TutoringStatus
from ..core.exceptions import ForbiddenException, NotFoundException, ValidationException
from ..models.user import TeacherProfile, User, UserAvailability
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


class UserService(BaseService):
    """Service for user profile and teacher profile operations."""

    def __init__(self, db: Session, user_repository=None, teacher_profile_repository=None):
        super().__init__(db)
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)
        self.teacher_profile_repository = (
            teacher_profile_repository or RepositoryFactory.create_teacher_profile_repository(db)
        )
        self.availability_repository = RepositoryFactory.create_user_availability_repository(db)
        self.course_repository = RepositoryFactory.create_course_repository(db)
        self.enrollment_repository = RepositoryFactory.create_enrollment_repository(db)
        self.tutoring_session_repository = RepositoryFactory.create_tutoring_session_repository(db)
        self.tutoring_request_repository = RepositoryFactory.create_tutoring_request_repository(db)
        self.review_repository = RepositoryFactory.create_course_review_repository(db)
        self.points_repository = RepositoryFactory.create_points_transaction_repository(db)
        self.certificate_repository = RepositoryFactory.create_certificate_repository(db)

    def _get_user_or_404(self, user_id: str) -> User:
        user = self.user_repository.get_by_id(user_id)
        if user is None:
            raise NotFoundException("User not found")
        return user

    # Accounts

    @BaseService.measure_operation("list_users")
    def list_users(self, role: Optional[str] = None, search: Optional[str] = None) -> List[User]:
        return self.user_repository.list_users(role=role, search=search)

    @BaseService.measure_operation("get_user")
    def get_user(self, user_id: str) -> Dict[str, Any]:
        """User with their most recent certificates."""
        user = self._get_user_or_404(user_id)
        return {
            "user": user,
            "certificates": self.certificate_repository.list_for_user(user_id, limit=RECENT_CERTIFICATES),
        }

    @BaseService.measure_operation("update_current_user")
    def update_current_user(self, user_id: str, **fields: Any) -> User:
        """Update name, bio, avatar or password of the calling user."""
        user = self._get_user_or_404(user_id)
        updates = {k: v for k, v in fields.items() if k in {"name", "bio", "avatar"} and v is not None}

        password = fields.get("password")
        if password is not None:
            if len(password) < MIN_PASSWORD_LENGTH:
                raise ValidationException(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
            updates["hashed_password"] = get_password_hash(password)

        with self.transaction():
            self.user_repository.update_entity(user, **updates)

        self.log_operation("update_current_user", user_id=user_id, fields=sorted(updates))
        return user

    @BaseService.measure_operation("admin_update_user")
    def admin_update_user(self, user_id: str, **fields: Any) -> User:
        """
        Admin edit of any user.

        Promoting a user to teacher creates the missing teacher profile.
        """
        user = self._get_user_or_404(user_id)
        updates = {k: v for k, v in fields.items() if v is not None}

        role = updates.get("role")
        if role is not None and role not in {r.value for r in RoleName}:
            raise ValidationException("Invalid role. Must be student, teacher, or admin")

        email = updates.get("email")
        if email is not None and email.lower() != user.email.lower():
            if self.user_repository.get_by_email(email):
                raise ValidationException("User already exists")

        with self.transaction():
            self.user_repository.update_entity(user, **updates)
            if role == RoleName.TEACHER.value:
                self.teacher_profile_repository.get_or_create(user.id)

        self.db.refresh(user)
        self.log_operation("admin_update_user", user_id=user_id, fields=sorted(updates))
        return user

    @BaseService.measure_operation("delete_user")
    def delete_user(self, user_id: str) -> None:
        user = self._get_user_or_404(user_id)
        with self.transaction():
            self.user_repository.delete_entity(user)
        self.logger.info(f"Deleted user {user_id}")

    @BaseService.measure_operation("get_points_transactions")
    def get_points_transactions(self, user_id: str):
        return self.points_repository.list_for_user(user_id, limit=POINTS_TRANSACTIONS_HISTORY)

    # Teacher profiles

    @BaseService.measure_operation("get_teacher_public_profile")
    def get_teacher_public_profile(self, teacher_id: str) -> Dict[str, Any]:
        """Teacher, their published courses and the course count."""
        teacher = self.user_repository.get_by_id(teacher_id)
        if teacher is None or not teacher.is_teacher:
            raise NotFoundException("Teacher not found")

        courses = self.course_repository.list_by_teacher(teacher_id, published_only=True)
        return {"teacher": teacher, "courses": courses, "courses_count": len(courses)}

    @BaseService.measure_operation("get_my_teacher_profile")
    def get_my_teacher_profile(self, user_id: str) -> TeacherProfile:
        profile = self.teacher_profile_repository.get_by_user_id(user_id)
        if profile is None:
            raise NotFoundException("Teacher profile not found")
        return profile

    @BaseService.measure_operation("update_teacher_profile")
    def update_teacher_profile(self, user: User, **fields: Any) -> TeacherProfile:
        if not user.is_teacher:
            raise ForbiddenException("Only teachers can update teacher profile")

        updates = {k: v for k, v in fields.items() if v is not None}
        with self.transaction():
            profile = self.teacher_profile_repository.upsert(user.id, **updates)

        self.log_operation("update_teacher_profile", user_id=user.id, fields=sorted(updates))
        return profile

    @BaseService.measure_operation("update_teacher_stats")
    def update_teacher_stats(self, actor: User, teacher_id: str) -> int:
        """
        Recount the distinct students of a teacher.

        Students are the union of users enrolled in any of the teacher's
        courses and students with an accepted tutoring request.
        """
        if actor.id != teacher_id and not actor.is_admin:
            raise ForbiddenException("Not authorized")

        profile = self.teacher_profile_repository.get_by_user_id(teacher_id)
        if profile is None:
            raise NotFoundException("Teacher profile not found")

        course_ids = self.course_repository.ids_for_teacher(teacher_id)
        students = set(self.enrollment_repository.distinct_students_for_courses(course_ids))
        students.update(self.tutoring_request_repository.accepted_student_ids_for_teacher(teacher_id))

        with self.transaction():
            profile.students = len(students)

        self.log_operation("update_teacher_stats", teacher_id=teacher_id, students=len(students))
        return len(students)

    # Teacher dashboard

    @BaseService.measure_operation("get_teacher_dashboard")
    def get_teacher_dashboard(self, teacher_id: str) -> Dict[str, Any]:
        profile = self.get_my_teacher_profile(teacher_id)
        return {
            "profile": profile,
            "course_stats": self._with_all_statuses(
                self.course_repository.count_by_status(teacher_id), CourseStatus
            ),
            "tutoring_stats": self._with_all_statuses(
                self.tutoring_session_repository.count_by_status(teacher_id), TutoringStatus
            ),
            "recent_enrollments": [
                {
                    "id": e.id,
                    "enrolled_at": e.enrolled_at,
                    "user": {"id": e.user.id, "name": e.user.name, "avatar": e.user.avatar},
                    "course": {"id": e.course.id, "title": e.course.title},
                }
                for e in self.enrollment_repository.recent(DASHBOARD_RECENT_ITEMS, teacher_id=teacher_id)
            ],
            "recent_requests": [
                {
                    "id": r.id,
                    "status": r.status,
                    "created_at": r.created_at,
                    "student": {"id": r.student.id, "name": r.student.name, "avatar": r.student.avatar},
                    "session": {"id": r.session.id, "subject": r.session.subject},
                }
                for r in self.tutoring_request_repository.recent_for_teacher(teacher_id, DASHBOARD_RECENT_ITEMS)
            ],
        }

    @staticmethod
    def _with_all_statuses(counts: Dict[str, int], enum_cls) -> Dict[str, int]:
        result = {member.value: 0 for member in enum_cls}
        result.update(counts)
        return result

    @BaseService.measure_operation("get_teacher_stats")
    def get_teacher_stats(self, teacher_id: str) -> Dict[str, Any]:
        course_ids = self.course_repository.ids_for_teacher(teacher_id)
        ratings = self.review_repository.summary_for_courses(course_ids)
        review_count = sum(count for _, count in ratings.values())
        weighted = sum(avg * count for avg, count in ratings.values())
        course_counts = self.course_repository.count_by_status(teacher_id)
        return {
            "total_courses": len(course_ids),
            "published_courses": course_counts.get(CourseStatus.PUBLISHED.value, 0),
            "total_enrollments": sum(self.enrollment_repository.count_by_course(course_ids).values()),
            "total_students": len(self.enrollment_repository.distinct_students_for_courses(course_ids)),
            "average_rating": round(weighted / review_count, 2) if review_count else 0,
            "total_reviews": review_count,
            "tutoring_sessions": sum(self.tutoring_session_repository.count_by_status(teacher_id).values()),
            "pending_requests": self.tutoring_request_repository.count_for_teacher(
                teacher_id, TutoringRequestStatus.PENDING.value
            ),
        }

    @BaseService.measure_operation("get_teacher_courses")
    def get_teacher_courses(self, teacher_id: str) -> List[Dict[str, Any]]:
        courses = self.course_repository.list_by_teacher(teacher_id)
        course_ids = [c.id for c in courses]
        enrollments = self.enrollment_repository.count_by_course(course_ids)
        ratings = self.review_repository.summary_for_courses(course_ids)
        return [
            {
                "course": course,
                "enrollment_count": enrollments.get(course.id, 0),
                "average_rating": ratings.get(course.id, (0, 0))[0],
                "review_count": ratings.get(course.id, (0, 0))[1],
            }
            for course in courses
        ]

    @BaseService.measure_operation("get_teacher_activities")
    def get_teacher_activities(self, teacher_id: str) -> List[Dict[str, Any]]:
        """Latest enrollments, tutoring requests and reviews, merged newest first."""
        activities: List[Dict[str, Any]] = []
        for e in self.enrollment_repository.recent(DASHBOARD_RECENT_ITEMS, teacher_id=teacher_id):
            activities.append(
                {
                    "type": "enrollment",
                    "message": f"{e.user.name} enrolled in {e.course.title}",
                    "timestamp": e.enrolled_at,
                }
            )
        for r in self.tutoring_request_repository.recent_for_teacher(teacher_id, DASHBOARD_RECENT_ITEMS):
            activities.append(
                {
                    "type": "tutoring_request",
                    "message": f"{r.student.name} requested tutoring for {r.session.subject}",
                    "timestamp": r.created_at,
                }
            )
        for review in self.review_repository.recent_for_teacher(teacher_id, DASHBOARD_RECENT_ITEMS):
            activities.append(
                {
                    "type": "review",
                    "message": f"{review.user.name} left a {review.rating}-star review",
                    "timestamp": review.created_at,
                }
            )
        activities.sort(key=lambda a: a["timestamp"], reverse=True)
        return activities[:DASHBOARD_RECENT_ITEMS]

    @BaseService.measure_operation("get_teacher_reviews")
    def get_teacher_reviews(self, teacher_id: str):
        return self.review_repository.recent_for_teacher(teacher_id, DASHBOARD_RECENT_ITEMS)

    # Availability

    @BaseService.measure_operation("get_availability")
    def get_availability(self, user_id: str) -> List[UserAvailability]:
        return self.availability_repository.list_for_user(user_id)

    @BaseService.measure_operation("set_availability")
    def set_availability(self, user_id: str, availability: Any) -> List[UserAvailability]:
        """Replace the whole weekly availability of a user."""
        if not isinstance(availability, list):
            raise ValidationException("Availability must be an array")

        slots = [self._validate_slot(slot) for slot in availability]
        with self.transaction():
            result = self.availability_repository.replace_for_user(user_id, slots)

        self.log_operation("set_availability", user_id=user_id, slots=len(slots))
        return result

    @staticmethod
    def _validate_slot(slot: Any) -> Dict[str, Any]:
        if not isinstance(slot, dict):
            raise ValidationException("Each availability slot must be an object")
        day = slot.get("day_of_week")
        start, end = slot.get("start_time"), slot.get("end_time")
        if not isinstance(day, int) or isinstance(day, bool) or not 0 <= day <= 6:
            raise ValidationException("day_of_week must be an integer between 0 and 6")
        for value in (start, end):
            if not isinstance(value, str) or not re.match(TIME_SLOT_PATTERN, value):
                raise ValidationException("Times must use the HH:MM format")
        if start >= end:
            raise ValidationException("start_time must be before end_time")
        return {"day_of_week": day, "start_time": start, "end_time": end}

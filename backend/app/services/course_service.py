# backend/app/services/course_service.py
"""
Course Service for the EduMarket platform

Catalogue browsing, course authoring and deletion. The nested content tree
is handled by CourseContentService; this service owns the transactions and
the ownership checks around it.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.enums import CourseStatus
from ..core.exceptions import ForbiddenException, NotFoundException, ValidationException
from ..models.calendar_event import CalendarEvent
from ..models.certificate import Certificate
from ..models.course import Course
from ..models.enrollment import Enrollment
from ..models.favorite import LikedCourse, SavedCourse
from ..models.review import CourseReview
from ..models.subscription import BundleCourse
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..schemas.course import CourseCreate, CourseUpdate
from .base import BaseService
from .course_content_service import CourseContentService

logger = logging.getLogger(__name__)

RatingSummary = Tuple[float, int]


class CourseService(BaseService):
    """Service for course catalogue and authoring operations."""

    def __init__(self, db: Session, course_repository=None, content_service: Optional[CourseContentService] = None):
        super().__init__(db)
        self.course_repository = course_repository or RepositoryFactory.create_course_repository(db)
        self.content_service = content_service or CourseContentService(db)
        self.review_repository = RepositoryFactory.create_course_review_repository(db)
        self.enrollment_repository = RepositoryFactory.create_enrollment_repository(db)

    def get_course_or_404(self, course_id: str) -> Course:
        course = self.course_repository.get_by_id(course_id)
        if course is None:
            raise NotFoundException("Course not found")
        return course

    def _check_owner(self, course: Course, user: User, action: str) -> None:
        if course.teacher_id != user.id and not user.is_admin:
            raise ForbiddenException(f"Not authorized to {action} this course")

    def with_ratings(self, courses: List[Course]) -> List[Tuple[Course, RatingSummary]]:
        ratings = self.review_repository.summary_for_courses([c.id for c in courses])
        return [(course, ratings.get(course.id, (0, 0))) for course in courses]

    # Browsing

    @BaseService.measure_operation("list_published_courses")
    def list_published(
        self,
        subject: Optional[str] = None,
        search: Optional[str] = None,
        featured: Optional[bool] = None,
    ) -> List[Tuple[Course, RatingSummary]]:
        courses = self.course_repository.list_published(subject=subject, search=search, featured=featured)
        return self.with_ratings(courses)

    @BaseService.measure_operation("get_course")
    def get_course(self, course_id: str, viewer: Optional[User] = None) -> Dict[str, Any]:
        """
        Course with its whole content tree.

        Unpublished courses are visible to their teacher and to admins only.
        """
        course = self.get_course_or_404(course_id)
        if not course.is_published:
            if viewer is None or (viewer.id != course.teacher_id and not viewer.is_admin):
                raise ForbiddenException("Course not available")

        average, count = self.review_repository.summary_for_courses([course.id]).get(course.id, (0, 0))
        return {
            "course": course,
            "average_rating": average,
            "review_count": count,
            "enrollment_count": self.enrollment_repository.count_for_course(course.id),
        }

    @BaseService.measure_operation("get_teacher_courses")
    def get_teacher_courses(self, teacher_id: str, viewer: Optional[User] = None) -> List[Tuple[Course, RatingSummary]]:
        """All courses for the teacher themself or an admin, published ones for everyone else."""
        own_view = viewer is not None and (viewer.id == teacher_id or viewer.is_admin)
        courses = self.course_repository.list_by_teacher(teacher_id, published_only=not own_view)
        return self.with_ratings(courses)

    @BaseService.measure_operation("get_my_courses")
    def get_my_courses(self, teacher_id: str) -> List[Tuple[Course, RatingSummary]]:
        return self.with_ratings(self.course_repository.list_by_teacher(teacher_id))

    # Authoring

    @BaseService.measure_operation("create_course")
    def create_course(self, teacher: User, data: CourseCreate) -> Course:
        """
        Create a draft course with its nested content.

        Raises:
            ValidationException: If title or subject is missing
        """
        if not data.title or not data.subject:
            raise ValidationException("Title and subject are required")

        with self.transaction():
            course = self.course_repository.create(
                title=data.title,
                description=data.description,
                subject=data.subject,
                image=data.image,
                price=data.price or 0,
                points_price=data.points_price or 0,
                featured=data.featured,
                teacher_id=teacher.id,
                status=CourseStatus.DRAFT.value,
            )
            self.content_service.build_topics(course, data.topics)

        self.log_operation("create_course", course_id=course.id, teacher_id=teacher.id, topics=len(data.topics))
        return course

    @BaseService.measure_operation("update_course")
    def update_course(self, user: User, course_id: str, data: CourseUpdate) -> Course:
        """Partial update; a ``topics`` list triggers content reconciliation."""
        course = self.get_course_or_404(course_id)
        self._check_owner(course, user, "update")

        fields = data.model_dump(exclude_unset=True, exclude={"topics"})
        fields = {k: v for k, v in fields.items() if v is not None}
        if "status" in fields and fields["status"] not in {s.value for s in CourseStatus}:
            raise ValidationException("Invalid course status")

        with self.transaction():
            self.course_repository.update_entity(course, **fields)
            if data.topics is not None:
                self.content_service.reconcile_topics(course, data.topics)

        if data.topics is not None:
            # Reconciled children were written through repositories; reload the tree
            self.db.expire_all()
        self.log_operation("update_course", course_id=course_id, fields=sorted(fields), topics=data.topics is not None)
        return course

    @BaseService.measure_operation("delete_course")
    def delete_course(self, user: User, course_id: str) -> None:
        """
        Delete a course and everything that references it.

        Order: enrollments, reviews, certificates, bundle links, saved and
        liked rows, then the content tree (learner artefacts per lesson first),
        then the course itself.
        """
        course = self.get_course_or_404(course_id)
        self._check_owner(course, user, "delete")

        with self.transaction():
            self.enrollment_repository.delete_where(Enrollment.course_id == course_id)
            self.review_repository.delete_where(CourseReview.course_id == course_id)
            RepositoryFactory.create_certificate_repository(self.db).delete_where(Certificate.course_id == course_id)
            RepositoryFactory.create_base_repository(self.db, BundleCourse).delete_where(
                BundleCourse.course_id == course_id
            )
            RepositoryFactory.create_saved_course_repository(self.db).delete_where(SavedCourse.course_id == course_id)
            RepositoryFactory.create_liked_course_repository(self.db).delete_where(LikedCourse.course_id == course_id)
            RepositoryFactory.create_calendar_event_repository(self.db).delete_where(
                CalendarEvent.course_id == course_id
            )
            self.content_service.delete_content(course)
            self.course_repository.delete_entity(course)

        self.log_operation("delete_course", course_id=course_id, deleted_by=user.id)

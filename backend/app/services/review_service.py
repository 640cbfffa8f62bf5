# backend/app/services/review_service.py
"""
ReviewService: business logic for course and tutoring reviews.

Implements:
- Eligibility (enrolled in the course; completed appointment or accepted
  request for a tutoring session)
- One review per user and target; submitting again updates it
- Listing with the average rating
"""

import logging
from typing import Any, Dict, List, Optional, Union

from sqlalchemy.orm import Session

from ..core.constants import MAX_RATING, MIN_RATING
from ..core.exceptions import NotFoundException, ValidationException
from ..models.review import CourseReview, TutoringReview
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

MAX_COMMENT_LENGTH = 2000


def average_rating(reviews: List[Union[CourseReview, TutoringReview]]) -> float:
    if not reviews:
        return 0.0
    return round(sum(r.rating for r in reviews) / len(reviews), 2)


class ReviewService(BaseService):
    """Service layer for reviews & ratings."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.course_review_repository = RepositoryFactory.create_course_review_repository(db)
        self.tutoring_review_repository = RepositoryFactory.create_tutoring_review_repository(db)
        self.course_repository = RepositoryFactory.create_course_repository(db)
        self.enrollment_repository = RepositoryFactory.create_enrollment_repository(db)
        self.session_repository = RepositoryFactory.create_tutoring_session_repository(db)
        self.appointment_repository = RepositoryFactory.create_tutoring_appointment_repository(db)
        self.request_repository = RepositoryFactory.create_tutoring_request_repository(db)

    @staticmethod
    def _clean(rating: Optional[int], comment: Optional[str]) -> Optional[str]:
        if not isinstance(rating, int) or isinstance(rating, bool) or not MIN_RATING <= rating <= MAX_RATING:
            raise ValidationException(f"Rating must be an integer between {MIN_RATING} and {MAX_RATING}")
        if comment is not None:
            comment = comment.strip()
            if len(comment) > MAX_COMMENT_LENGTH:
                raise ValidationException(f"Review comment cannot exceed {MAX_COMMENT_LENGTH} characters")
        return comment or None

    # Courses

    def _get_course_or_404(self, course_id: str):
        course = self.course_repository.get_by_id(course_id, load_relationships=False)
        if course is None:
            raise NotFoundException("Course not found")
        return course

    @BaseService.measure_operation("list_course_reviews")
    def list_course_reviews(self, course_id: str) -> Dict[str, Any]:
        course = self._get_course_or_404(course_id)
        reviews = self.course_review_repository.list_for_course(course.id)
        return {"reviews": reviews, "average_rating": average_rating(reviews), "total_reviews": len(reviews)}

    @BaseService.measure_operation("submit_course_review")
    def submit_course_review(
        self, user: User, course_id: str, rating: Optional[int], comment: Optional[str] = None
    ) -> CourseReview:
        """Create or update the user's review of a course they are enrolled in."""
        comment = self._clean(rating, comment)
        course = self._get_course_or_404(course_id)
        if self.enrollment_repository.get_for_user_course(user.id, course.id) is None:
            raise ValidationException("You can only review courses you are enrolled in")

        review = self.course_review_repository.find(user.id, course.id)
        with self.transaction():
            if review is None:
                review = self.course_review_repository.create(
                    user_id=user.id, course_id=course.id, rating=rating, comment=comment
                )
            else:
                self.course_review_repository.update_entity(review, rating=rating, comment=comment)

        self.log_operation("submit_course_review", user_id=user.id, course_id=course.id, rating=rating)
        return review

    @BaseService.measure_operation("delete_course_review")
    def delete_course_review(self, user: User, course_id: str) -> None:
        review = self.course_review_repository.find(user.id, course_id)
        if review is None:
            raise NotFoundException("Review not found")
        with self.transaction():
            self.course_review_repository.delete_entity(review)

    # Tutoring

    def _get_session_or_404(self, session_id: str):
        session = self.session_repository.get_by_id(session_id, load_relationships=False)
        if session is None:
            raise NotFoundException("Tutoring session not found")
        return session

    @BaseService.measure_operation("list_tutoring_reviews")
    def list_tutoring_reviews(self, session_id: str) -> Dict[str, Any]:
        session = self._get_session_or_404(session_id)
        reviews = self.tutoring_review_repository.list_for_session(session.id)
        return {"reviews": reviews, "average_rating": average_rating(reviews), "total_reviews": len(reviews)}

    @BaseService.measure_operation("submit_tutoring_review")
    def submit_tutoring_review(
        self, user: User, session_id: str, rating: Optional[int], comment: Optional[str] = None
    ) -> TutoringReview:
        """Create or update the user's review of a session they were taught in."""
        comment = self._clean(rating, comment)
        session = self._get_session_or_404(session_id)
        attended = self.appointment_repository.find_completed(session.id, user.id) is not None
        if not attended and not self.request_repository.has_accepted(session.id, user.id):
            raise ValidationException("You can only review tutoring sessions you have attended")

        review = self.tutoring_review_repository.find(user.id, session.id)
        with self.transaction():
            if review is None:
                review = self.tutoring_review_repository.create(
                    user_id=user.id, session_id=session.id, rating=rating, comment=comment
                )
            else:
                self.tutoring_review_repository.update_entity(review, rating=rating, comment=comment)

        self.log_operation("submit_tutoring_review", user_id=user.id, session_id=session.id, rating=rating)
        return review

    @BaseService.measure_operation("delete_tutoring_review")
    def delete_tutoring_review(self, user: User, session_id: str) -> None:
        review = self.tutoring_review_repository.find(user.id, session_id)
        if review is None:
            raise NotFoundException("Review not found")
        with self.transaction():
            self.tutoring_review_repository.delete_entity(review)

"""ReviewService: rating rules, eligibility and one review per user and target."""

import pytest

from app.core.exceptions import NotFoundException, ValidationException
from app.models.review import CourseReview
from app.schemas.tutoring import TutoringRequestCreate, TutoringRequestStatusUpdate
from app.services.enrollment_service import EnrollmentService
from app.services.review_service import ReviewService, average_rating
from app.services.tutoring_request_service import TutoringRequestService


class TestAverageRating:
    def test_empty(self):
        assert average_rating([]) == 0.0

    def test_rounded_to_two_places(self):
        reviews = [CourseReview(rating=5), CourseReview(rating=4), CourseReview(rating=4)]
        assert average_rating(reviews) == 4.33


class TestCourseReviews:
    @pytest.mark.parametrize("rating", [0, 6, None, True, 3.5])
    def test_rating_must_be_int_in_range(self, db, student, published_course, rating):
        EnrollmentService(db).enroll(student, published_course.id)
        with pytest.raises(ValidationException) as exc:
            ReviewService(db).submit_course_review(student, published_course.id, rating)
        assert exc.value.message == "Rating must be an integer between 1 and 5"

    def test_requires_enrollment(self, db, student, published_course):
        with pytest.raises(ValidationException) as exc:
            ReviewService(db).submit_course_review(student, published_course.id, 5)
        assert exc.value.message == "You can only review courses you are enrolled in"

    def test_resubmit_updates_existing(self, db, student, published_course):
        EnrollmentService(db).enroll(student, published_course.id)
        service = ReviewService(db)

        first = service.submit_course_review(student, published_course.id, 3, "  Okay  ")
        second = service.submit_course_review(student, published_course.id, 5, "Great after all")

        assert first.id == second.id
        assert second.rating == 5
        listing = service.list_course_reviews(published_course.id)
        assert listing["total_reviews"] == 1
        assert listing["average_rating"] == 5

    def test_blank_comment_stored_as_none(self, db, student, published_course):
        EnrollmentService(db).enroll(student, published_course.id)
        review = ReviewService(db).submit_course_review(student, published_course.id, 4, "   ")
        assert review.comment is None

    def test_average_over_students(self, db, student, other_student, published_course):
        service = ReviewService(db)
        for user, rating in ((student, 4), (other_student, 5)):
            EnrollmentService(db).enroll(user, published_course.id)
            service.submit_course_review(user, published_course.id, rating)

        listing = service.list_course_reviews(published_course.id)

        assert listing["average_rating"] == 4.5
        assert listing["total_reviews"] == 2

    def test_delete_own_review(self, db, student, published_course):
        EnrollmentService(db).enroll(student, published_course.id)
        service = ReviewService(db)
        service.submit_course_review(student, published_course.id, 4)

        service.delete_course_review(student, published_course.id)

        assert service.list_course_reviews(published_course.id)["total_reviews"] == 0
        with pytest.raises(NotFoundException):
            service.delete_course_review(student, published_course.id)

    def test_unknown_course(self, db, student):
        with pytest.raises(NotFoundException):
            ReviewService(db).list_course_reviews("01HZZZZZZZZZZZZZZZZZZZZZZZ")


class TestTutoringReviews:
    def test_requires_attendance(self, db, student, approved_session):
        with pytest.raises(ValidationException):
            ReviewService(db).submit_tutoring_review(student, approved_session.id, 5)

    def test_accepted_request_is_enough(self, db, teacher, student, approved_session):
        requests = TutoringRequestService(db)
        request = requests.create_request(student, approved_session.id, TutoringRequestCreate())
        requests.update_status(
            teacher,
            request.id,
            TutoringRequestStatusUpdate(status="accepted", scheduled_at="2030-01-07T15:00:00Z", duration=60),
        )

        review = ReviewService(db).submit_tutoring_review(student, approved_session.id, 5, "Very clear")

        assert review.session_id == approved_session.id
        assert ReviewService(db).list_tutoring_reviews(approved_session.id)["average_rating"] == 5

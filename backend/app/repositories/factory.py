# backend/app/repositories/factory.py
"""
Repository Factory for the EduMarket platform

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from sqlalchemy.orm import Session

from .achievement_repository import AchievementRepository, UserAchievementRepository
from .base_repository import BaseRepository
from .blog_repository import BlogCategoryRepository, BlogCommentRepository, BlogPostRepository, BlogTagRepository
from .calendar_repository import CalendarEventRepository
from .certificate_repository import CertificateRepository
from .course_repository import (
    AssignmentRepository,
    AssignmentSubmissionRepository,
    CourseRepository,
    LessonRepository,
    QuestionRepository,
    QuizAttemptRepository,
    QuizRepository,
    TopicRepository,
)
from .enrollment_repository import EnrollmentRepository, LessonProgressRepository
from .favorites_repository import CourseFavoritesRepository
from .notification_repository import NotificationRepository
from .payment_repository import PaymentRepository
from .points_repository import PointsPackageRepository, PointsTransactionRepository
from .referral_repository import ReferralCodeRepository, ReferralUseRepository
from .review_repository import CourseReviewRepository, TutoringReviewRepository
from .subscription_repository import (
    BundleOwnershipRepository,
    CourseBundleRepository,
    SubscriptionPlanRepository,
    UserSubscriptionRepository,
)
from .tutoring_repository import (
    TutoringAppointmentRepository,
    TutoringAvailabilityRepository,
    TutoringMessageRepository,
    TutoringRequestRepository,
    TutoringSessionRepository,
)
from .user_repository import TeacherProfileRepository, UserAvailabilityRepository, UserRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations in tests.
    """

    @staticmethod
    def create_base_repository(db: Session, model) -> BaseRepository:
        """
        Create a generic base repository for any model.

        Args:
            db: Database session
            model: SQLAlchemy model class

        Returns:
            BaseRepository instance
        """
        return BaseRepository(db, model)

    # Users
    @staticmethod
    def create_user_repository(db: Session) -> UserRepository:
        return UserRepository(db)

    @staticmethod
    def create_teacher_profile_repository(db: Session) -> TeacherProfileRepository:
        return TeacherProfileRepository(db)

    @staticmethod
    def create_user_availability_repository(db: Session) -> UserAvailabilityRepository:
        return UserAvailabilityRepository(db)

    # Courses and content
    @staticmethod
    def create_course_repository(db: Session) -> CourseRepository:
        return CourseRepository(db)

    @staticmethod
    def create_topic_repository(db: Session) -> TopicRepository:
        return TopicRepository(db)

    @staticmethod
    def create_lesson_repository(db: Session) -> LessonRepository:
        return LessonRepository(db)

    @staticmethod
    def create_quiz_repository(db: Session) -> QuizRepository:
        return QuizRepository(db)

    @staticmethod
    def create_question_repository(db: Session) -> QuestionRepository:
        return QuestionRepository(db)

    @staticmethod
    def create_assignment_repository(db: Session) -> AssignmentRepository:
        return AssignmentRepository(db)

    @staticmethod
    def create_quiz_attempt_repository(db: Session) -> QuizAttemptRepository:
        return QuizAttemptRepository(db)

    @staticmethod
    def create_assignment_submission_repository(db: Session) -> AssignmentSubmissionRepository:
        return AssignmentSubmissionRepository(db)

    # Enrollment and progress
    @staticmethod
    def create_enrollment_repository(db: Session) -> EnrollmentRepository:
        return EnrollmentRepository(db)

    @staticmethod
    def create_lesson_progress_repository(db: Session) -> LessonProgressRepository:
        return LessonProgressRepository(db)

    @staticmethod
    def create_saved_course_repository(db: Session) -> CourseFavoritesRepository:
        return CourseFavoritesRepository.saved(db)

    @staticmethod
    def create_liked_course_repository(db: Session) -> CourseFavoritesRepository:
        return CourseFavoritesRepository.liked(db)

    # Points, referrals, payments
    @staticmethod
    def create_points_transaction_repository(db: Session) -> PointsTransactionRepository:
        return PointsTransactionRepository(db)

    @staticmethod
    def create_points_package_repository(db: Session) -> PointsPackageRepository:
        return PointsPackageRepository(db)

    @staticmethod
    def create_referral_code_repository(db: Session) -> ReferralCodeRepository:
        return ReferralCodeRepository(db)

    @staticmethod
    def create_referral_use_repository(db: Session) -> ReferralUseRepository:
        return ReferralUseRepository(db)

    @staticmethod
    def create_payment_repository(db: Session) -> PaymentRepository:
        return PaymentRepository(db)

    # Subscriptions and bundles
    @staticmethod
    def create_subscription_plan_repository(db: Session) -> SubscriptionPlanRepository:
        return SubscriptionPlanRepository(db)

    @staticmethod
    def create_user_subscription_repository(db: Session) -> UserSubscriptionRepository:
        return UserSubscriptionRepository(db)

    @staticmethod
    def create_course_bundle_repository(db: Session) -> CourseBundleRepository:
        return CourseBundleRepository(db)

    @staticmethod
    def create_bundle_ownership_repository(db: Session) -> BundleOwnershipRepository:
        return BundleOwnershipRepository(db)

    # Tutoring
    @staticmethod
    def create_tutoring_session_repository(db: Session) -> TutoringSessionRepository:
        return TutoringSessionRepository(db)

    @staticmethod
    def create_tutoring_availability_repository(db: Session) -> TutoringAvailabilityRepository:
        return TutoringAvailabilityRepository(db)

    @staticmethod
    def create_tutoring_request_repository(db: Session) -> TutoringRequestRepository:
        return TutoringRequestRepository(db)

    @staticmethod
    def create_tutoring_appointment_repository(db: Session) -> TutoringAppointmentRepository:
        return TutoringAppointmentRepository(db)

    @staticmethod
    def create_tutoring_message_repository(db: Session) -> TutoringMessageRepository:
        return TutoringMessageRepository(db)

    # Engagement
    @staticmethod
    def create_achievement_repository(db: Session) -> AchievementRepository:
        return AchievementRepository(db)

    @staticmethod
    def create_user_achievement_repository(db: Session) -> UserAchievementRepository:
        return UserAchievementRepository(db)

    @staticmethod
    def create_certificate_repository(db: Session) -> CertificateRepository:
        return CertificateRepository(db)

    @staticmethod
    def create_calendar_event_repository(db: Session) -> CalendarEventRepository:
        return CalendarEventRepository(db)

    @staticmethod
    def create_notification_repository(db: Session) -> NotificationRepository:
        return NotificationRepository(db)

    @staticmethod
    def create_course_review_repository(db: Session) -> CourseReviewRepository:
        return CourseReviewRepository(db)

    @staticmethod
    def create_tutoring_review_repository(db: Session) -> TutoringReviewRepository:
        return TutoringReviewRepository(db)

    # Blog
    @staticmethod
    def create_blog_post_repository(db: Session) -> BlogPostRepository:
        return BlogPostRepository(db)

    @staticmethod
    def create_blog_comment_repository(db: Session) -> BlogCommentRepository:
        return BlogCommentRepository(db)

    @staticmethod
    def create_blog_category_repository(db: Session) -> BlogCategoryRepository:
        return BlogCategoryRepository(db)

    @staticmethod
    def create_blog_tag_repository(db: Session) -> BlogTagRepository:
        return BlogTagRepository(db)

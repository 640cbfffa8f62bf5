# backend/app/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
bound to the request-scoped database session.
"""

import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...database import get_db
from ...services.achievement_service import AchievementService
from ...services.admin_service import AdminService
from ...services.auth_service import AuthService
from ...services.blog_service import BlogService
from ...services.blog_taxonomy_service import BlogTaxonomyService
from ...services.calendar_service import CalendarService
from ...services.certificate_service import CertificateService
from ...services.course_favorites_service import CourseFavoritesService
from ...services.course_progress_service import CourseProgressService
from ...services.course_service import CourseService
from ...services.enrollment_service import EnrollmentService
from ...services.notification_service import NotificationService
from ...services.payment_service import PaymentService
from ...services.points_service import PointsService
from ...services.referral_service import ReferralService
from ...services.review_service import ReviewService
from ...services.subscription_service import SubscriptionService
from ...services.tutoring_message_service import TutoringMessageService
from ...services.tutoring_request_service import TutoringRequestService
from ...services.tutoring_service import TutoringService
from ...services.user_service import UserService

logger = logging.getLogger(__name__)


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    """
    Get notification service instance.

    Args:
        db: Database session

    Returns:
        NotificationService instance
    """
    return NotificationService(db)


def get_points_service(db: Session = Depends(get_db)) -> PointsService:
    return PointsService(db)


def get_payment_service(db: Session = Depends(get_db)) -> PaymentService:
    return PaymentService(db)


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(db)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


def get_course_service(db: Session = Depends(get_db)) -> CourseService:
    return CourseService(db)


def get_enrollment_service(db: Session = Depends(get_db)) -> EnrollmentService:
    return EnrollmentService(db)


def get_course_progress_service(db: Session = Depends(get_db)) -> CourseProgressService:
    return CourseProgressService(db)


def get_course_favorites_service(db: Session = Depends(get_db)) -> CourseFavoritesService:
    return CourseFavoritesService(db)


def get_referral_service(
    db: Session = Depends(get_db), points_service: PointsService = Depends(get_points_service)
) -> ReferralService:
    return ReferralService(db, points_service=points_service)


def get_subscription_service(
    db: Session = Depends(get_db), payment_service: PaymentService = Depends(get_payment_service)
) -> SubscriptionService:
    return SubscriptionService(db, payment_service=payment_service)


def get_tutoring_service(db: Session = Depends(get_db)) -> TutoringService:
    return TutoringService(db)


def get_tutoring_request_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
) -> TutoringRequestService:
    return TutoringRequestService(db, notification_service=notification_service)


def get_tutoring_message_service(db: Session = Depends(get_db)) -> TutoringMessageService:
    return TutoringMessageService(db)


def get_achievement_service(
    db: Session = Depends(get_db),
    points_service: PointsService = Depends(get_points_service),
    notification_service: NotificationService = Depends(get_notification_service),
) -> AchievementService:
    """Get AchievementService with the services it rewards and notifies through."""
    return AchievementService(db, points_service=points_service, notification_service=notification_service)


def get_certificate_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
) -> CertificateService:
    return CertificateService(db, notification_service=notification_service)


def get_calendar_service(db: Session = Depends(get_db)) -> CalendarService:
    return CalendarService(db)


def get_blog_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
) -> BlogService:
    return BlogService(db, notification_service=notification_service)


def get_blog_taxonomy_service(db: Session = Depends(get_db)) -> BlogTaxonomyService:
    return BlogTaxonomyService(db)


def get_review_service(db: Session = Depends(get_db)) -> ReviewService:
    return ReviewService(db)


def get_admin_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
) -> AdminService:
    return AdminService(db, notification_service=notification_service)

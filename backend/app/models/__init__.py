"""
Database models for the EduMarket platform.

This module exports all SQLAlchemy models used in the application.
The models are organized by functionality:
- Users, teacher profiles and weekly availability
- Course content tree, enrollments, progress and favorites
- Tutoring sessions, requests, appointments and messages
- Points, referrals, payments, subscriptions and bundles
- Blog, achievements, certificates, calendar and notifications
"""

from .achievement import Achievement, UserAchievement
from .blog import BlogCategory, BlogComment, BlogPost, BlogTag, blog_post_categories, blog_post_tags
from .calendar_event import CalendarEvent
from .certificate import Certificate
from .course import Assignment, AssignmentSubmission, Course, Lesson, Question, Quiz, QuizAttempt, Topic
from .enrollment import Enrollment, LessonProgress
from .favorite import LikedCourse, SavedCourse
from .notification import Notification
from .payment import Payment
from .points import PointsPackage, PointsTransaction
from .referrals import ReferralCode, ReferralUse
from .review import CourseReview, TutoringReview
from .subscription import BundleCourse, BundleOwnership, CourseBundle, SubscriptionPlan, UserSubscription
from .tutoring import (
    TutoringAppointment,
    TutoringAvailability,
    TutoringMessage,
    TutoringRequest,
    TutoringSession,
)
from .user import TeacherProfile, User, UserAvailability

__all__ = [
    "Achievement",
    "Assignment",
    "AssignmentSubmission",
    "BlogCategory",
    "BlogComment",
    "BlogPost",
    "BlogTag",
    "BundleCourse",
    "BundleOwnership",
    "CalendarEvent",
    "Certificate",
    "Course",
    "CourseBundle",
    "CourseReview",
    "Enrollment",
    "Lesson",
    "LessonProgress",
    "LikedCourse",
    "Notification",
    "Payment",
    "PointsPackage",
    "PointsTransaction",
    "Question",
    "Quiz",
    "QuizAttempt",
    "ReferralCode",
    "ReferralUse",
    "SavedCourse",
    "SubscriptionPlan",
    "TeacherProfile",
    "Topic",
    "TutoringAppointment",
    "TutoringAvailability",
    "TutoringMessage",
    "TutoringRequest",
    "TutoringReview",
    "TutoringSession",
    "User",
    "UserAchievement",
    "UserAvailability",
    "UserSubscription",
    "blog_post_categories",
    "blog_post_tags",
]

# backend/app/core/enums.py
"""
Core enums for the EduMarket platform.

Values are stored as plain strings in the database; these enums give the
application code a single source of truth for the accepted values.
"""

from enum import Enum


class RoleName(str, Enum):
    """User roles. Every user has exactly one."""

    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class CourseStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    REJECTED = "rejected"
    ARCHIVED = "archived"


class LessonType(str, Enum):
    LESSON = "lesson"
    VIDEO = "video"
    TEXT = "text"
    QUIZ = "quiz"
    ASSIGNMENT = "assignment"


class QuestionType(str, Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"
    TRUE_FALSE = "true_false"
    ORDER = "order"


class EnrollmentStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class TutoringStatus(str, Enum):
    """Moderation state of a tutoring session offer."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class LocationType(str, Enum):
    ONLINE = "online"
    IN_PERSON = "in_person"
    BOTH = "both"


class TutoringRequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class AppointmentStatus(str, Enum):
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PointsTransactionType(str, Enum):
    PURCHASE = "purchase"
    COURSE_PURCHASE = "course_purchase"
    REFERRAL = "referral"
    ACHIEVEMENT = "achievement"
    BONUS = "bonus"
    REFUND = "refund"
    ADMIN = "admin"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentReferenceType(str, Enum):
    """What a payment pays for; drives post-payment processing."""

    POINTS_PACKAGE = "points_package"
    SUBSCRIPTION = "subscription"
    COURSE = "course"
    BUNDLE = "bundle"


class SubscriptionPeriod(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


class SubscriptionStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    CANCELLED = "cancelled"


class CertificateType(str, Enum):
    COURSE_COMPLETION = "course_completion"
    TUTORING_COMPLETION = "tutoring_completion"


class NotificationType(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    TUTORING_REQUEST = "TUTORING_REQUEST"
    TUTORING_RESPONSE = "TUTORING_RESPONSE"
    COURSE_STATUS = "COURSE_STATUS"
    TUTORING_STATUS = "TUTORING_STATUS"
    BLOG_COMMENT = "BLOG_COMMENT"
    CERTIFICATE = "CERTIFICATE"


class CalendarEventType(str, Enum):
    LESSON = "lesson"
    TUTORING = "tutoring"
    DEADLINE = "deadline"
    EXAM = "exam"
    OTHER = "other"

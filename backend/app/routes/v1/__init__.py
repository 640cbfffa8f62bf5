# backend/app/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1.
All new endpoints should be added here.
"""

from . import (
    achievements,
    admin,
    auth,
    blog,
    calendar,
    certificates,
    course_progress,
    courses,
    enrollments,
    favorites,
    notifications,
    payments,
    points,
    referrals,
    reviews,
    subscriptions,
    tutoring,
    tutoring_messages,
    tutoring_requests,
    users,
)

__all__ = [
    "achievements",
    "admin",
    "auth",
    "blog",
    "calendar",
    "certificates",
    "course_progress",
    "courses",
    "enrollments",
    "favorites",
    "notifications",
    "payments",
    "points",
    "referrals",
    "reviews",
    "subscriptions",
    "tutoring",
    "tutoring_messages",
    "tutoring_requests",
    "users",
]

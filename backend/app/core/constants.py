"""Application-wide constants for the EduMarket platform."""

from __future__ import annotations

BRAND_NAME = "EduMarket"
API_TITLE = f"{BRAND_NAME} API"
API_DESCRIPTION = f"Backend API for {BRAND_NAME} - an e-learning marketplace for courses and tutoring"
API_VERSION = "1.0.0"

# Auth
MIN_PASSWORD_LENGTH = 6
EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
REFERRAL_NAME_PREFIX_LENGTH = 5
REFERRAL_RANDOM_SUFFIX_LENGTH = 5

# Query limits
RECENT_POINTS_TRANSACTIONS = 10
POINTS_TRANSACTIONS_HISTORY = 50
RECENT_CERTIFICATES = 5
NOTIFICATIONS_PAGE_SIZE = 50
DASHBOARD_RECENT_ITEMS = 10
APPROVAL_PREVIEW_ITEMS = 5
TOP_COURSES_LIMIT = 10

# Blog
DEFAULT_BLOG_PAGE_SIZE = 10
MAX_BLOG_PAGE_SIZE = 100
DELETED_COMMENT_PLACEHOLDER = "[Deleted]"

# Achievements
ACHIEVEMENT_COMPLETE_PROGRESS = 100

# Reviews
MIN_RATING = 1
MAX_RATING = 5

# Payments
PAYMENT_INTENT_PREFIX = "pi_"
CHECKOUT_SESSION_PREFIX = "cs_"
DEFAULT_PAYMENT_METHOD_TYPES = ("card", "apple_pay", "google_pay")

# Time format for weekly availability slots
TIME_SLOT_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

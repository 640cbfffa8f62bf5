# backend/app/models/review.py
"""
Review models.

- ULID string IDs (26 chars)
- One review per (user, course) and per (user, tutoring session)
- Rating constrained to 1..5 at the database level
"""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
import ulid

from ..database import Base


class CourseReview(Base):
    """Review left by an enrolled student on a course."""

    __tablename__ = "course_reviews"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(String(26), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=True,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_course_review_user_course"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_course_reviews_rating_range"),
    )


class TutoringReview(Base):
    """Review left by a student on a tutoring session they attended."""

    __tablename__ = "tutoring_reviews"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    session_id = Column(
        String(26), ForeignKey("tutoring_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=True,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("user_id", "session_id", name="uq_tutoring_review_user_session"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_tutoring_reviews_rating_range"),
    )

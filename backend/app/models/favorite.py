"""Saved and liked course models."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
import ulid

from ..core.timezone_utils import utc_now
from ..database import Base
from .course import Course


class SavedCourse(Base):
    """Junction table for users bookmarking courses."""

    __tablename__ = "saved_courses"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    saved_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)

    course: Mapped[Course] = relationship("Course")

    __table_args__ = (UniqueConstraint("user_id", "course_id", name="uq_saved_course"),)

    def __repr__(self) -> str:
        return f"<SavedCourse(user={self.user_id}, course={self.course_id})>"


class LikedCourse(Base):
    """Junction table for users liking courses."""

    __tablename__ = "liked_courses"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    liked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)

    course: Mapped[Course] = relationship("Course")

    __table_args__ = (UniqueConstraint("user_id", "course_id", name="uq_liked_course"),)

    def __repr__(self) -> str:
        return f"<LikedCourse(user={self.user_id}, course={self.course_id})>"

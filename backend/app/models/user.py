# backend/app/models/user.py
"""
User models for the EduMarket platform.

Students, teachers and admins share the ``users`` table and are told apart
by the ``role`` column. Teachers additionally own a ``TeacherProfile``.

Classes:
    User: Authentication, role and points balance
    TeacherProfile: Public teaching profile (teachers only)
    UserAvailability: Recurring weekly availability slot
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
import ulid

from ..core.enums import RoleName
from ..core.timezone_utils import utc_now
from ..database import Base


class User(Base):
    """
    Main user model for authentication and profile management.

    Attributes:
        id: ULID primary key
        email: Unique email address used for login
        hashed_password: Bcrypt hashed password
        role: student | teacher | admin
        points: Current points balance, never negative
        referral_code: Personal code generated at registration
        last_login: Refreshed on login and on every authenticated request
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=RoleName.STUDENT.value, index=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    avatar: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    referral_code: Mapped[Optional[str]] = mapped_column(String(20), unique=True, nullable=True)
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    teacher_profile: Mapped[Optional["TeacherProfile"]] = relationship(
        "TeacherProfile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_admin(self) -> bool:
        return self.role == RoleName.ADMIN.value

    @property
    def is_teacher(self) -> bool:
        return self.role == RoleName.TEACHER.value

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"


class TeacherProfile(Base):
    """Teaching profile; ``students`` is a denormalised count kept by the user service."""

    __tablename__ = "teacher_profiles"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    specialization: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    education: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    experience: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    certificates: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    students: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    user: Mapped["User"] = relationship("User", back_populates="teacher_profile")


class UserAvailability(Base):
    """Weekly recurring slot; times are ``HH:MM`` strings in the user's local time."""

    __tablename__ = "user_availability"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)

# backend/app/models/tutoring.py
"""
Tutoring marketplace models.

A teacher publishes a TutoringSession (moderated by admins). Students send
TutoringRequests; accepting one creates a TutoringAppointment. Each request
carries a private message thread between the student and the teacher.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
import ulid

from ..core.enums import AppointmentStatus, TutoringRequestStatus, TutoringStatus
from ..core.timezone_utils import utc_now
from ..database import Base
from .user import User


class TutoringSession(Base):
    __tablename__ = "tutoring_sessions"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    teacher_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    subject: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price_per_hour: Mapped[float] = mapped_column(Float, nullable=False)
    location_type: Mapped[str] = mapped_column(String(20), nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    max_students: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    prerequisites: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    level: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TutoringStatus.PENDING.value, index=True
    )
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    teacher: Mapped[User] = relationship("User")
    availability: Mapped[List["TutoringAvailability"]] = relationship(
        "TutoringAvailability",
        back_populates="session",
        order_by=lambda: [TutoringAvailability.day_of_week, TutoringAvailability.start_time],
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_approved(self) -> bool:
        return self.status == TutoringStatus.APPROVED.value


class TutoringAvailability(Base):
    __tablename__ = "tutoring_availability"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    session_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("tutoring_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)

    session: Mapped[TutoringSession] = relationship("TutoringSession", back_populates="availability")


class TutoringRequest(Base):
    __tablename__ = "tutoring_requests"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    session_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("tutoring_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    student_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    preferred_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TutoringRequestStatus.PENDING.value, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    session: Mapped[TutoringSession] = relationship("TutoringSession")
    student: Mapped[User] = relationship("User")
    appointment: Mapped[Optional["TutoringAppointment"]] = relationship(
        "TutoringAppointment",
        back_populates="request",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class TutoringAppointment(Base):
    __tablename__ = "tutoring_appointments"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    request_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("tutoring_requests.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    session_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("tutoring_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    student_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    teacher_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    scheduled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=AppointmentStatus.CONFIRMED.value, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)

    request: Mapped[TutoringRequest] = relationship("TutoringRequest", back_populates="appointment")


class TutoringMessage(Base):
    __tablename__ = "tutoring_messages"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    request_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("tutoring_requests.id", ondelete="CASCADE"), nullable=False, index=True
    )
    sender_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)

    sender: Mapped[User] = relationship("User")

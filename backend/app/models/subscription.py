"""Subscription plans, user subscriptions and course bundles."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
import ulid

from ..core.enums import SubscriptionPeriod, SubscriptionStatus
from ..core.timezone_utils import utc_now
from ..database import Base
from .course import Course


class SubscriptionPlan(Base):
    __tablename__ = "subscription_plans"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    period: Mapped[str] = mapped_column(String(20), nullable=False, default=SubscriptionPeriod.MONTHLY.value)
    featured_benefit: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    benefits: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    is_popular: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )


class UserSubscription(Base):
    __tablename__ = "user_subscriptions"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    plan_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("subscription_plans.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=SubscriptionStatus.PENDING.value, index=True
    )
    start_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    payment_reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)

    plan: Mapped[SubscriptionPlan] = relationship("SubscriptionPlan")


class CourseBundle(Base):
    __tablename__ = "course_bundles"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    original_price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    discount: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    featured_benefit: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    benefits: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    bundle_courses: Mapped[List["BundleCourse"]] = relationship(
        "BundleCourse", back_populates="bundle", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def course_ids(self) -> List[str]:
        return [link.course_id for link in self.bundle_courses]


class BundleCourse(Base):
    __tablename__ = "bundle_courses"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    bundle_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("course_bundles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )

    bundle: Mapped[CourseBundle] = relationship("CourseBundle", back_populates="bundle_courses")
    course: Mapped[Course] = relationship("Course")

    __table_args__ = (UniqueConstraint("bundle_id", "course_id", name="uq_bundle_course"),)


class BundleOwnership(Base):
    __tablename__ = "bundle_ownerships"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    bundle_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("course_bundles.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    purchased_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)

    __table_args__ = (UniqueConstraint("user_id", "bundle_id", name="uq_bundle_ownership"),)

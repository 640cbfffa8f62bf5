"""Referral program models.

A ReferralCode is either a personal code owned by a user (``is_user_code``)
or a promotional code managed by admins. Each redemption is recorded as a
ReferralUse; a user may redeem a given code at most once.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
import ulid

from app.core.timezone_utils import utc_now
from app.database import Base

if TYPE_CHECKING:
    from app.models.user import User


class ReferralCode(Base):
    __tablename__ = "referral_codes"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    owner_id: Mapped[Optional[str]] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    points_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=50)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_user_code: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    max_uses: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    owner: Mapped[Optional["User"]] = relationship("User")


class ReferralUse(Base):
    __tablename__ = "referral_uses"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    code_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("referral_codes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    points_awarded: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)

    __table_args__ = (UniqueConstraint("code_id", "user_id", name="uq_referral_use_code_user"),)

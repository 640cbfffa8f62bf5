"""Payment records written by the mock payment gateway."""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, DateTime, Float, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
import ulid

from ..core.enums import PaymentStatus
from ..core.timezone_utils import utc_now
from ..database import Base
from .user import User


class Payment(Base):
    """
    One row per payment intent or checkout session.

    ``reference_id`` holds the gateway object id (``pi_...``/``cs_...``);
    ``reference_type`` and ``payment_metadata`` describe what is being paid
    for and drive processing once the payment completes.
    """

    __tablename__ = "payments"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="eur")
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PaymentStatus.PENDING.value, index=True
    )
    payment_method: Mapped[str] = mapped_column(String(30), nullable=False, default="card")
    reference_id: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    reference_type: Mapped[Optional[str]] = mapped_column(String(30), nullable=True, index=True)
    payment_metadata: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    user: Mapped[User] = relationship("User")

    def __repr__(self) -> str:
        return f"<Payment {self.reference_id} {self.amount} {self.currency} ({self.status})>"

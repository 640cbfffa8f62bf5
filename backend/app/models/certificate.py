"""Completion certificates for courses and tutoring."""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column
import ulid

from ..core.timezone_utils import utc_now
from ..database import Base


class Certificate(Base):
    """
    Issued to a user for exactly one course or one tutoring session.

    ``certificate_metadata`` keeps display data (course or subject name,
    teacher, custom message, badge) frozen at issue time.
    """

    __tablename__ = "certificates"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_id: Mapped[Optional[str]] = mapped_column(
        String(26), ForeignKey("courses.id", ondelete="CASCADE"), nullable=True, index=True
    )
    tutoring_session_id: Mapped[Optional[str]] = mapped_column(
        String(26), ForeignKey("tutoring_sessions.id", ondelete="CASCADE"), nullable=True, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(30), nullable=False)
    issue_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    certificate_metadata: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

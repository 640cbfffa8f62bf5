"""Pydantic schemas for course and tutoring completion certificates."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel

from .base import ORMModel


class CertificateGenerateRequest(BaseModel):
    """Exactly one of ``course_id`` and ``tutoring_id`` must be set."""

    course_id: Optional[str] = None
    tutoring_id: Optional[str] = None
    custom_message: Optional[str] = None
    badge: Optional[str] = None


class CertificateResponse(ORMModel):
    id: str
    user_id: str
    course_id: Optional[str] = None
    tutoring_session_id: Optional[str] = None
    title: str
    type: str
    issue_date: datetime
    image_url: Optional[str] = None
    certificate_metadata: Dict[str, Any] = {}

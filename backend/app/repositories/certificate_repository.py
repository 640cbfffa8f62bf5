"""Certificate data access."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.certificate import Certificate
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class CertificateRepository(BaseRepository[Certificate]):
    def __init__(self, db: Session):
        super().__init__(db, Certificate)

    def list_for_user(self, user_id: str, limit: Optional[int] = None) -> List[Certificate]:
        query = (
            self.db.query(Certificate)
            .filter(Certificate.user_id == user_id)
            .order_by(Certificate.issue_date.desc())
        )
        if limit:
            query = query.limit(limit)
        return query.all()

    def find_for_course(self, user_id: str, course_id: str) -> Optional[Certificate]:
        return (
            self.db.query(Certificate)
            .filter(Certificate.user_id == user_id, Certificate.course_id == course_id)
            .first()
        )

    def find_for_tutoring(self, user_id: str, session_id: str) -> Optional[Certificate]:
        return (
            self.db.query(Certificate)
            .filter(Certificate.user_id == user_id, Certificate.tutoring_session_id == session_id)
            .first()
        )

"""
Payment Repository for the EduMarket platform.

Payments are looked up by the gateway reference (``pi_...``/``cs_...``)
more often than by primary key.
"""

from datetime import datetime
import logging
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..core.enums import PaymentStatus
from ..core.exceptions import RepositoryException
from ..models.payment import Payment
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class PaymentRepository(BaseRepository[Payment]):
    def __init__(self, db: Session):
        super().__init__(db, Payment)

    def get_by_reference(self, reference_id: str) -> Optional[Payment]:
        try:
            return self.db.query(Payment).filter(Payment.reference_id == reference_id).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting payment {reference_id}: {str(e)}")
            raise RepositoryException(f"Failed to get payment: {str(e)}")

    def list_for_user(self, user_id: str) -> List[Payment]:
        return (
            self.db.query(Payment)
            .filter(Payment.user_id == user_id)
            .order_by(Payment.created_at.desc())
            .all()
        )

    def search(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        status: Optional[str] = None,
    ) -> List[Payment]:
        query = self.db.query(Payment).options(selectinload(Payment.user))
        if start:
            query = query.filter(Payment.created_at >= start)
        if end:
            query = query.filter(Payment.created_at <= end)
        if status:
            query = query.filter(Payment.status == status)
        return query.order_by(Payment.created_at.desc()).all()

    def recent(self, limit: int) -> List[Payment]:
        return (
            self.db.query(Payment)
            .options(selectinload(Payment.user))
            .order_by(Payment.created_at.desc())
            .limit(limit)
            .all()
        )

    def totals(self) -> Dict[str, float]:
        total = self.db.query(func.count(Payment.id)).scalar() or 0
        completed = (
            self.db.query(func.count(Payment.id))
            .filter(Payment.status == PaymentStatus.COMPLETED.value)
            .scalar()
            or 0
        )
        revenue = (
            self.db.query(func.coalesce(func.sum(Payment.amount), 0))
            .filter(Payment.status == PaymentStatus.COMPLETED.value)
            .scalar()
        )
        return {"total": total, "completed": completed, "revenue": float(revenue or 0)}

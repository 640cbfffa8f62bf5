"""Points ledger and points package data access."""

import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models.points import PointsPackage, PointsTransaction
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class PointsTransactionRepository(BaseRepository[PointsTransaction]):
    def __init__(self, db: Session):
        super().__init__(db, PointsTransaction)

    def list_for_user(self, user_id: str, limit: Optional[int] = None) -> List[PointsTransaction]:
        query = (
            self.db.query(PointsTransaction)
            .filter(PointsTransaction.user_id == user_id)
            .order_by(PointsTransaction.created_at.desc())
        )
        if limit:
            query = query.limit(limit)
        return query.all()

    def sum_for_user(self, user_id: str, type_: str) -> int:
        total = (
            self.db.query(func.coalesce(func.sum(PointsTransaction.amount), 0))
            .filter(PointsTransaction.user_id == user_id, PointsTransaction.type == type_)
            .scalar()
        )
        return int(total or 0)


class PointsPackageRepository(BaseRepository[PointsPackage]):
    def __init__(self, db: Session):
        super().__init__(db, PointsPackage)

    def list_active(self) -> List[PointsPackage]:
        return (
            self.db.query(PointsPackage)
            .filter(PointsPackage.is_active.is_(True))
            .order_by(PointsPackage.points.asc())
            .all()
        )

    def list_all(self) -> List[PointsPackage]:
        return self.db.query(PointsPackage).order_by(PointsPackage.points.asc()).all()

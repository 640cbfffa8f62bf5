"""Referral code and redemption data access."""

import logging
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from ..models.referrals import ReferralCode, ReferralUse
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ReferralCodeRepository(BaseRepository[ReferralCode]):
    def __init__(self, db: Session):
        super().__init__(db, ReferralCode)

    def get_by_code(self, code: str) -> Optional[ReferralCode]:
        return self.db.query(ReferralCode).filter(ReferralCode.code == code).first()

    def get_for_update(self, code_id: str) -> Optional[ReferralCode]:
        """Row-lock the code so concurrent redemptions count uses one at a time."""
        return (
            self.db.query(ReferralCode)
            .filter(ReferralCode.id == code_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    def get_user_code(self, owner_id: str) -> Optional[ReferralCode]:
        return (
            self.db.query(ReferralCode)
            .filter(ReferralCode.owner_id == owner_id, ReferralCode.is_user_code.is_(True))
            .first()
        )

    def list_all(self) -> List[ReferralCode]:
        return (
            self.db.query(ReferralCode)
            .options(selectinload(ReferralCode.owner))
            .order_by(ReferralCode.created_at.desc())
            .all()
        )


class ReferralUseRepository(BaseRepository[ReferralUse]):
    def __init__(self, db: Session):
        super().__init__(db, ReferralUse)

    def count_for_code(self, code_id: str) -> int:
        return self.db.query(func.count(ReferralUse.id)).filter(ReferralUse.code_id == code_id).scalar() or 0

    def counts_by_code(self, code_ids: List[str]) -> Dict[str, int]:
        if not code_ids:
            return {}
        rows = (
            self.db.query(ReferralUse.code_id, func.count(ReferralUse.id))
            .filter(ReferralUse.code_id.in_(code_ids))
            .group_by(ReferralUse.code_id)
            .all()
        )
        return {code_id: count for code_id, count in rows}

    def has_used(self, code_id: str, user_id: str) -> bool:
        return self.exists(code_id=code_id, user_id=user_id)

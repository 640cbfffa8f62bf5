"""Achievement catalogue and user progress data access."""

import logging
from typing import List, Optional

from sqlalchemy import case
from sqlalchemy.orm import Session, selectinload

from ..models.achievement import Achievement, UserAchievement
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AchievementRepository(BaseRepository[Achievement]):
    def __init__(self, db: Session):
        super().__init__(db, Achievement)

    def list_ordered(self) -> List[Achievement]:
        return self.db.query(Achievement).order_by(Achievement.id.asc()).all()


class UserAchievementRepository(BaseRepository[UserAchievement]):
    def __init__(self, db: Session):
        super().__init__(db, UserAchievement)

    def get_for_user(self, user_id: str, achievement_id: int) -> Optional[UserAchievement]:
        return (
            self.db.query(UserAchievement)
            .filter(UserAchievement.user_id == user_id, UserAchievement.achievement_id == achievement_id)
            .first()
        )

    def achievement_ids_for_user(self, user_id: str) -> List[int]:
        rows = self.db.query(UserAchievement.achievement_id).filter(UserAchievement.user_id == user_id).all()
        return [row[0] for row in rows]

    def list_for_user(self, user_id: str) -> List[UserAchievement]:
        """Most recently completed first; unfinished achievements last, by catalogue order."""
        nulls_last = case((UserAchievement.completed_at.is_(None), 1), else_=0)
        return (
            self.db.query(UserAchievement)
            .options(selectinload(UserAchievement.achievement))
            .filter(UserAchievement.user_id == user_id)
            .order_by(nulls_last, UserAchievement.completed_at.desc(), UserAchievement.achievement_id.asc())
            .all()
        )

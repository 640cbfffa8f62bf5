"""
Favorites Repository for the EduMarket platform.

Saved and liked courses share the same shape (user, course, timestamp), so
one repository class serves both tables.
"""

import logging
from typing import List, Optional, Type, Union

from sqlalchemy.orm import Session, selectinload

from ..models.course import Course
from ..models.favorite import LikedCourse, SavedCourse
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

FavoriteModel = Union[SavedCourse, LikedCourse]


class CourseFavoritesRepository(BaseRepository[FavoriteModel]):
    """
    Repository for one favorites table.

    Use ``CourseFavoritesRepository.saved(db)`` or ``.liked(db)``.
    """

    def __init__(self, db: Session, model: Type[FavoriteModel]):
        super().__init__(db, model)
        self.timestamp_column = model.saved_at if model is SavedCourse else model.liked_at

    @classmethod
    def saved(cls, db: Session) -> "CourseFavoritesRepository":
        return cls(db, SavedCourse)

    @classmethod
    def liked(cls, db: Session) -> "CourseFavoritesRepository":
        return cls(db, LikedCourse)

    def get(self, user_id: str, course_id: str) -> Optional[FavoriteModel]:
        return (
            self.db.query(self.model)
            .filter(self.model.user_id == user_id, self.model.course_id == course_id)
            .first()
        )

    def list_for_user(self, user_id: str) -> List[FavoriteModel]:
        """Newest first, with the course and its teacher loaded."""
        return (
            self.db.query(self.model)
            .options(selectinload(self.model.course).selectinload(Course.teacher))
            .filter(self.model.user_id == user_id)
            .order_by(self.timestamp_column.desc())
            .all()
        )

    def remove_many(self, user_id: str, course_ids: List[str]) -> int:
        if not course_ids:
            return 0
        return self.delete_where(self.model.user_id == user_id, self.model.course_id.in_(course_ids))

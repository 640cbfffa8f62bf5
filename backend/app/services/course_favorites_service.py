# backend/app/services/course_favorites_service.py
"""
Course Favorites Service for the EduMarket platform

Saved ("watch later") and liked courses. Both behave the same way and
are backed by one repository class per table.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException, ValidationException
from ..repositories.factory import RepositoryFactory
from ..repositories.favorites_repository import CourseFavoritesRepository, FavoriteModel
from .base import BaseService

logger = logging.getLogger(__name__)


class CourseFavoritesService(BaseService):
    """Service for saving and liking courses."""

    def __init__(
        self,
        db: Session,
        saved_repository: Optional[CourseFavoritesRepository] = None,
        liked_repository: Optional[CourseFavoritesRepository] = None,
    ):
        super().__init__(db)
        self.saved_repository = saved_repository or RepositoryFactory.create_saved_course_repository(db)
        self.liked_repository = liked_repository or RepositoryFactory.create_liked_course_repository(db)
        self.course_repository = RepositoryFactory.create_course_repository(db)

    def _toggle(self, repository: CourseFavoritesRepository, user_id: str, course_id: str) -> bool:
        if self.course_repository.get_by_id(course_id, load_relationships=False) is None:
            raise NotFoundException("Course not found")

        existing = repository.get(user_id, course_id)
        with self.transaction():
            if existing is not None:
                repository.delete_entity(existing)
                return False
            repository.create(user_id=user_id, course_id=course_id)
            return True

    @BaseService.measure_operation("toggle_saved_course")
    def toggle_saved(self, user_id: str, course_id: str) -> Dict[str, Any]:
        saved = self._toggle(self.saved_repository, user_id, course_id)
        return {"saved": saved, "message": "Course saved" if saved else "Course removed from saved"}

    @BaseService.measure_operation("toggle_liked_course")
    def toggle_liked(self, user_id: str, course_id: str) -> Dict[str, Any]:
        liked = self._toggle(self.liked_repository, user_id, course_id)
        return {"liked": liked, "message": "Course liked" if liked else "Course unliked"}

    @BaseService.measure_operation("get_saved_courses")
    def get_saved(self, user_id: str) -> List[FavoriteModel]:
        return self.saved_repository.list_for_user(user_id)

    @BaseService.measure_operation("get_liked_courses")
    def get_liked(self, user_id: str) -> List[FavoriteModel]:
        return self.liked_repository.list_for_user(user_id)

    def saved_status(self, user_id: str, course_id: str) -> Dict[str, Any]:
        saved = self.saved_repository.get(user_id, course_id)
        return {"is_saved": saved is not None, "saved_at": saved.saved_at if saved else None}

    def liked_status(self, user_id: str, course_id: str) -> Dict[str, Any]:
        liked = self.liked_repository.get(user_id, course_id)
        return {"is_liked": liked is not None, "liked_at": liked.liked_at if liked else None}

    @BaseService.measure_operation("get_all_favorites")
    def get_all(self, user_id: str) -> Dict[str, Any]:
        """Ids of both lists plus a per-course timestamp lookup."""
        saved = self.saved_repository.list_for_user(user_id)
        liked = self.liked_repository.list_for_user(user_id)
        return {
            "saved_courses": [s.course_id for s in saved],
            "liked_courses": [l.course_id for l in liked],
            "saved_details": {s.course_id: {"saved_at": s.saved_at} for s in saved},
            "liked_details": {l.course_id: {"liked_at": l.liked_at} for l in liked},
        }

    @BaseService.measure_operation("remove_bulk_saved")
    def remove_bulk_saved(self, user_id: str, course_ids: Optional[List[str]]) -> Dict[str, Any]:
        if not course_ids:
            raise ValidationException("Course IDs array is required")

        with self.transaction():
            self.saved_repository.remove_many(user_id, course_ids)

        return {
            "message": f"Removed {len(course_ids)} courses from saved",
            "removed_count": len(course_ids),
        }

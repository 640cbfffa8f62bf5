# backend/app/services/achievement_service.py
"""
Achievement Service for the EduMarket platform

Every user has one progress row per catalogue achievement, created lazily
the first time their achievements are read. Reaching 100% completes the
achievement, credits its reward and notifies the user.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.constants import ACHIEVEMENT_COMPLETE_PROGRESS
from ..core.enums import NotificationType, PointsTransactionType
from ..core.exceptions import NotFoundException, ValidationException
from ..core.timezone_utils import utc_now
from ..models.achievement import Achievement, UserAchievement
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .notification_service import NotificationService
from .points_service import PointsService

logger = logging.getLogger(__name__)


class AchievementService(BaseService):
    """Service for the achievement catalogue and user progress."""

    def __init__(
        self,
        db: Session,
        points_service: Optional[PointsService] = None,
        notification_service: Optional[NotificationService] = None,
    ):
        super().__init__(db)
        self.achievement_repository = RepositoryFactory.create_achievement_repository(db)
        self.user_achievement_repository = RepositoryFactory.create_user_achievement_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.points_service = points_service or PointsService(db)
        self.notification_service = notification_service or NotificationService(db)

    @BaseService.measure_operation("list_achievements")
    def list_achievements(self) -> List[Achievement]:
        return self.achievement_repository.list_ordered()

    def initialize_for_user(self, user_id: str) -> int:
        """Create missing progress rows at 0%. Returns how many were added."""
        existing = set(self.user_achievement_repository.achievement_ids_for_user(user_id))
        missing = [a for a in self.achievement_repository.list_ordered() if a.id not in existing]
        if not missing:
            return 0
        with self.transaction():
            self.user_achievement_repository.bulk_create(
                [{"user_id": user_id, "achievement_id": a.id, "progress": 0, "completed": False} for a in missing]
            )
        return len(missing)

    @BaseService.measure_operation("get_user_achievements")
    def get_user_achievements(self, user_id: str) -> List[UserAchievement]:
        self.initialize_for_user(user_id)
        return self.user_achievement_repository.list_for_user(user_id)

    @BaseService.measure_operation("progress_achievement")
    def progress(
        self,
        user_id: str,
        achievement_id: int,
        progress: Optional[float],
        increment: bool = True,
    ) -> UserAchievement:
        """
        Move a user's progress on an achievement.

        With ``increment`` the value is added to the current progress,
        otherwise it replaces it; either way it is capped at 100. Completed
        achievements are returned unchanged.

        Raises:
            ValidationException: If no progress value is given
            NotFoundException: If the achievement or the user does not exist
        """
        if progress is None:
            raise ValidationException("Progress value is required")

        achievement = self.achievement_repository.get_by_id(achievement_id, load_relationships=False)
        if achievement is None:
            raise NotFoundException("Achievement not found")
        user = self.user_repository.get_by_id(user_id, load_relationships=False)
        if user is None:
            raise NotFoundException("User not found")

        user_achievement = self.user_achievement_repository.get_for_user(user_id, achievement.id)
        if user_achievement is not None and user_achievement.completed:
            return user_achievement

        current = user_achievement.progress if user_achievement is not None else 0
        new_progress = int(min(ACHIEVEMENT_COMPLETE_PROGRESS, current + progress if increment else progress))
        completed = new_progress >= ACHIEVEMENT_COMPLETE_PROGRESS

        with self.transaction():
            if user_achievement is None:
                user_achievement = self.user_achievement_repository.create(
                    user_id=user_id, achievement_id=achievement.id, progress=0, completed=False
                )
            self.user_achievement_repository.update_entity(
                user_achievement,
                progress=new_progress,
                completed=completed,
                completed_at=utc_now() if completed else None,
            )
            if completed and achievement.points_rewarded > 0:
                self.points_service.credit(
                    user,
                    achievement.points_rewarded,
                    PointsTransactionType.ACHIEVEMENT.value,
                    f"Achievement completed: {achievement.name}",
                    reference_id=str(achievement.id),
                )
                self.notification_service.notify(
                    user.id,
                    "Achievement Unlocked!",
                    f"You've earned {achievement.points_rewarded} points for completing \"{achievement.name}\"",
                    NotificationType.SUCCESS.value,
                    "/achievements",
                )

        if completed:
            self.log_operation("complete_achievement", user_id=user_id, achievement_id=achievement.id)
        return user_achievement

    @BaseService.measure_operation("complete_achievement")
    def complete(self, user_id: str, achievement_id: int) -> UserAchievement:
        return self.progress(user_id, achievement_id, ACHIEVEMENT_COMPLETE_PROGRESS, increment=False)

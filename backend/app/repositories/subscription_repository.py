"""Subscription plan, user subscription and course bundle data access."""

import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from ..models.subscription import BundleCourse, BundleOwnership, CourseBundle, SubscriptionPlan, UserSubscription
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class SubscriptionPlanRepository(BaseRepository[SubscriptionPlan]):
    def __init__(self, db: Session):
        super().__init__(db, SubscriptionPlan)

    def list_ordered(self, active_only: bool = False) -> List[SubscriptionPlan]:
        query = self.db.query(SubscriptionPlan)
        if active_only:
            query = query.filter(SubscriptionPlan.is_active.is_(True))
        return query.order_by(SubscriptionPlan.price.asc()).all()


class UserSubscriptionRepository(BaseRepository[UserSubscription]):
    def __init__(self, db: Session):
        super().__init__(db, UserSubscription)

    def list_for_user(self, user_id: str) -> List[UserSubscription]:
        return (
            self.db.query(UserSubscription)
            .options(selectinload(UserSubscription.plan))
            .filter(UserSubscription.user_id == user_id)
            .order_by(UserSubscription.created_at.desc())
            .all()
        )

    def count_for_plan(self, plan_id: str) -> int:
        return (
            self.db.query(func.count(UserSubscription.id)).filter(UserSubscription.plan_id == plan_id).scalar()
            or 0
        )

    def get_by_payment_reference(self, reference: str) -> Optional[UserSubscription]:
        return self.db.query(UserSubscription).filter(UserSubscription.payment_reference == reference).first()


class CourseBundleRepository(BaseRepository[CourseBundle]):
    def __init__(self, db: Session):
        super().__init__(db, CourseBundle)

    def _apply_eager_loading(self, query):
        return query.options(selectinload(CourseBundle.bundle_courses).selectinload(BundleCourse.course))

    def list_all(self, active_only: bool = False) -> List[CourseBundle]:
        query = self._apply_eager_loading(self.db.query(CourseBundle))
        if active_only:
            query = query.filter(CourseBundle.is_active.is_(True))
        return query.order_by(CourseBundle.created_at.desc()).all()

    def replace_courses(self, bundle: CourseBundle, course_ids: List[str]) -> None:
        bundle.bundle_courses.clear()
        self.db.flush()
        for course_id in dict.fromkeys(course_ids):
            bundle.bundle_courses.append(BundleCourse(course_id=course_id))
        self.db.flush()


class BundleOwnershipRepository(BaseRepository[BundleOwnership]):
    def __init__(self, db: Session):
        super().__init__(db, BundleOwnership)

    def count_for_bundle(self, bundle_id: str) -> int:
        return (
            self.db.query(func.count(BundleOwnership.id)).filter(BundleOwnership.bundle_id == bundle_id).scalar()
            or 0
        )

    def get_for_user(self, user_id: str, bundle_id: str) -> Optional[BundleOwnership]:
        return (
            self.db.query(BundleOwnership)
            .filter(BundleOwnership.user_id == user_id, BundleOwnership.bundle_id == bundle_id)
            .first()
        )

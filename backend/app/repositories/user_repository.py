"""
User Repository for the EduMarket platform.

Data access for users, teacher profiles and weekly availability.
"""

from datetime import datetime
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, selectinload

from ..core.enums import RoleName
from ..core.exceptions import RepositoryException
from ..models.user import TeacherProfile, User, UserAvailability
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for user lookups and admin listings."""

    def __init__(self, db: Session):
        super().__init__(db, User)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(selectinload(User.teacher_profile))

    def get_by_email(self, email: str) -> Optional[User]:
        try:
            return self.db.query(User).filter(func.lower(User.email) == email.lower()).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting user by email: {str(e)}")
            raise RepositoryException(f"Failed to get user by email: {str(e)}")

    def referral_code_exists(self, code: str) -> bool:
        return self.db.query(User.id).filter(User.referral_code == code).first() is not None

    def list_users(self, role: Optional[str] = None, search: Optional[str] = None) -> List[User]:
        """Newest first, optionally filtered by role and a name/email substring."""
        query = self.db.query(User).options(selectinload(User.teacher_profile))
        if role:
            query = query.filter(User.role == role)
        if search:
            pattern = f"%{search.lower()}%"
            query = query.filter(or_(func.lower(User.name).like(pattern), func.lower(User.email).like(pattern)))
        return query.order_by(User.created_at.desc()).all()

    def count_by_role(self) -> Dict[str, int]:
        rows = self.db.query(User.role, func.count(User.id)).group_by(User.role).all()
        counts = {role.value: 0 for role in RoleName}
        counts.update({role: count for role, count in rows})
        return counts

    def created_since(self, since: datetime) -> List[datetime]:
        """Creation timestamps of users registered at or after ``since``."""
        rows = self.db.query(User.created_at).filter(User.created_at >= since).order_by(User.created_at).all()
        return [row[0] for row in rows]

    def adjust_points(self, user: User, delta: int, *, keep_non_negative: bool = False) -> bool:
        """
        Add ``delta`` to the stored balance in a single UPDATE.

        The increment is computed by the database, so concurrent adjustments
        never overwrite each other. With ``keep_non_negative`` the row is only
        touched while the resulting balance stays at or above zero.

        Returns:
            False when the guarded update matched no row
        """
        new_balance = func.coalesce(User.points, 0) + delta
        stmt = update(User).where(User.id == user.id).values(points=new_balance)
        if keep_non_negative:
            stmt = stmt.where(new_balance >= 0)
        try:
            result = self.db.execute(stmt.execution_options(synchronize_session=False))
        except SQLAlchemyError as e:
            self.logger.error(f"Error adjusting points for user {user.id}: {str(e)}")
            raise RepositoryException(f"Failed to adjust points: {str(e)}")
        self.db.refresh(user, attribute_names=["points"])
        return result.rowcount == 1


class TeacherProfileRepository(BaseRepository[TeacherProfile]):
    def __init__(self, db: Session):
        super().__init__(db, TeacherProfile)

    def get_by_user_id(self, user_id: str) -> Optional[TeacherProfile]:
        return self.db.query(TeacherProfile).filter(TeacherProfile.user_id == user_id).first()

    def get_or_create(self, user_id: str) -> TeacherProfile:
        profile = self.get_by_user_id(user_id)
        if profile:
            return profile
        return self.create(user_id=user_id, specialization=[], certificates=[], students=0)

    def upsert(self, user_id: str, **fields: Any) -> TeacherProfile:
        profile = self.get_by_user_id(user_id)
        if profile is None:
            defaults: Dict[str, Any] = {"specialization": [], "certificates": [], "students": 0}
            defaults.update(fields)
            return self.create(user_id=user_id, **defaults)
        return self.update_entity(profile, **fields)

    def list_incomplete(self) -> List[TeacherProfile]:
        """
        Profiles missing education or experience, or without any specialization.

        The empty-list check is done in Python so it behaves the same on every
        JSON backend.
        """
        profiles = (
            self.db.query(TeacherProfile)
            .options(selectinload(TeacherProfile.user))
            .order_by(TeacherProfile.created_at.desc())
            .all()
        )
        return [p for p in profiles if not p.specialization or p.education is None or p.experience is None]


class UserAvailabilityRepository(BaseRepository[UserAvailability]):
    def __init__(self, db: Session):
        super().__init__(db, UserAvailability)

    def list_for_user(self, user_id: str) -> List[UserAvailability]:
        return (
            self.db.query(UserAvailability)
            .filter(UserAvailability.user_id == user_id)
            .order_by(UserAvailability.day_of_week, UserAvailability.start_time)
            .all()
        )

    def replace_for_user(self, user_id: str, slots: List[Dict[str, Any]]) -> List[UserAvailability]:
        self.delete_where(UserAvailability.user_id == user_id)
        self.bulk_create([{"user_id": user_id, **slot} for slot in slots])
        return self.list_for_user(user_id)

# backend/app/api/dependencies/auth.py
"""
Authentication and authorization dependencies.

The bearer token only carries the user id; every authenticated request
loads the user row so deleted accounts and role changes take effect
immediately. User lookups run in a worker thread to keep the event loop
free.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...auth import get_current_user_id, get_current_user_id_optional
from ...core.enums import RoleName
from ...core.timezone_utils import utc_now
from ...database import get_db
from ...models.user import User
from ...repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


def _load_and_touch(db: Session, user_id: str) -> Optional[User]:
    user = UserRepository(db).get_by_id(user_id, load_relationships=False)
    if user is not None:
        user.last_login = utc_now()
        db.commit()
    return user


async def get_current_user(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> User:
    """
    Get the current authenticated user.

    Raises:
        HTTPException: 401 if the token is invalid or the user no longer exists
    """
    user = await asyncio.to_thread(_load_and_touch, db, user_id)
    if user is None:
        logger.info(f"Token for unknown user {user_id}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_current_user_optional(
    user_id: Optional[str] = Depends(get_current_user_id_optional),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Current user when a valid token is sent, otherwise None."""
    if not user_id:
        return None
    return await asyncio.to_thread(_load_and_touch, db, user_id)


def require_roles(*roles: RoleName) -> Callable[..., Awaitable[User]]:
    """Dependency factory allowing only users whose role is in ``roles``."""
    allowed = {role.value for role in roles}

    async def verify_role(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access forbidden")
        return current_user

    return verify_role


async def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    """Dependency that ensures the caller has administrator privileges."""
    if not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access forbidden")
    return current_user


async def get_current_teacher(current_user: User = Depends(get_current_user)) -> User:
    """Teachers and admins."""
    if current_user.role not in (RoleName.TEACHER.value, RoleName.ADMIN.value):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access forbidden")
    return current_user

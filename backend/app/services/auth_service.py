# backend/app/services/auth_service.py
"""
Authentication Service for the EduMarket platform

Handles user registration, login and the current-user profile.
Follows the service layer pattern to keep business logic out of routes.
"""

import logging
import re
import secrets
import string
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.orm import Session

from ..auth import create_access_token, get_password_hash, verify_password
from ..core.constants import (
    EMAIL_PATTERN,
    MIN_PASSWORD_LENGTH,
    RECENT_CERTIFICATES,
    RECENT_POINTS_TRANSACTIONS,
    REFERRAL_NAME_PREFIX_LENGTH,
    REFERRAL_RANDOM_SUFFIX_LENGTH,
)
from ..core.enums import RoleName
from ..core.exceptions import NotFoundException, UnauthorizedException, ValidationException
from ..core.timezone_utils import utc_now
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

_REFERRAL_ALPHABET = string.ascii_uppercase + string.digits


def generate_referral_code(name: str) -> str:
    """First alphanumerics of the name, upper-cased, plus a random suffix."""
    prefix = re.sub(r"[^a-zA-Z0-9]", "", name)[:REFERRAL_NAME_PREFIX_LENGTH].upper()
    suffix = "".join(secrets.choice(_REFERRAL_ALPHABET) for _ in range(REFERRAL_RANDOM_SUFFIX_LENGTH))
    return f"{prefix}{suffix}"


class AuthService(BaseService):
    """Service for handling authentication operations."""

    def __init__(
        self,
        db: Session,
        user_repository=None,
        teacher_profile_repository=None,
    ) -> None:
        super().__init__(db)
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)
        self.teacher_profile_repository = (
            teacher_profile_repository or RepositoryFactory.create_teacher_profile_repository(db)
        )
        self.points_repository = RepositoryFactory.create_points_transaction_repository(db)
        self.user_achievement_repository = RepositoryFactory.create_user_achievement_repository(db)
        self.certificate_repository = RepositoryFactory.create_certificate_repository(db)

    @BaseService.measure_operation("register_user")
    def register(
        self,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str],
        role: str = RoleName.STUDENT.value,
    ) -> Tuple[User, str]:
        """
        Register a new user and issue an access token.

        Returns:
            (user, token)

        Raises:
            ValidationException: Missing fields, bad email or password, unknown role,
                or the email is already registered
        """
        self.log_operation("register_user", email=email, role=role)

        if not name or not email or not password:
            raise ValidationException("Please provide all required fields: name, email, and password")
        if not re.match(EMAIL_PATTERN, email):
            raise ValidationException("Invalid email format")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationException(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        if role not in {r.value for r in RoleName}:
            raise ValidationException("Invalid role. Must be student, teacher, or admin")

        if self.user_repository.get_by_email(email):
            self.logger.warning(f"Registration failed - email already exists: {email}")
            raise ValidationException("User already exists")

        referral_code = generate_referral_code(name)
        while self.user_repository.referral_code_exists(referral_code):
            referral_code = generate_referral_code(name)

        with self.transaction():
            user = self.user_repository.create(
                name=name,
                email=email,
                hashed_password=get_password_hash(password),
                role=role,
                referral_code=referral_code,
                points=0,
            )
            if role == RoleName.TEACHER.value:
                self.teacher_profile_repository.get_or_create(user.id)

        self.logger.info(f"Registered {role} {user.id}")
        return user, create_access_token(data={"sub": user.id})

    @BaseService.measure_operation("login")
    def login(self, email: Optional[str], password: Optional[str]) -> Tuple[User, str]:
        """
        Authenticate by email and password.

        Raises:
            ValidationException: Missing email or password
            UnauthorizedException: Unknown email or wrong password
        """
        if not email or not password:
            raise ValidationException("Please provide email and password")

        user = self.user_repository.get_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            self.logger.info(f"Failed login for {email}")
            raise UnauthorizedException("Invalid credentials")

        with self.transaction():
            user.last_login = utc_now()

        return user, create_access_token(data={"sub": user.id})

    @BaseService.measure_operation("get_profile")
    def get_profile(self, user_id: str) -> Dict[str, Any]:
        """Current user with recent points activity, achievements and certificates."""
        user = self.user_repository.get_by_id(user_id)
        if user is None:
            raise NotFoundException("User not found")

        achievements = [
            {
                "achievement_id": ua.achievement_id,
                "name": ua.achievement.name,
                "progress": ua.progress,
                "completed": ua.completed,
            }
            for ua in self.user_achievement_repository.list_for_user(user_id)
        ]
        return {
            "user": user,
            "teacher_profile": user.teacher_profile if user.is_teacher else None,
            "points_transactions": self.points_repository.list_for_user(user_id, limit=RECENT_POINTS_TRANSACTIONS),
            "achievements": achievements,
            "certificates": self.certificate_repository.list_for_user(user_id, limit=RECENT_CERTIFICATES),
        }

# backend/app/services/referral_service.py
"""
Referral Service for the EduMarket platform

Referral codes come in two kinds. User codes are created on demand for
every user and reward both the new user and the code owner. Promotional
codes are managed by admins, reward only the user applying them, and may
carry a use limit and an expiry date.
"""

import logging
import re
from typing import Any, Dict, List, Optional
import uuid

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import PointsTransactionType
from ..core.exceptions import NotFoundException, ValidationException
from ..core.timezone_utils import ensure_utc, utc_now
from ..models.referrals import ReferralCode
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..schemas.referrals import ReferralCodeCreate, ReferralCodeUpdate
from .base import BaseService
from .points_service import PointsService

logger = logging.getLogger(__name__)


def user_referral_code(name: Optional[str]) -> str:
    """``NAME_1A2B3C4D``: the user's name stripped to letters and digits, or ``USER``."""
    prefix = re.sub(r"[^A-Za-z0-9]", "", name or "")[:20] or "user"
    return f"{prefix}_{uuid.uuid4().hex[:8]}".upper()


class ReferralService(BaseService):
    """Service for applying and administering referral codes."""

    def __init__(self, db: Session, points_service: Optional[PointsService] = None):
        super().__init__(db)
        self.code_repository = RepositoryFactory.create_referral_code_repository(db)
        self.use_repository = RepositoryFactory.create_referral_use_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.points_service = points_service or PointsService(db)

    def _is_usable(self, code: ReferralCode) -> bool:
        if not code.is_active:
            return False
        expires_at = ensure_utc(code.expires_at)
        return expires_at is None or expires_at > utc_now()

    @BaseService.measure_operation("get_my_referral_code")
    def get_my_code(self, user: User) -> Dict[str, Any]:
        """Find or create the user's personal code, with its usage and the referral points earned."""
        code = self.code_repository.get_user_code(user.id)
        if code is None:
            value = user_referral_code(user.name)
            while self.code_repository.get_by_code(value) is not None:
                value = user_referral_code(user.name)
            with self.transaction():
                code = self.code_repository.create(
                    code=value,
                    owner_id=user.id,
                    is_user_code=True,
                    points_reward=settings.referral_points_reward,
                    is_active=True,
                )

        return {
            "code": code.code,
            "usage_count": self.use_repository.count_for_code(code.id),
            "points_earned": self.points_service.transaction_repository.sum_for_user(
                user.id, PointsTransactionType.REFERRAL.value
            ),
        }

    @BaseService.measure_operation("apply_referral_code")
    def apply_code(self, user: User, code_value: Optional[str]) -> Dict[str, Any]:
        """
        Redeem a referral code for the user.

        Raises:
            ValidationException: Missing code, own code, exhausted or already used
            NotFoundException: Unknown, inactive or expired code
        """
        if not code_value:
            raise ValidationException("Referral code is required")

        code = self.code_repository.get_by_code(code_value)
        if code is None or not self._is_usable(code):
            raise NotFoundException("Invalid or expired referral code")
        if code.owner_id == user.id:
            raise ValidationException("You cannot use your own referral code")
        if self.use_repository.has_used(code.id, user.id):
            raise ValidationException("You have already used this referral code")

        reward = code.points_reward
        with self.transaction():
            self.code_repository.get_for_update(code.id)
            if code.max_uses is not None and self.use_repository.count_for_code(code.id) >= code.max_uses:
                raise ValidationException("This referral code has reached its maximum number of uses")
            self.use_repository.create(code_id=code.id, user_id=user.id, points_awarded=reward)
            self.points_service.credit(
                user,
                reward,
                PointsTransactionType.REFERRAL.value,
                f"Applied referral code {code.code}",
                reference_id=code.id,
            )
            if code.is_user_code and code.owner_id:
                owner = self.user_repository.get_by_id(code.owner_id, load_relationships=False)
                if owner is not None:
                    self.points_service.credit(
                        owner,
                        reward,
                        PointsTransactionType.REFERRAL.value,
                        f"Your referral code {code.code} was used by a new user",
                        reference_id=code.id,
                    )

        self.log_operation("apply_referral_code", user_id=user.id, code_id=code.id, reward=reward)
        return {
            "success": True,
            "message": f"Successfully applied referral code for {reward} points",
            "points_awarded": reward,
        }

    # Admin

    def _with_usage(self, code: ReferralCode, usage_count: Optional[int] = None) -> Dict[str, Any]:
        if usage_count is None:
            usage_count = self.use_repository.count_for_code(code.id)
        return {"code": code, "usage_count": usage_count}

    def _get_code_or_404(self, code_id: str) -> ReferralCode:
        code = self.code_repository.get_by_id(code_id, load_relationships=False)
        if code is None:
            raise NotFoundException("Referral code not found")
        return code

    @BaseService.measure_operation("list_referral_codes")
    def list_codes(self) -> List[Dict[str, Any]]:
        codes = self.code_repository.list_all()
        counts = self.use_repository.counts_by_code([c.id for c in codes])
        return [self._with_usage(code, counts.get(code.id, 0)) for code in codes]

    @BaseService.measure_operation("create_referral_code")
    def create_code(self, data: ReferralCodeCreate) -> Dict[str, Any]:
        if not data.code or not data.points_reward:
            raise ValidationException("Code and points reward are required")
        if self.code_repository.get_by_code(data.code) is not None:
            raise ValidationException("This referral code already exists")

        with self.transaction():
            code = self.code_repository.create(
                code=data.code,
                description=data.description,
                points_reward=data.points_reward,
                max_uses=data.max_uses or None,
                is_active=True if data.is_active is None else data.is_active,
                expires_at=data.expires_at,
                is_user_code=False,
            )
        return self._with_usage(code, 0)

    @BaseService.measure_operation("update_referral_code")
    def update_code(self, code_id: str, data: ReferralCodeUpdate) -> Dict[str, Any]:
        code = self._get_code_or_404(code_id)
        fields = data.model_dump(exclude_unset=True)
        if not fields.get("code"):
            fields.pop("code", None)
        elif fields["code"] != code.code and self.code_repository.get_by_code(fields["code"]) is not None:
            raise ValidationException("This referral code already exists")
        if "max_uses" in fields:
            fields["max_uses"] = fields["max_uses"] or None
        if fields.get("points_reward") is None:
            fields.pop("points_reward", None)
        if fields.get("is_active") is None:
            fields.pop("is_active", None)

        with self.transaction():
            self.code_repository.update_entity(code, **fields)
        return self._with_usage(code)

    @BaseService.measure_operation("delete_referral_code")
    def delete_code(self, code_id: str) -> None:
        code = self._get_code_or_404(code_id)
        if code.is_user_code:
            raise ValidationException("Cannot delete user-specific referral codes")
        with self.transaction():
            self.code_repository.delete_entity(code)

    @BaseService.measure_operation("toggle_referral_code")
    def toggle_code(self, code_id: str) -> Dict[str, Any]:
        code = self._get_code_or_404(code_id)
        with self.transaction():
            self.code_repository.update_entity(code, is_active=not code.is_active)
        return self._with_usage(code)

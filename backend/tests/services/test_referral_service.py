"""ReferralService: personal and promotional codes."""

from datetime import timedelta

import pytest

from app.core.exceptions import NotFoundException, ValidationException
from app.core.timezone_utils import utc_now
from app.models.referrals import ReferralUse
from app.schemas.referrals import ReferralCodeCreate, ReferralCodeUpdate
from app.services.referral_service import ReferralService, user_referral_code


class TestUserReferralCode:
    def test_prefix_from_name(self):
        code = user_referral_code("Sam O'Student")
        prefix, suffix = code.split("_")
        assert prefix == "SAMOSTUDENT"
        assert len(suffix) == 8

    def test_fallback_prefix(self):
        assert user_referral_code("!!!").startswith("USER_")


class TestPersonalCodes:
    def test_code_created_once(self, db, student):
        service = ReferralService(db)

        first = service.get_my_code(student)
        second = service.get_my_code(student)

        assert first["code"] == second["code"]
        assert first["usage_count"] == 0
        assert first["points_earned"] == 0

    def test_apply_rewards_both_sides(self, db, student, other_student):
        service = ReferralService(db)
        code = service.get_my_code(student)["code"]

        result = service.apply_code(other_student, code)

        assert result == {
            "success": True,
            "message": "Successfully applied referral code for 50 points",
            "points_awarded": 50,
        }
        db.refresh(student)
        db.refresh(other_student)
        assert other_student.points == 50
        assert student.points == 50
        mine = service.get_my_code(student)
        assert mine["usage_count"] == 1
        assert mine["points_earned"] == 50

    def test_own_code_rejected(self, db, student):
        service = ReferralService(db)
        code = service.get_my_code(student)["code"]
        with pytest.raises(ValidationException) as exc:
            service.apply_code(student, code)
        assert exc.value.message == "You cannot use your own referral code"

    def test_code_used_once_per_user(self, db, student, other_student):
        service = ReferralService(db)
        code = service.get_my_code(student)["code"]
        service.apply_code(other_student, code)

        with pytest.raises(ValidationException) as exc:
            service.apply_code(other_student, code)
        assert exc.value.message == "You have already used this referral code"

    def test_missing_and_unknown_codes(self, db, student):
        service = ReferralService(db)
        with pytest.raises(ValidationException):
            service.apply_code(student, "")
        with pytest.raises(NotFoundException):
            service.apply_code(student, "NOPE_0000")


class TestPromotionalCodes:
    def test_promo_rewards_only_user(self, db, student):
        service = ReferralService(db)
        service.create_code(ReferralCodeCreate(code="WELCOME", points_reward=25))

        service.apply_code(student, "WELCOME")

        db.refresh(student)
        assert student.points == 25

    def test_max_uses(self, db, student, other_student):
        service = ReferralService(db)
        service.create_code(ReferralCodeCreate(code="ONCE", points_reward=10, max_uses=1))
        service.apply_code(student, "ONCE")

        with pytest.raises(ValidationException) as exc:
            service.apply_code(other_student, "ONCE")
        assert "maximum number of uses" in exc.value.message
        assert other_student.points == 0
        assert db.query(ReferralUse).count() == 1

    def test_expired_and_inactive_codes(self, db, student):
        service = ReferralService(db)
        service.create_code(
            ReferralCodeCreate(code="OLD", points_reward=10, expires_at=utc_now() - timedelta(days=1))
        )
        toggled = service.create_code(ReferralCodeCreate(code="PAUSED", points_reward=10))
        service.toggle_code(toggled["code"].id)

        with pytest.raises(NotFoundException):
            service.apply_code(student, "OLD")
        with pytest.raises(NotFoundException):
            service.apply_code(student, "PAUSED")

    def test_duplicate_code_rejected(self, db):
        service = ReferralService(db)
        service.create_code(ReferralCodeCreate(code="SPRING", points_reward=10))
        with pytest.raises(ValidationException):
            service.create_code(ReferralCodeCreate(code="SPRING", points_reward=20))

    def test_update_ignores_blank_code(self, db):
        service = ReferralService(db)
        created = service.create_code(ReferralCodeCreate(code="SUMMER", points_reward=10))

        updated = service.update_code(created["code"].id, ReferralCodeUpdate(code="", points_reward=15))

        assert updated["code"].code == "SUMMER"
        assert updated["code"].points_reward == 15

    def test_user_codes_cannot_be_deleted(self, db, student):
        service = ReferralService(db)
        service.get_my_code(student)
        user_code = next(row["code"] for row in service.list_codes() if row["code"].is_user_code)

        with pytest.raises(ValidationException):
            service.delete_code(user_code.id)

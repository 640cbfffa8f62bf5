"""AuthService: registration rules, login and the profile bundle."""

import pytest

from app.auth import decode_access_token
from app.core.exceptions import UnauthorizedException, ValidationException
from app.models.user import TeacherProfile
from app.services.auth_service import AuthService, generate_referral_code


class TestGenerateReferralCode:
    def test_prefix_is_upper_alphanumerics_of_name(self):
        """Only the first five letters/digits of the name are kept."""
        code = generate_referral_code("jo-hn smith")
        assert code.startswith("JOHNS")
        assert len(code) == 10

    def test_suffix_is_random(self):
        assert generate_referral_code("Ann") != generate_referral_code("Ann")


class TestRegister:
    def test_student_registration_returns_token_for_user(self, db):
        user, token = AuthService(db).register("Sam", "sam@example.com", "secret123")

        assert user.role == "student"
        assert user.points == 0
        assert user.referral_code
        assert user.hashed_password != "secret123"
        assert decode_access_token(token)["sub"] == user.id

    def test_teacher_registration_creates_profile(self, db):
        user, _ = AuthService(db).register("Tina", "tina@example.com", "secret123", role="teacher")

        profile = db.query(TeacherProfile).filter_by(user_id=user.id).one()
        assert profile.students == 0

    @pytest.mark.parametrize(
        "name,email,password,message",
        [
            (None, "a@example.com", "secret123", "Please provide all required fields"),
            ("A", "not-an-email", "secret123", "Invalid email format"),
            ("A", "a@example.com", "short", "Password must be at least 6 characters long"),
        ],
    )
    def test_invalid_input_rejected(self, db, name, email, password, message):
        with pytest.raises(ValidationException) as exc:
            AuthService(db).register(name, email, password)
        assert message in exc.value.message

    def test_unknown_role_rejected(self, db):
        with pytest.raises(ValidationException):
            AuthService(db).register("A", "a@example.com", "secret123", role="owner")

    def test_duplicate_email_rejected(self, db, student):
        with pytest.raises(ValidationException) as exc:
            AuthService(db).register("Dup", student.email, "secret123")
        assert exc.value.message == "User already exists"


class TestLogin:
    def test_valid_credentials(self, db, student):
        user, token = AuthService(db).login(student.email, "secret123")

        assert user.id == student.id
        assert user.last_login is not None
        assert decode_access_token(token)["sub"] == student.id

    def test_wrong_password(self, db, student):
        with pytest.raises(UnauthorizedException):
            AuthService(db).login(student.email, "wrong-password")

    def test_unknown_email(self, db):
        with pytest.raises(UnauthorizedException):
            AuthService(db).login("nobody@example.com", "secret123")

    def test_missing_fields(self, db):
        with pytest.raises(ValidationException):
            AuthService(db).login("", None)


class TestGetProfile:
    def test_teacher_profile_included_for_teachers_only(self, db, teacher, student):
        service = AuthService(db)

        assert service.get_profile(teacher.id)["teacher_profile"] is not None
        assert service.get_profile(student.id)["teacher_profile"] is None

    def test_profile_lists_points_transactions(self, db, student):
        from app.services.points_service import PointsService

        points = PointsService(db)
        points.add_points(student.id, 10, "bonus", "first")
        points.add_points(student.id, 20, "bonus", "second")

        profile = AuthService(db).get_profile(student.id)
        assert {t.description for t in profile["points_transactions"]} == {"first", "second"}
        assert profile["user"].points == 30

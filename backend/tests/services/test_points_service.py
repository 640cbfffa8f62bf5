"""PointsService: ledger consistency, packages and paying for courses with points."""

import pytest
from sqlalchemy.orm import Session

from app.core.enums import CourseStatus, PaymentStatus
from app.core.exceptions import InsufficientPointsException, NotFoundException, ValidationException
from app.models.enrollment import Enrollment
from app.models.payment import Payment
from app.models.points import PointsTransaction
from app.models.user import User
from app.services.points_service import PointsService


def ledger_sum(db, user_id):
    return sum(t.amount for t in db.query(PointsTransaction).filter_by(user_id=user_id))


class TestMovements:
    def test_add_points_updates_balance_and_ledger(self, db, student):
        service = PointsService(db)
        transaction = service.add_points(student.id, 50, "bonus", "Welcome bonus")

        assert transaction.amount == 50
        assert service.get_balance(student.id) == 50
        assert ledger_sum(db, student.id) == 50

    def test_deduct_records_negative_amount(self, db, make_user):
        user = make_user(points=0)
        service = PointsService(db)
        service.add_points(user.id, 80, "bonus", "Top up")

        transaction = service.deduct_points(user.id, 30, "admin", "Correction")

        assert transaction.amount == -30
        assert service.get_balance(user.id) == 50
        assert ledger_sum(db, user.id) == 50

    def test_deduct_more_than_balance_fails_without_changes(self, db, student):
        service = PointsService(db)
        service.add_points(student.id, 10, "bonus", "Small")

        with pytest.raises(InsufficientPointsException) as exc:
            service.deduct_points(student.id, 11, "admin", "Too much")

        assert exc.value.details == {"balance": 10, "required": 11}
        assert service.get_balance(student.id) == 10
        assert db.query(PointsTransaction).filter_by(user_id=student.id).count() == 1

    @pytest.mark.parametrize("amount,type_,description", [(None, "bonus", "x"), (10, None, "x"), (10, "bonus", "")])
    def test_missing_fields_rejected(self, db, student, amount, type_, description):
        with pytest.raises(ValidationException):
            PointsService(db).add_points(student.id, amount, type_, description)

    def test_negative_amount_rejected(self, db, student):
        with pytest.raises(ValidationException) as exc:
            PointsService(db).add_points(student.id, -5, "bonus", "Negative")
        assert exc.value.message == "Amount must be positive"

    def test_unknown_user(self, db):
        with pytest.raises(NotFoundException):
            PointsService(db).get_balance("01HZZZZZZZZZZZZZZZZZZZZZZZ")


class TestOverlappingMovements:
    """Two sessions holding the same user row, as two concurrent requests would."""

    def test_credits_from_both_sessions_are_kept(self, db, make_user):
        user = make_user(points=100)
        other = Session(bind=db.get_bind(), expire_on_commit=False)
        try:
            stale = other.get(User, user.id)
            assert stale.points == 100

            PointsService(db).add_points(user.id, 50, "bonus", "First")
            PointsService(other).add_points(user.id, 30, "bonus", "Second")

            assert stale.points == 180
        finally:
            other.close()

        db.refresh(user)
        assert user.points == 180
        assert ledger_sum(db, user.id) == 80

    def test_debit_checks_the_stored_balance(self, db, make_user):
        user = make_user(points=100)
        other = Session(bind=db.get_bind(), expire_on_commit=False)
        try:
            other.get(User, user.id)
            PointsService(db).deduct_points(user.id, 80, "admin", "First")

            with pytest.raises(InsufficientPointsException) as exc:
                PointsService(other).deduct_points(user.id, 50, "admin", "Second")
        finally:
            other.close()

        assert exc.value.details == {"balance": 20, "required": 50}
        db.refresh(user)
        assert user.points == 20
        assert ledger_sum(db, user.id) == -80


class TestPackages:
    def test_direct_purchase_credits_points_and_records_payment(self, db, student, points_package):
        result = PointsService(db).purchase_package(student.id, points_package.id, "card")

        assert result["success"] is True
        assert result["message"] == "Successfully purchased 500 points"
        assert PointsService(db).get_balance(student.id) == 500
        payment = db.query(Payment).filter_by(user_id=student.id).one()
        assert payment.status == PaymentStatus.COMPLETED.value
        assert payment.reference_type == "points_package"

    def test_inactive_package_cannot_be_bought(self, db, student, points_package):
        points_package.is_active = False
        db.commit()

        with pytest.raises(NotFoundException):
            PointsService(db).purchase_package(student.id, points_package.id, "card")

    def test_payment_intent_carries_package_metadata(self, db, student, points_package):
        result = PointsService(db).create_package_payment_intent(student.id, points_package.id)

        assert result["client_secret"].startswith("pi_")
        assert result["package_details"]["points"] == 500
        payment = db.query(Payment).filter_by(user_id=student.id).one()
        assert payment.status == PaymentStatus.PENDING.value
        assert payment.payment_metadata["reference_id"] == points_package.id
        assert payment.amount == pytest.approx(44.99)

    def test_active_packages_only(self, db, points_package):
        from app.models.points import PointsPackage

        db.add(PointsPackage(name="Old", points=10, price=1.0, is_active=False))
        db.commit()

        assert [p.name for p in PointsService(db).get_active_packages()] == ["Standard"]


class TestCoursePurchase:
    def test_purchase_enrolls_and_debits(self, db, make_user, make_course, teacher):
        buyer = make_user(points=300)
        first = make_course(teacher, title="A", points_price=100)
        second = make_course(teacher, title="B", points_price=150)

        result = PointsService(db).purchase_courses(buyer.id, [first.id, second.id], 250, "Two courses")

        assert len(result["enrollments"]) == 2
        assert result["transaction"].amount == -250
        assert PointsService(db).get_balance(buyer.id) == 50
        assert db.query(Enrollment).filter_by(user_id=buyer.id).count() == 2

    def test_price_mismatch_rejected(self, db, make_user, published_course):
        buyer = make_user(points=500)
        with pytest.raises(ValidationException) as exc:
            PointsService(db).purchase_courses(buyer.id, [published_course.id], 99, "Cheap")
        assert exc.value.message == "Points price mismatch"
        assert PointsService(db).get_balance(buyer.id) == 500

    def test_unpublished_course_rejected(self, db, make_user, make_course, teacher):
        buyer = make_user(points=500)
        draft = make_course(teacher, status=CourseStatus.DRAFT.value, points_price=100)
        with pytest.raises(ValidationException):
            PointsService(db).purchase_courses(buyer.id, [draft.id], 100, "Draft")

    def test_insufficient_balance(self, db, make_user, published_course):
        buyer = make_user(points=10)
        with pytest.raises(InsufficientPointsException):
            PointsService(db).purchase_courses(buyer.id, [published_course.id], 100, "Course")

    def test_already_enrolled_rejected(self, db, make_user, published_course):
        buyer = make_user(points=500)
        service = PointsService(db)
        service.purchase_course(buyer.id, published_course.id)

        with pytest.raises(ValidationException):
            service.purchase_course(buyer.id, published_course.id)
        assert service.get_balance(buyer.id) == 400

    def test_free_course_cannot_be_bought_with_points(self, db, make_user, make_course, teacher):
        buyer = make_user(points=500)
        free = make_course(teacher, points_price=0)
        with pytest.raises(ValidationException):
            PointsService(db).purchase_course(buyer.id, free.id)

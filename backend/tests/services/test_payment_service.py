"""PaymentService: mock gateway objects and settlement of completed payments."""

import pytest

from app.core.enums import PaymentReferenceType, PaymentStatus, PointsTransactionType, SubscriptionStatus
from app.core.exceptions import NotFoundException, ValidationException
from app.models.enrollment import Enrollment
from app.models.payment import Payment
from app.models.points import PointsTransaction
from app.models.subscription import BundleOwnership, SubscriptionPlan, UserSubscription
from app.schemas.subscription import CourseBundleUpsert
from app.services.payment_service import PaymentService
from app.services.points_service import PointsService
from app.services.subscription_service import SubscriptionService


class TestGatewayObjects:
    def test_intent_creates_pending_payment(self, db, student):
        intent = PaymentService(db).create_payment_intent(1999, "eur", {"user_id": student.id})

        assert intent["id"].startswith("pi_")
        assert intent["status"] == "requires_payment_method"
        assert intent["client_secret"].startswith("pi_")
        payment = db.query(Payment).filter_by(reference_id=intent["id"]).one()
        assert payment.status == PaymentStatus.PENDING.value
        assert payment.amount == pytest.approx(19.99)
        assert payment.user_id == student.id

    @pytest.mark.parametrize("amount", [0, -5])
    def test_intent_requires_positive_amount(self, db, amount):
        with pytest.raises(ValidationException):
            PaymentService(db).create_payment_intent(amount)

    def test_checkout_session_requires_price_and_quantity(self, db):
        with pytest.raises(ValidationException) as exc:
            PaymentService(db).create_checkout_session(None, 1)
        assert exc.value.message == "Price ID and quantity are required"

    def test_checkout_session_records_payment(self, db, student):
        session = PaymentService(db).create_checkout_session(
            "plan_1", 1, {"user_id": student.id, "amount": "9.99"}, customer_id=student.id
        )

        assert session["id"].startswith("cs_")
        assert session["status"] == "open"
        payment = db.query(Payment).filter_by(reference_id=session["id"]).one()
        assert payment.amount == pytest.approx(9.99)

    def test_payment_methods(self, db, student):
        methods = PaymentService(db).get_payment_methods(student.id)
        assert [m["card"]["last4"] for m in methods] == ["4242", "5555"]


class TestConfirm:
    def test_confirm_settles_points_package_once(self, db, student, points_package):
        PointsService(db).create_package_payment_intent(student.id, points_package.id)
        payment = db.query(Payment).one()
        service = PaymentService(db)

        first = service.confirm_payment_intent(payment.reference_id, "pm_card_visa")
        second = service.confirm_payment_intent(payment.reference_id, "pm_card_visa")

        assert first["status"] == second["status"] == "succeeded"
        assert first["amount_received"] == 4499
        db.refresh(student)
        assert student.points == points_package.points
        purchases = db.query(PointsTransaction).filter_by(
            user_id=student.id, type=PointsTransactionType.PURCHASE.value
        )
        assert purchases.count() == 1
        assert payment.status == PaymentStatus.COMPLETED.value

    def test_confirm_requires_method(self, db):
        with pytest.raises(ValidationException):
            PaymentService(db).confirm_payment_intent("pi_123", None)

    def test_confirm_unknown_intent(self, db):
        with pytest.raises(NotFoundException):
            PaymentService(db).confirm_payment_intent("pi_missing", "pm_card_visa")

    def test_course_payment_enrolls(self, db, student, published_course):
        service = PaymentService(db)
        intent = service.create_payment_intent(
            1999,
            metadata={
                "user_id": student.id,
                "reference_type": PaymentReferenceType.COURSE.value,
                "reference_id": published_course.id,
            },
        )

        service.confirm_payment_intent(intent["id"], "pm_card_visa")

        assert db.query(Enrollment).filter_by(user_id=student.id, course_id=published_course.id).count() == 1

    def test_bundle_payment_records_ownership(self, db, student, teacher, make_course):
        courses = [make_course(teacher, title="One"), make_course(teacher, title="Two")]
        bundle = SubscriptionService(db).upsert_bundle(
            CourseBundleUpsert(name="Starter pack", price=29.99, course_ids=[c.id for c in courses])
        )["bundle"]
        SubscriptionService(db).purchase_bundle(student.id, bundle.id)
        payment = db.query(Payment).one()

        PaymentService(db).confirm_payment_intent(payment.reference_id, "pm_card_visa")

        assert db.query(BundleOwnership).filter_by(user_id=student.id, bundle_id=bundle.id).count() == 1
        assert db.query(Enrollment).filter_by(user_id=student.id).count() == 2

    def test_payment_without_reference_is_completed_only(self, db, student):
        service = PaymentService(db)
        intent = service.create_payment_intent(500, metadata={"user_id": student.id})

        service.confirm_payment_intent(intent["id"], "pm_card_visa")

        payment = db.query(Payment).one()
        assert payment.status == PaymentStatus.COMPLETED.value
        assert db.query(PointsTransaction).count() == 0


class TestWebhooks:
    def test_succeeded_settles_subscription(self, db, student):
        plan = SubscriptionPlan(name="Pro", price=19.99, period="monthly", benefits=[])
        db.add(plan)
        db.commit()

        result = SubscriptionService(db).subscribe(student.id, plan.id)
        session_id = result["checkout_session"]["id"]

        PaymentService(db).handle_webhook_event("payment_intent.succeeded", {"object": {"id": session_id}})

        subscription = db.query(UserSubscription).one()
        assert subscription.status == SubscriptionStatus.ACTIVE.value
        assert subscription.start_date is not None
        assert (subscription.end_date - subscription.start_date).days == 30

    def test_failed_marks_payment(self, db, student):
        service = PaymentService(db)
        intent = service.create_payment_intent(500, metadata={"user_id": student.id})

        service.handle_webhook_event("payment_intent.payment_failed", {"object": {"id": intent["id"]}})

        assert db.query(Payment).one().status == PaymentStatus.FAILED.value

    def test_unknown_event_ignored(self, db):
        PaymentService(db).handle_webhook_event("charge.refunded", {"object": {"id": "ch_1"}})

    def test_missing_event_type(self, db):
        with pytest.raises(ValidationException):
            PaymentService(db).handle_webhook_event(None, {})


class TestHistory:
    def test_history_for_user_only(self, db, student, other_student):
        service = PaymentService(db)
        service.create_payment_intent(100, metadata={"user_id": student.id})
        service.create_payment_intent(200, metadata={"user_id": other_student.id})

        history = service.get_history(student.id)

        assert [p.amount for p in history] == [pytest.approx(1.0)]

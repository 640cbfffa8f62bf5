# backend/app/services/payment_service.py
"""
Payment Service for the EduMarket platform

An in-process stand-in for a card payment gateway. It fabricates payment
intent and checkout session objects shaped like the gateway's, records a
``Payment`` row for each, and settles completed payments by dispatching on
the ``reference_type`` carried in the payment metadata:

    points_package -> credit the package's points
    subscription   -> activate the pending subscription
    course         -> enroll the payer
    bundle         -> record ownership and enroll in every bundled course

No network calls are made.
"""

from datetime import timedelta
import logging
import time
from typing import Any, Dict, List, Optional
import uuid

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import CHECKOUT_SESSION_PREFIX, DEFAULT_PAYMENT_METHOD_TYPES, PAYMENT_INTENT_PREFIX
from ..core.enums import PaymentReferenceType, PaymentStatus, PointsTransactionType, SubscriptionStatus
from ..core.exceptions import NotFoundException, ValidationException
from ..core.timezone_utils import ensure_utc, utc_now
from ..models.payment import Payment
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .enrollment_service import EnrollmentService
from .points_service import PointsService

logger = logging.getLogger(__name__)

SUBSCRIPTION_DAYS = {"monthly": 30, "yearly": 365}


def _hex_id() -> str:
    return uuid.uuid4().hex


class PaymentService(BaseService):
    """Mock gateway plus settlement of completed payments."""

    def __init__(self, db: Session, payment_repository=None):
        super().__init__(db)
        self.payment_repository = payment_repository or RepositoryFactory.create_payment_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)

    # Gateway objects

    @BaseService.measure_operation("create_payment_intent")
    def create_payment_intent(
        self,
        amount: int,
        currency: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        payment_method_types: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """
        Create a payment intent and its pending payment row.

        Args:
            amount: Amount in cents
            currency: ISO currency code
            metadata: Must carry ``user_id``; ``reference_type`` and
                ``reference_id`` drive settlement

        Returns:
            The intent object as the gateway would return it
        """
        metadata = dict(metadata or {})
        currency = currency or settings.default_currency
        if not amount or amount <= 0:
            raise ValidationException("Valid amount is required")

        intent_id = f"{PAYMENT_INTENT_PREFIX}{_hex_id()}"
        intent = {
            "id": intent_id,
            "object": "payment_intent",
            "amount": amount,
            "amount_received": 0,
            "client_secret": f"{intent_id}_secret_{_hex_id()}",
            "currency": currency,
            "metadata": metadata,
            "payment_method_types": payment_method_types or list(DEFAULT_PAYMENT_METHOD_TYPES),
            "status": "requires_payment_method",
            "created": int(time.time()),
        }

        with self.transaction():
            self.payment_repository.create(
                user_id=metadata.get("user_id"),
                reference_id=intent["id"],
                reference_type=metadata.get("reference_type"),
                amount=amount / 100,
                currency=currency,
                status=PaymentStatus.PENDING.value,
                payment_method="card",
                payment_metadata=metadata,
            )

        self.log_operation("create_payment_intent", intent_id=intent["id"], amount=amount)
        return intent

    @BaseService.measure_operation("create_checkout_session")
    def create_checkout_session(
        self,
        price_id: Optional[str],
        quantity: Optional[int],
        metadata: Optional[Dict[str, Any]] = None,
        customer_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create a hosted checkout session and its pending payment row."""
        metadata = dict(metadata or {})
        if not price_id or not quantity:
            raise ValidationException("Price ID and quantity are required")

        base_url = settings.frontend_url.rstrip("/")
        payment_intent_id = f"{PAYMENT_INTENT_PREFIX}{_hex_id()}"
        session = {
            "id": f"{CHECKOUT_SESSION_PREFIX}{_hex_id()}",
            "object": "checkout.session",
            "cancel_url": f"{base_url}/payment/cancel",
            "success_url": f"{base_url}/payment/success?session_id={{CHECKOUT_SESSION_ID}}",
            "client_reference_id": f"{metadata.get('reference_type')}_{metadata.get('reference_id')}",
            "customer": customer_id,
            "metadata": metadata,
            "payment_intent": payment_intent_id,
            "payment_status": "unpaid",
            "status": "open",
            "url": f"{base_url}/checkout/{payment_intent_id}",
            "created": int(time.time()),
        }

        with self.transaction():
            self.payment_repository.create(
                user_id=metadata.get("user_id") or customer_id,
                reference_id=session["id"],
                reference_type=metadata.get("reference_type"),
                amount=float(metadata.get("amount") or 0),
                status=PaymentStatus.PENDING.value,
                payment_method="checkout",
                payment_metadata=metadata,
            )

        self.log_operation("create_checkout_session", session_id=session["id"], price_id=price_id)
        return session

    @BaseService.measure_operation("confirm_payment_intent")
    def confirm_payment_intent(self, payment_intent_id: Optional[str], payment_method: Optional[str]) -> Dict[str, Any]:
        """
        Confirm an intent; the mock gateway always succeeds.

        Confirming an intent that is already completed returns it again
        without settling it a second time.
        """
        if not payment_intent_id or not payment_method:
            raise ValidationException("Payment intent ID and payment method are required")

        payment = self.payment_repository.get_by_reference(payment_intent_id)
        if payment is None:
            raise NotFoundException("Payment not found")

        with self.transaction():
            if payment.status != PaymentStatus.COMPLETED.value:
                self.payment_repository.update_entity(
                    payment, status=PaymentStatus.COMPLETED.value, payment_method=payment_method
                )
                self.process_completed_payment(payment)

        cents = int(round(payment.amount * 100))
        return {
            "id": payment_intent_id,
            "object": "payment_intent",
            "amount": cents,
            "amount_received": cents,
            "client_secret": f"{payment_intent_id}_secret_{_hex_id()}",
            "currency": payment.currency,
            "metadata": payment.payment_metadata,
            "payment_method": payment_method,
            "payment_method_types": list(DEFAULT_PAYMENT_METHOD_TYPES),
            "status": "succeeded",
            "created": int(ensure_utc(payment.created_at).timestamp()),
        }

    @BaseService.measure_operation("handle_webhook_event")
    def handle_webhook_event(self, event_type: Optional[str], data: Optional[Dict[str, Any]]) -> None:
        """Apply an asynchronous gateway event; unknown event types are acknowledged and ignored."""
        if not event_type:
            raise ValidationException("Webhook error")
        intent_id = ((data or {}).get("object") or {}).get("id")

        if event_type == "payment_intent.succeeded":
            payment = self.payment_repository.get_by_reference(intent_id) if intent_id else None
            if payment is None or payment.status == PaymentStatus.COMPLETED.value:
                return
            with self.transaction():
                self.payment_repository.update_entity(payment, status=PaymentStatus.COMPLETED.value)
                self.process_completed_payment(payment)
        elif event_type == "payment_intent.payment_failed":
            payment = self.payment_repository.get_by_reference(intent_id) if intent_id else None
            if payment is None:
                return
            with self.transaction():
                self.payment_repository.update_entity(payment, status=PaymentStatus.FAILED.value)
            prometheus_metrics.inc_payment(payment.reference_type or "unknown", PaymentStatus.FAILED.value)
        else:
            self.logger.info(f"Ignoring webhook event {event_type}")

    def get_payment_methods(self, customer_id: str) -> List[Dict[str, Any]]:
        """Saved cards for the customer; the mock always has the same two."""
        return [
            {
                "id": f"pm_{_hex_id()}",
                "object": "payment_method",
                "type": "card",
                "card": {"brand": "visa", "last4": "4242", "exp_month": 12, "exp_year": 2025},
            },
            {
                "id": f"pm_{_hex_id()}",
                "object": "payment_method",
                "type": "card",
                "card": {"brand": "mastercard", "last4": "5555", "exp_month": 10, "exp_year": 2024},
            },
        ]

    @BaseService.measure_operation("get_payment_history")
    def get_history(self, user_id: str) -> List[Payment]:
        return self.payment_repository.list_for_user(user_id)

    # Settlement

    def process_completed_payment(self, payment: Payment) -> None:
        """
        Grant whatever a completed payment paid for.

        Runs inside the caller's transaction. Payments without a reference
        or user, and unknown reference types, are logged and skipped.
        """
        metadata = payment.payment_metadata or {}
        reference_type = metadata.get("reference_type") or payment.reference_type
        reference_id = metadata.get("reference_id")
        user_id = metadata.get("user_id") or payment.user_id

        prometheus_metrics.inc_payment(reference_type or "unknown", PaymentStatus.COMPLETED.value)

        if not reference_type or not reference_id or not user_id:
            self.logger.warning(f"Payment {payment.reference_id} has no reference metadata; nothing to process")
            return

        handlers = {
            PaymentReferenceType.POINTS_PACKAGE.value: self._process_points_package,
            PaymentReferenceType.SUBSCRIPTION.value: self._process_subscription,
            PaymentReferenceType.COURSE.value: self._process_course,
            PaymentReferenceType.BUNDLE.value: self._process_bundle,
        }
        handler = handlers.get(reference_type)
        if handler is None:
            self.logger.warning(f"Unknown payment reference type {reference_type} on {payment.reference_id}")
            return
        handler(reference_id, user_id, payment)

    def _process_points_package(self, package_id: str, user_id: str, payment: Payment) -> None:
        package = RepositoryFactory.create_points_package_repository(self.db).get_by_id(
            package_id, load_relationships=False
        )
        user = self.user_repository.get_by_id(user_id, load_relationships=False)
        if package is None or user is None:
            self.logger.warning(f"Points package {package_id} or user {user_id} missing for {payment.reference_id}")
            return
        PointsService(self.db).credit(
            user,
            package.points,
            PointsTransactionType.PURCHASE.value,
            f"Purchased {package.name} package",
            reference_id=payment.reference_id,
        )

    def _process_subscription(self, subscription_id: str, user_id: str, payment: Payment) -> None:
        repository = RepositoryFactory.create_user_subscription_repository(self.db)
        subscription = repository.get_by_id(subscription_id, load_relationships=False)
        if subscription is None or subscription.user_id != user_id:
            self.logger.warning(f"Subscription {subscription_id} not found for {payment.reference_id}")
            return
        plan = RepositoryFactory.create_subscription_plan_repository(self.db).get_by_id(
            subscription.plan_id, load_relationships=False
        )
        start = utc_now()
        days = SUBSCRIPTION_DAYS.get(plan.period if plan else "monthly", 30)
        repository.update_entity(
            subscription,
            status=SubscriptionStatus.ACTIVE.value,
            start_date=start,
            end_date=start + timedelta(days=days),
            payment_reference=payment.reference_id,
        )

    def _process_course(self, course_id: str, user_id: str, payment: Payment) -> None:
        EnrollmentService(self.db).enroll_many(user_id, [course_id], source="payment")

    def _process_bundle(self, bundle_id: str, user_id: str, payment: Payment) -> None:
        bundle = RepositoryFactory.create_course_bundle_repository(self.db).get_by_id(bundle_id)
        if bundle is None:
            self.logger.warning(f"Bundle {bundle_id} not found for {payment.reference_id}")
            return
        ownership_repository = RepositoryFactory.create_bundle_ownership_repository(self.db)
        if ownership_repository.get_for_user(user_id, bundle_id) is None:
            ownership_repository.create(user_id=user_id, bundle_id=bundle_id)
        EnrollmentService(self.db).enroll_many(
            user_id, [link.course_id for link in bundle.bundle_courses], source="bundle"
        )

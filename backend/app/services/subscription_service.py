# backend/app/services/subscription_service.py
"""
Subscription Service for the EduMarket platform

Subscription plans and course bundles: the storefront side (list,
subscribe, cancel, buy a bundle) and the admin catalogue side.

Paid flows do not grant anything directly. Subscribing leaves a pending
subscription plus a checkout session; buying a bundle opens a payment
intent. PaymentService activates or grants once the payment completes.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import PaymentReferenceType, SubscriptionPeriod, SubscriptionStatus
from ..core.exceptions import ForbiddenException, NotFoundException, ResourceInUseException, ValidationException
from ..models.subscription import CourseBundle, SubscriptionPlan, UserSubscription
from ..repositories.factory import RepositoryFactory
from ..schemas.subscription import CourseBundleUpsert, SubscriptionPlanUpsert
from .base import BaseService
from .payment_service import PaymentService

logger = logging.getLogger(__name__)


class SubscriptionService(BaseService):
    """Service for subscription plans, user subscriptions and bundles."""

    def __init__(self, db: Session, payment_service: Optional[PaymentService] = None):
        super().__init__(db)
        self.plan_repository = RepositoryFactory.create_subscription_plan_repository(db)
        self.subscription_repository = RepositoryFactory.create_user_subscription_repository(db)
        self.bundle_repository = RepositoryFactory.create_course_bundle_repository(db)
        self.ownership_repository = RepositoryFactory.create_bundle_ownership_repository(db)
        self.course_repository = RepositoryFactory.create_course_repository(db)
        self.payment_service = payment_service or PaymentService(db)

    # Plans

    @BaseService.measure_operation("list_subscription_plans")
    def list_plans(self, active_only: bool = True) -> List[SubscriptionPlan]:
        return self.plan_repository.list_ordered(active_only=active_only)

    def _get_plan_or_404(self, plan_id: Optional[str]) -> SubscriptionPlan:
        plan = self.plan_repository.get_by_id(plan_id, load_relationships=False) if plan_id else None
        if plan is None:
            raise NotFoundException("Subscription plan not found")
        return plan

    @BaseService.measure_operation("subscribe")
    def subscribe(self, user_id: str, plan_id: Optional[str]) -> Dict[str, Any]:
        """
        Start a subscription.

        Returns:
            The pending subscription and the checkout session to pay it with
        """
        if not plan_id:
            raise ValidationException("Plan ID is required")
        plan = self._get_plan_or_404(plan_id)
        if not plan.is_active:
            raise ValidationException("Subscription plan is not available")

        with self.transaction():
            subscription = self.subscription_repository.create(
                user_id=user_id, plan_id=plan.id, status=SubscriptionStatus.PENDING.value
            )

        session = self.payment_service.create_checkout_session(
            price_id=plan.id,
            quantity=1,
            metadata={
                "reference_type": PaymentReferenceType.SUBSCRIPTION.value,
                "reference_id": subscription.id,
                "user_id": user_id,
                "plan_name": plan.name,
                "amount": str(plan.price),
            },
            customer_id=user_id,
        )

        with self.transaction():
            self.subscription_repository.update_entity(subscription, payment_reference=session["id"])

        self.log_operation("subscribe", user_id=user_id, plan_id=plan.id, subscription_id=subscription.id)
        return {"subscription": subscription, "checkout_session": session}

    @BaseService.measure_operation("get_my_subscriptions")
    def get_my_subscriptions(self, user_id: str) -> List[UserSubscription]:
        return self.subscription_repository.list_for_user(user_id)

    @BaseService.measure_operation("cancel_subscription")
    def cancel(self, user_id: str, subscription_id: str) -> UserSubscription:
        subscription = self.subscription_repository.get_by_id(subscription_id)
        if subscription is None:
            raise NotFoundException("Subscription not found")
        if subscription.user_id != user_id:
            raise ForbiddenException("Not authorized to cancel this subscription")
        if subscription.status == SubscriptionStatus.CANCELLED.value:
            raise ValidationException("Subscription is already cancelled")

        with self.transaction():
            self.subscription_repository.update_entity(subscription, status=SubscriptionStatus.CANCELLED.value)

        self.log_operation("cancel_subscription", user_id=user_id, subscription_id=subscription_id)
        return subscription

    @BaseService.measure_operation("upsert_subscription_plan")
    def upsert_plan(self, data: SubscriptionPlanUpsert) -> Dict[str, Any]:
        fields = data.model_dump(exclude_unset=True, exclude={"id"})
        if "period" in fields and fields["period"] not in {p.value for p in SubscriptionPeriod}:
            raise ValidationException("Invalid subscription period")

        with self.transaction():
            if data.id:
                plan = self._get_plan_or_404(data.id)
                self.plan_repository.update_entity(plan, **fields)
            else:
                if not data.name or data.price is None:
                    raise ValidationException("Name and price are required")
                fields.setdefault("benefits", [])
                fields.setdefault("is_popular", False)
                plan = self.plan_repository.create(**fields)

        return {"message": "Subscription plan updated" if data.id else "Subscription plan created", "plan": plan}

    @BaseService.measure_operation("delete_subscription_plan")
    def delete_plan(self, plan_id: str) -> None:
        plan = self._get_plan_or_404(plan_id)
        subscribers = self.subscription_repository.count_for_plan(plan.id)
        if subscribers:
            raise ResourceInUseException(
                "Cannot delete plan with active subscriptions. Update the plan instead.", count=subscribers
            )
        with self.transaction():
            self.plan_repository.delete_entity(plan)

    # Bundles

    @BaseService.measure_operation("list_course_bundles")
    def list_bundles(self, active_only: bool = True) -> List[CourseBundle]:
        return self.bundle_repository.list_all(active_only=active_only)

    def _get_bundle_or_404(self, bundle_id: str) -> CourseBundle:
        bundle = self.bundle_repository.get_by_id(bundle_id)
        if bundle is None:
            raise NotFoundException("Course bundle not found")
        return bundle

    @BaseService.measure_operation("purchase_bundle")
    def purchase_bundle(self, user_id: str, bundle_id: str) -> Dict[str, Any]:
        bundle = self._get_bundle_or_404(bundle_id)
        if not bundle.is_active:
            raise ValidationException("Course bundle is not available")
        if self.ownership_repository.get_for_user(user_id, bundle.id) is not None:
            raise ValidationException("You already own this bundle")

        intent = self.payment_service.create_payment_intent(
            amount=int(round(bundle.price * 100)),
            currency=settings.default_currency,
            metadata={
                "reference_type": PaymentReferenceType.BUNDLE.value,
                "reference_id": bundle.id,
                "user_id": user_id,
                "bundle_name": bundle.name,
            },
        )
        return {
            "client_secret": intent["client_secret"],
            "payment_intent_id": intent["id"],
            "bundle_details": {"id": bundle.id, "name": bundle.name, "price": bundle.price},
        }

    @BaseService.measure_operation("upsert_course_bundle")
    def upsert_bundle(self, data: CourseBundleUpsert) -> Dict[str, Any]:
        """
        Create or update a bundle.

        When ``course_ids`` is given every course must be published, and the
        bundle's course links are replaced in the same transaction.
        """
        course_ids = list(dict.fromkeys(data.course_ids or []))
        if course_ids and len(self.course_repository.get_published_by_ids(course_ids)) != len(course_ids):
            raise ValidationException("Some courses are invalid or not published")

        fields = data.model_dump(exclude_unset=True, exclude={"id", "course_ids"})
        with self.transaction():
            if data.id:
                bundle = self._get_bundle_or_404(data.id)
                self.bundle_repository.update_entity(bundle, **fields)
            else:
                if not data.name or data.price is None:
                    raise ValidationException("Name and price are required")
                fields.setdefault("benefits", [])
                bundle = self.bundle_repository.create(**fields)
            if data.id is None or data.course_ids is not None:
                self.bundle_repository.replace_courses(bundle, course_ids)

        return {"message": "Course bundle updated" if data.id else "Course bundle created", "bundle": bundle}

    @BaseService.measure_operation("delete_course_bundle")
    def delete_bundle(self, bundle_id: str) -> None:
        bundle = self._get_bundle_or_404(bundle_id)
        owners = self.ownership_repository.count_for_bundle(bundle.id)
        if owners:
            raise ResourceInUseException(
                "Cannot delete bundle with active owners. Update the bundle instead.", count=owners
            )
        with self.transaction():
            self.bundle_repository.delete_entity(bundle)

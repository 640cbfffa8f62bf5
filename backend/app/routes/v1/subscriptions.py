# backend/app/routes/v1/subscriptions.py
"""
Subscription and bundle routes - API v1

Versioned endpoints under /api/v1/subscriptions. Plan and bundle
management lives with the admin routes.

Endpoints:
    GET /plans                          → Active plans by price
    POST /subscribe                     → Pending subscription plus a checkout session
    GET /my                             → Own subscriptions
    PUT /{subscription_id}/cancel       → Cancel an own subscription
    GET /bundles                        → Active course bundles
    POST /bundles/{bundle_id}/purchase  → Payment intent for a bundle
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends, status

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.services import get_subscription_service
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.subscription import (
    BundlePurchaseResponse,
    CourseBundleResponse,
    SubscribeRequest,
    SubscribeResponse,
    SubscriptionPlanResponse,
    UserSubscriptionResponse,
)
from ...services.subscription_service import SubscriptionService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["subscriptions-v1"])


@router.get("/plans", response_model=List[SubscriptionPlanResponse])
async def list_plans(
    subscription_service: SubscriptionService = Depends(get_subscription_service),
) -> List[SubscriptionPlanResponse]:
    plans = await asyncio.to_thread(subscription_service.list_plans)
    return [SubscriptionPlanResponse.model_validate(p) for p in plans]


@router.post("/subscribe", response_model=SubscribeResponse, status_code=status.HTTP_201_CREATED)
async def subscribe(
    payload: SubscribeRequest,
    current_user: User = Depends(get_current_user),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
) -> SubscribeResponse:
    """The subscription stays pending until its checkout session is paid."""
    try:
        data = await asyncio.to_thread(subscription_service.subscribe, current_user.id, payload.plan_id)
    except DomainException as e:
        raise e.to_http_exception()
    return SubscribeResponse.model_validate(data)


@router.get("/my", response_model=List[UserSubscriptionResponse])
async def my_subscriptions(
    current_user: User = Depends(get_current_user),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
) -> List[UserSubscriptionResponse]:
    subscriptions = await asyncio.to_thread(subscription_service.get_my_subscriptions, current_user.id)
    return [UserSubscriptionResponse.model_validate(s) for s in subscriptions]


@router.get("/bundles", response_model=List[CourseBundleResponse])
async def list_bundles(
    subscription_service: SubscriptionService = Depends(get_subscription_service),
) -> List[CourseBundleResponse]:
    bundles = await asyncio.to_thread(subscription_service.list_bundles)
    return [CourseBundleResponse.model_validate(b) for b in bundles]


@router.post("/bundles/{bundle_id}/purchase", response_model=BundlePurchaseResponse)
async def purchase_bundle(
    bundle_id: str,
    current_user: User = Depends(get_current_user),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
) -> BundlePurchaseResponse:
    try:
        data = await asyncio.to_thread(subscription_service.purchase_bundle, current_user.id, bundle_id)
    except DomainException as e:
        raise e.to_http_exception()
    return BundlePurchaseResponse(**data)


@router.put("/{subscription_id}/cancel", response_model=UserSubscriptionResponse)
async def cancel_subscription(
    subscription_id: str,
    current_user: User = Depends(get_current_user),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
) -> UserSubscriptionResponse:
    try:
        subscription = await asyncio.to_thread(subscription_service.cancel, current_user.id, subscription_id)
    except DomainException as e:
        raise e.to_http_exception()
    return UserSubscriptionResponse.model_validate(subscription)

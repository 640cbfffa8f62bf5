# backend/app/routes/v1/payments.py
"""
Payment routes - API v1

Versioned payment endpoints under /api/v1/payments. The gateway is
simulated in-process by PaymentService.

Endpoints:
    GET /history                   → Own payments, newest first
    POST /                         → Create a payment intent
    POST /checkout-session         → Create a hosted checkout session
    POST /confirm                  → Confirm a payment intent and settle it
    POST /webhook                  → Gateway event delivery
    GET /methods                   → Saved payment methods
    POST /points/course/{course_id} → Buy a course with points
    POST /points/purchase          → Direct points package purchase
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.services import get_payment_service, get_points_service
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.payment_schemas import (
    CheckoutSessionResponse,
    ConfirmPaymentRequest,
    CreateCheckoutSessionRequest,
    CreatePaymentIntentRequest,
    PaymentIntentResponse,
    PaymentMethodResponse,
    PaymentResponse,
    WebhookAckResponse,
    WebhookEventRequest,
)
from ...schemas.points import CoursesPurchaseResponse, PackagePurchaseRequest, PackagePurchaseResponse
from ...services.payment_service import PaymentService
from ...services.points_service import PointsService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["payments-v1"])


@router.get("/history", response_model=List[PaymentResponse])
async def payment_history(
    current_user: User = Depends(get_current_user),
    payment_service: PaymentService = Depends(get_payment_service),
) -> List[PaymentResponse]:
    payments = await asyncio.to_thread(payment_service.get_history, current_user.id)
    return [PaymentResponse.model_validate(p) for p in payments]


@router.post("", response_model=PaymentIntentResponse)
async def create_payment_intent(
    payload: CreatePaymentIntentRequest,
    current_user: User = Depends(get_current_user),
    payment_service: PaymentService = Depends(get_payment_service),
) -> PaymentIntentResponse:
    """The caller is recorded as the payer whatever the metadata says."""
    metadata = {**payload.metadata, "user_id": current_user.id}
    try:
        intent = await asyncio.to_thread(
            payment_service.create_payment_intent,
            payload.amount,
            payload.currency,
            metadata,
            payload.payment_method_types,
        )
    except DomainException as e:
        raise e.to_http_exception()
    return PaymentIntentResponse(**intent)


@router.post("/checkout-session", response_model=CheckoutSessionResponse)
async def create_checkout_session(
    payload: CreateCheckoutSessionRequest,
    current_user: User = Depends(get_current_user),
    payment_service: PaymentService = Depends(get_payment_service),
) -> CheckoutSessionResponse:
    metadata = {**payload.metadata, "user_id": current_user.id}
    try:
        session = await asyncio.to_thread(
            payment_service.create_checkout_session,
            payload.price_id,
            payload.quantity,
            metadata,
            current_user.id,
        )
    except DomainException as e:
        raise e.to_http_exception()
    return CheckoutSessionResponse(**session)


@router.post("/confirm", response_model=PaymentIntentResponse)
async def confirm_payment(
    payload: ConfirmPaymentRequest,
    _: User = Depends(get_current_user),
    payment_service: PaymentService = Depends(get_payment_service),
) -> PaymentIntentResponse:
    """Confirm and settle; confirming an already completed intent settles nothing again."""
    try:
        intent = await asyncio.to_thread(
            payment_service.confirm_payment_intent, payload.payment_intent_id, payload.payment_method
        )
    except DomainException as e:
        raise e.to_http_exception()
    return PaymentIntentResponse(**intent)


@router.post("/webhook", response_model=WebhookAckResponse)
async def payment_webhook(
    payload: WebhookEventRequest,
    payment_service: PaymentService = Depends(get_payment_service),
) -> WebhookAckResponse:
    try:
        await asyncio.to_thread(payment_service.handle_webhook_event, payload.type, payload.data)
    except DomainException as e:
        logger.warning(f"Rejected webhook event {payload.type}: {e.message}")
        raise e.to_http_exception()
    return WebhookAckResponse(received=True)


@router.get("/methods", response_model=List[PaymentMethodResponse])
async def payment_methods(
    current_user: User = Depends(get_current_user),
    payment_service: PaymentService = Depends(get_payment_service),
) -> List[PaymentMethodResponse]:
    methods = await asyncio.to_thread(payment_service.get_payment_methods, current_user.id)
    return [PaymentMethodResponse(**m) for m in methods]


@router.post("/points/course/{course_id}", response_model=CoursesPurchaseResponse)
async def purchase_course_with_points(
    course_id: str,
    current_user: User = Depends(get_current_user),
    points_service: PointsService = Depends(get_points_service),
) -> CoursesPurchaseResponse:
    try:
        result = await asyncio.to_thread(points_service.purchase_course, current_user.id, course_id)
    except DomainException as e:
        raise e.to_http_exception()
    return CoursesPurchaseResponse.model_validate(result)


@router.post("/points/purchase", response_model=PackagePurchaseResponse)
async def purchase_points_package(
    payload: PackagePurchaseRequest,
    current_user: User = Depends(get_current_user),
    points_service: PointsService = Depends(get_points_service),
) -> PackagePurchaseResponse:
    try:
        result = await asyncio.to_thread(
            points_service.purchase_package, current_user.id, payload.package_id, payload.payment_method
        )
    except DomainException as e:
        raise e.to_http_exception()
    return PackagePurchaseResponse.model_validate(result)

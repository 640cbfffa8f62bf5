# backend/app/routes/v1/points.py
"""
Points routes - API v1

Versioned points economy endpoints under /api/v1/points. Referral code
endpoints share the prefix and live in referrals.py.

Endpoints:
    GET /balance                    → Current balance
    GET /transactions               → Ledger, newest first
    GET /packages                   → Active packages by points
    POST /add                       → Credit points
    POST /deduct                    → Debit points
    POST /purchase-courses          → Buy published courses with points
    POST /purchase                  → Direct package purchase without the gateway
    POST /create-payment-intent     → Gateway payment intent for a package
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends, status

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.services import get_points_service
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.points import (
    CoursesPurchaseRequest,
    CoursesPurchaseResponse,
    PackagePaymentIntentRequest,
    PackagePaymentIntentResponse,
    PackagePurchaseRequest,
    PackagePurchaseResponse,
    PointsBalanceResponse,
    PointsMovementRequest,
    PointsPackageResponse,
    PointsTransactionResponse,
)
from ...services.points_service import PointsService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["points-v1"])


@router.get("/balance", response_model=PointsBalanceResponse)
async def get_balance(
    current_user: User = Depends(get_current_user),
    points_service: PointsService = Depends(get_points_service),
) -> PointsBalanceResponse:
    try:
        points = await asyncio.to_thread(points_service.get_balance, current_user.id)
    except DomainException as e:
        raise e.to_http_exception()
    return PointsBalanceResponse(points=points)


@router.get("/transactions", response_model=List[PointsTransactionResponse])
async def get_transactions(
    current_user: User = Depends(get_current_user),
    points_service: PointsService = Depends(get_points_service),
) -> List[PointsTransactionResponse]:
    transactions = await asyncio.to_thread(points_service.get_transactions, current_user.id)
    return [PointsTransactionResponse.model_validate(t) for t in transactions]


@router.get("/packages", response_model=List[PointsPackageResponse])
async def get_packages(
    points_service: PointsService = Depends(get_points_service),
) -> List[PointsPackageResponse]:
    packages = await asyncio.to_thread(points_service.get_active_packages)
    return [PointsPackageResponse.model_validate(p) for p in packages]


@router.post("/add", response_model=PointsTransactionResponse)
async def add_points(
    payload: PointsMovementRequest,
    current_user: User = Depends(get_current_user),
    points_service: PointsService = Depends(get_points_service),
) -> PointsTransactionResponse:
    try:
        transaction = await asyncio.to_thread(
            points_service.add_points, current_user.id, payload.amount, payload.type, payload.description
        )
    except DomainException as e:
        raise e.to_http_exception()
    return PointsTransactionResponse.model_validate(transaction)


@router.post("/deduct", response_model=PointsTransactionResponse)
async def deduct_points(
    payload: PointsMovementRequest,
    current_user: User = Depends(get_current_user),
    points_service: PointsService = Depends(get_points_service),
) -> PointsTransactionResponse:
    """The ledger stores deductions as negative amounts."""
    try:
        transaction = await asyncio.to_thread(
            points_service.deduct_points, current_user.id, payload.amount, payload.type, payload.description
        )
    except DomainException as e:
        raise e.to_http_exception()
    return PointsTransactionResponse.model_validate(transaction)


@router.post("/purchase-courses", response_model=CoursesPurchaseResponse, status_code=status.HTTP_201_CREATED)
async def purchase_courses(
    payload: CoursesPurchaseRequest,
    current_user: User = Depends(get_current_user),
    points_service: PointsService = Depends(get_points_service),
) -> CoursesPurchaseResponse:
    """
    Buy courses with points.

    ``total_points_price`` must equal the summed points price of the
    courses; the deduction and the enrollments are written together.
    """
    try:
        result = await asyncio.to_thread(
            points_service.purchase_courses,
            current_user.id,
            payload.course_ids,
            payload.total_points_price,
            payload.description,
        )
    except DomainException as e:
        raise e.to_http_exception()
    return CoursesPurchaseResponse.model_validate(result)


@router.post("/purchase", response_model=PackagePurchaseResponse)
async def purchase_package(
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


@router.post("/create-payment-intent", response_model=PackagePaymentIntentResponse)
async def create_package_payment_intent(
    payload: PackagePaymentIntentRequest,
    current_user: User = Depends(get_current_user),
    points_service: PointsService = Depends(get_points_service),
) -> PackagePaymentIntentResponse:
    """Points are credited once the gateway reports the intent as paid."""
    try:
        result = await asyncio.to_thread(
            points_service.create_package_payment_intent, current_user.id, payload.package_id
        )
    except DomainException as e:
        raise e.to_http_exception()
    return PackagePaymentIntentResponse(**result)

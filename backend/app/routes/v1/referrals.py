# backend/app/routes/v1/referrals.py
"""
Referral routes - API v1

Endpoints (mounted under /api/v1/points):
    GET /referral-code                     → Own referral code with usage and points earned
    POST /referral-code/apply              → Redeem a referral code

Admin endpoints (mounted under /api/v1/admin/referral-codes):
    GET /                                  → All codes with usage counts
    POST /                                 → Create a promotional code
    PUT /{code_id}                         → Update a code
    DELETE /{code_id}                      → Delete a promotional code
    PATCH /{code_id}/toggle                → Flip a code's active flag
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends, status

from ...api.dependencies.auth import get_current_admin, get_current_user
from ...api.dependencies.services import get_referral_service
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.base import MessageResponse
from ...schemas.referrals import (
    ApplyReferralRequest,
    ApplyReferralResponse,
    MyReferralCodeResponse,
    ReferralCodeCreate,
    ReferralCodeUpdate,
    ReferralCodeWithUsage,
)
from ...services.referral_service import ReferralService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["referrals-v1"])
admin_router = APIRouter(tags=["admin-referrals-v1"], dependencies=[Depends(get_current_admin)])


@router.get("/referral-code", response_model=MyReferralCodeResponse)
async def get_my_referral_code(
    current_user: User = Depends(get_current_user),
    referral_service: ReferralService = Depends(get_referral_service),
) -> MyReferralCodeResponse:
    """The caller's personal code, created on first request."""
    data = await asyncio.to_thread(referral_service.get_my_code, current_user)
    return MyReferralCodeResponse(**data)


@router.post("/referral-code/apply", response_model=ApplyReferralResponse)
async def apply_referral_code(
    payload: ApplyReferralRequest,
    current_user: User = Depends(get_current_user),
    referral_service: ReferralService = Depends(get_referral_service),
) -> ApplyReferralResponse:
    try:
        data = await asyncio.to_thread(referral_service.apply_code, current_user, payload.code)
    except DomainException as e:
        raise e.to_http_exception()
    return ApplyReferralResponse(**data)


# Admin


@admin_router.get("", response_model=List[ReferralCodeWithUsage])
async def list_referral_codes(
    referral_service: ReferralService = Depends(get_referral_service),
) -> List[ReferralCodeWithUsage]:
    rows = await asyncio.to_thread(referral_service.list_codes)
    return [ReferralCodeWithUsage.model_validate(row) for row in rows]


@admin_router.post("", response_model=ReferralCodeWithUsage, status_code=status.HTTP_201_CREATED)
async def create_referral_code(
    payload: ReferralCodeCreate,
    referral_service: ReferralService = Depends(get_referral_service),
) -> ReferralCodeWithUsage:
    try:
        row = await asyncio.to_thread(referral_service.create_code, payload)
    except DomainException as e:
        raise e.to_http_exception()
    return ReferralCodeWithUsage.model_validate(row)


@admin_router.put("/{code_id}", response_model=ReferralCodeWithUsage)
async def update_referral_code(
    code_id: str,
    payload: ReferralCodeUpdate,
    referral_service: ReferralService = Depends(get_referral_service),
) -> ReferralCodeWithUsage:
    try:
        row = await asyncio.to_thread(referral_service.update_code, code_id, payload)
    except DomainException as e:
        raise e.to_http_exception()
    return ReferralCodeWithUsage.model_validate(row)


@admin_router.delete("/{code_id}", response_model=MessageResponse)
async def delete_referral_code(
    code_id: str,
    referral_service: ReferralService = Depends(get_referral_service),
) -> MessageResponse:
    """Personal user codes cannot be deleted."""
    try:
        await asyncio.to_thread(referral_service.delete_code, code_id)
    except DomainException as e:
        raise e.to_http_exception()
    return MessageResponse(message="Referral code deleted successfully")


@admin_router.patch("/{code_id}/toggle", response_model=ReferralCodeWithUsage)
async def toggle_referral_code(
    code_id: str,
    referral_service: ReferralService = Depends(get_referral_service),
) -> ReferralCodeWithUsage:
    try:
        row = await asyncio.to_thread(referral_service.toggle_code, code_id)
    except DomainException as e:
        raise e.to_http_exception()
    return ReferralCodeWithUsage.model_validate(row)

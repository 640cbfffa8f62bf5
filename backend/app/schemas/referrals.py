"""Schemas for referral-code endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .base import ORMModel, StandardizedModel


class ApplyReferralRequest(BaseModel):
    """Code redeemed by the current user."""

    code: Optional[str] = None


class MyReferralCodeResponse(StandardizedModel):
    code: str
    usage_count: int
    points_earned: int


class ApplyReferralResponse(StandardizedModel):
    success: bool
    message: str
    points_awarded: int


class ReferralCodeCreate(BaseModel):
    """Admin payload for a promotional code."""

    code: Optional[str] = None
    description: Optional[str] = None
    points_reward: Optional[int] = Field(None, ge=0)
    max_uses: Optional[int] = Field(None, ge=0, description="0 or null means unlimited")
    is_active: Optional[bool] = None
    expires_at: Optional[datetime] = None


class ReferralCodeUpdate(ReferralCodeCreate):
    pass


class ReferralCodeResponse(ORMModel):
    id: str
    code: str
    owner_id: Optional[str] = None
    description: Optional[str] = None
    points_reward: int
    is_active: bool
    is_user_code: bool
    max_uses: Optional[int] = None
    expires_at: Optional[datetime] = None
    created_at: datetime


class ReferralCodeWithUsage(StandardizedModel):
    code: ReferralCodeResponse
    usage_count: int

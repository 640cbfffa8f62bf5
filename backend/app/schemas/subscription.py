"""
Pydantic schemas for subscription plans and course bundles.

Upsert payloads carry an optional ``id``: present means update the stored
row, absent means create a new one.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .base import ORMModel, StandardizedModel


class SubscriptionPlanUpsert(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    period: Optional[str] = None
    featured_benefit: Optional[str] = None
    benefits: Optional[List[str]] = None
    is_popular: Optional[bool] = None
    is_active: Optional[bool] = None


class CourseBundleUpsert(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    original_price: Optional[float] = Field(None, ge=0)
    discount: Optional[float] = Field(None, ge=0, le=100)
    featured_benefit: Optional[str] = None
    benefits: Optional[List[str]] = None
    image_url: Optional[str] = None
    is_active: Optional[bool] = None
    course_ids: Optional[List[str]] = None


class SubscribeRequest(BaseModel):
    plan_id: Optional[str] = None


class SubscriptionPlanResponse(ORMModel):
    id: str
    name: str
    description: Optional[str] = None
    price: float
    period: str
    featured_benefit: Optional[str] = None
    benefits: List[str] = []
    is_popular: bool
    is_active: bool
    created_at: datetime


class UserSubscriptionResponse(ORMModel):
    id: str
    user_id: str
    plan_id: str
    status: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    payment_reference: Optional[str] = None
    created_at: datetime
    plan: Optional[SubscriptionPlanResponse] = None


class SubscribeResponse(StandardizedModel):
    subscription: UserSubscriptionResponse
    checkout_session: Dict[str, Any]


class SubscriptionPlanSaveResponse(StandardizedModel):
    message: str
    plan: SubscriptionPlanResponse


class CourseBundleResponse(ORMModel):
    id: str
    name: str
    description: Optional[str] = None
    price: float
    original_price: Optional[float] = None
    discount: Optional[float] = None
    featured_benefit: Optional[str] = None
    benefits: List[str] = []
    image_url: Optional[str] = None
    is_active: bool
    course_ids: List[str] = []
    created_at: datetime


class CourseBundleSaveResponse(StandardizedModel):
    message: str
    bundle: CourseBundleResponse


class BundlePurchaseResponse(StandardizedModel):
    client_secret: str
    payment_intent_id: str
    bundle_details: Dict[str, Any]

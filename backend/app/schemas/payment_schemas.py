"""
Payment-related Pydantic schemas for the EduMarket platform.

Defines request and response models for the mock payment gateway:
payment intents, checkout sessions, confirmation, webhooks and the
payment history.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .base import ORMModel, StandardizedModel

# ========== Request Models ==========


class CreatePaymentIntentRequest(BaseModel):
    """Request to open a payment intent."""

    amount: Optional[int] = Field(None, description="Amount in cents")
    currency: Optional[str] = Field(None, description="ISO currency code, defaults to the platform currency")
    metadata: Dict[str, Any] = Field(
        default_factory=dict, description="reference_type and reference_id drive settlement"
    )
    payment_method_types: Optional[List[str]] = Field(None, description="Defaults to card and wallets")


class CreateCheckoutSessionRequest(BaseModel):
    """Request to open a hosted checkout session."""

    price_id: Optional[str] = Field(None, description="Gateway price ID")
    quantity: Optional[int] = Field(None, ge=1)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ConfirmPaymentRequest(BaseModel):
    """Request to confirm a payment intent."""

    payment_intent_id: Optional[str] = Field(None, description="pi_... identifier")
    payment_method: Optional[str] = Field(None, description="Payment method used")


class WebhookEventRequest(BaseModel):
    """Gateway event delivered to the webhook endpoint."""

    type: Optional[str] = Field(None, description="Event type, e.g. payment_intent.succeeded")
    data: Dict[str, Any] = Field(default_factory=dict, description="Holds the event object under 'object'")


# ========== Response Models ==========


class PaymentIntentResponse(StandardizedModel):
    """Payment intent as the gateway returns it."""

    id: str
    object: str = "payment_intent"
    amount: int
    amount_received: int = 0
    client_secret: str
    currency: str
    metadata: Dict[str, Any] = {}
    payment_method: Optional[str] = None
    payment_method_types: List[str] = []
    status: str
    created: int


class CheckoutSessionResponse(StandardizedModel):
    """Hosted checkout session as the gateway returns it."""

    id: str
    object: str = "checkout.session"
    cancel_url: str
    success_url: str
    client_reference_id: str
    customer: Optional[str] = None
    metadata: Dict[str, Any] = {}
    payment_intent: str
    payment_status: str
    status: str
    url: str
    created: int


class CardDetails(StandardizedModel):
    brand: str
    last4: str
    exp_month: int
    exp_year: int


class PaymentMethodResponse(StandardizedModel):
    """Saved payment method."""

    id: str
    object: str = "payment_method"
    type: str
    card: CardDetails


class PaymentResponse(ORMModel):
    """Stored payment row."""

    id: str
    user_id: str
    amount: float
    currency: str
    status: str
    payment_method: str
    reference_id: str
    reference_type: Optional[str] = None
    payment_metadata: Dict[str, Any] = {}
    created_at: datetime
    updated_at: datetime


class WebhookAckResponse(StandardizedModel):
    received: bool = True

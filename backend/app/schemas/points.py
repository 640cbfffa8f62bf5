"""
Pydantic schemas for the points economy: balances, ledger entries,
purchasable packages and spending points on courses.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .base import ORMModel, StandardizedModel
from .enrollment import EnrollmentResponse

# ========== Request Models ==========


class PointsMovementRequest(BaseModel):
    """Manual credit or debit of the current user's balance."""

    amount: Optional[int] = Field(None, description="Positive number of points")
    type: Optional[str] = None
    description: Optional[str] = None


class PackagePaymentIntentRequest(BaseModel):
    package_id: Optional[str] = None


class PackagePurchaseRequest(BaseModel):
    package_id: Optional[str] = None
    payment_method: Optional[str] = None


class CoursesPurchaseRequest(BaseModel):
    course_ids: Optional[List[str]] = None
    total_points_price: Optional[int] = Field(None, description="Must equal the summed points price")
    description: Optional[str] = None


class PointsPackageCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    points: Optional[int] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)
    bonus_points: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class PointsPackageUpdate(PointsPackageCreate):
    pass


# ========== Response Models ==========


class PointsBalanceResponse(StandardizedModel):
    points: int


class PointsTransactionResponse(ORMModel):
    id: str
    user_id: str
    amount: int
    type: str
    description: str
    reference_id: Optional[str] = None
    created_at: datetime


class PointsPackageResponse(ORMModel):
    id: str
    name: str
    description: Optional[str] = None
    points: int
    price: float
    bonus_points: int
    is_active: bool
    created_at: datetime


class PackageDetails(StandardizedModel):
    id: str
    name: str
    points: int
    price: float


class PackagePaymentIntentResponse(StandardizedModel):
    client_secret: str
    package_details: PackageDetails


class PackagePurchaseResponse(StandardizedModel):
    transaction: PointsTransactionResponse
    success: bool
    message: str


class CoursesPurchaseResponse(StandardizedModel):
    success: bool
    message: str
    transaction: PointsTransactionResponse
    enrollments: List[EnrollmentResponse] = []

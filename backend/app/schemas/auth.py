"""
Pydantic schemas for registration, login and the current-user profile.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from .base import ORMModel, StandardizedModel
from .user import TeacherProfileResponse, UserResponse, UserWithProfileResponse


class RegisterRequest(BaseModel):
    # Required fields are checked by AuthService so missing values map to 400
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: str = "student"


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class AuthResponse(StandardizedModel):
    message: str
    user: UserWithProfileResponse
    token: str


class PointsTransactionBrief(ORMModel):
    id: str
    amount: int
    type: str
    description: Optional[str] = None
    created_at: datetime


class AchievementBrief(ORMModel):
    achievement_id: int
    name: str
    progress: int
    completed: bool


class CertificateBrief(ORMModel):
    id: str
    title: str
    type: str
    issue_date: datetime


class MeResponse(UserResponse):
    teacher_profile: Optional[TeacherProfileResponse] = None
    points_transactions: List[PointsTransactionBrief] = []
    achievements: List[AchievementBrief] = []
    certificates: List[CertificateBrief] = []

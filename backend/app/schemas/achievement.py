"""Pydantic schemas for achievements and per-user achievement progress."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from .base import ORMModel


class AchievementResponse(ORMModel):
    id: int
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    points_rewarded: int
    criteria: Any = None


class UserAchievementResponse(ORMModel):
    id: int
    user_id: str
    achievement_id: int
    progress: int
    completed: bool
    completed_at: Optional[datetime] = None
    created_at: datetime
    achievement: Optional[AchievementResponse] = None


class AchievementProgressRequest(BaseModel):
    progress: Optional[float] = Field(None, description="Amount to add, or the new value when increment is false")
    increment: bool = True

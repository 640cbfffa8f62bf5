"""
Pydantic schemas for tutoring sessions, requests, appointments and the
per-request message threads.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .base import ORMModel, StandardizedModel
from .course import TeacherBrief
from .user import AvailabilitySlot, AvailabilitySlotResponse

# Sessions


class TutoringSessionCreate(BaseModel):
    # subject, price_per_hour and location_type are checked by TutoringService
    subject: Optional[str] = None
    description: Optional[str] = None
    price_per_hour: Optional[float] = Field(None, ge=0)
    location_type: Optional[str] = None
    location: Optional[str] = None
    max_students: Optional[int] = Field(None, ge=1)
    prerequisites: Optional[List[str]] = None
    level: Optional[str] = None
    tags: Optional[List[str]] = None
    availability: Optional[List[AvailabilitySlot]] = None


class TutoringSessionUpdate(TutoringSessionCreate):
    status: Optional[str] = None
    featured: Optional[bool] = None


class TutoringSessionResponse(ORMModel):
    id: str
    teacher_id: str
    teacher: Optional[TeacherBrief] = None
    subject: str
    description: Optional[str] = None
    price_per_hour: float
    location_type: str
    location: Optional[str] = None
    max_students: int
    prerequisites: List[str] = []
    level: Optional[str] = None
    tags: List[str] = []
    featured: bool
    status: str
    rejection_reason: Optional[str] = None
    availability: List[AvailabilitySlotResponse] = []
    created_at: datetime
    updated_at: datetime


class TutoringReviewBrief(ORMModel):
    id: str
    user_id: str
    rating: int
    comment: Optional[str] = None
    created_at: datetime


class TutoringSessionDetailResponse(StandardizedModel):
    session: TutoringSessionResponse
    reviews: List[TutoringReviewBrief] = []


class TutoringSessionCreatedResponse(StandardizedModel):
    message: str
    session: TutoringSessionResponse


# Requests


class TutoringRequestCreate(BaseModel):
    message: Optional[str] = None
    preferred_date: Optional[datetime] = None


class TutoringRequestStatusUpdate(BaseModel):
    status: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    duration: Optional[int] = Field(None, ge=1, description="Minutes")


class StudentBrief(ORMModel):
    id: str
    name: str
    email: str
    avatar: Optional[str] = None


class TutoringAppointmentResponse(ORMModel):
    id: str
    request_id: str
    session_id: str
    student_id: str
    teacher_id: str
    scheduled_at: datetime
    duration: int
    price: float
    status: str
    created_at: datetime


class TutoringRequestResponse(ORMModel):
    id: str
    session_id: str
    student_id: str
    message: Optional[str] = None
    preferred_date: Optional[datetime] = None
    status: str
    created_at: datetime
    updated_at: datetime
    student: Optional[StudentBrief] = None
    appointment: Optional[TutoringAppointmentResponse] = None


class StudentTutoringRequestResponse(TutoringRequestResponse):
    session: Optional[TutoringSessionResponse] = None


class TeacherSessionWithRequests(StandardizedModel):
    session: TutoringSessionResponse
    requests: List[TutoringRequestResponse] = []


class TutoringRequestCreatedResponse(StandardizedModel):
    message: str
    request: TutoringRequestResponse


# Messages


class TutoringMessageCreate(BaseModel):
    content: Optional[str] = None


class TutoringMessageResponse(ORMModel):
    id: str
    request_id: str
    sender_id: str
    content: str
    read: bool
    created_at: datetime
    sender: Optional[TeacherBrief] = None


class TutoringConversationResponse(StandardizedModel):
    request_id: str
    session_id: str
    status: str
    subject: str
    other_party: Optional[StudentBrief] = None
    last_message: Optional[TutoringMessageResponse] = None
    unread_count: int = 0


class UnreadMessageCountResponse(StandardizedModel):
    unread_count: int

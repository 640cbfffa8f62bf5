"""
Pydantic schemas for courses and their nested content.

Request payloads mirror the course builder: a course carries topics,
topics carry lessons, and a lesson carries at most one quiz or assignment.
Items that include an ``id`` update the stored row on course update;
items without one are created.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from .base import ORMModel, StandardizedModel


class TeacherBrief(ORMModel):
    id: str
    name: str
    avatar: Optional[str] = None


# Requests


class QuestionPayload(BaseModel):
    question_text: str
    type: str = "single"
    options: Any = None
    correct_options: List[Any] = []


class QuizPayload(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    time_limit: Optional[int] = None
    questions: Optional[List[QuestionPayload]] = None


class AssignmentPayload(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    max_score: int = 100
    allow_file_upload: bool = True
    allowed_file_types: List[str] = []
    unit_tests: Any = None


class LessonPayload(BaseModel):
    id: Optional[str] = None
    title: str
    description: Optional[str] = None
    content: Optional[str] = None
    video_url: Optional[str] = None
    type: str = "lesson"
    duration: int = 0
    quiz: Optional[QuizPayload] = None
    assignment: Optional[AssignmentPayload] = None


class TopicPayload(BaseModel):
    id: Optional[str] = None
    title: str
    description: Optional[str] = None
    lessons: Optional[List[LessonPayload]] = None


class CourseCreate(BaseModel):
    # title and subject are checked by CourseService so a missing value is a 400
    title: Optional[str] = None
    description: Optional[str] = None
    subject: Optional[str] = None
    image: Optional[str] = None
    price: float = Field(0, ge=0)
    points_price: int = Field(0, ge=0)
    featured: bool = False
    topics: List[TopicPayload] = []


class CourseUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    subject: Optional[str] = None
    image: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    points_price: Optional[int] = Field(None, ge=0)
    featured: Optional[bool] = None
    status: Optional[str] = None
    topics: Optional[List[TopicPayload]] = None


# Responses


class QuestionResponse(ORMModel):
    id: str
    question_text: str
    type: str
    options: Any = None
    correct_options: List[Any] = []
    order_index: int


class QuizResponse(ORMModel):
    id: str
    title: str
    description: Optional[str] = None
    time_limit: Optional[int] = None
    questions: List[QuestionResponse] = []


class AssignmentResponse(ORMModel):
    id: str
    title: str
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    max_score: int
    allow_file_upload: bool
    allowed_file_types: List[str] = []
    unit_tests: Any = None


class LessonResponse(ORMModel):
    id: str
    topic_id: str
    course_id: str
    title: str
    description: Optional[str] = None
    content: Optional[str] = None
    video_url: Optional[str] = None
    type: str
    duration: int
    order_index: int
    quiz: Optional[QuizResponse] = None
    assignment: Optional[AssignmentResponse] = None


class LessonBrief(ORMModel):
    id: str
    title: str
    type: str
    duration: int
    order_index: int


class TopicResponse(ORMModel):
    id: str
    title: str
    description: Optional[str] = None
    order_index: int
    lessons: List[LessonResponse] = []


class TopicOutline(ORMModel):
    id: str
    title: str
    order_index: int
    lessons: List[LessonBrief] = []


class CourseSummaryResponse(ORMModel):
    id: str
    title: str
    description: Optional[str] = None
    subject: str
    image: Optional[str] = None
    price: float
    points_price: int
    status: str
    featured: bool
    teacher_id: str
    teacher: Optional[TeacherBrief] = None
    created_at: datetime
    updated_at: datetime


class CourseListItem(CourseSummaryResponse):
    average_rating: float = 0
    review_count: int = 0
    topics: List[TopicOutline] = []


class CourseDetailResponse(CourseSummaryResponse):
    average_rating: float = 0
    review_count: int = 0
    enrollment_count: int = 0
    topics: List[TopicResponse] = []


class CourseCreatedResponse(StandardizedModel):
    message: str
    course_id: str

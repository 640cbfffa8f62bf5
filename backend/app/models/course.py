# backend/app/models/course.py
"""
Course content models.

The content tree is Course -> Topic -> Lesson, where a lesson of type
``quiz`` owns one Quiz (with ordered Questions) and a lesson of type
``assignment`` owns one Assignment. Children are ordered by ``order_index``.
"""

from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
import ulid

from ..core.enums import CourseStatus, LessonType
from ..core.timezone_utils import utc_now
from ..database import Base
from .user import User


class Course(Base):
    __tablename__ = "courses"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    subject: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    points_price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    teacher_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=CourseStatus.DRAFT.value, index=True)
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    teacher: Mapped[User] = relationship("User")
    topics: Mapped[List["Topic"]] = relationship(
        "Topic",
        back_populates="course",
        order_by="Topic.order_index",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_published(self) -> bool:
        return self.status == CourseStatus.PUBLISHED.value

    def __repr__(self) -> str:
        return f"<Course {self.title!r} ({self.status})>"


class Topic(Base):
    __tablename__ = "topics"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    course_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    course: Mapped[Course] = relationship("Course", back_populates="topics")
    lessons: Mapped[List["Lesson"]] = relationship(
        "Lesson",
        back_populates="topic",
        order_by="Lesson.order_index",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Lesson(Base):
    __tablename__ = "lessons"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    topic_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("topics.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Denormalised so progress queries don't have to join through topics
    course_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    video_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default=LessonType.LESSON.value)
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    topic: Mapped[Topic] = relationship("Topic", back_populates="lessons")
    quiz: Mapped[Optional["Quiz"]] = relationship(
        "Quiz", back_populates="lesson", uselist=False, cascade="all, delete-orphan", passive_deletes=True
    )
    assignment: Mapped[Optional["Assignment"]] = relationship(
        "Assignment", back_populates="lesson", uselist=False, cascade="all, delete-orphan", passive_deletes=True
    )


class Quiz(Base):
    __tablename__ = "quizzes"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    lesson_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("lessons.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    time_limit: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    lesson: Mapped[Lesson] = relationship("Lesson", back_populates="quiz")
    questions: Mapped[List["Question"]] = relationship(
        "Question",
        back_populates="quiz",
        order_by="Question.order_index",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Question(Base):
    __tablename__ = "questions"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    quiz_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    options: Mapped[Any] = mapped_column(JSON, nullable=False, default=list)
    correct_options: Mapped[List[Any]] = mapped_column(JSON, nullable=False, default=list)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    quiz: Mapped[Quiz] = relationship("Quiz", back_populates="questions")


class Assignment(Base):
    __tablename__ = "assignments"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    lesson_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("lessons.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    max_score: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    allow_file_upload: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    allowed_file_types: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    unit_tests: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)

    lesson: Mapped[Lesson] = relationship("Lesson", back_populates="assignment")


class QuizAttempt(Base):
    __tablename__ = "quiz_attempts"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    quiz_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    answers: Mapped[Any] = mapped_column(JSON, nullable=False, default=dict)
    score: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)


class AssignmentSubmission(Base):
    __tablename__ = "assignment_submissions"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    assignment_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    file_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)

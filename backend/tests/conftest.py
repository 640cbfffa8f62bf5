"""
Shared fixtures.

Every test gets a fresh in-memory SQLite database. The API client shares
the test session through a ``get_db`` override, so rows created by
fixtures are visible to the routes and vice versa.
"""

import os
from typing import Callable, Iterator, Optional

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app import models  # noqa: F401
from app.auth import get_password_hash
from app.core.enums import CourseStatus, LessonType, LocationType, RoleName, TutoringStatus
from app.database import Base, get_db, install_sqlite_pragmas
from app.main import app
from app.models.course import Course, Lesson, Topic
from app.models.points import PointsPackage
from app.models.tutoring import TutoringSession
from app.models.user import TeacherProfile, User
from tests.helpers import auth_headers_for

TEST_PASSWORD = "secret123"


@pytest.fixture(scope="session")
def password_hash() -> str:
    """Bcrypt is slow; hash the shared test password once."""
    return get_password_hash(TEST_PASSWORD)


@pytest.fixture(scope="function")
def db() -> Iterator[Session]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    install_sqlite_pragmas(engine)
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db: Session) -> Iterator[TestClient]:
    """Create a test client with the test database."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    test_client = TestClient(app)

    yield test_client

    app.dependency_overrides.clear()
    test_client.close()


# Users


@pytest.fixture
def make_user(db: Session, password_hash: str) -> Callable[..., User]:
    counter = {"n": 0}

    def _make(role: str = RoleName.STUDENT.value, name: Optional[str] = None, points: int = 0) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            name=name or f"{role.title()} {n}",
            email=f"{role}{n}@example.com",
            hashed_password=password_hash,
            role=role,
            points=points,
            referral_code=f"{role[:3].upper()}{n:05d}",
        )
        db.add(user)
        db.flush()
        if role == RoleName.TEACHER.value:
            db.add(TeacherProfile(user_id=user.id))
        db.commit()
        return user

    return _make


@pytest.fixture
def student(make_user) -> User:
    return make_user(RoleName.STUDENT.value, name="Sam Student")


@pytest.fixture
def other_student(make_user) -> User:
    return make_user(RoleName.STUDENT.value, name="Olive Other")


@pytest.fixture
def teacher(make_user) -> User:
    return make_user(RoleName.TEACHER.value, name="Tina Teacher")


@pytest.fixture
def admin(make_user) -> User:
    return make_user(RoleName.ADMIN.value, name="Ada Admin")


@pytest.fixture
def student_headers(student: User) -> dict:
    return auth_headers_for(student)


@pytest.fixture
def teacher_headers(teacher: User) -> dict:
    return auth_headers_for(teacher)


@pytest.fixture
def admin_headers(admin: User) -> dict:
    return auth_headers_for(admin)


# Catalogue


@pytest.fixture
def make_course(db: Session) -> Callable[..., Course]:
    """Course with ``lessons_per_topic`` plain lessons in each of ``topics`` topics."""

    def _make(
        teacher: User,
        title: str = "Python Basics",
        status: str = CourseStatus.PUBLISHED.value,
        points_price: int = 0,
        price: float = 0,
        topics: int = 1,
        lessons_per_topic: int = 2,
        subject: str = "programming",
        featured: bool = False,
    ) -> Course:
        course = Course(
            title=title,
            description=f"{title} description",
            subject=subject,
            teacher_id=teacher.id,
            status=status,
            points_price=points_price,
            price=price,
            featured=featured,
        )
        db.add(course)
        db.flush()
        for t in range(topics):
            topic = Topic(course_id=course.id, title=f"Topic {t + 1}", order_index=t)
            db.add(topic)
            db.flush()
            for i in range(lessons_per_topic):
                db.add(
                    Lesson(
                        topic_id=topic.id,
                        course_id=course.id,
                        title=f"Lesson {t + 1}.{i + 1}",
                        type=LessonType.LESSON.value,
                        order_index=i,
                    )
                )
        db.commit()
        db.refresh(course)
        return course

    return _make


@pytest.fixture
def published_course(make_course, teacher) -> Course:
    return make_course(teacher, points_price=100, price=19.99)


@pytest.fixture
def points_package(db: Session) -> PointsPackage:
    package = PointsPackage(name="Standard", description="500 points", points=500, price=44.99, bonus_points=50)
    db.add(package)
    db.commit()
    return package


# Tutoring


@pytest.fixture
def make_session(db: Session) -> Callable[..., TutoringSession]:
    def _make(
        teacher: User,
        subject: str = "Algebra",
        status: str = TutoringStatus.APPROVED.value,
        price_per_hour: float = 40.0,
        location_type: str = LocationType.ONLINE.value,
    ) -> TutoringSession:
        session = TutoringSession(
            teacher_id=teacher.id,
            subject=subject,
            price_per_hour=price_per_hour,
            location_type=location_type,
            status=status,
        )
        db.add(session)
        db.commit()
        return session

    return _make


@pytest.fixture
def approved_session(make_session, teacher) -> TutoringSession:
    return make_session(teacher)

"""Small helpers shared by the test modules."""

from typing import List

from app.auth import create_access_token
from app.models.course import Course
from app.models.user import User


def auth_headers_for(user: User) -> dict:
    token = create_access_token(data={"sub": user.id})
    return {"Authorization": f"Bearer {token}"}


def lesson_ids(course: Course) -> List[str]:
    return [lesson.id for topic in course.topics for lesson in topic.lessons]

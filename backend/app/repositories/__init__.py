# backend/app/repositories/__init__.py
"""
Repository Pattern Implementation for the EduMarket platform

This package provides the repository layer for data access,
separating business logic from database queries.

Usage:
    from app.repositories import RepositoryFactory

    # In a service:
    repository = RepositoryFactory.create_course_repository(db)
    courses = repository.list_published(subject="math")
"""

from .base_repository import BaseRepository
from .factory import RepositoryFactory

__all__ = [
    "BaseRepository",
    "RepositoryFactory",
]

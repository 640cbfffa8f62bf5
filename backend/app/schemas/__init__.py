# backend/app/schemas/__init__.py
"""
Pydantic schemas for the EduMarket API.

Each module holds the request and response models of one area; import
them from their module, e.g. ``from app.schemas.course import CourseCreate``.
"""

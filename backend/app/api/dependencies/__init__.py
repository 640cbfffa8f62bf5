# backend/app/api/dependencies/__init__.py
"""
Central export point for request dependencies.
"""

from .auth import (
    get_current_admin,
    get_current_teacher,
    get_current_user,
    get_current_user_optional,
    require_roles,
)

__all__ = [
    "get_current_user",
    "get_current_user_optional",
    "get_current_admin",
    "get_current_teacher",
    "require_roles",
]

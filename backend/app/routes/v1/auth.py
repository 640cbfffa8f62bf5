# backend/app/routes/v1/auth.py
"""
Authentication routes - API v1

Versioned authentication endpoints under /api/v1/auth.

Endpoints:
    POST /register                       → User registration
    POST /login                          → Email/password login
    GET /me                              → Current user with points, achievements and certificates
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, status

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.services import get_auth_service
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.auth import AuthResponse, LoginRequest, MeResponse, RegisterRequest
from ...schemas.user import UserResponse, UserWithProfileResponse
from ...services.auth_service import AuthService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["auth-v1"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """
    Register a new user.

    Teachers get an empty teacher profile. The response carries a bearer
    token so the client is signed in straight away.
    """
    try:
        user, token = await asyncio.to_thread(
            auth_service.register, payload.name, payload.email, payload.password, payload.role
        )
    except DomainException as e:
        raise e.to_http_exception()

    return AuthResponse(
        message="User registered successfully",
        user=UserWithProfileResponse.model_validate(user),
        token=token,
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    try:
        user, token = await asyncio.to_thread(auth_service.login, payload.email, payload.password)
    except DomainException as e:
        raise e.to_http_exception()

    return AuthResponse(
        message="Login successful",
        user=UserWithProfileResponse.model_validate(user),
        token=token,
    )


@router.get("/me", response_model=MeResponse)
async def read_users_me(
    current_user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> MeResponse:
    """Current user with recent points activity, achievements and certificates."""
    try:
        profile = await asyncio.to_thread(auth_service.get_profile, current_user.id)
    except DomainException as e:
        raise e.to_http_exception()

    user = UserResponse.model_validate(profile.pop("user")).model_dump()
    return MeResponse.model_validate({**user, **profile})

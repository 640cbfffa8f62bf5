# backend/app/routes/health.py
"""
Health check endpoint for monitoring and load balancer probes.
"""

from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Response

from ..core.config import settings
from ..core.constants import API_VERSION, BRAND_NAME
from ..schemas.base import HealthResponse

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health_check(response: Response) -> HealthResponse:
    """
    Basic health status including service info and environment.

    Does not touch the database, so it stays cheap for high-frequency probes.
    """
    response.headers["Cache-Control"] = "no-store"
    return HealthResponse(
        status="ok",
        service=f"{BRAND_NAME.lower()}-api",
        version=API_VERSION,
        environment=settings.environment,
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    )

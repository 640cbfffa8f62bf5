# backend/app/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import Any, AsyncGenerator, Dict

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from .core.config import is_running_tests, settings
from .core.constants import API_DESCRIPTION, API_TITLE, API_VERSION, BRAND_NAME
from .errors import register_error_handlers
from .middleware.prometheus_middleware import PrometheusMiddleware
from .middleware.timing import TimingMiddleware
from .routes import health, prometheus
from .routes.v1 import (
    achievements as achievements_v1,
    admin as admin_v1,
    auth as auth_v1,
    blog as blog_v1,
    calendar as calendar_v1,
    certificates as certificates_v1,
    course_progress as course_progress_v1,
    courses as courses_v1,
    enrollments as enrollments_v1,
    favorites as favorites_v1,
    notifications as notifications_v1,
    payments as payments_v1,
    points as points_v1,
    referrals as referrals_v1,
    reviews as reviews_v1,
    subscriptions as subscriptions_v1,
    tutoring as tutoring_v1,
    tutoring_messages as tutoring_messages_v1,
    tutoring_requests as tutoring_requests_v1,
    users as users_v1,
)

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown without deprecated events."""
    logger.info(f"{BRAND_NAME} API starting up...")
    logger.info(f"Environment: {settings.environment}")
    if is_running_tests():
        logger.info("Running under pytest (test mode active)")

    yield

    logger.info(f"{BRAND_NAME} API shutting down...")


def _unique_operation_id(route: APIRoute) -> str:
    methods = "_".join(sorted(m.lower() for m in route.methods or []))
    path = route.path_format.replace("/", "_").replace("{", "").replace("}", "").strip("_")
    name = (route.name or "operation").lower().replace(" ", "_")
    return f"{methods}__{path}__{name}".strip("_")


app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
    generate_unique_id_function=_unique_operation_id,
)

# Register unified error envelope handlers
register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
)
logger.info("CORS allow_origins=%s allow_credentials=%s", settings.cors_origins, True)

app.add_middleware(TimingMiddleware)
if settings.prometheus_enabled:
    app.add_middleware(PrometheusMiddleware)

# Create API v1 router
api_v1 = APIRouter(prefix="/api/v1")

# Mount v1 routes
# Note: several modules share a prefix; their paths differ in segment count or literals
api_v1.include_router(auth_v1.router, prefix="/auth")
api_v1.include_router(users_v1.router, prefix="/users")

api_v1.include_router(favorites_v1.router, prefix="/courses")
api_v1.include_router(course_progress_v1.router, prefix="/courses")
api_v1.include_router(enrollments_v1.router, prefix="/courses")
api_v1.include_router(courses_v1.router, prefix="/courses")

api_v1.include_router(tutoring_requests_v1.router, prefix="/tutoring")
api_v1.include_router(tutoring_messages_v1.router, prefix="/tutoring")
api_v1.include_router(tutoring_v1.router, prefix="/tutoring")

api_v1.include_router(achievements_v1.router, prefix="/achievements")
api_v1.include_router(certificates_v1.router, prefix="/certificates")
api_v1.include_router(reviews_v1.router, prefix="/reviews")
api_v1.include_router(calendar_v1.router, prefix="/calendar")
api_v1.include_router(subscriptions_v1.router, prefix="/subscriptions")
api_v1.include_router(payments_v1.router, prefix="/payments")
api_v1.include_router(points_v1.router, prefix="/points")
api_v1.include_router(referrals_v1.router, prefix="/points")
api_v1.include_router(notifications_v1.router, prefix="/notifications")
api_v1.include_router(blog_v1.router, prefix="/blog")

# Admin-only routers
api_v1.include_router(referrals_v1.admin_router, prefix="/admin/referral-codes")
api_v1.include_router(blog_v1.admin_router, prefix="/admin/blog")
api_v1.include_router(admin_v1.router, prefix="/admin")

# Mount API v1 first
app.include_router(api_v1)

# Infrastructure endpoints (unversioned)
app.include_router(health.router)
app.include_router(prometheus.router)


@app.get("/", include_in_schema=False)
def root() -> Dict[str, Any]:
    return {"message": f"Welcome to {API_TITLE}", "version": API_VERSION, "docs": "/docs"}

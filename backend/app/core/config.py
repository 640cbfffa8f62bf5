# backend/app/core/config.py
import logging
import os
from pathlib import Path
from typing import Any, List

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.info(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    """Runtime configuration for the API, read from the environment and backend/.env."""

    environment: str = Field(default="development", description="development | production | test")

    # Database
    database_url: str = Field(
        default="sqlite:///./edumarket.db",
        description="SQLAlchemy database URL",
    )
    database_echo: bool = False

    # JWT
    secret_key: SecretStr = Field(
        default=SecretStr("dev-secret-key-change-me"),
        description="Secret used to sign access tokens",
    )
    algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(default=60 * 24, description="Tokens live for one day")

    # URLs
    frontend_url: str = Field(default="http://localhost:3000")
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    # Points & referrals
    referral_points_reward: int = Field(default=50, ge=0)
    default_currency: str = "eur"

    # Blog
    words_per_minute: int = Field(default=200, gt=0)

    # Observability
    slow_request_threshold_ms: float = 500.0
    prometheus_enabled: bool = True

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _parse_cors_origins(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [token.strip() for token in value.split(",") if token.strip()]
        return list(value)

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


settings = Settings()

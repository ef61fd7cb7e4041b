import json
import os
import sys
from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _should_load_env_file() -> str | None:
    """Decide whether `backend/.env` should be read.

    Local development loads `.env` for convenience. Under pytest or CI the
    file is ignored so tests see only the environment they set up themselves.
    """
    if any("pytest" in str(x) for x in sys.argv if x):
        return None
    if os.environ.get("CI") in ("1", "true", "True"):
        return None
    return ".env"


class Settings(BaseSettings):
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: 'development', 'staging', 'production' or 'test'",
    )

    DATABASE_URL: str = "sqlite:///./data/mtaa.db"
    SECRET_KEY: str = Field(
        ...,  # Required, no default
        description="JWT verification key - must be set via SECRET_KEY",
    )
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    CORS_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins (comma-separated or JSON list in env var)",
    )

    # Bootstrap admin for init_db.py
    ADMIN_USERNAME: Optional[str] = Field(
        default=None,
        description="Username promoted to admin by init_db.py",
    )

    # Database connection pool settings
    DB_POOL_SIZE: int = Field(default=5, description="Persistent connections in pool")
    DB_MAX_OVERFLOW: int = Field(
        default=10, description="Extra connections when pool exhausted"
    )
    DB_POOL_TIMEOUT: int = Field(
        default=30, description="Seconds to wait for a pooled connection"
    )
    DB_POOL_RECYCLE: int = Field(
        default=1800, description="Recycle connections after N seconds"
    )

    AUTO_CREATE_DB: bool = Field(
        default=False,
        description="When true (development only), call Base.metadata.create_all on startup",
    )

    SLOW_REQUEST_THRESHOLD: float = Field(
        default=1.0,
        description="Log warning for requests slower than this (seconds)",
    )

    # Moderation
    REPORT_REVIEW_THRESHOLD: int = Field(
        default=5,
        description="Active reports at which a post is highlighted in the admin queue",
    )
    TEMPORARY_BAN_DAYS: int = Field(
        default=7,
        description="Ban length when the resolve reason asks for a temporary ban",
    )
    DEFAULT_BAN_REASON: str = Field(
        default="Violation of community guidelines",
        description="Ban reason stored when the admin gives none",
    )
    REPORT_RATE_LIMIT: str = Field(
        default="10/minute",
        description="slowapi limit for report submission per client",
    )
    REPORTS_PAGE_SIZE_MAX: int = Field(
        default=100,
        description="Upper bound for the admin queue page size",
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | List[str]) -> List[str]:
        """Parse CORS origins from a JSON list or comma-separated string."""
        if isinstance(v, str):
            if v.strip().startswith("["):
                return json.loads(v)
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    model_config = SettingsConfigDict(
        env_file=_should_load_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Raises pydantic.ValidationError at import time if SECRET_KEY is missing
settings = Settings()  # type: ignore[call-arg]

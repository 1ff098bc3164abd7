from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "Estate Admin Console"
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # -------------------------------------------------
    # Remote platform API
    # -------------------------------------------------
    API_BASE_URL: str = "http://localhost:4000"
    API_TIMEOUT_SECONDS: float = Field(30.0, description="Per-request timeout for the platform API")

    # -------------------------------------------------
    # Operator session (local storage file)
    # -------------------------------------------------
    # None keeps the session in memory only
    SESSION_STORAGE_PATH: Optional[str] = None

    # -------------------------------------------------
    # RBAC
    # -------------------------------------------------
    PERMISSION_BURST_WINDOW_MS: int = Field(500, description="How long a resolved permission read is reused")
    SUPER_ADMIN_ROLE: str = "super_admin"
    ENTERPRISE_ADMIN_ROLE: str = "enterprise_role"

    # -------------------------------------------------
    # CORS
    # -------------------------------------------------
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
    ]

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True


# Instantiate settings
settings = Settings()

# Strip trailing slashes so paths can always start with "/"
settings.API_BASE_URL = settings.API_BASE_URL.rstrip("/")
settings.BACKEND_CORS_ORIGINS = sorted({o.rstrip("/") for o in settings.BACKEND_CORS_ORIGINS})

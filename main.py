from typing import List

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Core
from core.api_client import close_api_client
from core.config import settings
from core.logging_config import logger

# -------------------------------------------------
# Routers
# -------------------------------------------------
from routers import (
    auth_router,
    rbac_router,
    campaigns_router,
    properties_router,
    users_router,
    health_router,
)


def describe_routes(app: FastAPI) -> List[str]:
    """One "METHODS path" line per documented endpoint, read from the OpenAPI schema."""
    lines = []
    for path, operations in app.openapi().get("paths", {}).items():
        methods = ",".join(sorted(m.upper() for m in operations))
        lines.append(f"{methods:10s} {path}")
    return lines


# -------------------------------------------------
# Create the Application
# -------------------------------------------------
def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="Admin console for the real-estate platform: listings, campaigns, users and roles",
    )

    # -------------------------------------------------
    # CORS
    # -------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------
    # Startup / shutdown
    # -------------------------------------------------
    @app.on_event("startup")
    async def on_startup():
        logger.info(f"🚀 Starting {settings.PROJECT_NAME} (platform API: {settings.API_BASE_URL})")
        for line in describe_routes(app):
            logger.debug(line)

    @app.on_event("shutdown")
    async def on_shutdown():
        await close_api_client()

    # -------------------------------------------------
    # Error handling
    # -------------------------------------------------
    @app.exception_handler(StarletteHTTPException)
    async def handle_http(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (401, 403, 500):
            logger.warning(
                f"HTTP {exc.status_code} at {request.url}: {exc.detail}"
            )
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(Exception)
    async def handle_unhandled(request: Request, exc: Exception):
        logger.error("Unhandled error at %s", request.url, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    # -------------------------------------------------
    # Register Routers
    # -------------------------------------------------

    # Session
    app.include_router(auth_router)

    # Access Control
    app.include_router(rbac_router)

    # Console resources
    app.include_router(campaigns_router)
    app.include_router(properties_router)
    app.include_router(users_router)

    # Health
    app.include_router(health_router)

    return app


# Create the global FastAPI instance
app = create_app()

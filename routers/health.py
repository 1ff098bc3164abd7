# routers/health.py

from fastapi import APIRouter, Depends

from core.config import settings
from core.session import SessionManager
from dependencies.auth import get_session

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


# -----------------------------------------------------
# GET /health/app
# Simple liveness check
# -----------------------------------------------------
@router.get("/app", summary="App health check")
async def health_app():
    return {
        "service": settings.PROJECT_NAME,
        "status": "ok",
    }


# -----------------------------------------------------
# GET /health/session
# Whether an operator session is held (no profile details)
# -----------------------------------------------------
@router.get("/session", summary="Session health check")
def health_session(session: SessionManager = Depends(get_session)):
    return {
        "service": settings.PROJECT_NAME,
        "authenticated": session.is_authenticated,
        "api_base_url": settings.API_BASE_URL,
    }

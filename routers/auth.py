from fastapi import APIRouter, Depends, HTTPException

from core.api_client import ApiClient
from core.errors import ApiError, AuthError, handle_api_error
from core.roles import is_enterprise_admin, is_super_admin
from core.session import SessionManager
from dependencies.auth import get_current_user, get_platform_client, get_session
from models.auth import LoginRequest, SessionRead
from models.user import AuthenticatedUser
from services.auth_service import AuthService


router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


def _session_read(session: SessionManager) -> SessionRead:
    user = session.user if session.is_authenticated else None
    return SessionRead(
        authenticated=user is not None,
        user=user,
        is_super_admin=is_super_admin(user),
        is_enterprise_admin=is_enterprise_admin(user),
    )


# ============================================================
# LOGIN (PLATFORM AUTH)
# ============================================================
@router.post("/login", response_model=SessionRead, summary="Start a console session")
async def login(
    payload: LoginRequest,
    client: ApiClient = Depends(get_platform_client),
    session: SessionManager = Depends(get_session),
):
    try:
        await AuthService(client, session).login(payload.username, payload.password)
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except ApiError as e:
        raise handle_api_error(e, "Login")

    return _session_read(session)


# ============================================================
# LOGOUT
# ============================================================
@router.post("/logout", response_model=SessionRead, summary="End the console session")
def logout(
    client: ApiClient = Depends(get_platform_client),
    session: SessionManager = Depends(get_session),
):
    AuthService(client, session).logout()
    return _session_read(session)


# ============================================================
# CURRENT USER
# ============================================================
@router.get("/me", response_model=SessionRead, summary="Current console operator")
def read_me(
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: SessionManager = Depends(get_session),
):
    return _session_read(session)

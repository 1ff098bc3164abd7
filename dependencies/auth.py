from typing import Union

from fastapi import Depends, HTTPException, status

from core.api_client import ApiClient, get_api_client
from core.permission_helpers import ModulePermission, require_module_permission
from core.session import SessionManager, get_session_manager
from models.enums import ActionKey, ModuleKey
from models.user import AuthenticatedUser
from services.rbac_service import PermissionMatrixService, get_rbac_service


# ============================================================
# Process-wide collaborators (overridable in tests)
# ============================================================
def get_session() -> SessionManager:
    return get_session_manager()


def get_platform_client() -> ApiClient:
    return get_api_client()


def get_permission_service() -> PermissionMatrixService:
    return get_rbac_service()


# ============================================================
# CURRENT USER (operator session)
# ============================================================
def get_current_user(session: SessionManager = Depends(get_session)) -> AuthenticatedUser:
    if not session.is_authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No active console session",
        )
    return session.user


# ============================================================
# MODULE PERMISSION CHECK (DELEGATES TO permission_helpers)
# ============================================================
def requires_module_permission(module: Union[ModuleKey, str], action: Union[ActionKey, str]):
    """
    Usage:
        @router.post("/", dependencies=[Depends(requires_module_permission("campaign", "add"))])
    """

    async def dependency(
        current_user: AuthenticatedUser = Depends(get_current_user),
        service: PermissionMatrixService = Depends(get_permission_service),
    ) -> ModulePermission:
        engine = ModulePermission(current_user, module, service)
        await engine.resolve()
        require_module_permission(engine, action)
        return engine

    return dependency

from typing import Optional, Protocol, Union, runtime_checkable

from fastapi import HTTPException

from core.logging_config import logger
from core.permissions import resolve_module_key
from core.roles import is_enterprise_admin, is_super_admin
from models.enums import ActionKey, ModuleKey
from models.rbac import ModuleAccess, MyPermissions, PermissionsMap
from models.user import AuthenticatedUser


@runtime_checkable
class PermissionSource(Protocol):
    """Where the engine reads the current role's permissions from."""

    async def get_my_permissions(self) -> MyPermissions:
        ...


# -----------------------------------------------------
# Module permission engine
#   • super admin → everything, never fetches
#   • not an enterprise admin → nothing, never fetches
#   • enterprise admin → whatever /rbac/my-permissions grants
# -----------------------------------------------------
class ModulePermission:
    """
    Answers can(action) for one module and one user.

    can() is synchronous and fails closed: until resolve() has stored a
    permissions map, every check for an enterprise admin returns False.
    `permission_ready` tells callers when the answer is final.
    """

    def __init__(
        self,
        user: Optional[AuthenticatedUser],
        module: Union[ModuleKey, str],
        service: PermissionSource,
    ):
        self.user = user
        self.module = resolve_module_key(module)
        self.service = service

        self.super_admin = is_super_admin(user)
        self.enterprise_admin = is_enterprise_admin(user)

        self.permissions: Optional[PermissionsMap] = None
        self.resolved = False
        self.resolving = False
        self.closed = False

    @property
    def needs_fetch(self) -> bool:
        return self.enterprise_admin and not self.super_admin

    @property
    def permission_ready(self) -> bool:
        return self.super_admin or not self.enterprise_admin or self.resolved

    async def resolve(self) -> "ModulePermission":
        if not self.needs_fetch or self.resolved:
            return self

        self.resolving = True
        try:
            result = await self.service.get_my_permissions()
            permissions: Optional[PermissionsMap] = result.permissions
        except Exception as e:
            logger.warning(f"Could not resolve permissions for '{self.module}', failing closed: {e}")
            permissions = None
        finally:
            self.resolving = False

        # Closed while the request was out: the cache keeps the result, we don't
        if self.closed:
            return self

        self.permissions = permissions
        self.resolved = True
        return self

    def close(self):
        self.closed = True

    def can(self, action: Union[ActionKey, str]) -> bool:
        action = action.value if isinstance(action, ActionKey) else str(action)

        if self.super_admin:
            return True
        if not self.enterprise_admin:
            return False
        if not self.permissions:
            return False

        module_permissions = self.permissions.get(self.module)
        if not module_permissions:
            return False

        if action == ActionKey.view.value:
            return module_permissions.get(ActionKey.view.value) is True

        # Every other action depends on view
        if module_permissions.get(ActionKey.view.value) is not True:
            return False
        return module_permissions.get(action) is True

    def access(self) -> ModuleAccess:
        return ModuleAccess(
            module=self.module,
            permission_ready=self.permission_ready,
            actions={action: self.can(action) for action in ActionKey.list()},
        )


def require_module_permission(engine: ModulePermission, action: Union[ActionKey, str]):
    """Raise 403 unless the (resolved) engine grants `action`."""
    if not engine.can(action):
        action_key = action.value if isinstance(action, ActionKey) else action
        raise HTTPException(
            status_code=403,
            detail=f"Insufficient permissions: '{engine.module}:{action_key}' required",
        )

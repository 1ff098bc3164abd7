# -------------------------
# Enums
# -------------------------
from .enums import (
    BaseStrEnum,
    ModuleKey,
    ActionKey,
)

# -------------------------
# RBAC Models
# -------------------------
from .rbac import (
    ModulePermissions,
    PermissionsMap,
    PermissionsMatrix,
    RbacPermissionEntry,
    RbacOrganization,
    RbacUser,
    RbacRole,
    CreateRolePayload,
    UpdateRolePermissionsPayload,
    MyPermissions,
    ModuleAccess,
    MatrixUpdate,
    ModuleCatalogue,
)

# -------------------------
# Identity Models
# -------------------------
from .user import RoleRef, AuthenticatedUser

# -------------------------
# Auth Models
# -------------------------
from .auth import LoginRequest, SessionRead

__all__ = [
    # enums
    "BaseStrEnum",
    "ModuleKey",
    "ActionKey",

    # rbac
    "ModulePermissions",
    "PermissionsMap",
    "PermissionsMatrix",
    "RbacPermissionEntry",
    "RbacOrganization",
    "RbacUser",
    "RbacRole",
    "CreateRolePayload",
    "UpdateRolePermissionsPayload",
    "MyPermissions",
    "ModuleAccess",
    "MatrixUpdate",
    "ModuleCatalogue",

    # identity
    "RoleRef",
    "AuthenticatedUser",

    # auth
    "LoginRequest",
    "SessionRead",
]

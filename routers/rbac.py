# routers/rbac.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from core.errors import ApiError, handle_api_error
from core.permission_helpers import ModulePermission
from core.permissions import ACTION_CONFIG, MODULE_CONFIG, MODULE_KEYS, resolve_module_key
from dependencies.auth import (
    get_current_user,
    get_permission_service,
    requires_module_permission,
)
from models.enums import ActionKey, ModuleKey
from models.rbac import (
    CreateRolePayload,
    MatrixUpdate,
    ModuleAccess,
    ModuleCatalogue,
    MyPermissions,
    PermissionsMatrix,
    RbacRole,
    UpdateRolePermissionsPayload,
)
from models.user import AuthenticatedUser
from services.rbac_service import (
    PermissionMatrixService,
    map_matrix_to_permissions_map,
    map_permissions_to_matrix,
)

router = APIRouter(
    prefix="/rbac",
    tags=["RBAC"],
)

ROLES_MODULE = ModuleKey.user_management


# ============================================================
# MODULE CATALOGUE
# ============================================================
@router.get("/modules", response_model=ModuleCatalogue, summary="Modules and actions with labels")
def list_modules(current_user: AuthenticatedUser = Depends(get_current_user)):
    return ModuleCatalogue(modules=MODULE_CONFIG, actions=ACTION_CONFIG)


# ============================================================
# ACCESS FOR THE CURRENT OPERATOR
# ============================================================
@router.get("/access/{module}", response_model=ModuleAccess, summary="Evaluate module access")
async def module_access(
    module: str,
    current_user: AuthenticatedUser = Depends(get_current_user),
    service: PermissionMatrixService = Depends(get_permission_service),
):
    """
    What the operator may do in a module. Accepts the shorthands
    "users" and "property".
    """
    if resolve_module_key(module) not in MODULE_KEYS:
        raise HTTPException(404, f"Unknown module '{module}'")

    engine = ModulePermission(current_user, module, service)
    await engine.resolve()
    return engine.access()


@router.get("/my-permissions", response_model=MyPermissions, summary="Permissions of the current role")
async def my_permissions(
    current_user: AuthenticatedUser = Depends(get_current_user),
    service: PermissionMatrixService = Depends(get_permission_service),
):
    try:
        return await service.get_my_permissions()
    except ApiError as e:
        raise handle_api_error(e, "Failed to load permissions")


# ============================================================
# ROLES
# ============================================================
@router.get(
    "/roles",
    response_model=List[RbacRole],
    dependencies=[Depends(requires_module_permission(ROLES_MODULE, ActionKey.view))],
)
async def list_roles(service: PermissionMatrixService = Depends(get_permission_service)):
    try:
        return await service.list_roles()
    except ApiError as e:
        raise handle_api_error(e, "Failed to load roles")


@router.get(
    "/roles/{role_id}",
    response_model=RbacRole,
    dependencies=[Depends(requires_module_permission(ROLES_MODULE, ActionKey.view))],
)
async def get_role(role_id: int, service: PermissionMatrixService = Depends(get_permission_service)):
    try:
        return await service.get_role(role_id)
    except ApiError as e:
        raise handle_api_error(e, f"Failed to load role {role_id}")


@router.get(
    "/roles/{role_id}/matrix",
    response_model=PermissionsMatrix,
    dependencies=[Depends(requires_module_permission(ROLES_MODULE, ActionKey.view))],
)
async def get_role_matrix(role_id: int, service: PermissionMatrixService = Depends(get_permission_service)):
    """Full module x action grid for the permission editor."""
    try:
        role = await service.get_role(role_id)
    except ApiError as e:
        raise handle_api_error(e, f"Failed to load role {role_id}")
    return map_permissions_to_matrix(role.permissions)


@router.post(
    "/roles",
    response_model=RbacRole,
    status_code=201,
    dependencies=[Depends(requires_module_permission(ROLES_MODULE, ActionKey.add))],
)
async def create_role(payload: CreateRolePayload, service: PermissionMatrixService = Depends(get_permission_service)):
    if not payload.role.strip():
        raise HTTPException(400, "Role name is required")

    payload.role = payload.role.strip()
    try:
        return await service.create_role(payload)
    except ApiError as e:
        raise handle_api_error(e, "Failed to create role")


@router.patch(
    "/roles/{role_id}",
    response_model=RbacRole,
    dependencies=[Depends(requires_module_permission(ROLES_MODULE, ActionKey.edit))],
)
async def update_role_permissions(
    role_id: int,
    payload: UpdateRolePermissionsPayload,
    service: PermissionMatrixService = Depends(get_permission_service),
):
    try:
        return await service.update_role_permissions(role_id, payload)
    except ApiError as e:
        raise handle_api_error(e, f"Failed to update role {role_id}")


@router.put(
    "/roles/{role_id}/matrix",
    response_model=RbacRole,
    dependencies=[Depends(requires_module_permission(ROLES_MODULE, ActionKey.edit))],
)
async def update_role_matrix(
    role_id: int,
    payload: MatrixUpdate,
    service: PermissionMatrixService = Depends(get_permission_service),
):
    update = UpdateRolePermissionsPayload(permissions=map_matrix_to_permissions_map(payload.matrix))
    try:
        return await service.update_role_permissions(role_id, update)
    except ApiError as e:
        raise handle_api_error(e, f"Failed to update role {role_id}")


@router.delete(
    "/roles/{role_id}",
    status_code=204,
    dependencies=[Depends(requires_module_permission(ROLES_MODULE, ActionKey.delete))],
)
async def delete_role(role_id: int, service: PermissionMatrixService = Depends(get_permission_service)):
    try:
        await service.delete_role(role_id)
    except ApiError as e:
        raise handle_api_error(e, f"Failed to delete role {role_id}")

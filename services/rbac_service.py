# services/rbac_service.py

"""
Gateway to the role/permission backend.

Every read goes through the request deduplicator and every payload through
the normalizer, so callers only ever see canonical RbacRole / PermissionsMap
values no matter which wire shape the backend answered with.
"""

from typing import Any, List, Optional, Union

from core.api_client import ApiClient, get_api_client
from core.cache import RequestDeduplicator, get_request_cache
from core.logging_config import logger
from core.permissions import ACTION_KEYS, MODULE_KEYS, canonical_module
from core.rbac_normalizer import (
    extract_permissions_map,
    normalize_role,
    to_role_array,
    unwrap_envelope,
)
from models.rbac import (
    CreateRolePayload,
    MyPermissions,
    PermissionsMap,
    PermissionsMatrix,
    RbacRole,
    UpdateRolePermissionsPayload,
)

ROLES_KEY = "rbac-roles:all"
MY_PERMISSIONS_KEY = "rbac-my-permissions"


def role_key(role_id: int) -> str:
    return f"rbac-role:{role_id}"


class PermissionMatrixService:
    def __init__(self, client: ApiClient, cache: RequestDeduplicator):
        self.client = client
        self.cache = cache

    # -----------------------------------------------------
    # Reads (deduplicated)
    # -----------------------------------------------------
    async def list_roles(self) -> List[RbacRole]:
        payload = await self.cache.dedupe_get(ROLES_KEY, lambda: self.client.get("/rbac/roles"))
        return [normalize_role(item) for item in to_role_array(payload)]

    async def get_role(self, role_id: int) -> RbacRole:
        payload = await self.cache.dedupe_get(
            role_key(role_id), lambda: self.client.get(f"/rbac/roles/{role_id}")
        )
        return normalize_role(unwrap_envelope(payload))

    async def get_my_permissions(self) -> MyPermissions:
        payload = await self.cache.dedupe_get(
            MY_PERMISSIONS_KEY, lambda: self.client.get("/rbac/my-permissions")
        )

        body = unwrap_envelope(payload)
        if isinstance(body, list):
            body = body[0] if body else {}
        if not isinstance(body, dict):
            body = {}

        role = ""
        for field in ("role", "name", "Name"):
            value = body.get(field)
            if isinstance(value, str) and value:
                role = value
                break

        return MyPermissions(role=role, permissions=extract_permissions_map(body.get("permissions")))

    # -----------------------------------------------------
    # Writes
    # -----------------------------------------------------
    async def create_role(self, payload: CreateRolePayload) -> RbacRole:
        response = await self.client.post("/rbac/roles", json=payload.model_dump(exclude_none=True))
        role = normalize_role(unwrap_envelope(response))

        self.cache.invalidate(ROLES_KEY)
        logger.info(f"Created role '{role.role}' (id {role.id})")
        return role

    async def update_role_permissions(
        self, role_id: int, payload: Union[UpdateRolePermissionsPayload, dict]
    ) -> RbacRole:
        if not isinstance(payload, UpdateRolePermissionsPayload):
            payload = UpdateRolePermissionsPayload.model_validate(payload)

        body = {"permission": [payload.effective_map()]}
        response = await self.client.patch(f"/rbac/roles/{role_id}", json=body)
        role = normalize_role(unwrap_envelope(response))

        self.cache.invalidate(ROLES_KEY)
        self.cache.invalidate(role_key(role_id))
        logger.info(f"Updated permissions of role {role_id}")
        return role

    async def delete_role(self, role_id: int) -> None:
        await self.client.delete(f"/rbac/roles/{role_id}")

        self.cache.invalidate(ROLES_KEY)
        self.cache.invalidate(role_key(role_id))
        logger.info(f"Deleted role {role_id}")


# ============================================================
# Matrix helpers (pure)
# ============================================================

def empty_matrix() -> PermissionsMatrix:
    return {module: {action: False for action in ACTION_KEYS} for module in MODULE_KEYS}


def map_permissions_to_matrix(permission_entries: Any) -> PermissionsMatrix:
    """Full module x action grid, overlaid with whatever the entries grant."""
    matrix = empty_matrix()

    for raw_key, module_perms in extract_permissions_map(permission_entries).items():
        module = canonical_module(raw_key)
        if module is None or not isinstance(module_perms, dict):
            continue
        for action, granted in module_perms.items():
            if action in matrix[module]:
                matrix[module][action] = bool(granted)

    return matrix


def map_matrix_to_permissions_map(matrix: Optional[PermissionsMatrix]) -> PermissionsMap:
    matrix = matrix or {}
    return {
        module: {action: bool((matrix.get(module) or {}).get(action, False)) for action in ACTION_KEYS}
        for module in MODULE_KEYS
    }


_service: Optional[PermissionMatrixService] = None


def get_rbac_service() -> PermissionMatrixService:
    """Service bound to the process-wide API client and deduplicator."""
    global _service
    if _service is None:
        _service = PermissionMatrixService(get_api_client(), get_request_cache())
    return _service

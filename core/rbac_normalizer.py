# core/rbac_normalizer.py

"""
Turns the permission backend's payloads into canonical RBAC values.

The backend has emitted several shapes over time:
  • list endpoints: a bare array, or {"data": [...]}
  • single objects: the object, or {"data": {...}}
  • permissions: [{"id": .., "permissions": {...}}] (current),
    {"permissions": {...}}, or a bare {"campaign": {...}} map (legacy)
  • role fields: id / Id, role / name / Name

Nothing here raises on malformed input. Every field has a safe default,
because the server stays the authority on what is actually allowed.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ValidationError

from core.logging_config import logger
from core.permissions import ACTION_KEYS, MODULE_KEYS
from models.enums import ModuleKey
from models.rbac import (
    PermissionsMap,
    RbacOrganization,
    RbacPermissionEntry,
    RbacRole,
    RbacUser,
)

LEGACY_MODULE_KEYS = {ModuleKey.properties.value: "property"}


# -----------------------------------------------------
# Envelope decoding
# -----------------------------------------------------
def unwrap_envelope(payload: Any) -> Any:
    """{"data": X} with a non-null X decodes to X; every other shape is returned as-is."""
    if isinstance(payload, dict) and payload.get("data") is not None:
        return payload["data"]
    return payload


def to_role_array(payload: Any) -> List[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        return payload["data"]
    return []


def _as_mapping(value: Any) -> Optional[Dict[str, Any]]:
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, dict):
        return value
    return None


def _as_flag(value: Any) -> bool:
    # bool is a subclass of int, so 1/0 from older payloads count too
    if isinstance(value, (bool, int)):
        return bool(value)
    return False


# -----------------------------------------------------
# Permission maps
# -----------------------------------------------------
def normalize_permissions_map(raw: Any) -> PermissionsMap:
    """
    Keep only canonical modules, each with all four actions present.
    Modules missing from `raw` are omitted (callers treat them as all-false).
    """
    source = _as_mapping(raw)
    if source is None:
        return {}

    result: PermissionsMap = {}
    for module in MODULE_KEYS:
        module_raw = source.get(module)
        if not isinstance(module_raw, dict) and module in LEGACY_MODULE_KEYS:
            module_raw = source.get(LEGACY_MODULE_KEYS[module])
        if not isinstance(module_raw, dict):
            continue

        result[module] = {action: _as_flag(module_raw.get(action)) for action in ACTION_KEYS}

    return result


def _map_from_entry(entry: Any) -> PermissionsMap:
    entry_map = _as_mapping(entry)
    if entry_map is None:
        return {}
    if "permissions" in entry_map:
        return normalize_permissions_map(entry_map["permissions"])
    return normalize_permissions_map(entry_map)


def extract_permissions_map(entries: Any) -> PermissionsMap:
    """
    Accepts the list-of-one-wrapped-entry shape, a single wrapped entry,
    or a bare legacy map. Only the first list element is considered.
    """
    if isinstance(entries, (list, tuple)):
        if not entries:
            return {}
        return _map_from_entry(entries[0])
    return _map_from_entry(entries)


# -----------------------------------------------------
# Roles
# -----------------------------------------------------
def _first_text(source: Dict[str, Any], *fields: str) -> str:
    for field in fields:
        value = source.get(field)
        if isinstance(value, str) and value:
            return value
    return ""


def _as_int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return default
    return default


def _organization(raw: Any) -> Optional[RbacOrganization]:
    if not isinstance(raw, dict):
        return None
    try:
        return RbacOrganization.model_validate(raw)
    except ValidationError as e:
        logger.debug(f"Ignoring malformed role organization: {e.error_count()} error(s)")
        return None


def _users(raw: Any) -> List[RbacUser]:
    if not isinstance(raw, list):
        return []

    users = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        try:
            users.append(RbacUser.model_validate(item))
        except ValidationError:
            logger.debug("Ignoring malformed role user entry")
    return users


def normalize_role(raw: Any) -> RbacRole:
    source = _as_mapping(raw) or {}

    role_id = source.get("id")
    if role_id is None:
        role_id = source.get("Id")

    role_title = source.get("role_title")
    users = _users(source.get("users"))

    user_count = source.get("user_count")
    if isinstance(user_count, bool) or not isinstance(user_count, int):
        user_count = len(users)

    return RbacRole(
        id=_as_int(role_id),
        role=_first_text(source, "role", "name", "Name"),
        role_title=role_title if isinstance(role_title, str) else None,
        permissions=[
            RbacPermissionEntry(id=0, permissions=extract_permissions_map(source.get("permissions")))
        ],
        organization=_organization(source.get("organization")),
        users=users,
        user_count=user_count,
    )

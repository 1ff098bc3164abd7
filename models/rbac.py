# models/rbac.py

from typing import Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


# module -> action -> granted
ModulePermissions = Dict[str, bool]
PermissionsMap = Dict[str, ModulePermissions]
PermissionsMatrix = Dict[str, Dict[str, bool]]


# ===============================================================
# ROLE PAYLOAD PIECES
# ===============================================================

class RbacPermissionEntry(BaseModel):
    """
    One item of a role's `permissions` list.
    Roles always carry exactly one entry with id 0.
    """
    id: int = 0
    permissions: PermissionsMap = Field(default_factory=dict)


class RbacOrganization(BaseModel):
    """Organization attached to a role (extra metadata is kept as-is)."""
    model_config = ConfigDict(extra="allow")

    id: Optional[Union[int, str]] = None
    name: Optional[str] = None
    industry: Optional[str] = None
    size: Optional[Union[str, int]] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class RbacUser(BaseModel):
    """Summary of a user currently holding a role."""
    model_config = ConfigDict(extra="allow")

    id: Optional[Union[int, str]] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None


class RbacRole(BaseModel):
    """
    Canonical role. `role` unifies the wire fields role / name / Name.
    Name and organization never change after creation.
    """
    id: int = 0
    role: str = ""
    role_title: Optional[str] = None
    permissions: List[RbacPermissionEntry] = Field(default_factory=list)
    organization: Optional[RbacOrganization] = None
    users: List[RbacUser] = Field(default_factory=list)
    user_count: int = 0

    @property
    def permissions_map(self) -> PermissionsMap:
        if not self.permissions:
            return {}
        return self.permissions[0].permissions


# ===============================================================
# REQUEST / RESPONSE BODIES
# ===============================================================

class CreateRolePayload(BaseModel):
    role: str
    organization_id: Optional[int] = None
    permission: List[PermissionsMap] = Field(default_factory=list)


class UpdateRolePermissionsPayload(BaseModel):
    """Either field is accepted; `permissions` wins when both are given."""
    permissions: Optional[PermissionsMap] = None
    permission: Optional[List[PermissionsMap]] = None

    def effective_map(self) -> PermissionsMap:
        if self.permissions is not None:
            return self.permissions
        if self.permission:
            return self.permission[0]
        return {}


class MyPermissions(BaseModel):
    role: str = ""
    permissions: PermissionsMap = Field(default_factory=dict)


class ModuleAccess(BaseModel):
    """Evaluated engine state for one module."""
    module: str
    permission_ready: bool
    actions: Dict[str, bool]


class MatrixUpdate(BaseModel):
    matrix: PermissionsMatrix


class ModuleCatalogue(BaseModel):
    modules: List[Dict[str, str]]
    actions: List[Dict[str, str]]



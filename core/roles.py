# core/roles.py

"""
Role membership checks for the console operator.

A role reference is either a plain string ("Super Admin") or a structured
object exposing role / name / Name / role_title. Keys are compared after
lowercasing and stripping whitespace, underscores and hyphens, so
"Super Admin", "super_admin" and "SUPER-ADMIN" all match "super_admin".
"""

import re
from typing import Any, List, Optional

from core.config import settings
from models.user import AuthenticatedUser, RoleRef

_SEPARATORS = re.compile(r"[\s_\-]+")

# Fields of a structured role reference, in lookup order
ROLE_NAME_FIELDS = ("role", "name", "Name", "role_title")


def normalize_role_key(value: str) -> str:
    return _SEPARATORS.sub("", value).lower()


def role_candidate_names(ref: Any) -> List[str]:
    """Every non-empty name a role reference could be matched by."""
    if isinstance(ref, str):
        return [ref] if ref else []

    if isinstance(ref, RoleRef):
        values = [getattr(ref, field, None) for field in ROLE_NAME_FIELDS]
    elif isinstance(ref, dict):
        values = [ref.get(field) for field in ROLE_NAME_FIELDS]
    else:
        return []

    return [v for v in values if isinstance(v, str) and v]


def has_role(user: Optional[AuthenticatedUser], role_key: str) -> bool:
    if user is None or user.roles is None:
        return False

    target = normalize_role_key(role_key)
    for ref in user.roles:
        for name in role_candidate_names(ref):
            if normalize_role_key(name) == target:
                return True
    return False


def is_super_admin(user: Optional[AuthenticatedUser]) -> bool:
    return has_role(user, settings.SUPER_ADMIN_ROLE)


def is_enterprise_admin(user: Optional[AuthenticatedUser]) -> bool:
    return has_role(user, settings.ENTERPRISE_ADMIN_ROLE)


def has_console_access(user: Optional[AuthenticatedUser]) -> bool:
    """Only super admins and enterprise admins may hold a console session."""
    return is_super_admin(user) or is_enterprise_admin(user)

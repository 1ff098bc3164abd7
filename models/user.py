# models/user.py

from typing import Any, List, Optional, Union
from pydantic import BaseModel, ConfigDict


# ===============================================================
# CONSOLE IDENTITY MODELS
# ===============================================================

class RoleRef(BaseModel):
    """
    Structured role reference as the platform returns it inside `user.roles`.
    Any of role / name / Name / role_title may carry the role key; values
    that are not strings are kept but never match a role.
    """
    model_config = ConfigDict(extra="allow")

    role: Any = None
    name: Any = None
    Name: Any = None
    role_title: Any = None


class AuthenticatedUser(BaseModel):
    """
    The console operator. Only `id` and `roles` are typed; the rest of the
    profile is passed through untouched so the persisted copy round-trips.
    """
    model_config = ConfigDict(extra="allow")

    id: Optional[Union[int, str]] = None
    username: Any = None
    first_name: Any = None
    last_name: Any = None
    email: Any = None
    phone_number: Any = None

    # None means "no roles array" (matches no classification)
    roles: Optional[List[Union[str, RoleRef]]] = None

    @property
    def display_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if isinstance(p, str) and p]
        if parts:
            return " ".join(parts)
        if isinstance(self.username, str) and self.username:
            return self.username
        return str(self.id or "")

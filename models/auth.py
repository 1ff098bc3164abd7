# models/auth.py

from typing import Optional
from pydantic import BaseModel, Field

from models.user import AuthenticatedUser


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, description="Username or email")
    password: str = Field(..., min_length=6, max_length=100)


class SessionRead(BaseModel):
    authenticated: bool
    user: Optional[AuthenticatedUser] = None
    is_super_admin: bool = False
    is_enterprise_admin: bool = False

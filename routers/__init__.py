# routers/__init__.py

from .auth import router as auth_router
from .rbac import router as rbac_router
from .resources import campaigns_router, properties_router, users_router
from .health import router as health_router

__all__ = [
    "auth_router",
    "rbac_router",
    "campaigns_router",
    "properties_router",
    "users_router",
    "health_router",
]

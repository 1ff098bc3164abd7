# services/resource_service.py

"""
Pass-through CRUD for the console's plain resources (campaigns, properties,
users). Access is decided before these are called; the remote API still
enforces its own rules.
"""

from typing import Any, Dict, Optional

from core.api_client import ApiClient, get_api_client
from core.rbac_normalizer import unwrap_envelope
from models.enums import ModuleKey


class ResourceService:
    def __init__(self, client: ApiClient, remote_path: str):
        self.client = client
        self.remote_path = remote_path.rstrip("/")

    async def list(self, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.client.get(self.remote_path, params=params)

    async def get(self, item_id: str) -> Any:
        body = unwrap_envelope(await self.client.get(f"{self.remote_path}/{item_id}"))
        # Some endpoints answer a single record as a one-element list
        if isinstance(body, list):
            return body[0] if body else None
        return body

    async def create(self, body: Optional[Dict[str, Any]] = None, files: Any = None) -> Any:
        if files:
            return await self.client.post(self.remote_path, data=body, files=files)
        return await self.client.post(self.remote_path, json=body)

    async def update(self, item_id: str, body: Optional[Dict[str, Any]] = None, files: Any = None) -> Any:
        path = f"{self.remote_path}/{item_id}"
        if files:
            return await self.client.put(path, data=body, files=files)
        return await self.client.put(path, json=body)

    async def delete(self, item_id: str) -> Any:
        return await self.client.delete(f"{self.remote_path}/{item_id}")


# module -> remote collection
RESOURCE_PATHS: Dict[str, str] = {
    ModuleKey.campaign.value: "/Campaign",
    ModuleKey.properties.value: "/properties",
    ModuleKey.user_management.value: "/users",
}


def get_resource_service(module: str, client: Optional[ApiClient] = None) -> ResourceService:
    return ResourceService(client or get_api_client(), RESOURCE_PATHS[module])

# routers/resources.py

"""
Campaigns, properties and users: plain pass-through to the platform API,
each verb gated by the matching module action.
"""

import json
from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, Body, Depends, File, Form, HTTPException, Request, UploadFile

from core.api_client import ApiClient
from core.errors import ApiError, handle_api_error
from dependencies.auth import get_platform_client, requires_module_permission
from models.enums import ActionKey, ModuleKey
from services.resource_service import get_resource_service


# -----------------------------------------------------
# Multipart helpers
# -----------------------------------------------------
def parse_form_fields(raw: Optional[str]) -> Dict[str, str]:
    """
    `fields` form value: a JSON object of the record's plain fields.
    Non-string values are re-encoded as JSON so they survive multipart.
    """
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except ValueError:
        raise HTTPException(400, "fields must be a JSON object")
    if not isinstance(value, dict):
        raise HTTPException(400, "fields must be a JSON object")

    return {k: v if isinstance(v, str) else json.dumps(v) for k, v in value.items()}


async def read_uploads(files: List[UploadFile], field_name: str) -> List[Tuple[str, Tuple[str, bytes, str]]]:
    uploads = []
    for upload in files:
        content = await upload.read()
        uploads.append(
            (field_name, (upload.filename or "upload", content, upload.content_type or "application/octet-stream"))
        )
    return uploads


def build_resource_router(prefix: str, module: ModuleKey, label: str) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[label])

    def service(client: ApiClient):
        return get_resource_service(module.value, client)

    # ============================================================
    # LIST
    # ============================================================
    @router.get("", dependencies=[Depends(requires_module_permission(module, ActionKey.view))])
    async def list_items(request: Request, client: ApiClient = Depends(get_platform_client)):
        """Query parameters (page, limit, search, ...) are forwarded untouched."""
        try:
            return await service(client).list(dict(request.query_params))
        except ApiError as e:
            raise handle_api_error(e, f"Failed to list {label.lower()}")

    # ============================================================
    # GET
    # ============================================================
    @router.get("/{item_id}", dependencies=[Depends(requires_module_permission(module, ActionKey.view))])
    async def get_item(item_id: str, client: ApiClient = Depends(get_platform_client)):
        try:
            item = await service(client).get(item_id)
        except ApiError as e:
            raise handle_api_error(e, f"Failed to load {label.lower()} {item_id}")

        if item is None:
            raise handle_api_error(ApiError(404, "empty result"), f"Failed to load {label.lower()} {item_id}")
        return item

    # ============================================================
    # CREATE
    # ============================================================
    @router.post("", status_code=201, dependencies=[Depends(requires_module_permission(module, ActionKey.add))])
    async def create_item(
        body: Optional[Dict[str, Any]] = Body(None),
        client: ApiClient = Depends(get_platform_client),
    ):
        try:
            return await service(client).create(body or {})
        except ApiError as e:
            raise handle_api_error(e, f"Failed to create {label.lower()}")

    @router.post("/upload", status_code=201, dependencies=[Depends(requires_module_permission(module, ActionKey.add))])
    async def create_item_with_files(
        files: List[UploadFile] = File(...),
        fields: Optional[str] = Form(None),
        file_field: str = Form("files"),
        client: ApiClient = Depends(get_platform_client),
    ):
        """Multipart create: uploaded files are forwarded under `file_field`."""
        body = parse_form_fields(fields)
        uploads = await read_uploads(files, file_field)
        try:
            return await service(client).create(body, files=uploads)
        except ApiError as e:
            raise handle_api_error(e, f"Failed to create {label.lower()}")

    # ============================================================
    # UPDATE
    # ============================================================
    @router.put("/{item_id}", dependencies=[Depends(requires_module_permission(module, ActionKey.edit))])
    async def update_item(
        item_id: str,
        body: Optional[Dict[str, Any]] = Body(None),
        client: ApiClient = Depends(get_platform_client),
    ):
        try:
            return await service(client).update(item_id, body or {})
        except ApiError as e:
            raise handle_api_error(e, f"Failed to update {label.lower()} {item_id}")

    @router.put("/{item_id}/upload", dependencies=[Depends(requires_module_permission(module, ActionKey.edit))])
    async def update_item_with_files(
        item_id: str,
        files: List[UploadFile] = File(...),
        fields: Optional[str] = Form(None),
        file_field: str = Form("files"),
        client: ApiClient = Depends(get_platform_client),
    ):
        body = parse_form_fields(fields)
        uploads = await read_uploads(files, file_field)
        try:
            return await service(client).update(item_id, body, files=uploads)
        except ApiError as e:
            raise handle_api_error(e, f"Failed to update {label.lower()} {item_id}")

    # ============================================================
    # DELETE
    # ============================================================
    @router.delete("/{item_id}", dependencies=[Depends(requires_module_permission(module, ActionKey.delete))])
    async def delete_item(item_id: str, client: ApiClient = Depends(get_platform_client)):
        try:
            return await service(client).delete(item_id)
        except ApiError as e:
            raise handle_api_error(e, f"Failed to delete {label.lower()} {item_id}")

    return router


campaigns_router = build_resource_router("/campaigns", ModuleKey.campaign, "Campaigns")
properties_router = build_resource_router("/properties", ModuleKey.properties, "Properties")
users_router = build_resource_router("/users", ModuleKey.user_management, "Users")

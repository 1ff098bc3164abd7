# tests/test_routes.py

"""
Tests for the gated console endpoints: roles, matrix, resources and health.
"""

import httpx
from fastapi.testclient import TestClient

from main import create_app, describe_routes
from tests.conftest import request_json

ALL = {"view": True, "add": True, "edit": True, "delete": True}
VIEW_ONLY = {"view": True, "add": False, "edit": False, "delete": False}


def grant(platform, permissions):
    platform.on("GET", "/rbac/my-permissions", {"data": {"role": "enterprise_role", "permissions": permissions}})


# -----------------------------------------------------
# Session gate
# -----------------------------------------------------
def test_requires_session(client: TestClient):
    """Test accessing gated endpoints without a session."""
    for path in ("/rbac/roles", "/rbac/modules", "/rbac/access/campaign", "/campaigns", "/auth/me"):
        response = client.get(path)
        assert response.status_code == 401, path


def test_app_starts_and_lists_routes():
    """Startup hooks run and every endpoint is logged, including router-mounted ones."""
    application = create_app()

    with TestClient(application) as test_client:
        assert test_client.get("/health/app").status_code == 200

    lines = [line.split() for line in describe_routes(application)]
    assert ["GET", "/health/app"] in lines
    assert ["DELETE,GET,PUT", "/campaigns/{item_id}"] in lines
    assert ["GET,POST", "/rbac/roles"] in lines


def test_health(client: TestClient, login_as, super_admin_user):
    assert client.get("/health/app").json()["status"] == "ok"
    assert client.get("/health/session").json()["authenticated"] is False

    login_as(super_admin_user)
    assert client.get("/health/session").json()["authenticated"] is True


# -----------------------------------------------------
# Super admin
# -----------------------------------------------------
def test_super_admin_lists_roles(client: TestClient, platform, login_as, super_admin_user):
    login_as(super_admin_user)
    platform.on("GET", "/rbac/roles", {"data": [{"id": 1, "role": "agent_role", "permissions": {"campaign": ALL}}]})

    response = client.get("/rbac/roles")

    assert response.status_code == 200
    assert response.json()[0]["role"] == "agent_role"
    # Never asked the platform for its own permissions
    assert platform.calls("GET", "/rbac/my-permissions") == []
    assert platform.calls("GET", "/rbac/roles")[0].headers["Authorization"] == "Bearer test-token"


def test_super_admin_resource_crud(client: TestClient, platform, login_as, super_admin_user):
    login_as(super_admin_user)
    platform.on("GET", "/Campaign", {"data": [{"id": 1}], "total": 1})
    platform.on("GET", "/Campaign/1", {"data": [{"id": 1, "title": "Spring"}]})
    platform.on("POST", "/Campaign", lambda request: httpx.Response(201, json={"data": request_json(request)}))
    platform.on("PUT", "/Campaign/1", {"data": {"id": 1, "title": "Summer"}})
    platform.on("DELETE", "/Campaign/1", lambda request: httpx.Response(204))

    assert client.get("/campaigns", params={"page": 2}).json()["total"] == 1
    assert platform.calls("GET", "/Campaign")[0].url.params["page"] == "2"

    assert client.get("/campaigns/1").json() == {"id": 1, "title": "Spring"}

    created = client.post("/campaigns", json={"title": "Autumn"})
    assert created.status_code == 201
    assert created.json()["data"]["title"] == "Autumn"

    assert client.put("/campaigns/1", json={"title": "Summer"}).status_code == 200
    assert client.delete("/campaigns/1").status_code == 200


def test_resource_not_found(client: TestClient, platform, login_as, super_admin_user):
    login_as(super_admin_user)
    platform.on("GET", "/properties/9", {"data": []})

    assert client.get("/properties/9").status_code == 404
    # Unrouted on the platform side: 404 passes through
    assert client.get("/properties/10").status_code == 404


def test_platform_failure_is_bad_gateway(client: TestClient, platform, login_as, super_admin_user):
    login_as(super_admin_user)
    platform.on("GET", "/users", (500, {"message": "boom"}))

    assert client.get("/users").status_code == 502


# -----------------------------------------------------
# Enterprise admin
# -----------------------------------------------------
def test_enterprise_admin_view_only(client: TestClient, platform, login_as, enterprise_user):
    login_as(enterprise_user)
    grant(platform, {"properties": VIEW_ONLY})
    platform.on("GET", "/properties", {"data": []})

    assert client.get("/properties").status_code == 200

    response = client.post("/properties", json={"title": "Loft"})
    assert response.status_code == 403
    assert "properties:add" in response.json()["detail"]
    assert platform.calls("POST", "/properties") == []


def test_enterprise_admin_denied_when_view_missing(client: TestClient, platform, login_as, enterprise_user):
    login_as(enterprise_user)
    grant(platform, {"campaign": {"view": False, "add": True, "edit": True, "delete": True}})

    assert client.post("/campaigns", json={}).status_code == 403
    assert client.delete("/campaigns/1").status_code == 403


def test_enterprise_admin_denied_when_permissions_fail(client: TestClient, platform, login_as, enterprise_user):
    login_as(enterprise_user)
    platform.on("GET", "/rbac/my-permissions", (500, {"message": "boom"}))

    assert client.get("/campaigns").status_code == 403


def test_plain_user_session_is_rejected(client: TestClient, login_as, plain_user):
    assert login_as(plain_user) is None
    assert client.get("/campaigns").status_code == 401


def test_module_access(client: TestClient, platform, login_as, enterprise_user):
    login_as(enterprise_user)
    grant(platform, {"user_management": {"view": True, "edit": True}})

    response = client.get("/rbac/access/users")

    assert response.status_code == 200
    data = response.json()
    assert data["module"] == "user_management"
    assert data["permission_ready"] is True
    assert data["actions"] == {"view": True, "add": False, "edit": True, "delete": False}

    assert client.get("/rbac/access/settings").status_code == 404


def test_module_catalogue(client: TestClient, login_as, enterprise_user):
    login_as(enterprise_user)

    data = client.get("/rbac/modules").json()

    assert {m["key"] for m in data["modules"]} == {"campaign", "properties", "user_management"}
    assert {a["key"] for a in data["actions"]} == {"view", "add", "edit", "delete"}


# -----------------------------------------------------
# Roles and matrix
# -----------------------------------------------------
def test_role_matrix_round_trip(client: TestClient, platform, login_as, super_admin_user):
    login_as(super_admin_user)
    platform.on("GET", "/rbac/roles/7", {"data": {"id": 7, "role": "ops", "permissions": [
        {"id": 2, "permissions": {"property": {"view": True, "edit": True}}},
    ]}})
    platform.on("PATCH", "/rbac/roles/7", lambda request: httpx.Response(200, json={
        "data": {"id": 7, "role": "ops", "permissions": [{"permissions": request_json(request)["permission"][0]}]},
    }))

    matrix = client.get("/rbac/roles/7/matrix").json()
    assert matrix["properties"] == {"view": True, "add": False, "edit": True, "delete": False}
    assert matrix["campaign"] == {"view": False, "add": False, "edit": False, "delete": False}

    matrix["campaign"]["view"] = True
    response = client.put("/rbac/roles/7/matrix", json={"matrix": matrix})

    assert response.status_code == 200
    sent = request_json(platform.calls("PATCH", "/rbac/roles/7")[0])
    assert sent["permission"][0]["campaign"]["view"] is True
    assert sent["permission"][0]["properties"]["edit"] is True


def test_create_role_requires_name(client: TestClient, platform, login_as, super_admin_user):
    login_as(super_admin_user)
    platform.on("POST", "/rbac/roles", lambda request: httpx.Response(201, json={"data": {"id": 3, **request_json(request)}}))

    assert client.post("/rbac/roles", json={"role": "   ", "permission": [{}]}).status_code == 400

    response = client.post("/rbac/roles", json={"role": " viewer ", "permission": [{"campaign": VIEW_ONLY}]})
    assert response.status_code == 201
    assert response.json()["role"] == "viewer"


def test_delete_role_gated_by_user_management(client: TestClient, platform, login_as, enterprise_user):
    login_as(enterprise_user)
    grant(platform, {"user_management": VIEW_ONLY})

    assert client.delete("/rbac/roles/3").status_code == 403
    assert platform.calls("DELETE", "/rbac/roles/3") == []


def test_delete_role(client: TestClient, platform, login_as, super_admin_user):
    login_as(super_admin_user)
    platform.on("DELETE", "/rbac/roles/3", lambda request: httpx.Response(204))

    assert client.delete("/rbac/roles/3").status_code == 204


def test_my_permissions(client: TestClient, platform, login_as, enterprise_user):
    login_as(enterprise_user)
    grant(platform, {"property": {"view": 1}})

    data = client.get("/rbac/my-permissions").json()

    assert data["role"] == "enterprise_role"
    assert data["permissions"]["properties"]["view"] is True


# -----------------------------------------------------
# Multipart uploads
# -----------------------------------------------------
def test_create_with_files(client: TestClient, platform, login_as, super_admin_user):
    login_as(super_admin_user)
    platform.on("POST", "/properties", lambda request: httpx.Response(201, json={"data": {"id": 12}}))

    response = client.post(
        "/properties/upload",
        files=[("files", ("cover.jpg", b"jpeg-bytes", "image/jpeg"))],
        data={"fields": '{"title": "Loft", "price": 120}', "file_field": "images"},
    )

    assert response.status_code == 201
    assert response.json() == {"data": {"id": 12}}

    sent = platform.calls("POST", "/properties")[0]
    assert sent.headers["Content-Type"].startswith("multipart/form-data")
    assert b"jpeg-bytes" in sent.content
    assert b'name="images"' in sent.content
    assert b"Loft" in sent.content
    assert b"120" in sent.content


def test_update_with_files(client: TestClient, platform, login_as, super_admin_user):
    login_as(super_admin_user)
    platform.on("PUT", "/Campaign/4", {"data": {"id": 4}})

    response = client.put("/campaigns/4/upload", files=[("files", ("banner.png", b"png-bytes", "image/png"))])

    assert response.status_code == 200
    assert b"png-bytes" in platform.calls("PUT", "/Campaign/4")[0].content


def test_upload_rejects_bad_fields(client: TestClient, platform, login_as, super_admin_user):
    login_as(super_admin_user)

    response = client.post(
        "/properties/upload",
        files=[("files", ("cover.jpg", b"jpeg-bytes", "image/jpeg"))],
        data={"fields": "[1, 2]"},
    )

    assert response.status_code == 400
    assert platform.calls("POST", "/properties") == []


def test_upload_requires_add(client: TestClient, platform, login_as, enterprise_user):
    login_as(enterprise_user)
    grant(platform, {"properties": VIEW_ONLY})

    response = client.post("/properties/upload", files=[("files", ("cover.jpg", b"jpeg-bytes", "image/jpeg"))])

    assert response.status_code == 403
    assert platform.calls("POST", "/properties") == []

# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import json
from typing import Any, Callable, Dict, Generator, List, Tuple, Union

import httpx
import pytest
from fastapi.testclient import TestClient

from core.api_client import ApiClient
from core.cache import RequestDeduplicator
from core.session import ACCESS_TOKEN_KEY, SessionManager
from core.storage import LocalStorage
from dependencies.auth import get_permission_service, get_platform_client, get_session
from main import create_app
from models.user import AuthenticatedUser
from services.rbac_service import PermissionMatrixService

Handler = Union[Callable[[httpx.Request], httpx.Response], Any]


class FakePlatform:
    """
    Stand-in for the remote platform API.
    Routes map (METHOD, path) to a JSON body, a (status, body) tuple,
    or a callable taking the httpx.Request.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Handler] = {}
        self.requests: List[httpx.Request] = []

    def on(self, method: str, path: str, handler: Handler):
        self.routes[(method.upper(), path)] = handler

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method.upper() and r.url.path == path]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"message": "not found"})
        if callable(handler):
            return handler(request)
        if isinstance(handler, tuple):
            status, body = handler
            return httpx.Response(status, json=body)
        return httpx.Response(200, json=handler)


def request_json(request: httpx.Request) -> Any:
    return json.loads(request.content.decode("utf-8"))


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def storage() -> LocalStorage:
    return LocalStorage()


@pytest.fixture
def api_client(storage, platform) -> ApiClient:
    return ApiClient(storage, base_url="http://platform.test", transport=httpx.MockTransport(platform.handle))


@pytest.fixture
def dedup() -> RequestDeduplicator:
    return RequestDeduplicator(burst_window_seconds=0.5)


@pytest.fixture
def rbac_service(api_client, dedup) -> PermissionMatrixService:
    return PermissionMatrixService(api_client, dedup)


@pytest.fixture
def session(storage) -> SessionManager:
    return SessionManager(storage)


@pytest.fixture
def super_admin_user() -> AuthenticatedUser:
    return AuthenticatedUser(id=6, username="root", roles=[{"Name": "Super Admin", "role_title": "Super Admin"}])


@pytest.fixture
def enterprise_user() -> AuthenticatedUser:
    return AuthenticatedUser(id=21, username="agency-admin", roles=[{"role": "enterprise_role"}])


@pytest.fixture
def plain_user() -> AuthenticatedUser:
    return AuthenticatedUser(id=40, username="agent", roles=["agent"])


@pytest.fixture
def login_as(session, storage):
    """Put a user straight into the session, token included."""

    def _login(user: AuthenticatedUser):
        storage.set_item(ACCESS_TOKEN_KEY, "test-token")
        return session.login(user)

    return _login


@pytest.fixture(scope="function")
def app(session, api_client, rbac_service):
    """Create a test FastAPI application instance wired to the fakes."""
    application = create_app()
    application.dependency_overrides[get_session] = lambda: session
    application.dependency_overrides[get_platform_client] = lambda: api_client
    application.dependency_overrides[get_permission_service] = lambda: rbac_service
    return application


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def reset_cache():
    """Reset the process-wide cache before each test."""
    from core.cache import cache_clear
    cache_clear()
    yield
    cache_clear()

# core/api_client.py

from typing import Any, Dict, Optional

import httpx

from core.config import settings
from core.errors import ApiError
from core.logging_config import logger
from core.session import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY
from core.storage import LocalStorage, get_storage

AUTH_PATHS = ("/auth/login", "/auth/refresh")


# ============================================================
# Token extraction (the auth endpoints nest tokens differently)
# ============================================================

def _dig(body: Any, *path: str) -> Any:
    node = body
    for part in path:
        if not isinstance(node, dict):
            return None
        node = node.get(part)
    return node


def extract_token(body: Any, camel: str, snake: str) -> Optional[str]:
    """
    First token found under data.tokens, data, tokens or the top level,
    spelled either camelCase or snake_case.
    """
    for prefix in (("data", "tokens"), ("data",), ("tokens",), ()):
        for name in (camel, snake):
            value = _dig(body, *prefix, name)
            if isinstance(value, str) and value:
                return value
    return None


# ============================================================
# Platform API client
# ============================================================

class ApiClient:
    """
    Authenticated JSON / multipart client for the platform API.

    Attaches the stored bearer token, and on a 401 tries one token refresh
    before retrying the original request once.
    """

    def __init__(
        self,
        storage: LocalStorage,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.storage = storage
        self._http = httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            timeout=timeout if timeout is not None else settings.API_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def aclose(self):
        await self._http.aclose()

    # -----------------------------------------------------
    # Verbs
    # -----------------------------------------------------
    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None, files: Any = None, data: Any = None,
                   params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("POST", path, json=json, files=files, data=data, params=params)

    async def patch(self, path: str, json: Any = None, files: Any = None, data: Any = None,
                    params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("PATCH", path, json=json, files=files, data=data, params=params)

    async def put(self, path: str, json: Any = None, files: Any = None, data: Any = None,
                  params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("PUT", path, json=json, files=files, data=data, params=params)

    async def delete(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("DELETE", path, params=params)

    # -----------------------------------------------------
    # Core request / refresh
    # -----------------------------------------------------
    def _headers(self) -> Dict[str, str]:
        token = self.storage.get_item(ACCESS_TOKEN_KEY)
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    async def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        # Multipart bodies: httpx picks the boundary and content type itself
        if kwargs.get("files") is None:
            kwargs.pop("files", None)
        if kwargs.get("data") is None:
            kwargs.pop("data", None)

        try:
            return await self._http.request(method, path, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Platform API unreachable ({method} {path}): {e}")
            raise ApiError(503, f"Platform API unreachable: {type(e).__name__}")

    async def request(self, method: str, path: str, **kwargs) -> Any:
        response = await self._send(method, path, **kwargs)

        if (
            response.status_code == 401
            and not path.startswith(AUTH_PATHS)
            and self.storage.get_item(REFRESH_TOKEN_KEY)
        ):
            await self._refresh_access_token()
            response = await self._send(method, path, **kwargs)

        return self._parse(response)

    async def _refresh_access_token(self):
        refresh_token = self.storage.get_item(REFRESH_TOKEN_KEY)

        try:
            response = await self._send("POST", "/auth/refresh", json={"refreshToken": refresh_token})
            body = self._parse(response)
            new_token = extract_token(body, "accessToken", "access_token")
            if not new_token:
                raise ApiError(401, "Refresh token response did not include access token")
        except ApiError:
            # Refresh token expired or rejected: the session is over
            logger.warning("Token refresh failed; clearing session storage")
            self.storage.clear()
            raise

        self.storage.set_item(ACCESS_TOKEN_KEY, new_token)
        logger.info("Access token refreshed")

    @staticmethod
    def _parse(response: httpx.Response) -> Any:
        payload: Any = None
        if response.content:
            try:
                payload = response.json()
            except ValueError:
                payload = response.text

        if response.is_success:
            return payload

        detail = f"{response.request.method} {response.request.url.path} returned {response.status_code}"
        raise ApiError(response.status_code, detail, payload)


_client: Optional[ApiClient] = None


def get_api_client() -> ApiClient:
    """Get the process-wide platform API client (created on first use)."""
    global _client
    if _client is None:
        _client = ApiClient(get_storage())
    return _client


async def close_api_client():
    """Close and forget the process-wide client (app shutdown)."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None

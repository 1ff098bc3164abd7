# services/auth_service.py

import json

from pydantic import ValidationError

from core.api_client import ApiClient, extract_token
from core.errors import ApiError, AuthError
from core.logging_config import logger
from core.session import (
    ACCESS_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    SUBSCRIPTION_KEY,
    SessionManager,
)
from models.user import AuthenticatedUser


class AuthService:
    """
    Console login against the platform's /auth/login.

    Tokens and subscription are written here; the user profile is handed to
    the session, which refuses anyone who is not a super admin or an
    enterprise admin.
    """

    def __init__(self, client: ApiClient, session: SessionManager):
        self.client = client
        self.session = session

    async def login(self, username: str, password: str) -> AuthenticatedUser:
        username = username.strip()

        try:
            body = await self.client.post("/auth/login", json={"username": username, "password": password})
        except ApiError as e:
            logger.warning(f"Login attempt failed for {username}: remote status {e.status_code}")
            if e.status_code in (400, 401, 403, 404):
                raise AuthError("Invalid username or password")
            raise

        access_token = extract_token(body, "accessToken", "access_token")
        refresh_token = extract_token(body, "refreshToken", "refresh_token")
        data = body.get("data") if isinstance(body, dict) else None
        data = data if isinstance(data, dict) else {}

        user = data.get("user")
        if not access_token or not isinstance(user, dict):
            raise AuthError("Login response did not include a session")

        self.session.storage.set_item(ACCESS_TOKEN_KEY, access_token)
        if refresh_token:
            self.session.storage.set_item(REFRESH_TOKEN_KEY, refresh_token)
        if data.get("subscription") is not None:
            self.session.storage.set_item(SUBSCRIPTION_KEY, json.dumps(data["subscription"]))

        try:
            current = self.session.login(user)
        except ValidationError:
            self.session.logout()
            raise AuthError("Login response did not include a valid user")
        if current is None:
            raise AuthError("This account does not have access to the admin console", status_code=403)

        return current

    def logout(self):
        """End the console session; the platform keeps no server-side state for it."""
        self.session.logout()
        logger.info("Console session ended")

# core/session.py

"""
Identity/session component for the console operator.

The access token is the source of truth for "is there a session"; the stored
user profile is only a cache of who that session belongs to. The
authorization policy (super admin or enterprise admin) is re-checked every
time the held identity changes, including when a persisted profile is
restored.
"""

import json
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from core.logging_config import logger
from core.roles import has_console_access
from core.storage import LocalStorage, get_storage
from models.user import AuthenticatedUser

ACCESS_TOKEN_KEY = "accessToken"
REFRESH_TOKEN_KEY = "refreshToken"
USER_KEY = "user"
SUBSCRIPTION_KEY = "subscription"

SESSION_KEYS = (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_KEY, SUBSCRIPTION_KEY)


class SessionManager:
    def __init__(self, storage: LocalStorage):
        self.storage = storage
        self._user: Optional[AuthenticatedUser] = None
        self._restore()

    # -----------------------------------------------------
    # Startup
    # -----------------------------------------------------
    def _restore(self):
        if not self.storage.get_item(ACCESS_TOKEN_KEY):
            # No token, no session: whatever profile is left over is stale
            self.storage.remove_item(USER_KEY)
            return

        raw = self.storage.get_item(USER_KEY)
        if not raw:
            return

        try:
            user = AuthenticatedUser.model_validate(json.loads(raw))
        except (ValueError, ValidationError):
            logger.warning("Discarding corrupt persisted user profile")
            self.storage.remove_item(USER_KEY)
            return

        self._set_user(user)

    # -----------------------------------------------------
    # Identity
    # -----------------------------------------------------
    @property
    def user(self) -> Optional[AuthenticatedUser]:
        return self._user

    @property
    def access_token(self) -> Optional[str]:
        return self.storage.get_item(ACCESS_TOKEN_KEY)

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None and bool(self.access_token)

    def _set_user(self, user: Optional[AuthenticatedUser]):
        self._user = user
        self._enforce_policy()

    def _enforce_policy(self):
        if self._user is None or has_console_access(self._user):
            return

        logger.warning(
            f"User {self._user.id} is neither super admin nor enterprise admin; ending session"
        )
        self.logout()

    def login(self, user: Union[AuthenticatedUser, Dict[str, Any]]) -> Optional[AuthenticatedUser]:
        """
        Hold `user` as the current identity and persist the profile.
        Tokens are written by the auth flow before this is called.
        Returns the identity actually held (None when the policy rejected it).
        """
        if not isinstance(user, AuthenticatedUser):
            user = AuthenticatedUser.model_validate(user)

        self.storage.set_item(USER_KEY, user.model_dump_json(exclude_none=True))
        self._set_user(user)

        if self._user is not None:
            logger.info(f"Console session started for {user.display_name} (id {user.id})")
        return self._user

    def logout(self):
        self._user = None
        for key in SESSION_KEYS:
            self.storage.remove_item(key)


_session: Optional[SessionManager] = None


def get_session_manager() -> SessionManager:
    """Get the process-wide session (restored from storage on first use)."""
    global _session
    if _session is None:
        _session = SessionManager(get_storage())
    return _session

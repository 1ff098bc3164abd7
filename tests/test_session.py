# tests/test_session.py

"""
Tests for the operator session and its access policy.
"""

import json

from core.session import (
    ACCESS_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    SESSION_KEYS,
    SUBSCRIPTION_KEY,
    USER_KEY,
    SessionManager,
)
from core.storage import LocalStorage


def seeded_storage(user=None, token="token-123", path=None) -> LocalStorage:
    storage = LocalStorage(path)
    if token:
        storage.set_item(ACCESS_TOKEN_KEY, token)
        storage.set_item(REFRESH_TOKEN_KEY, "refresh-456")
    storage.set_item(SUBSCRIPTION_KEY, json.dumps({"id": 1, "status": "active"}))
    if user is not None:
        storage.set_item(USER_KEY, user if isinstance(user, str) else json.dumps(user))
    return storage


def test_restores_authorized_user():
    storage = seeded_storage({"id": 6, "username": "root", "roles": ["super_admin"]})

    session = SessionManager(storage)

    assert session.is_authenticated
    assert session.user.username == "root"


def test_unauthorized_persisted_user_is_logged_out():
    """A profile without super_admin / enterprise_role wipes all four keys."""
    storage = seeded_storage({"id": 40, "username": "agent", "roles": [{"Name": "Sales Agent"}]})

    session = SessionManager(storage)

    assert session.user is None
    assert not session.is_authenticated
    for key in SESSION_KEYS:
        assert storage.get_item(key) is None


def test_user_without_roles_is_logged_out():
    storage = seeded_storage({"id": 40})

    session = SessionManager(storage)

    assert session.user is None
    assert storage.get_item(ACCESS_TOKEN_KEY) is None


def test_profile_without_token_is_discarded():
    storage = seeded_storage({"id": 6, "roles": ["super_admin"]}, token=None)

    session = SessionManager(storage)

    assert session.user is None
    assert storage.get_item(USER_KEY) is None


def test_corrupt_profile_is_cleared():
    storage = seeded_storage("{not json")

    session = SessionManager(storage)

    assert session.user is None
    assert storage.get_item(USER_KEY) is None
    # The token itself is left alone
    assert storage.get_item(ACCESS_TOKEN_KEY) == "token-123"


def test_login_persists_profile(storage, super_admin_user):
    storage.set_item(ACCESS_TOKEN_KEY, "t")
    session = SessionManager(storage)

    session.login(super_admin_user)

    assert session.is_authenticated
    assert json.loads(storage.get_item(USER_KEY))["username"] == "root"


def test_login_of_unauthorized_user_ends_session(storage, plain_user):
    storage.set_item(ACCESS_TOKEN_KEY, "t")
    session = SessionManager(storage)

    assert session.login(plain_user) is None
    assert storage.get_item(ACCESS_TOKEN_KEY) is None
    assert storage.get_item(USER_KEY) is None


def test_identity_without_token_is_not_authenticated(storage, enterprise_user):
    session = SessionManager(storage)

    session.login(enterprise_user)

    assert session.user is not None
    assert not session.is_authenticated


def test_logout_clears_everything():
    storage = seeded_storage({"id": 6, "roles": ["super_admin"]})
    session = SessionManager(storage)

    session.logout()

    assert session.user is None
    assert storage.keys() == []


def test_session_survives_restart_through_file(tmp_path):
    path = str(tmp_path / "session.json")
    seeded_storage({"id": 21, "roles": [{"role": "enterprise_role"}], "avatar": "a.png"}, path=path)

    session = SessionManager(LocalStorage(path))

    assert session.is_authenticated
    # Unknown profile fields survive the round trip
    assert session.user.model_dump()["avatar"] == "a.png"


def test_profile_with_non_string_fields_is_kept():
    """Numeric phone numbers and odd role fields must not end the session."""
    storage = seeded_storage({
        "id": 6,
        "username": "root",
        "phone_number": 5551234,
        "email": None,
        "roles": [{"Name": "Super Admin", "role_title": 3}],
    })

    session = SessionManager(storage)

    assert session.is_authenticated
    assert session.user.phone_number == 5551234
    assert session.user.display_name == "root"

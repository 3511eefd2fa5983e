# 📄 File: tests/test_users_api.py
#
# 🧭 Purpose (Layman Explanation):
# Checks signing in with Google, asking "am I logged in?", picking a garden username and
# saving how far someone got through the app tour.
#
# 🧪 Purpose (Technical Summary):
# HTTP-level tests for /api/auth (Google callback with a fake provider, status, logout),
# /api/users (profile username generation, username changes), /api/user-settings and
# /api/tutorial.
#
# 🔗 Dependencies:
# - pytest, pytest-asyncio, httpx
#
# 🔄 Connected Modules / Calls From:
# - pytest

from datetime import timedelta
from urllib.parse import parse_qs, urlparse

import pytest

from sproutsync.main import app
from sproutsync.modules.user_management.infrastructure.external.oauth_providers import (
    get_google_oauth_provider,
)
from sproutsync.shared.config.settings import get_settings
from sproutsync.shared.core.exceptions import ExternalServiceError
from sproutsync.shared.core.security import TokenData, create_access_token, verify_token
from tests.conftest import auth_headers


class FakeGoogleProvider:
    def __init__(self, profile=None):
        self.profile = profile
        self.codes = []

    def get_authorization_url(self, state: str) -> str:
        return f"https://accounts.google.com/o/oauth2/v2/auth?state={state}"

    async def authenticate(self, code: str):
        self.codes.append(code)
        if self.profile is None:
            raise ExternalServiceError("Failed to exchange Google authorization code", service="google_oauth")
        return self.profile


@pytest.fixture
def google_provider():
    provider = FakeGoogleProvider(
        {
            "google_id": "google-12345",
            "email": "ivy@example.com",
            "name": "Ivy Green",
            "avatar_url": "https://lh3.googleusercontent.com/ivy.png",
        }
    )
    app.dependency_overrides[get_google_oauth_provider] = lambda: provider
    yield provider
    app.dependency_overrides.pop(get_google_oauth_provider, None)


# =============================================================================
# AUTH
# =============================================================================

async def test_google_login_sets_state_cookie(client, google_provider):
    response = await client.get("/api/auth/google")

    assert response.status_code == 302
    state = parse_qs(urlparse(response.headers["location"]).query)["state"][0]
    assert response.cookies.get("sproutsync_oauth_state") == state


async def test_google_callback_issues_token(client, google_provider):
    response = await client.get("/api/auth/google/callback", params={"code": "auth-code"})

    assert response.status_code == 302
    location = response.headers["location"]
    assert location.startswith(f"{get_settings().FRONTEND_URL}/auth-callback?token=")
    token = parse_qs(urlparse(location).query)["token"][0]
    identity = verify_token(token)
    assert identity.email == "ivy@example.com"
    assert google_provider.codes == ["auth-code"]

    status = await client.get("/api/auth/status", headers={"Authorization": f"Bearer {token}"})
    assert status.json()["user"]["name"] == "Ivy Green"


async def test_google_callback_reuses_existing_user(client, google_provider):
    first = await client.get("/api/auth/google/callback", params={"code": "one"})
    google_provider.profile = {**google_provider.profile, "name": "Ivy Renamed"}
    second = await client.get("/api/auth/google/callback", params={"code": "two"})

    first_id = verify_token(parse_qs(urlparse(first.headers["location"]).query)["token"][0]).user_id
    second_identity = verify_token(parse_qs(urlparse(second.headers["location"]).query)["token"][0])
    assert second_identity.user_id == first_id
    assert second_identity.name == "Ivy Renamed"


@pytest.mark.parametrize(
    "params, cookies",
    [
        ({}, {}),
        ({"code": "auth-code", "state": "forged"}, {"sproutsync_oauth_state": "expected"}),
    ],
)
async def test_google_callback_failures_redirect_to_error(client, google_provider, params, cookies):
    client.cookies.update(cookies)

    response = await client.get("/api/auth/google/callback", params=params)

    assert response.status_code == 302
    assert response.headers["location"] == f"{get_settings().FRONTEND_URL}/auth-error"
    assert google_provider.codes == []


async def test_google_callback_provider_error_redirects(client, google_provider):
    google_provider.profile = None

    response = await client.get("/api/auth/google/callback", params={"code": "bad"})

    assert response.headers["location"].endswith("/auth-error")


async def test_public_status_without_token(client):
    response = await client.get("/api/auth/status/public")

    assert response.json() == {"success": True, "authenticated": False, "user": None}


async def test_public_status_with_token(client, make_user):
    user = await make_user(name="Basil Leaf")

    response = await client.get("/api/auth/status/public", headers=auth_headers(user))

    body = response.json()
    assert body["authenticated"] is True
    assert body["user"]["id"] == user.id


async def test_status_requires_authorization_header(client):
    response = await client.get("/api/auth/status")

    assert response.status_code == 401
    error = response.json()["error"]
    assert error["code"] == "AUTHENTICATION_ERROR"
    assert error["message"] == "No authorization header"


async def test_expired_token_is_rejected(client, make_user):
    user = await make_user()
    token = create_access_token(TokenData(user_id=user.id, email=user.email), expires_delta=timedelta(seconds=-5))

    response = await client.get("/api/auth/status", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


async def test_logout_is_acknowledged(client):
    response = await client.post("/api/auth/logout")

    assert response.json() == {"success": True, "message": "Logged out successfully"}


# =============================================================================
# PROFILE & USERNAME
# =============================================================================

async def test_profile_generates_username_from_first_name(client, make_user):
    await make_user(name="Fern Other", username="fern")
    user = await make_user(name="Fern Keeper")

    response = await client.get("/api/users/profile", headers=auth_headers(user))

    assert response.status_code == 200
    assert response.json()["data"]["username"] == "fern-1"

    # Stored, not regenerated
    again = await client.get("/api/users/profile", headers=auth_headers(user))
    assert again.json()["data"]["username"] == "fern-1"


async def test_username_can_be_changed(client, make_user):
    user = await make_user()

    response = await client.patch("/api/users/username", json={"username": "plant-parent"}, headers=auth_headers(user))

    assert response.status_code == 200
    assert response.json()["message"] == "Username updated successfully"
    assert response.json()["data"]["username"] == "plant-parent"


async def test_taken_username_is_rejected(client, make_user):
    await make_user(username="monstera-mom")
    user = await make_user()

    response = await client.patch("/api/users/username", json={"username": "monstera-mom"}, headers=auth_headers(user))

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "BUSINESS_RULE_VIOLATION"
    assert error["message"] == "Username is already taken"


async def test_username_format_is_validated(client, make_user):
    user = await make_user()

    response = await client.patch("/api/users/username", json={"username": "Fern Lover"}, headers=auth_headers(user))

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


# =============================================================================
# SETTINGS & TUTORIAL
# =============================================================================

async def test_new_user_focus_flag(client, make_user):
    user = await make_user()
    headers = auth_headers(user)

    assert (await client.get("/api/user-settings", headers=headers)).json()["data"] == {
        "has_seen_new_user_focus": False
    }
    await client.put("/api/user-settings/new-user-focus", json={"has_seen_new_user_focus": True}, headers=headers)

    assert (await client.get("/api/user-settings", headers=headers)).json()["data"]["has_seen_new_user_focus"] is True


async def test_tutorial_state_is_merged(client, make_user):
    user = await make_user()
    headers = auth_headers(user)

    initial = (await client.get("/api/tutorial/state", headers=headers)).json()["data"]
    assert initial == {"tutorial_completed": False, "completed_steps": [], "skipped_steps": []}

    await client.post("/api/tutorial/state", json={"completed_steps": ["add-plant"]}, headers=headers)
    await client.post("/api/tutorial/state", json={"skipped_steps": ["calendar"]}, headers=headers)
    response = await client.post("/api/tutorial/complete", headers=headers)

    assert response.json()["data"] == {
        "tutorial_completed": True,
        "completed_steps": ["add-plant"],
        "skipped_steps": ["calendar"],
    }

# 📄 File: sproutsync/modules/user_management/presentation/api/v1/auth.py
# 🧭 Purpose (Layman Explanation):
# The sign-in endpoints: start "Sign in with Google", receive the user back from Google
# and hand the app its session pass, plus a few "am I signed in?" checks.
#
# 🧪 Purpose (Technical Summary):
# FastAPI router mounted at /api/auth. The Google callback finds or creates the user,
# issues a python-jose JWT and redirects to the frontend; any failure redirects to
# /auth-error. The OAuth state is round-tripped through a short-lived cookie.
#
# 🔗 Dependencies:
# - FastAPI APIRouter, RedirectResponse
# - user_management GoogleOAuthProvider and UserService
# - shared.core.security (JWT issuing)
#
# 🔄 Connected Modules / Calls From:
# - sproutsync.api.v1.router

"""
Authentication API Endpoints

Endpoints:
- GET /google: Redirect to Google's consent screen
- GET /google/callback: Complete sign-in and redirect to the frontend with a token
- GET /profile: Identity carried by the token
- POST /logout: Stateless logout acknowledgement
- GET /status: Authenticated status (token required)
- GET /status/public: Authenticated status (token optional)
"""

import logging
import secrets
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Cookie, Depends, Query
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import SQLAlchemyError

from sproutsync.modules.user_management.domain.services.user_service import UserService, get_user_service
from sproutsync.modules.user_management.infrastructure.external.oauth_providers import (
    GoogleOAuthProvider,
    get_google_oauth_provider,
)
from sproutsync.shared.config.settings import get_settings
from sproutsync.shared.core.dependencies import CurrentUser, get_current_user, get_optional_user
from sproutsync.shared.core.exceptions import SproutSyncException
from sproutsync.shared.core.security import TokenData, create_access_token

logger = logging.getLogger(__name__)

auth_router = APIRouter()

OAUTH_STATE_COOKIE = "sproutsync_oauth_state"
OAUTH_STATE_MAX_AGE = 600


@auth_router.get("/google", summary="Start Google sign-in", response_class=RedirectResponse)
async def google_login(provider: GoogleOAuthProvider = Depends(get_google_oauth_provider)):
    state = secrets.token_urlsafe(16)
    response = RedirectResponse(provider.get_authorization_url(state), status_code=302)
    response.set_cookie(
        OAUTH_STATE_COOKIE,
        state,
        max_age=OAUTH_STATE_MAX_AGE,
        httponly=True,
        samesite="lax",
        secure=get_settings().is_production,
    )
    return response


@auth_router.get("/google/callback", summary="Google sign-in callback", response_class=RedirectResponse)
async def google_callback(
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    state_cookie: Optional[str] = Cookie(None, alias=OAUTH_STATE_COOKIE),
    provider: GoogleOAuthProvider = Depends(get_google_oauth_provider),
    service: UserService = Depends(get_user_service),
):
    """
    Finish sign-in and redirect to ``{FRONTEND_URL}/auth-callback?token=...``.

    Every failure redirects to ``{FRONTEND_URL}/auth-error``.
    """
    frontend_url = get_settings().FRONTEND_URL
    error_redirect = RedirectResponse(f"{frontend_url}/auth-error", status_code=302)
    error_redirect.delete_cookie(OAUTH_STATE_COOKIE)

    if not code:
        logger.warning("⚠️ Google callback without authorization code")
        return error_redirect
    if state_cookie and state != state_cookie:
        logger.warning("⚠️ Google callback state mismatch")
        return error_redirect

    try:
        profile = await provider.authenticate(code)
        user = await service.upsert_google_user(profile)
        await service.session.commit()
    except (SproutSyncException, SQLAlchemyError) as e:
        logger.error(f"❌ Google sign-in failed: {e}")
        return error_redirect

    token = create_access_token(TokenData(
        user_id=user.id,
        email=user.email,
        name=user.name,
        avatar_url=user.avatar_url,
    ))
    logger.info(f"🔐 User {user.id} signed in with Google")

    response = RedirectResponse(f"{frontend_url}/auth-callback?{urlencode({'token': token})}", status_code=302)
    response.delete_cookie(OAUTH_STATE_COOKIE)
    return response


@auth_router.get("/profile", summary="Current user from token")
async def get_profile(current_user: CurrentUser = Depends(get_current_user)):
    return {"success": True, "user": current_user.to_dict()}


@auth_router.post("/logout", summary="Log out")
async def logout():
    """Tokens are stateless; the client discards its copy."""
    return {"success": True, "message": "Logged out successfully"}


@auth_router.get("/status", summary="Authentication status")
async def auth_status(current_user: CurrentUser = Depends(get_current_user)):
    return {"success": True, "authenticated": True, "user": current_user.to_dict()}


@auth_router.get("/status/public", summary="Authentication status without requiring a token")
async def public_auth_status(current_user: Optional[CurrentUser] = Depends(get_optional_user)):
    if current_user is None:
        return {"success": True, "authenticated": False, "user": None}
    return {"success": True, "authenticated": True, "user": current_user.to_dict()}

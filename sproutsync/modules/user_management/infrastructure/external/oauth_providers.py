# 📄 File: sproutsync/modules/user_management/infrastructure/external/oauth_providers.py
# 🧭 Purpose (Layman Explanation):
# Handles "Sign in with Google": sends people to Google's sign-in page and, when they come
# back, finds out who they are.
#
# 🧪 Purpose (Technical Summary):
# Google OAuth 2.0 authorization-code flow (openid email profile) over httpx: consent URL,
# code-for-token exchange, userinfo retrieval and normalization to our user fields.
#
# 🔗 Dependencies:
# - httpx (async HTTP client)
# - sproutsync.shared.config.settings (OAuth client configuration)
#
# 🔄 Connected Modules / Calls From:
# - user_management.domain.services.auth_service
# - user_management.presentation.api.v1.auth (dependency override point in tests)

"""
OAuth Providers Service

Google is the only sign-in provider. The provider never touches the database;
AuthService turns the normalized profile into a UserModel.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from sproutsync.shared.config.settings import get_settings
from sproutsync.shared.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


class GoogleOAuthProvider:
    """
    Google OAuth 2.0 provider implementation.

    Handles Google Sign-In following OAuth 2.0 and Google's userinfo API.
    """

    auth_url = "https://accounts.google.com/o/oauth2/v2/auth"
    token_url = "https://oauth2.googleapis.com/token"
    user_info_url = "https://www.googleapis.com/oauth2/v2/userinfo"
    scopes = ["openid", "email", "profile"]

    def __init__(self):
        settings = get_settings()
        self.client_id = settings.GOOGLE_CLIENT_ID
        self.client_secret = settings.GOOGLE_CLIENT_SECRET
        self.redirect_uri = settings.google_callback_url
        self.timeout = settings.GOOGLE_HTTP_TIMEOUT

    def get_authorization_url(self, state: str) -> str:
        """
        Generate the Google consent URL.

        Args:
            state: Opaque value echoed back to the callback for CSRF protection
        """
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": " ".join(self.scopes),
            "response_type": "code",
            "state": state,
            "prompt": "select_account",
        }
        logger.debug("Generated Google OAuth authorization URL")
        return f"{self.auth_url}?{urlencode(params)}"

    async def exchange_code_for_token(self, code: str) -> Dict[str, Any]:
        """
        Exchange an authorization code for Google tokens.

        Raises:
            ExternalServiceError: Google rejected the code or could not be reached
        """
        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": self.redirect_uri,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.token_url, data=data)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"❌ HTTP error during Google token exchange: {e}")
            raise ExternalServiceError("Failed to exchange Google authorization code", service="google_oauth")

        logger.debug("Successfully exchanged Google authorization code for token")
        return response.json()

    async def get_user_info(self, access_token: str) -> Dict[str, Any]:
        """
        Raises:
            ExternalServiceError: The userinfo call failed
        """
        headers = {"Authorization": f"Bearer {access_token}"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.user_info_url, headers=headers)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"❌ HTTP error during Google user info retrieval: {e}")
            raise ExternalServiceError("Failed to fetch Google profile", service="google_oauth")

        user_info = response.json()
        logger.debug(f"Retrieved Google user info for: {user_info.get('email')}")
        return user_info

    @staticmethod
    def normalize_user_data(provider_data: Dict[str, Any]) -> Dict[str, Optional[str]]:
        """Map Google's userinfo fields onto UserModel columns."""
        return {
            "google_id": provider_data.get("id"),
            "email": provider_data.get("email"),
            "name": provider_data.get("name") or provider_data.get("given_name") or "",
            "avatar_url": provider_data.get("picture"),
        }

    async def authenticate(self, code: str) -> Dict[str, Optional[str]]:
        """Full callback leg: code -> access token -> normalized profile."""
        token_data = await self.exchange_code_for_token(code)
        access_token = token_data.get("access_token")
        if not access_token:
            raise ExternalServiceError("Google did not return an access token", service="google_oauth")
        return self.normalize_user_data(await self.get_user_info(access_token))


def get_google_oauth_provider() -> GoogleOAuthProvider:
    """FastAPI dependency for the Google OAuth provider."""
    return GoogleOAuthProvider()

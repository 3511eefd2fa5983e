# 📄 File: sproutsync/shared/core/security.py
# 🧭 Purpose (Layman Explanation):
# Creates and checks the "session pass" a user receives after signing in with Google,
# so every later request can prove who is asking.
# 🧪 Purpose (Technical Summary):
# HS256 JWT issuing and verification via python-jose with issuer/audience claims,
# a cached SecurityManager and module-level convenience wrappers.
# 🔗 Dependencies:
# python-jose, pydantic, sproutsync.shared.config.settings, sproutsync.shared.core.exceptions
# 🔄 Connected Modules / Calls From:
# user_management auth routes (token issue), presentation dependencies (get_current_user)

"""
Security utilities for JWT issuing and validation.
Provides the session token handed to the frontend after Google sign-in.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from functools import lru_cache

from jose import JWTError, jwt
from pydantic import BaseModel

from ..config.settings import get_settings
from .exceptions import AuthenticationError

logger = logging.getLogger(__name__)


class TokenData(BaseModel):
    """Token payload data structure"""
    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    avatar_url: Optional[str] = None


class SecurityManager:
    """
    Centralized security manager for session tokens.
    Issues and verifies the HS256 JWTs used by every authenticated route.
    """

    def __init__(self):
        self.settings = get_settings()
        self.algorithm = self.settings.JWT_ALGORITHM
        self.secret_key = self.settings.JWT_SECRET
        self.issuer = self.settings.JWT_ISSUER
        self.audience = self.settings.JWT_AUDIENCE
        self.expire_days = self.settings.JWT_EXPIRES_DAYS

    def create_access_token(
        self,
        user: TokenData,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Create JWT access token for a signed-in user.

        Args:
            user: Identity to embed in the token
            expires_delta: Custom expiration time

        Returns:
            str: Encoded JWT token
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(days=self.expire_days))

        to_encode = {
            "sub": user.user_id,
            "userId": user.user_id,
            "id": user.user_id,
            "email": user.email,
            "name": user.name,
            "avatarUrl": user.avatar_url,
            "iss": self.issuer,
            "aud": self.audience,
            "iat": int(now.timestamp()),
            "exp": int(expire.timestamp()),
            "type": "access",
        }

        encoded_jwt = jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)
        logger.debug(f"Access token created for user: {user.user_id}")
        return encoded_jwt

    def verify_token(self, token: str) -> TokenData:
        """
        Verify and decode JWT token.

        Args:
            token: JWT token to verify

        Returns:
            TokenData: Identity carried by the token

        Raises:
            AuthenticationError: If token is invalid or expired
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
            )
        except JWTError as e:
            logger.warning(f"JWT validation failed: {e}")
            raise AuthenticationError("Invalid or expired token")

        user_id = payload.get("userId") or payload.get("sub")
        if not user_id:
            logger.warning("Token missing user identifier")
            raise AuthenticationError("Invalid or expired token")

        return TokenData(
            user_id=user_id,
            email=payload.get("email"),
            name=payload.get("name"),
            avatar_url=payload.get("avatarUrl"),
        )


@lru_cache()
def get_security_manager() -> SecurityManager:
    """
    Get cached security manager instance.

    Returns:
        SecurityManager: Singleton security manager
    """
    return SecurityManager()


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Strip an optional 'Bearer ' prefix from an Authorization header value."""
    if not authorization:
        return None
    token = authorization.strip()
    if token.lower().startswith("bearer "):
        token = token[7:].strip()
    return token or None


# Convenience functions for direct usage
def create_access_token(user: TokenData, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    return get_security_manager().create_access_token(user, expires_delta)


def verify_token(token: str) -> TokenData:
    """Verify JWT token."""
    return get_security_manager().verify_token(token)

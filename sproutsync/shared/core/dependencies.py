# 📄 File: sproutsync/shared/core/dependencies.py
# 🧭 Purpose (Layman Explanation):
# Reusable building blocks every endpoint can ask for: "who is calling?",
# "which page of results?", "what timezone is the user in?".
# 🧪 Purpose (Technical Summary):
# FastAPI dependencies for bearer-token authentication (with last-active tracking),
# optional authentication, pagination parameters and the X-User-Timezone header.
# 🔗 Dependencies:
# FastAPI, SQLAlchemy, sproutsync.shared.core.security, user_settings_service
# 🔄 Connected Modules / Calls From:
# Every authenticated presentation router

"""
Common FastAPI dependencies for SproutSync.
Provides user authentication, pagination and request context utilities.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Header, Query, Request
from sqlalchemy.exc import SQLAlchemyError

from sproutsync.modules.user_management.domain.services.user_settings_service import touch_last_active
from sproutsync.shared.core.exceptions import AuthenticationError, DatabaseError, TransactionError
from sproutsync.shared.core.security import extract_bearer_token, get_security_manager
from sproutsync.shared.infrastructure.database.session import database_session
from sproutsync.shared.utils.logging import bind_user_id

logger = logging.getLogger(__name__)


class CurrentUser:
    """User information extracted from JWT token."""

    def __init__(
        self,
        user_id: str,
        email: Optional[str] = None,
        name: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ):
        self.user_id = user_id
        self.email = email
        self.name = name
        self.avatar_url = avatar_url

    def to_dict(self) -> Dict[str, Any]:
        """Convert user info to the wire format."""
        return {
            "id": self.user_id,
            "email": self.email,
            "name": self.name,
            "avatar_url": self.avatar_url,
        }


def _user_from_token(token: str) -> CurrentUser:
    data = get_security_manager().verify_token(token)
    return CurrentUser(
        user_id=data.user_id,
        email=data.email,
        name=data.name,
        avatar_url=data.avatar_url,
    )


async def get_current_user(request: Request) -> CurrentUser:
    """
    Authenticate the request from its Authorization header.

    The "Bearer " prefix is optional. Each successful call also records
    the user's last activity; failures there are logged only.

    Raises:
        AuthenticationError: Missing header or invalid token
    """
    authorization = request.headers.get("Authorization")
    if not authorization:
        raise AuthenticationError("No authorization header")

    token = extract_bearer_token(authorization)
    if not token:
        raise AuthenticationError("Invalid or expired token")

    user = _user_from_token(token)
    request.state.user_id = user.user_id
    bind_user_id(user.user_id)

    try:
        async with database_session() as db:
            await touch_last_active(db, user.user_id)
    except (SQLAlchemyError, DatabaseError, TransactionError) as e:
        logger.warning(f"⚠️ Failed to update last active for user {user.user_id}: {e}")

    return user


async def get_optional_user(request: Request) -> Optional[CurrentUser]:
    """Authenticated user if a valid token is present, otherwise None."""
    token = extract_bearer_token(request.headers.get("Authorization"))
    if not token:
        return None
    try:
        return _user_from_token(token)
    except AuthenticationError:
        return None


class PaginationParams:
    """Page-based pagination parameters for list endpoints."""

    def __init__(self, page: int = 1, limit: int = 20):
        self.page = page
        self.limit = limit

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def to_dict(self) -> Dict[str, int]:
        return {"page": self.page, "limit": self.limit}


def get_pagination_params(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
) -> PaginationParams:
    """Dependency for pagination parameters (default 20 per page)."""
    return PaginationParams(page=page, limit=limit)


def get_wide_pagination_params(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(50, ge=1, le=100, description="Items per page"),
) -> PaginationParams:
    """Dependency for pagination parameters (default 50 per page)."""
    return PaginationParams(page=page, limit=limit)


def get_user_timezone_header(
    x_user_timezone: Optional[str] = Header(None, alias="X-User-Timezone"),
) -> Optional[str]:
    """Timezone reported by the client, unvalidated."""
    return x_user_timezone

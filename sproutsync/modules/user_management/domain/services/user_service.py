# 📄 File: sproutsync/modules/user_management/domain/services/user_service.py
# 🧭 Purpose (Layman Explanation):
# Keeps track of who our users are: signs them up the first time they log in with Google,
# and lets them pick the public username used in their shareable links.
#
# 🧪 Purpose (Technical Summary):
# UserModel find-or-create by Google subject id (refreshing name and avatar on each
# login), lazy username generation and username changes with uniqueness checks.
#
# 🔗 Dependencies:
# - SQLAlchemy async session
# - shared.utils.slugify
#
# 🔄 Connected Modules / Calls From:
# - user_management auth and users routers

import logging
from typing import Dict, Optional

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sproutsync.modules.user_management.infrastructure.database.models import UserModel
from sproutsync.shared.core.exceptions import BusinessRuleViolationError, NotFoundError, ValidationError
from sproutsync.shared.infrastructure.database.session import get_db_session
from sproutsync.shared.utils.slugify import generate_unique_username, to_slug

logger = logging.getLogger(__name__)


class UserService:
    """User accounts and public usernames."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def upsert_google_user(self, profile: Dict[str, Optional[str]]) -> UserModel:
        """
        Find the user by Google id or create them.

        Existing users get their name and avatar refreshed from the latest profile.

        Raises:
            ValidationError: The Google profile has no email
        """
        if not profile.get("email"):
            raise ValidationError("No email found in Google profile", field="email")

        user = await self.session.scalar(select(UserModel).where(UserModel.google_id == profile["google_id"]))
        if user is None:
            user = UserModel(
                google_id=profile["google_id"],
                email=profile["email"],
                name=profile.get("name") or "",
                avatar_url=profile.get("avatar_url"),
            )
            self.session.add(user)
            logger.info(f"🆕 New user signed up: {profile['email']}")
        else:
            user.name = profile.get("name") or user.name
            user.avatar_url = profile.get("avatar_url")
            logger.info(f"👋 Returning user signed in: {user.email}")

        await self.session.flush()
        return user

    async def get_profile(self, user_id: str) -> UserModel:
        """
        User row, assigning a generated username the first time it is missing.

        Raises:
            NotFoundError: Unknown user
        """
        user = await self.session.get(UserModel, user_id)
        if user is None:
            raise NotFoundError("User not found", resource_type="user", resource_id=user_id)

        if not user.username and user.name:
            user.username = await generate_unique_username(self.session, user.name)
            await self.session.flush()
            logger.info(f"🏷️ Generated username {user.username} for user {user_id}")
        return user

    async def update_username(self, user_id: str, username: str) -> UserModel:
        """
        Raises:
            NotFoundError: Unknown user
            BusinessRuleViolationError: Another user already holds the username
        """
        slug = to_slug(username)
        holder = await self.session.scalar(select(UserModel).where(UserModel.username == slug))
        if holder is not None and holder.id != user_id:
            raise BusinessRuleViolationError("Username is already taken", rule="unique_username")

        user = await self.session.get(UserModel, user_id)
        if user is None:
            raise NotFoundError("User not found", resource_type="user", resource_id=user_id)

        user.username = slug
        await self.session.flush()
        logger.info(f"🏷️ User {user_id} changed username to {slug}")
        return user


def get_user_service(db: AsyncSession = Depends(get_db_session)) -> UserService:
    """FastAPI dependency for UserService."""
    return UserService(db)

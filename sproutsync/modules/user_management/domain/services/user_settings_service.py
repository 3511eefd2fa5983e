# 📄 File: sproutsync/modules/user_management/domain/services/user_settings_service.py
# 🧭 Purpose (Layman Explanation):
# Looks after each person's settings row: creates it the first time it is needed,
# remembers their timezone and notes when they were last active.
#
# 🧪 Purpose (Technical Summary):
# Upsert-style helpers over UserSettingsModel used across modules, including the
# X-User-Timezone resolution rules and tutorial/onboarding state.
#
# 🔗 Dependencies:
# - SQLAlchemy async session
# - sproutsync.shared.utils.timezone
#
# 🔄 Connected Modules / Calls From:
# - shared.core.dependencies (last active tracking)
# - care_management and plant_gifting (user timezone)
# - user_settings / tutorial routers, notification and calendar services

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sproutsync.modules.user_management.infrastructure.database.models import UserSettingsModel
from sproutsync.shared.utils.timezone import (
    default_timezone,
    should_overwrite_stored_timezone,
    try_normalize_timezone,
)

logger = logging.getLogger(__name__)


async def get_user_settings(session: AsyncSession, user_id: str) -> Optional[UserSettingsModel]:
    """Settings row for a user, or None."""
    result = await session.execute(
        select(UserSettingsModel).where(UserSettingsModel.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def get_or_create_user_settings(
    session: AsyncSession,
    user_id: str,
    **defaults: Any
) -> UserSettingsModel:
    """
    Fetch the settings row, creating it with PRIMARY persona when missing.

    Args:
        session: Database session
        user_id: Owner
        **defaults: Extra column values applied only on create
    """
    settings = await get_user_settings(session, user_id)
    if settings is not None:
        return settings

    settings = UserSettingsModel(
        user_id=user_id,
        persona="PRIMARY",
        synced_plant_ids=[],
        tutorial_completed_steps=[],
        tutorial_skipped_steps=[],
        **defaults,
    )
    session.add(settings)
    await session.flush()
    logger.info(f"🆕 Created default settings for user {user_id}")
    return settings


async def upsert_user_settings(session: AsyncSession, user_id: str, **values: Any) -> UserSettingsModel:
    """Update the given columns, creating the row first if needed."""
    settings = await get_or_create_user_settings(session, user_id)
    for key, value in values.items():
        setattr(settings, key, value)
    await session.flush()
    return settings


async def touch_last_active(session: AsyncSession, user_id: str) -> None:
    """Record that the user just made an authenticated request."""
    await upsert_user_settings(session, user_id, last_active_at=datetime.now(timezone.utc))


async def resolve_user_timezone(
    session: AsyncSession,
    user_id: str,
    preferred: Optional[str] = None
) -> str:
    """
    Decide which timezone to use for a user's date math.

    A valid client-reported zone wins and is persisted when the stored value is
    missing, a UTC placeholder or different. Otherwise the stored zone is used,
    then the configured default.
    """
    normalized_preferred = try_normalize_timezone(preferred)
    settings = await get_user_settings(session, user_id)

    if normalized_preferred:
        if (
            settings is None
            or should_overwrite_stored_timezone(settings.timezone)
            or settings.timezone != normalized_preferred
        ):
            await upsert_user_settings(session, user_id, timezone=normalized_preferred)
            logger.debug(f"🕒 Stored timezone {normalized_preferred} for user {user_id}")
        return normalized_preferred

    stored = try_normalize_timezone(settings.timezone if settings else None)
    if stored:
        return stored

    return default_timezone()


# =============================================================================
# ONBOARDING STATE
# =============================================================================

def tutorial_state(settings: Optional[UserSettingsModel]) -> Dict[str, Any]:
    """Tutorial progress in wire format, with defaults for missing settings."""
    if settings is None:
        return {"tutorial_completed": False, "completed_steps": [], "skipped_steps": []}
    return {
        "tutorial_completed": bool(settings.tutorial_completed),
        "completed_steps": list(settings.tutorial_completed_steps or []),
        "skipped_steps": list(settings.tutorial_skipped_steps or []),
    }


async def update_tutorial_state(
    session: AsyncSession,
    user_id: str,
    tutorial_completed: Optional[bool] = None,
    completed_steps: Optional[List[str]] = None,
    skipped_steps: Optional[List[str]] = None,
) -> UserSettingsModel:
    """Apply the provided tutorial fields, leaving the others unchanged."""
    values: Dict[str, Any] = {}
    if tutorial_completed is not None:
        values["tutorial_completed"] = tutorial_completed
    if completed_steps is not None:
        values["tutorial_completed_steps"] = list(completed_steps)
    if skipped_steps is not None:
        values["tutorial_skipped_steps"] = list(skipped_steps)
    return await upsert_user_settings(session, user_id, **values)

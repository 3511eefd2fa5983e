# 📄 File: sproutsync/modules/user_management/presentation/api/v1/user_settings.py
# 🧭 Purpose (Layman Explanation):
# Remembers whether a new user has already seen the welcome highlights.
#
# 🧪 Purpose (Technical Summary):
# FastAPI router mounted at /api/user-settings; settings rows are created on first use.
#
# 🔗 Dependencies:
# - user_management user_settings_service
#
# 🔄 Connected Modules / Calls From:
# - sproutsync.api.v1.router

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sproutsync.modules.user_management.domain.services.user_settings_service import (
    get_or_create_user_settings,
    upsert_user_settings,
)
from sproutsync.modules.user_management.presentation.api.schemas.user_schemas import NewUserFocusRequest
from sproutsync.shared.core.dependencies import CurrentUser, get_current_user
from sproutsync.shared.core.responses import api_response
from sproutsync.shared.infrastructure.database.session import get_db_session

user_settings_router = APIRouter()


@user_settings_router.get("", summary="Get user settings")
async def get_settings(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    user_settings = await get_or_create_user_settings(db, current_user.user_id, has_seen_new_user_focus=False)
    return api_response(data={"has_seen_new_user_focus": bool(user_settings.has_seen_new_user_focus)})


@user_settings_router.put("/new-user-focus", summary="Update new user focus flag")
async def update_new_user_focus(
    payload: NewUserFocusRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    await upsert_user_settings(db, current_user.user_id, has_seen_new_user_focus=payload.has_seen_new_user_focus)
    return api_response(
        data={"has_seen_new_user_focus": payload.has_seen_new_user_focus},
        message="New user focus status updated successfully",
    )

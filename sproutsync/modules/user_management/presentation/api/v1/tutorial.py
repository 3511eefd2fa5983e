# 📄 File: sproutsync/modules/user_management/presentation/api/v1/tutorial.py
# 🧭 Purpose (Layman Explanation):
# Saves how far someone has got through the in-app tutorial so it can pick up where they
# left off.
#
# 🧪 Purpose (Technical Summary):
# FastAPI router mounted at /api/tutorial. Partial updates leave omitted fields unchanged;
# non-list step values fail request validation (400).
#
# 🔗 Dependencies:
# - user_management user_settings_service (tutorial_state, update_tutorial_state)
#
# 🔄 Connected Modules / Calls From:
# - sproutsync.api.v1.router

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sproutsync.modules.user_management.domain.services.user_settings_service import (
    get_user_settings,
    tutorial_state,
    update_tutorial_state,
)
from sproutsync.modules.user_management.presentation.api.schemas.user_schemas import TutorialStateRequest
from sproutsync.shared.core.dependencies import CurrentUser, get_current_user
from sproutsync.shared.core.responses import api_response
from sproutsync.shared.infrastructure.database.session import get_db_session

tutorial_router = APIRouter()


@tutorial_router.get("/state", summary="Get tutorial progress")
async def get_tutorial_state(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return api_response(data=tutorial_state(await get_user_settings(db, current_user.user_id)))


@tutorial_router.post("/state", summary="Update tutorial progress", responses={400: {"description": "Steps must be lists"}})
async def save_tutorial_state(
    payload: TutorialStateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    user_settings = await update_tutorial_state(
        db,
        current_user.user_id,
        tutorial_completed=payload.tutorial_completed,
        completed_steps=payload.completed_steps,
        skipped_steps=payload.skipped_steps,
    )
    return api_response(data=tutorial_state(user_settings))


@tutorial_router.post("/complete", summary="Mark tutorial completed")
async def complete_tutorial(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    user_settings = await update_tutorial_state(db, current_user.user_id, tutorial_completed=True)
    return api_response(data=tutorial_state(user_settings))

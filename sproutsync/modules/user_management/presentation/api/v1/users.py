# 📄 File: sproutsync/modules/user_management/presentation/api/v1/users.py
# 🧭 Purpose (Layman Explanation):
# Lets a signed-in person see their profile and choose the username that appears in their
# public garden links.
#
# 🧪 Purpose (Technical Summary):
# FastAPI router mounted at /api/users over UserService.
#
# 🔗 Dependencies:
# - FastAPI APIRouter
# - user_management UserService and user schemas
#
# 🔄 Connected Modules / Calls From:
# - sproutsync.api.v1.router

from fastapi import APIRouter, Depends

from sproutsync.modules.user_management.domain.services.user_service import UserService, get_user_service
from sproutsync.modules.user_management.presentation.api.schemas.user_schemas import (
    UsernameUpdateRequest,
    UserProfileResponse,
)
from sproutsync.shared.core.dependencies import CurrentUser, get_current_user
from sproutsync.shared.core.responses import api_response

users_router = APIRouter()


@users_router.get("/profile", summary="Get user profile", responses={404: {"description": "User not found"}})
async def get_profile(
    current_user: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Profile row; a username is generated from the first name when missing."""
    user = await service.get_profile(current_user.user_id)
    return api_response(data=UserProfileResponse.model_validate(user).model_dump(mode="json"))


@users_router.patch(
    "/username",
    summary="Change username",
    responses={400: {"description": "Invalid or already taken username"}},
)
async def update_username(
    payload: UsernameUpdateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    user = await service.update_username(current_user.user_id, payload.username)
    return api_response(
        data=UserProfileResponse.model_validate(user).model_dump(mode="json", exclude={"created_at"}),
        message="Username updated successfully",
    )

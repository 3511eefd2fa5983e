# 📄 File: sproutsync/modules/community_social/presentation/api/v1/gardens.py
# 🧭 Purpose (Layman Explanation):
# Lets signed-in visitors like or comment on someone's garden or on a single plant.
#
# 🧪 Purpose (Technical Summary):
# Authenticated FastAPI router mounted at /api/gardens. Appreciations toggle; comments
# return 201 with the author embedded.
#
# 🔗 Dependencies:
# - FastAPI APIRouter
# - community_social CommunityService
#
# 🔄 Connected Modules / Calls From:
# - sproutsync.api.v1.router

from fastapi import APIRouter, Depends, status

from sproutsync.modules.community_social.domain.services.community_service import (
    CommunityService,
    get_community_service,
)
from sproutsync.modules.community_social.presentation.api.schemas.community_schemas import CommentCreateRequest
from sproutsync.shared.core.dependencies import CurrentUser, get_current_user
from sproutsync.shared.core.responses import api_response

gardens_router = APIRouter()


def _toggle_message(appreciated: bool) -> str:
    return "Appreciation added" if appreciated else "Appreciation removed"


@gardens_router.post(
    "/plants/{plant_id}/appreciate",
    summary="Toggle plant appreciation",
    responses={404: {"description": "Plant not found"}},
)
async def toggle_plant_appreciation(
    plant_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: CommunityService = Depends(get_community_service),
):
    appreciated = await service.toggle_plant_appreciation(plant_id, current_user.user_id)
    return api_response(data={"appreciated": appreciated}, message=_toggle_message(appreciated))


@gardens_router.post(
    "/plants/{plant_id}/comments",
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a plant",
    responses={404: {"description": "Plant not found"}},
)
async def add_plant_comment(
    plant_id: str,
    payload: CommentCreateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: CommunityService = Depends(get_community_service),
):
    comment = await service.add_plant_comment(plant_id, current_user.user_id, payload.comment)
    return api_response(data=comment.model_dump(mode="json"), message="Comment added successfully")


@gardens_router.post(
    "/{garden_owner_id}/appreciate",
    summary="Toggle garden appreciation",
    responses={404: {"description": "Garden owner not found"}},
)
async def toggle_garden_appreciation(
    garden_owner_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: CommunityService = Depends(get_community_service),
):
    appreciated = await service.toggle_garden_appreciation(garden_owner_id, current_user.user_id)
    return api_response(data={"appreciated": appreciated}, message=_toggle_message(appreciated))


@gardens_router.post(
    "/{garden_owner_id}/comments",
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a garden",
    responses={404: {"description": "Garden owner not found"}},
)
async def add_garden_comment(
    garden_owner_id: str,
    payload: CommentCreateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: CommunityService = Depends(get_community_service),
):
    comment = await service.add_garden_comment(garden_owner_id, current_user.user_id, payload.comment)
    return api_response(data=comment.model_dump(mode="json"), message="Comment added successfully")

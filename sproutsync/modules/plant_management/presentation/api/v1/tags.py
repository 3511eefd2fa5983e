# 📄 File: sproutsync/modules/plant_management/presentation/api/v1/tags.py
# 🧭 Purpose (Layman Explanation):
# Endpoints for creating, renaming, recoloring and deleting the labels used to group plants.
#
# 🧪 Purpose (Technical Summary):
# FastAPI router mounted at /api/tags: paginated listing (default 50 per page) with plant
# counts, detail with linked plants, and CRUD scoped to the caller.
#
# 🔗 Dependencies:
# - FastAPI APIRouter
# - plant_management TagService and tag schemas
#
# 🔄 Connected Modules / Calls From:
# - sproutsync.api.v1.router

import logging

from fastapi import APIRouter, Depends, status

from sproutsync.modules.plant_management.domain.services.tag_service import TagService, get_tag_service
from sproutsync.modules.plant_management.presentation.api.schemas.tag_schemas import (
    TagCreateRequest,
    TagDetailResponse,
    TaggedPlantSummary,
    TagResponse,
    TagUpdateRequest,
    TagWithCountResponse,
)
from sproutsync.shared.core.dependencies import (
    CurrentUser,
    PaginationParams,
    get_current_user,
    get_wide_pagination_params,
)
from sproutsync.shared.core.responses import api_response, paginated_response

logger = logging.getLogger(__name__)

tags_router = APIRouter()

_NOT_FOUND = {404: {"description": "Tag not found"}}


@tags_router.get("", summary="List tags")
async def list_tags(
    current_user: CurrentUser = Depends(get_current_user),
    pagination: PaginationParams = Depends(get_wide_pagination_params),
    service: TagService = Depends(get_tag_service),
):
    """The caller's tags ordered by name, each with the number of tagged plants."""
    rows, total = await service.list_tags(current_user.user_id, pagination.offset, pagination.limit)
    items = [
        TagWithCountResponse(
            **TagResponse.model_validate(tag).model_dump(),
            plant_count=plant_count,
        ).model_dump(mode="json")
        for tag, plant_count in rows
    ]
    return paginated_response(items, pagination.page, pagination.limit, total)


@tags_router.post("", status_code=status.HTTP_201_CREATED, summary="Create tag")
async def create_tag(
    payload: TagCreateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
):
    tag = await service.create_tag(current_user.user_id, payload.name, payload.color_hex)
    return api_response(
        data=TagResponse.model_validate(tag).model_dump(mode="json"),
        message="Tag created successfully",
    )


@tags_router.get("/{tag_id}", summary="Get tag", responses=_NOT_FOUND)
async def get_tag(
    tag_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
):
    tag = await service.get_tag(tag_id, current_user.user_id, with_plants=True)
    plants = [link.plant for link in tag.plant_tags]
    detail = TagDetailResponse(
        **TagResponse.model_validate(tag).model_dump(),
        plant_count=len(plants),
        plants=[TaggedPlantSummary.model_validate(plant) for plant in plants],
    )
    return api_response(data=detail.model_dump(mode="json"))


@tags_router.put("/{tag_id}", summary="Update tag", responses=_NOT_FOUND)
async def update_tag(
    tag_id: str,
    payload: TagUpdateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
):
    tag = await service.update_tag(tag_id, current_user.user_id, payload.model_dump(exclude_unset=True))
    return api_response(
        data=TagResponse.model_validate(tag).model_dump(mode="json"),
        message="Tag updated successfully",
    )


@tags_router.delete("/{tag_id}", summary="Delete tag", responses=_NOT_FOUND)
async def delete_tag(
    tag_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
):
    """Unlink the tag from all plants, then delete it."""
    await service.delete_tag(tag_id, current_user.user_id)
    return api_response(message="Tag deleted successfully")

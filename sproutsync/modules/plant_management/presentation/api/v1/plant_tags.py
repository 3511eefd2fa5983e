# 📄 File: sproutsync/modules/plant_management/presentation/api/v1/plant_tags.py
# 🧭 Purpose (Layman Explanation):
# Endpoints to see which labels a plant wears and to add or take off a label.
#
# 🧪 Purpose (Technical Summary):
# FastAPI router mounted at /api/plants/{plant_id}/tags. Unassignment accepts the tag id
# either in the JSON body or as a path segment.
#
# 🔗 Dependencies:
# - FastAPI APIRouter
# - plant_management TagService, tag schemas, get_owned_plant
#
# 🔄 Connected Modules / Calls From:
# - sproutsync.api.v1.router

import logging

from fastapi import APIRouter, Depends, status

from sproutsync.modules.plant_management.domain.services.tag_service import TagService, get_tag_service
from sproutsync.modules.plant_management.infrastructure.database.models import PlantModel
from sproutsync.modules.plant_management.presentation.api.schemas.tag_schemas import (
    TagAssignRequest,
    TagResponse,
)
from sproutsync.modules.plant_management.presentation.dependencies import get_owned_plant
from sproutsync.shared.core.dependencies import CurrentUser, get_current_user
from sproutsync.shared.core.responses import api_response

logger = logging.getLogger(__name__)

plant_tags_router = APIRouter()


@plant_tags_router.get("", summary="List plant tags")
async def list_plant_tags(
    plant: PlantModel = Depends(get_owned_plant),
    service: TagService = Depends(get_tag_service),
):
    tags = await service.list_plant_tags(plant.id)
    data = [TagResponse.model_validate(tag).model_dump(mode="json") for tag in tags]
    return api_response(data=data, count=len(data))


@plant_tags_router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Assign tag to plant",
    responses={
        400: {"description": "Tag is already assigned to this plant"},
        404: {"description": "Tag not found"},
    },
)
async def assign_tag(
    payload: TagAssignRequest,
    plant: PlantModel = Depends(get_owned_plant),
    current_user: CurrentUser = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
):
    tag = await service.assign_tag(plant.id, payload.tag_id, current_user.user_id)
    return api_response(
        data=TagResponse.model_validate(tag).model_dump(mode="json"),
        message="Tag assigned successfully",
    )


@plant_tags_router.delete(
    "",
    summary="Unassign tag (tag id in body)",
    responses={404: {"description": "Tag is not assigned to this plant"}},
)
async def unassign_tag(
    payload: TagAssignRequest,
    plant: PlantModel = Depends(get_owned_plant),
    service: TagService = Depends(get_tag_service),
):
    await service.unassign_tag(plant.id, payload.tag_id)
    return api_response(message="Tag unassigned successfully")


@plant_tags_router.delete(
    "/{tag_id}",
    summary="Unassign tag",
    responses={404: {"description": "Tag is not assigned to this plant"}},
)
async def unassign_tag_by_id(
    tag_id: str,
    plant: PlantModel = Depends(get_owned_plant),
    service: TagService = Depends(get_tag_service),
):
    await service.unassign_tag(plant.id, tag_id)
    return api_response(message="Tag unassigned successfully")

# 📄 File: sproutsync/modules/community_social/presentation/api/v1/public.py
# 🧭 Purpose (Layman Explanation):
# Shareable pages anyone can open without signing in: one plant's profile or a person's
# whole garden.
#
# 🧪 Purpose (Technical Summary):
# Unauthenticated FastAPI router mounted at /api/public over CommunityService.
#
# 🔗 Dependencies:
# - FastAPI APIRouter
# - community_social CommunityService
#
# 🔄 Connected Modules / Calls From:
# - sproutsync.api.v1.router

from fastapi import APIRouter, Depends

from sproutsync.modules.community_social.domain.services.community_service import (
    CommunityService,
    get_community_service,
)
from sproutsync.shared.core.responses import api_response

public_router = APIRouter()


@public_router.get(
    "/u/{username}/{plant_slug}",
    summary="Public plant profile",
    responses={404: {"description": "User not found or plant not found"}},
)
async def get_public_plant(
    username: str,
    plant_slug: str,
    service: CommunityService = Depends(get_community_service),
):
    return api_response(data=await service.get_public_plant(username, plant_slug))


@public_router.get(
    "/garden/{username}",
    summary="Public garden",
    responses={404: {"description": "User not found"}},
)
async def get_public_garden(username: str, service: CommunityService = Depends(get_community_service)):
    return api_response(data=await service.get_public_garden(username))

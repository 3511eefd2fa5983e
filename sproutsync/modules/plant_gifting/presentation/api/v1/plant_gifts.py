# 📄 File: sproutsync/modules/plant_gifting/presentation/api/v1/plant_gifts.py
# 🧭 Purpose (Layman Explanation):
# Endpoints for sending a plant as a gift, opening a gift link, accepting it and seeing
# which gifts were sent or received.
#
# 🧪 Purpose (Technical Summary):
# FastAPI router mounted at /api/plant-gifts over PlantGiftService. The gift lookup by
# token is public; everything else requires a user.
#
# 🔗 Dependencies:
# - FastAPI APIRouter
# - plant_gifting PlantGiftService and gift schemas
# - care_management get_user_timezone (receiver's local day for copied tasks)
#
# 🔄 Connected Modules / Calls From:
# - sproutsync.api.v1.router

import logging

from fastapi import APIRouter, Depends, status

from sproutsync.modules.care_management.presentation.dependencies import get_user_timezone
from sproutsync.modules.plant_gifting.domain.services.gift_service import PlantGiftService, get_gift_service
from sproutsync.modules.plant_gifting.presentation.api.schemas.gift_schemas import (
    GiftAcceptRequest,
    GiftCreateRequest,
    GiftResponse,
    gift_payload,
)
from sproutsync.modules.plant_management.presentation.api.schemas.plant_schemas import PlantResponse
from sproutsync.shared.core.dependencies import CurrentUser, get_current_user
from sproutsync.shared.core.responses import api_response

logger = logging.getLogger(__name__)

plant_gifts_router = APIRouter()


@plant_gifts_router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Gift a plant",
    responses={400: {"description": "This plant has already been gifted"}, 404: {"description": "Plant not found"}},
)
async def create_gift(
    payload: GiftCreateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: PlantGiftService = Depends(get_gift_service),
):
    gift = await service.create_gift(current_user.user_id, payload.plant_id, payload.message)
    return api_response(data=gift_payload(gift, "sender"), message="Plant gift created successfully")


@plant_gifts_router.get(
    "/gift/{token}",
    summary="Open a gift link",
    responses={404: {"description": "Gift not found or already processed"}, 410: {"description": "This gift has expired"}},
)
async def get_gift(token: str, service: PlantGiftService = Depends(get_gift_service)):
    """Public: anyone with the link can preview the gifted plant and its photos."""
    gift = await service.get_pending_gift(token)
    return api_response(data=gift_payload(gift, "sender", all_photos=True))


@plant_gifts_router.post(
    "/accept",
    summary="Accept a gift",
    responses={
        400: {"description": "You cannot accept your own gifts"},
        404: {"description": "Gift not found or already processed"},
        410: {"description": "This gift has expired"},
    },
)
async def accept_gift(
    payload: GiftAcceptRequest,
    current_user: CurrentUser = Depends(get_current_user),
    user_timezone: str = Depends(get_user_timezone),
    service: PlantGiftService = Depends(get_gift_service),
):
    """The receiver gets a full copy of the plant; its tasks are due today in their timezone."""
    gift, plant = await service.accept_gift(payload.gift_token, current_user.user_id, user_timezone)
    return api_response(
        data={
            "gift": GiftResponse.model_validate(gift).model_dump(mode="json"),
            "plant": PlantResponse.from_model(plant, detail=True).to_wire(),
        },
        message="Plant gift accepted successfully",
    )


@plant_gifts_router.get("/sent", summary="Gifts I sent")
async def list_sent_gifts(
    current_user: CurrentUser = Depends(get_current_user),
    service: PlantGiftService = Depends(get_gift_service),
):
    gifts = await service.list_sent_gifts(current_user.user_id)
    return api_response(data=[gift_payload(gift, "receiver") for gift in gifts], count=len(gifts))


@plant_gifts_router.get("/received", summary="Gifts I received")
async def list_received_gifts(
    current_user: CurrentUser = Depends(get_current_user),
    service: PlantGiftService = Depends(get_gift_service),
):
    gifts = await service.list_received_gifts(current_user.user_id)
    return api_response(data=[gift_payload(gift, "sender") for gift in gifts], count=len(gifts))


@plant_gifts_router.delete("/{gift_id}", summary="Cancel a pending gift", responses={404: {"description": "Gift not found"}})
async def cancel_gift(
    gift_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: PlantGiftService = Depends(get_gift_service),
):
    gift = await service.cancel_gift(gift_id, current_user.user_id)
    return api_response(
        data=GiftResponse.model_validate(gift).model_dump(mode="json"),
        message="Plant gift cancelled successfully",
    )

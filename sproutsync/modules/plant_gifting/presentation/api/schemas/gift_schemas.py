# 📄 File: sproutsync/modules/plant_gifting/presentation/api/schemas/gift_schemas.py
# 🧭 Purpose (Layman Explanation):
# Describes what a gift looks like when the app sends one, opens a gift link or lists gifts.
#
# 🧪 Purpose (Technical Summary):
# Pydantic request/response models for /api/plant-gifts, plus serializers that embed the
# gifted plant and the counterpart user.
#
# 🔗 Dependencies:
# - pydantic v2
# - plant_management PlantResponse
#
# 🔄 Connected Modules / Calls From:
# - plant_gifting.presentation.api.v1.plant_gifts

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from sproutsync.modules.plant_management.presentation.api.schemas.journal_schemas import PhotoResponse
from sproutsync.modules.plant_management.presentation.api.schemas.plant_schemas import PlantResponse


class GiftCreateRequest(BaseModel):
    plant_id: str
    message: Optional[str] = Field(None, max_length=1000)


class GiftAcceptRequest(BaseModel):
    gift_token: str = Field(..., min_length=1)


class GiftUserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str


class GiftResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    plant_id: str
    sender_id: str
    receiver_id: Optional[str] = None
    gift_token: str
    message: Optional[str] = None
    status: str
    expires_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None
    created_at: datetime


def gift_payload(gift, user_field: Optional[str] = None, all_photos: bool = False) -> Dict[str, Any]:
    """
    Gift with its plant and, optionally, the sender or receiver embedded.

    Args:
        gift: PlantGiftModel with plant (tags, tasks, photos) and the requested user loaded
        user_field: "sender" or "receiver"
        all_photos: Include every photo instead of the latest one
    """
    data = GiftResponse.model_validate(gift).model_dump(mode="json")

    plant = PlantResponse.from_model(gift.plant)
    if all_photos:
        plant.photos = [
            PhotoResponse.model_validate(photo)
            for photo in sorted(gift.plant.photos, key=lambda photo: photo.taken_at, reverse=True)
        ]
    data["plant"] = plant.to_wire()

    if user_field:
        user = getattr(gift, user_field)
        data[user_field] = GiftUserSummary.model_validate(user).model_dump() if user else None
    return data

# 📄 File: sproutsync/modules/community_social/presentation/api/schemas/community_schemas.py
# 🧭 Purpose (Layman Explanation):
# What visitors see on a shared plant or garden page, and what they send when leaving a
# comment.
#
# 🧪 Purpose (Technical Summary):
# Pydantic v2 models for /api/public and /api/gardens.
#
# 🔗 Dependencies:
# - pydantic v2
#
# 🔄 Connected Modules / Calls From:
# - community_social routers and CommunityService

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from sproutsync.modules.plant_management.presentation.api.schemas.journal_schemas import PhotoResponse


class CommentCreateRequest(BaseModel):
    comment: str = Field(..., min_length=1, max_length=500)


class PublicUserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    avatar_url: Optional[str] = None


class PublicOwner(PublicUserSummary):
    username: Optional[str] = None


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    comment: str
    created_at: datetime
    user: PublicUserSummary


class AppreciationSummary(BaseModel):
    count: int
    users: List[PublicUserSummary]


class PublicPlantSummary(BaseModel):
    """Public view of a plant; no owner-only fields."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    pet_name: Optional[str] = None
    botanical_name: str
    common_name: str
    slug: Optional[str] = None
    type: Optional[str] = None
    city: Optional[str] = None
    care_level: Optional[str] = None
    sun_requirements: Optional[str] = None
    created_at: datetime
    photo: Optional[PhotoResponse] = None


class GardenPlantSummary(PublicPlantSummary):
    health_score: int

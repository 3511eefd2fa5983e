# 📄 File: sproutsync/modules/plant_management/presentation/api/schemas/journal_schemas.py
# 🧭 Purpose (Layman Explanation):
# The plant diary formats: written notes, photos and dated progress updates.
#
# 🧪 Purpose (Technical Summary):
# Pydantic v2 request/response schemas for NoteModel, PhotoModel and PlantTrackingModel.
#
# 🔗 Dependencies:
# - pydantic
#
# 🔄 Connected Modules / Calls From:
# - plant_management.presentation.api.v1.plant_journal
# - plant_schemas (notes and photos embedded in plant responses)

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

NotePreset = Literal["STRESSED", "NEEDS_PRUNING", "FERTILIZER_DUE", "PEST_ISSUE"]


# =============================================================================
# NOTES
# =============================================================================

class NoteCreateRequest(BaseModel):
    body: str = Field(..., min_length=1, description="Note text")
    task_key: Optional[str] = Field(default=None, description="Related care task")
    preset: Optional[NotePreset] = None


class NoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    plant_id: str
    task_key: Optional[str] = None
    body: str
    preset: Optional[str] = None
    created_at: datetime


# =============================================================================
# PHOTOS
# =============================================================================

class PhotoCreateRequest(BaseModel):
    """Register a photo that was already uploaded through /api/upload/image."""

    cloudinary_public_id: str = Field(..., min_length=1)
    secure_url: str = Field(..., pattern=r"^https?://")
    taken_at: datetime


class PhotoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    plant_id: str
    cloudinary_public_id: str
    secure_url: str
    taken_at: datetime
    points_awarded: int = 0


# =============================================================================
# TRACKING
# =============================================================================

class TrackingCreateRequest(BaseModel):
    date: str = Field(..., min_length=1, description="Client supplied date")
    note: str = Field(..., min_length=1)
    photo_url: Optional[str] = None
    original_photo_url: Optional[str] = None
    cloudinary_public_id: Optional[str] = None


class TrackingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    plant_id: str
    date: str
    note: str
    photo_url: Optional[str] = None
    original_photo_url: Optional[str] = None
    cloudinary_public_id: Optional[str] = None
    created_at: datetime

# 📄 File: sproutsync/modules/plant_management/presentation/api/v1/plant_journal.py
# 🧭 Purpose (Layman Explanation):
# Endpoints for a plant's diary: write and read notes, attach and browse photos, and post or
# remove dated progress updates.
#
# 🧪 Purpose (Technical Summary):
# Three FastAPI routers mounted under /api/plants/{plant_id}: /notes, /photos and /tracking.
# Each route resolves the plant through get_owned_plant (403 when not owned) and returns the
# standard paginated envelope for lists.
#
# 🔗 Dependencies:
# - FastAPI APIRouter
# - plant_management PlantJournalService and journal schemas
# - shared pagination dependency and Cloudinary storage
#
# 🔄 Connected Modules / Calls From:
# - sproutsync.api.v1.router

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from sproutsync.modules.plant_management.domain.services.journal_service import (
    PlantJournalService,
    get_journal_service,
)
from sproutsync.modules.plant_management.infrastructure.database.models import PlantModel
from sproutsync.modules.plant_management.presentation.api.schemas.journal_schemas import (
    NoteCreateRequest,
    NoteResponse,
    PhotoCreateRequest,
    PhotoResponse,
    TrackingCreateRequest,
    TrackingResponse,
)
from sproutsync.modules.plant_management.presentation.dependencies import get_owned_plant
from sproutsync.shared.core.dependencies import PaginationParams, get_pagination_params
from sproutsync.shared.core.responses import api_response, paginated_response
from sproutsync.shared.infrastructure.storage.cloudinary_storage import (
    CloudinaryStorage,
    get_cloudinary_storage,
)

logger = logging.getLogger(__name__)

notes_router = APIRouter()
photos_router = APIRouter()
tracking_router = APIRouter()

_OWNERSHIP_RESPONSES = {403: {"description": "Access denied. Plant not found or you do not own this plant."}}


# =============================================================================
# NOTES
# =============================================================================

@notes_router.get("", summary="List plant notes", responses=_OWNERSHIP_RESPONSES)
async def list_notes(
    task_key: Optional[str] = Query(None),
    preset: Optional[str] = Query(None),
    plant: PlantModel = Depends(get_owned_plant),
    pagination: PaginationParams = Depends(get_pagination_params),
    service: PlantJournalService = Depends(get_journal_service),
):
    """Notes newest first, filterable by task key and preset."""
    notes, total = await service.list_notes(
        plant.id, pagination.offset, pagination.limit, task_key=task_key, preset=preset
    )
    items = [NoteResponse.model_validate(note).model_dump(mode="json") for note in notes]
    return paginated_response(items, pagination.page, pagination.limit, total)


@notes_router.post("", status_code=status.HTTP_201_CREATED, summary="Add note", responses=_OWNERSHIP_RESPONSES)
async def create_note(
    payload: NoteCreateRequest,
    plant: PlantModel = Depends(get_owned_plant),
    service: PlantJournalService = Depends(get_journal_service),
):
    note = await service.create_note(plant.id, payload.body, payload.task_key, payload.preset)
    return api_response(
        data=NoteResponse.model_validate(note).model_dump(mode="json"),
        message="Note created successfully",
    )


# =============================================================================
# PHOTOS
# =============================================================================

@photos_router.get("", summary="List plant photos", responses=_OWNERSHIP_RESPONSES)
async def list_photos(
    plant: PlantModel = Depends(get_owned_plant),
    pagination: PaginationParams = Depends(get_pagination_params),
    service: PlantJournalService = Depends(get_journal_service),
):
    photos, total = await service.list_photos(plant.id, pagination.offset, pagination.limit)
    items = [PhotoResponse.model_validate(photo).model_dump(mode="json") for photo in photos]
    return paginated_response(items, pagination.page, pagination.limit, total)


@photos_router.post("", status_code=status.HTTP_201_CREATED, summary="Add photo", responses=_OWNERSHIP_RESPONSES)
async def create_photo(
    payload: PhotoCreateRequest,
    plant: PlantModel = Depends(get_owned_plant),
    service: PlantJournalService = Depends(get_journal_service),
):
    """Record a photo already uploaded to Cloudinary."""
    photo = await service.create_photo(
        plant.id,
        payload.cloudinary_public_id,
        payload.secure_url,
        payload.taken_at,
    )
    return api_response(
        data=PhotoResponse.model_validate(photo).model_dump(mode="json"),
        message="Photo uploaded successfully",
    )


# =============================================================================
# TRACKING
# =============================================================================

@tracking_router.get("", summary="List tracking updates", responses=_OWNERSHIP_RESPONSES)
async def list_tracking(
    plant: PlantModel = Depends(get_owned_plant),
    pagination: PaginationParams = Depends(get_pagination_params),
    service: PlantJournalService = Depends(get_journal_service),
):
    entries, total = await service.list_tracking(plant.id, pagination.offset, pagination.limit)
    items = [TrackingResponse.model_validate(entry).model_dump(mode="json") for entry in entries]
    return paginated_response(items, pagination.page, pagination.limit, total)


@tracking_router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Add tracking update",
    responses=_OWNERSHIP_RESPONSES,
)
async def create_tracking(
    payload: TrackingCreateRequest,
    plant: PlantModel = Depends(get_owned_plant),
    service: PlantJournalService = Depends(get_journal_service),
):
    entry = await service.create_tracking(plant.id, payload.model_dump())
    return api_response(
        data=TrackingResponse.model_validate(entry).model_dump(mode="json"),
        message="Plant tracking update created successfully",
    )


@tracking_router.delete(
    "/{tracking_id}",
    summary="Delete tracking update",
    responses={**_OWNERSHIP_RESPONSES, 404: {"description": "Tracking update not found"}},
)
async def delete_tracking(
    tracking_id: str,
    plant: PlantModel = Depends(get_owned_plant),
    service: PlantJournalService = Depends(get_journal_service),
    storage: CloudinaryStorage = Depends(get_cloudinary_storage),
):
    """Delete an update; its Cloudinary image is removed best-effort."""
    await service.delete_tracking(plant.id, tracking_id, storage)
    return api_response(message="Plant tracking update deleted successfully")

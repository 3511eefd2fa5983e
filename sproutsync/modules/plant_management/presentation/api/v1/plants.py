# 📄 File: sproutsync/modules/plant_management/presentation/api/v1/plants.py
# 🧭 Purpose (Layman Explanation):
# The web endpoints behind "My Plants": list and search plants, open one plant, add a new
# plant with its care routine, edit it or remove it, plus the list of care task types.
#
# 🧪 Purpose (Technical Summary):
# FastAPI router mounted at /api/plants. Task templates are a fixed route declared before
# /{plant_id}. Creation commits before scheduling calendar sync and new-task notifications
# as background tasks; deletion removes calendar events in the background.
#
# 🔗 Dependencies:
# - FastAPI APIRouter, BackgroundTasks
# - plant_management PlantService and plant schemas
# - calendar_sync task_sync_service, notification_communication notification_service
#
# 🔄 Connected Modules / Calls From:
# - sproutsync.api.v1.router

"""
Plants API Endpoints

Endpoints:
- GET /task-templates: Available care task types (seeded on first use)
- GET /: List plants with optional search and tag filters
- GET /{plant_id}: Plant detail with tags, tasks, notes and photos
- POST /: Create a plant with initial care tasks
- PUT /{plant_id}: Partial update
- DELETE /{plant_id}: Delete a plant and all related records
"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from sproutsync.modules.calendar_sync.domain.services.task_sync_service import (
    remove_events_in_background,
    sync_tasks_in_background,
)
from sproutsync.modules.notification_communication.domain.services.notification_service import (
    send_immediate_task_notifications_in_background,
)
from sproutsync.modules.plant_management.domain.services.plant_service import PlantService
from sproutsync.modules.plant_management.presentation.api.schemas.plant_schemas import (
    PlantCreateRequest,
    PlantResponse,
    PlantUpdateRequest,
    TaskTemplateResponse,
)
from sproutsync.shared.core.dependencies import CurrentUser, get_current_user
from sproutsync.shared.core.responses import api_response
from sproutsync.shared.infrastructure.database.session import get_db_session
from sproutsync.shared.infrastructure.storage.cloudinary_storage import (
    CloudinaryStorage,
    get_cloudinary_storage,
)

logger = logging.getLogger(__name__)

plants_router = APIRouter()


@plants_router.get(
    "/task-templates",
    summary="List care task templates",
    responses={200: {"description": "Task templates ordered by key"}},
)
async def list_task_templates(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Available care task types, created with defaults if none exist yet."""
    templates = await PlantService(db).list_task_templates()
    data = [TaskTemplateResponse.model_validate(t).model_dump(mode="json") for t in templates]
    return api_response(data=data, count=len(data))


@plants_router.get(
    "",
    summary="List plants",
    description="The caller's plants, newest first, with tags, tasks, latest photo and counts",
)
async def list_plants(
    search: Optional[str] = Query(None, description="Name or type contains"),
    tag: Optional[str] = Query(None, description="Tag name"),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    service = PlantService(db)
    plants = await service.list_plants(current_user.user_id, search=search, tag=tag)
    counts = await service.count_children([plant.id for plant in plants])

    data = [PlantResponse.from_model(plant, counts=counts[plant.id]).to_wire() for plant in plants]
    return api_response(data=data, count=len(data))


@plants_router.get(
    "/{plant_id}",
    summary="Get plant",
    responses={404: {"description": "Plant not found"}},
)
async def get_plant(
    plant_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    plant = await PlantService(db).get_plant(plant_id, current_user.user_id)
    return api_response(data=PlantResponse.from_model(plant, detail=True).to_wire())


@plants_router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create plant",
    responses={
        201: {"description": "Plant created"},
        400: {"description": "Validation error or unknown task key"},
    },
)
async def create_plant(
    payload: PlantCreateRequest,
    background_tasks: BackgroundTasks,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """
    Create a plant together with its initial care tasks.

    The transaction is committed before the background jobs run so they can
    see the new rows.
    """
    plant = await PlantService(db).create_plant(
        current_user.user_id,
        payload.plant_values(),
        payload.care_task_values(),
    )
    await db.commit()

    task_ids = [task.id for task in plant.tasks]
    if task_ids:
        background_tasks.add_task(sync_tasks_in_background, task_ids)
        background_tasks.add_task(send_immediate_task_notifications_in_background, current_user.user_id, plant.id)

    return api_response(
        data=PlantResponse.from_model(plant, detail=True).to_wire(),
        message="Plant created successfully",
    )


@plants_router.put(
    "/{plant_id}",
    summary="Update plant",
    responses={404: {"description": "Plant not found"}},
)
async def update_plant(
    plant_id: str,
    payload: PlantUpdateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    plant = await PlantService(db).update_plant(
        plant_id,
        current_user.user_id,
        payload.model_dump(exclude_unset=True),
    )
    return api_response(
        data=PlantResponse.from_model(plant, detail=True).to_wire(),
        message="Plant updated successfully",
    )


@plants_router.delete(
    "/{plant_id}",
    summary="Delete plant",
    responses={404: {"description": "Plant not found"}},
)
async def delete_plant(
    plant_id: str,
    background_tasks: BackgroundTasks,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    storage: CloudinaryStorage = Depends(get_cloudinary_storage),
):
    """
    Delete a plant with its tasks, tags, notes, photos and tracking updates.

    Images and calendar events are cleaned up best-effort.
    """
    service = PlantService(db)
    plant = await service.get_plant(plant_id, current_user.user_id)
    data = PlantResponse.from_model(plant, detail=True).to_wire()

    event_ids = await service.delete_plant(plant, storage)
    await db.commit()

    if event_ids:
        background_tasks.add_task(remove_events_in_background, current_user.user_id, event_ids)

    return api_response(data=data, message="Plant deleted successfully")

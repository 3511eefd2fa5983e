# 📄 File: sproutsync/modules/care_management/presentation/api/v1/plant_tasks.py
# 🧭 Purpose (Layman Explanation):
# Endpoints for the care chores of one plant: list them, add one, change or remove it,
# tick it off and move it to another day.
#
# 🧪 Purpose (Technical Summary):
# FastAPI router mounted at /api/plants/{plant_id}/tasks. Every route checks plant ownership
# (403) and resolves the caller's timezone from X-User-Timezone; calendar mirroring runs as
# background tasks after an explicit commit.
#
# 🔗 Dependencies:
# - FastAPI APIRouter, BackgroundTasks
# - care_management TaskService and task schemas
# - calendar_sync task_sync_service background hooks
#
# 🔄 Connected Modules / Calls From:
# - sproutsync.api.v1.router

"""
Plant Tasks API Endpoints

Endpoints:
- GET /: Paginated tasks of the plant (soonest due first)
- POST /: Add a task, due today in the user's timezone
- GET /{task_id}: Single task
- PUT /{task_id}: Partial update
- DELETE /{task_id}: Remove calendar event then delete
- POST /{task_id}/complete: Complete; next due at local midnight + frequency
- POST /{task_id}/reschedule: Move the next due date
"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from sproutsync.modules.calendar_sync.domain.services.task_sync_service import (
    TaskSyncService,
    sync_tasks_in_background,
    update_task_in_background,
)
from sproutsync.modules.care_management.domain.services.task_service import TaskService, get_task_service
from sproutsync.modules.care_management.presentation.api.schemas.task_schemas import (
    PlantTaskCreateRequest,
    PlantTaskResponse,
    PlantTaskUpdateRequest,
    RescheduleTaskRequest,
)
from sproutsync.modules.care_management.presentation.dependencies import get_user_timezone
from sproutsync.modules.plant_management.infrastructure.database.models import PlantModel
from sproutsync.modules.plant_management.presentation.dependencies import get_owned_plant
from sproutsync.shared.core.dependencies import PaginationParams, get_pagination_params
from sproutsync.shared.core.exceptions import ValidationError
from sproutsync.shared.core.responses import api_response, paginated_response
from sproutsync.shared.infrastructure.database.session import get_db_session

logger = logging.getLogger(__name__)

plant_tasks_router = APIRouter()

_TASK_NOT_FOUND = {404: {"description": "Task not found"}}


def _task_payload(task) -> dict:
    return PlantTaskResponse.model_validate(task).model_dump(mode="json")


@plant_tasks_router.get("", summary="List plant tasks")
async def list_plant_tasks(
    task_key: Optional[str] = Query(None),
    plant: PlantModel = Depends(get_owned_plant),
    user_timezone: str = Depends(get_user_timezone),
    pagination: PaginationParams = Depends(get_pagination_params),
    service: TaskService = Depends(get_task_service),
):
    tasks, total = await service.list_plant_tasks(plant.id, pagination.offset, pagination.limit, task_key)
    return paginated_response([_task_payload(task) for task in tasks], pagination.page, pagination.limit, total)


@plant_tasks_router.post("", status_code=status.HTTP_201_CREATED, summary="Create plant task")
async def create_plant_task(
    payload: PlantTaskCreateRequest,
    background_tasks: BackgroundTasks,
    plant: PlantModel = Depends(get_owned_plant),
    user_timezone: str = Depends(get_user_timezone),
    service: TaskService = Depends(get_task_service),
    db: AsyncSession = Depends(get_db_session),
):
    """New tasks show up in today's list for the user's timezone."""
    task = await service.create_plant_task(plant.id, payload.task_key, payload.frequency_days, user_timezone)
    await db.commit()

    background_tasks.add_task(sync_tasks_in_background, [task.id])
    return api_response(data=_task_payload(task), message="Task created successfully")


@plant_tasks_router.get("/{task_id}", summary="Get plant task", responses=_TASK_NOT_FOUND)
async def get_plant_task(
    task_id: str,
    plant: PlantModel = Depends(get_owned_plant),
    user_timezone: str = Depends(get_user_timezone),
    service: TaskService = Depends(get_task_service),
):
    task = await service.get_plant_task(plant.id, task_id)
    return api_response(data=_task_payload(task))


@plant_tasks_router.put("/{task_id}", summary="Update plant task", responses=_TASK_NOT_FOUND)
async def update_plant_task(
    task_id: str,
    payload: PlantTaskUpdateRequest,
    background_tasks: BackgroundTasks,
    plant: PlantModel = Depends(get_owned_plant),
    user_timezone: str = Depends(get_user_timezone),
    service: TaskService = Depends(get_task_service),
    db: AsyncSession = Depends(get_db_session),
):
    task = await service.get_plant_task(plant.id, task_id)
    task = await service.update_task(task, payload.model_dump(exclude_unset=True))
    await db.commit()

    background_tasks.add_task(update_task_in_background, task.id)
    return api_response(data=_task_payload(task), message="Task updated successfully")


@plant_tasks_router.delete("/{task_id}", summary="Delete plant task", responses=_TASK_NOT_FOUND)
async def delete_plant_task(
    task_id: str,
    plant: PlantModel = Depends(get_owned_plant),
    user_timezone: str = Depends(get_user_timezone),
    service: TaskService = Depends(get_task_service),
    db: AsyncSession = Depends(get_db_session),
):
    """Remove the mirrored calendar event (errors are logged), then the task."""
    task = await service.get_plant_task(plant.id, task_id)
    await TaskSyncService(db).remove_task_from_calendar(task.id)
    await service.delete_task(task)
    return api_response(message="Task deleted successfully")


@plant_tasks_router.post("/{task_id}/complete", summary="Complete plant task", responses=_TASK_NOT_FOUND)
async def complete_plant_task(
    task_id: str,
    background_tasks: BackgroundTasks,
    plant: PlantModel = Depends(get_owned_plant),
    user_timezone: str = Depends(get_user_timezone),
    service: TaskService = Depends(get_task_service),
    db: AsyncSession = Depends(get_db_session),
):
    """Next due date becomes local midnight plus the task frequency."""
    task = await service.get_plant_task(plant.id, task_id)
    task = await service.complete_plant_task(task, user_timezone)
    await db.commit()

    background_tasks.add_task(update_task_in_background, task.id)
    return api_response(data=_task_payload(task), message="Task marked as completed")


@plant_tasks_router.post(
    "/{task_id}/reschedule",
    summary="Reschedule plant task",
    responses={**_TASK_NOT_FOUND, 400: {"description": "Next due date is required"}},
)
async def reschedule_plant_task(
    task_id: str,
    background_tasks: BackgroundTasks,
    payload: RescheduleTaskRequest,
    plant: PlantModel = Depends(get_owned_plant),
    user_timezone: str = Depends(get_user_timezone),
    service: TaskService = Depends(get_task_service),
    db: AsyncSession = Depends(get_db_session),
):
    if payload.next_due_on is None:
        raise ValidationError("Next due date is required", field="next_due_on")

    task = await service.get_plant_task(plant.id, task_id)
    task = await service.reschedule_task(task, payload.next_due_on)
    await db.commit()

    background_tasks.add_task(update_task_in_background, task.id)
    return api_response(data=_task_payload(task), message="Task rescheduled successfully")

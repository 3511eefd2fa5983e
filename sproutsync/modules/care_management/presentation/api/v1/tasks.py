# 📄 File: sproutsync/modules/care_management/presentation/api/v1/tasks.py
# 🧭 Purpose (Layman Explanation):
# The "all my chores" view across every plant: what is coming up this week, what is late,
# and quick actions to add, edit, delete or tick off a task.
#
# 🧪 Purpose (Technical Summary):
# FastAPI router mounted at /api/tasks. Fixed routes (/upcoming, /overdue) are declared
# before /{task_id}. Global completion uses absolute now + frequency_days.
#
# 🔗 Dependencies:
# - FastAPI APIRouter, BackgroundTasks
# - care_management TaskService and task schemas
# - calendar_sync task_sync_service background hooks
#
# 🔄 Connected Modules / Calls From:
# - sproutsync.api.v1.router

import logging
from datetime import datetime
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
    TaskCreateRequest,
    TaskUpdateRequest,
    TaskWithPlantResponse,
)
from sproutsync.shared.core.dependencies import CurrentUser, get_current_user
from sproutsync.shared.core.responses import api_response
from sproutsync.shared.infrastructure.database.session import get_db_session

logger = logging.getLogger(__name__)

tasks_router = APIRouter()

_TASK_NOT_FOUND = {404: {"description": "Task not found"}}


def _task_payload(task) -> dict:
    return TaskWithPlantResponse.model_validate(task).model_dump(mode="json")


def _task_list(tasks) -> dict:
    data = [_task_payload(task) for task in tasks]
    return api_response(data=data, count=len(data))


@tasks_router.get("", summary="List tasks")
async def list_tasks(
    plant_id: Optional[str] = Query(None),
    task_key: Optional[str] = Query(None),
    completed: Optional[bool] = Query(None, description="true: done at least once; false: never done"),
    start_date: Optional[datetime] = Query(None, description="Earliest next due date"),
    end_date: Optional[datetime] = Query(None, description="Latest next due date"),
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    tasks = await service.list_user_tasks(
        current_user.user_id,
        plant_id=plant_id,
        task_key=task_key,
        completed=completed,
        start_date=start_date,
        end_date=end_date,
    )
    return _task_list(tasks)


@tasks_router.get("/upcoming", summary="Upcoming tasks")
async def list_upcoming_tasks(
    days: int = Query(7, ge=1, le=365, description="Look-ahead window in days"),
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    return _task_list(await service.list_upcoming_tasks(current_user.user_id, days))


@tasks_router.get("/overdue", summary="Overdue tasks")
async def list_overdue_tasks(
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    return _task_list(await service.list_overdue_tasks(current_user.user_id))


@tasks_router.get("/{task_id}", summary="Get task", responses=_TASK_NOT_FOUND)
async def get_task(
    task_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    task = await service.get_user_task(current_user.user_id, task_id)
    return api_response(data=_task_payload(task))


@tasks_router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create task",
    responses={404: {"description": "Plant not found"}},
)
async def create_task(
    payload: TaskCreateRequest,
    background_tasks: BackgroundTasks,
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
    db: AsyncSession = Depends(get_db_session),
):
    task = await service.create_task(
        current_user.user_id,
        payload.plant_id,
        payload.task_key,
        payload.frequency_days,
        payload.next_due_on,
    )
    await db.commit()

    background_tasks.add_task(sync_tasks_in_background, [task.id])
    return api_response(data=_task_payload(task), message="Task created successfully")


@tasks_router.put("/{task_id}", summary="Update task", responses=_TASK_NOT_FOUND)
async def update_task(
    task_id: str,
    payload: TaskUpdateRequest,
    background_tasks: BackgroundTasks,
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
    db: AsyncSession = Depends(get_db_session),
):
    task = await service.get_user_task(current_user.user_id, task_id)
    task = await service.update_task(task, payload.model_dump(exclude_unset=True))
    await db.commit()

    background_tasks.add_task(update_task_in_background, task.id)
    return api_response(data=_task_payload(task), message="Task updated successfully")


@tasks_router.delete("/{task_id}", summary="Delete task", responses=_TASK_NOT_FOUND)
async def delete_task(
    task_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
    db: AsyncSession = Depends(get_db_session),
):
    task = await service.get_user_task(current_user.user_id, task_id)
    await TaskSyncService(db).remove_task_from_calendar(task.id)
    await service.delete_task(task)
    return api_response(message="Task deleted successfully")


@tasks_router.post("/{task_id}/complete", summary="Complete task", responses=_TASK_NOT_FOUND)
async def complete_task(
    task_id: str,
    background_tasks: BackgroundTasks,
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
    db: AsyncSession = Depends(get_db_session),
):
    """Next due date becomes exactly now plus the task frequency."""
    task = await service.get_user_task(current_user.user_id, task_id)
    task = await service.complete_task(task)
    await db.commit()

    background_tasks.add_task(update_task_in_background, task.id)
    return api_response(data=_task_payload(task), message="Task marked as completed")

# 📄 File: sproutsync/modules/calendar_sync/presentation/api/v1/google_calendar.py
# 🧭 Purpose (Layman Explanation):
# Lets people connect their Google Calendar, choose which plants show up there, push chores
# on demand and disconnect again.
#
# 🧪 Purpose (Technical Summary):
# FastAPI router mounted at /api/google-calendar. The OAuth callback answers with a small
# HTML page that notifies the opener window; settings changes sync or unsync plants in the
# background after commit.
#
# 🔗 Dependencies:
# - FastAPI APIRouter, BackgroundTasks, HTMLResponse
# - calendar_sync GoogleCalendarService and TaskSyncService
#
# 🔄 Connected Modules / Calls From:
# - sproutsync.api.v1.router
# - Frontend calendar settings popup

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from fastapi.responses import HTMLResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from sproutsync.modules.calendar_sync.domain.services.task_sync_service import (
    calendar_plant_name,
    sync_plants_in_background,
)
from sproutsync.modules.calendar_sync.infrastructure.external.google_calendar_service import (
    GoogleCalendarService,
)
from sproutsync.modules.calendar_sync.presentation.api.schemas.calendar_schemas import (
    CalendarSyncSettingsRequest,
    SyncTasksRequest,
)
from sproutsync.modules.care_management.infrastructure.database.models import PlantTaskModel
from sproutsync.modules.plant_management.infrastructure.database.models import PlantModel
from sproutsync.modules.user_management.domain.services.user_settings_service import (
    get_user_settings,
    upsert_user_settings,
)
from sproutsync.shared.core.dependencies import CurrentUser, get_current_user
from sproutsync.shared.core.exceptions import NotFoundError, SproutSyncException, ValidationError
from sproutsync.shared.core.responses import api_response
from sproutsync.shared.infrastructure.database.session import get_db_session

logger = logging.getLogger(__name__)

google_calendar_router = APIRouter()

POPUP_PAGE = """<html>
  <body>
    <script>
      window.opener.postMessage({{ type: '{message_type}' }}, '*');
      window.close();
    </script>
  </body>
</html>"""


def get_calendar_service(db: AsyncSession = Depends(get_db_session)) -> GoogleCalendarService:
    return GoogleCalendarService(db)


def _popup(message_type: str) -> HTMLResponse:
    return HTMLResponse(POPUP_PAGE.format(message_type=message_type))


@google_calendar_router.get("/auth-url", summary="Google Calendar consent URL")
async def get_auth_url(
    current_user: CurrentUser = Depends(get_current_user),
    calendar: GoogleCalendarService = Depends(get_calendar_service),
):
    return api_response(data={"auth_url": calendar.get_auth_url(current_user.user_id)})


@google_calendar_router.get("/callback", response_class=HTMLResponse, summary="Google Calendar OAuth callback")
async def calendar_callback(
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None, description="User id passed through the consent screen"),
    calendar: GoogleCalendarService = Depends(get_calendar_service),
):
    """Store the tokens and tell the opener window whether it worked."""
    if not code or not state:
        logger.error("❌ Google Calendar callback without code or state")
        return _popup("GOOGLE_CALENDAR_AUTH_ERROR")

    try:
        await calendar.exchange_code_for_tokens(code, state)
    except SproutSyncException as e:
        logger.error(f"❌ Google Calendar callback failed for user {state}: {e.message}")
        return _popup("GOOGLE_CALENDAR_AUTH_ERROR")

    logger.info(f"📅 Google Calendar access granted for user {state}")
    return _popup("GOOGLE_CALENDAR_AUTH_SUCCESS")


@google_calendar_router.get("/status", summary="Calendar sync status")
async def get_status(
    current_user: CurrentUser = Depends(get_current_user),
    calendar: GoogleCalendarService = Depends(get_calendar_service),
    db: AsyncSession = Depends(get_db_session),
):
    user_settings = await get_user_settings(db, current_user.user_id)
    if user_settings is None:
        return api_response(data={
            "enabled": False,
            "has_access": False,
            "reminder_minutes": 30,
            "synced_plant_ids": [],
        })

    return api_response(data={
        "enabled": bool(user_settings.google_calendar_sync_enabled),
        "has_access": await calendar.has_valid_access(current_user.user_id),
        "reminder_minutes": user_settings.google_calendar_reminder_minutes,
        "synced_plant_ids": list(user_settings.synced_plant_ids or []),
    })


@google_calendar_router.put(
    "/settings",
    summary="Update calendar sync settings",
    responses={400: {"description": "Google Calendar access is required to enable sync"}},
)
async def update_settings(
    payload: CalendarSyncSettingsRequest,
    background_tasks: BackgroundTasks,
    current_user: CurrentUser = Depends(get_current_user),
    calendar: GoogleCalendarService = Depends(get_calendar_service),
    db: AsyncSession = Depends(get_db_session),
):
    """
    Save the sync choices, then sync newly selected plants and unsync deselected ones.
    """
    user_id = current_user.user_id
    has_access = await calendar.has_valid_access(user_id)
    if payload.enabled and not has_access:
        raise ValidationError("Google Calendar access is required to enable sync")

    previous = await get_user_settings(db, user_id)
    previous_ids = list(previous.synced_plant_ids or []) if previous else []

    values = {"google_calendar_sync_enabled": payload.enabled}
    if payload.reminder_minutes is not None:
        values["google_calendar_reminder_minutes"] = payload.reminder_minutes
    if payload.synced_plant_ids is not None:
        values["synced_plant_ids"] = list(payload.synced_plant_ids)
    await upsert_user_settings(db, user_id, **values)
    await db.commit()

    next_ids = payload.synced_plant_ids or []
    added = [plant_id for plant_id in next_ids if plant_id not in previous_ids]
    removed = [plant_id for plant_id in previous_ids if plant_id not in next_ids]

    if payload.enabled and has_access and added:
        background_tasks.add_task(sync_plants_in_background, user_id, added, payload.reminder_minutes)
    if has_access and removed:
        background_tasks.add_task(sync_plants_in_background, user_id, removed, payload.reminder_minutes, True)

    logger.info(f"📅 Calendar settings for user {user_id}: +{len(added)} / -{len(removed)} plants")
    return api_response(
        data={
            "enabled": payload.enabled,
            "reminder_minutes": payload.reminder_minutes or 30,
            "synced_plant_ids": next_ids,
        },
        message="Sync settings updated successfully",
    )


@google_calendar_router.post(
    "/sync-tasks",
    summary="Sync tasks to Google Calendar",
    responses={400: {"description": "Google Calendar access is required"}, 404: {"description": "No valid tasks found"}},
)
async def sync_tasks(
    payload: SyncTasksRequest,
    current_user: CurrentUser = Depends(get_current_user),
    calendar: GoogleCalendarService = Depends(get_calendar_service),
    db: AsyncSession = Depends(get_db_session),
):
    user_id = current_user.user_id
    if not await calendar.has_valid_access(user_id):
        raise ValidationError("Google Calendar access is required")

    result = await db.execute(
        select(PlantTaskModel)
        .join(PlantModel, PlantModel.id == PlantTaskModel.plant_id)
        .where(
            PlantTaskModel.id.in_(payload.task_ids),
            PlantModel.user_id == user_id,
            PlantTaskModel.active.is_(True),
        )
        .options(selectinload(PlantTaskModel.plant))
    )
    tasks = list(result.scalars().all())
    if not tasks:
        raise NotFoundError("No valid tasks found", resource_type="task")

    results = []
    for task in tasks:
        try:
            event_id = await calendar.create_task_event(
                user_id, task, calendar_plant_name(task.plant), payload.reminder_minutes
            )
            task.google_calendar_event_id = event_id
            results.append({"task_id": task.id, "event_id": event_id, "success": True})
        except SproutSyncException as e:
            logger.error(f"❌ Error syncing task {task.id}: {e.message}")
            results.append({"task_id": task.id, "success": False, "error": "Failed to create calendar event"})

    success_count = sum(1 for item in results if item["success"])
    failure_count = len(results) - success_count
    message = f"Synced {success_count} tasks successfully"
    if failure_count:
        message += f", {failure_count} failed"

    return api_response(
        data={"results": results, "success_count": success_count, "failure_count": failure_count},
        message=message,
    )


@google_calendar_router.delete("/revoke", summary="Revoke Google Calendar access")
async def revoke_access(
    current_user: CurrentUser = Depends(get_current_user),
    calendar: GoogleCalendarService = Depends(get_calendar_service),
):
    await calendar.revoke_access(current_user.user_id)
    return api_response(message="Google Calendar access revoked successfully")

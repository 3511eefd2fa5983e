# 📄 File: sproutsync/modules/calendar_sync/domain/services/task_sync_service.py
# 🧭 Purpose (Layman Explanation):
# Keeps the user's Google Calendar in step with their plant chores: adds an event when a
# chore is created, moves it when the chore changes and removes it when the chore goes away.
#
# 🧪 Purpose (Technical Summary):
# Mirrors PlantTaskModel rows to Google Calendar events for plants listed in the user's
# synced_plant_ids. Every public method logs and swallows failures; background helpers open
# their own database session so they can run after the response is sent.
#
# 🔗 Dependencies:
# - calendar_sync GoogleCalendarService
# - SQLAlchemy async session, database_session() for background work
#
# 🔄 Connected Modules / Calls From:
# - care_management plant_tasks / tasks routers
# - plant_management plants router (create/delete)
# - calendar_sync google_calendar router (settings changes)

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from sproutsync.modules.calendar_sync.infrastructure.external.google_calendar_service import (
    GoogleCalendarService,
)
from sproutsync.modules.care_management.infrastructure.database.models import PlantTaskModel
from sproutsync.modules.plant_management.infrastructure.database.models import PlantModel
from sproutsync.modules.user_management.domain.services.user_settings_service import get_user_settings
from sproutsync.shared.infrastructure.database.session import database_session

logger = logging.getLogger(__name__)


def calendar_plant_name(plant: PlantModel) -> str:
    """Event title name: pet name, else the first common name, else the botanical name."""
    if plant.pet_name:
        return plant.pet_name
    common = (plant.common_name or "").split(",")[0].strip()
    return common or plant.botanical_name or "Unknown Plant"


class TaskSyncService:
    """Mirror care tasks to Google Calendar."""

    def __init__(self, session: AsyncSession, calendar: Optional[GoogleCalendarService] = None):
        self.session = session
        self.calendar = calendar or GoogleCalendarService(session)

    async def _load_task(self, task_id: str) -> Optional[PlantTaskModel]:
        result = await self.session.execute(
            select(PlantTaskModel)
            .where(PlantTaskModel.id == task_id)
            .options(selectinload(PlantTaskModel.plant))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _sync_target(self, task: Optional[PlantTaskModel]):
        """User settings when ``task`` should be mirrored, else None."""
        if task is None or not task.active:
            return None

        user_id = task.plant.user_id
        user_settings = await get_user_settings(self.session, user_id)
        if (
            user_settings is None
            or not user_settings.google_calendar_sync_enabled
            or not user_settings.google_calendar_access_token
            or task.plant_id not in (user_settings.synced_plant_ids or [])
        ):
            return None

        if not await self.calendar.has_valid_access(user_id):
            logger.warning(f"⚠️ User {user_id} has invalid Google Calendar access")
            return None
        return user_settings

    async def sync_task_to_calendar(self, task_id: str) -> None:
        """Create an event for the task and store its id."""
        try:
            task = await self._load_task(task_id)
            user_settings = await self._sync_target(task)
            if user_settings is None:
                return

            task.google_calendar_event_id = await self.calendar.create_task_event(
                task.plant.user_id,
                task,
                calendar_plant_name(task.plant),
                user_settings.google_calendar_reminder_minutes,
            )
            await self.session.flush()
            logger.info(f"📅 Synced task {task_id} to Google Calendar")
        except Exception as e:
            logger.error(f"❌ Error syncing task {task_id} to Google Calendar: {e}")

    async def update_task_in_calendar(self, task_id: str, event_id: Optional[str] = None) -> None:
        """Update the task's event; recreate it if the update fails or there is none."""
        try:
            task = await self._load_task(task_id)
            user_settings = await self._sync_target(task)
            if user_settings is None:
                return

            user_id = task.plant.user_id
            plant_name = calendar_plant_name(task.plant)
            reminder = user_settings.google_calendar_reminder_minutes
            stored_event_id = event_id or task.google_calendar_event_id

            if stored_event_id:
                try:
                    await self.calendar.update_task_event(user_id, stored_event_id, task, plant_name, reminder)
                    task.google_calendar_event_id = stored_event_id
                except Exception as e:
                    logger.warning(f"⚠️ Updating event {stored_event_id} for task {task_id} failed, recreating: {e}")
                    task.google_calendar_event_id = await self.calendar.create_task_event(
                        user_id, task, plant_name, reminder
                    )
            else:
                task.google_calendar_event_id = await self.calendar.create_task_event(
                    user_id, task, plant_name, reminder
                )

            await self.session.flush()
            logger.info(f"📅 Updated task {task_id} in Google Calendar")
        except Exception as e:
            logger.error(f"❌ Error updating task {task_id} in Google Calendar: {e}")

    async def remove_task_from_calendar(self, task_id: str, event_id: Optional[str] = None) -> None:
        """Delete the task's event and clear the stored id. Never raises."""
        try:
            task = await self._load_task(task_id)
            if task is None:
                return

            user_id = task.plant.user_id
            user_settings = await get_user_settings(self.session, user_id)
            if user_settings is None or not user_settings.google_calendar_access_token:
                return

            if not await self.calendar.has_valid_access(user_id):
                logger.warning(f"⚠️ User {user_id} has invalid Google Calendar access")
                return

            target_event_id = event_id or task.google_calendar_event_id
            if target_event_id:
                await self.calendar.delete_task_event(user_id, target_event_id)

            task.google_calendar_event_id = None
            await self.session.flush()
            logger.info(f"🗑️ Removed task {task_id} from Google Calendar")
        except Exception as e:
            logger.error(f"❌ Error removing task {task_id} from Google Calendar: {e}")

    async def sync_tasks_for_plants(
        self,
        user_id: str,
        plant_ids: List[str],
        reminder_minutes: Optional[int] = None,
        remove: bool = False,
    ) -> Dict[str, int]:
        """
        Create/update events for every active task of the given plants, or delete them.

        Args:
            reminder_minutes: Overrides the stored reminder
            remove: Delete events instead of syncing them

        Returns:
            dict: success_count and failure_count
        """
        counts = {"success_count": 0, "failure_count": 0}
        if not plant_ids:
            return counts

        try:
            user_settings = await get_user_settings(self.session, user_id)
            if user_settings is None or not user_settings.google_calendar_access_token:
                logger.warning(f"⚠️ User {user_id} does not have a Google Calendar access token")
                return counts

            if not await self.calendar.has_valid_access(user_id):
                logger.warning(f"⚠️ User {user_id} has invalid Google Calendar access")
                return counts

            reminder = reminder_minutes if reminder_minutes is not None else user_settings.google_calendar_reminder_minutes
            result = await self.session.execute(
                select(PlantTaskModel)
                .join(PlantModel, PlantModel.id == PlantTaskModel.plant_id)
                .where(
                    PlantModel.user_id == user_id,
                    PlantTaskModel.active.is_(True),
                    PlantTaskModel.plant_id.in_(plant_ids),
                )
                .options(selectinload(PlantTaskModel.plant))
                .execution_options(populate_existing=True)
            )

            for task in result.scalars().all():
                try:
                    if remove:
                        if task.google_calendar_event_id:
                            await self.calendar.delete_task_event(user_id, task.google_calendar_event_id)
                        task.google_calendar_event_id = None
                    elif task.google_calendar_event_id:
                        await self.calendar.update_task_event(
                            user_id,
                            task.google_calendar_event_id,
                            task,
                            calendar_plant_name(task.plant),
                            reminder,
                        )
                    else:
                        task.google_calendar_event_id = await self.calendar.create_task_event(
                            user_id, task, calendar_plant_name(task.plant), reminder
                        )
                    counts["success_count"] += 1
                except Exception as e:
                    logger.error(f"❌ Error {'removing' if remove else 'syncing'} task {task.id}: {e}")
                    counts["failure_count"] += 1

            await self.session.flush()
            logger.info(
                f"📅 {'Removed' if remove else 'Synced'} {counts['success_count']} tasks for user {user_id}, "
                f"{counts['failure_count']} failed"
            )
        except Exception as e:
            logger.error(f"❌ Error processing calendar tasks for plants {plant_ids} of user {user_id}: {e}")
        return counts

    async def sync_all_user_tasks(self, user_id: str) -> Dict[str, int]:
        """Sync every plant currently selected for calendar sync."""
        user_settings = await get_user_settings(self.session, user_id)
        if (
            user_settings is None
            or not user_settings.google_calendar_sync_enabled
            or not user_settings.google_calendar_access_token
            or not user_settings.synced_plant_ids
        ):
            return {"success_count": 0, "failure_count": 0}

        return await self.sync_tasks_for_plants(
            user_id,
            list(user_settings.synced_plant_ids),
            user_settings.google_calendar_reminder_minutes,
        )

    async def remove_all_user_tasks(self, user_id: str) -> None:
        user_settings = await get_user_settings(self.session, user_id)
        plant_ids = list(user_settings.synced_plant_ids or []) if user_settings else []
        if plant_ids:
            await self.sync_tasks_for_plants(user_id, plant_ids, remove=True)


# =============================================================================
# BACKGROUND HOOKS
# =============================================================================

async def sync_tasks_in_background(task_ids: List[str]) -> None:
    """Create calendar events for newly created tasks."""
    try:
        async with database_session() as db:
            service = TaskSyncService(db)
            for task_id in task_ids:
                await service.sync_task_to_calendar(task_id)
    except Exception as e:
        logger.error(f"❌ Background calendar sync failed for tasks {task_ids}: {e}")


async def update_task_in_background(task_id: str) -> None:
    try:
        async with database_session() as db:
            await TaskSyncService(db).update_task_in_calendar(task_id)
    except Exception as e:
        logger.error(f"❌ Background calendar update failed for task {task_id}: {e}")


async def remove_events_in_background(user_id: str, event_ids: List[str]) -> None:
    """Delete events whose tasks no longer exist (e.g. after a plant was deleted)."""
    if not event_ids:
        return
    try:
        async with database_session() as db:
            user_settings = await get_user_settings(db, user_id)
            if user_settings is None or not user_settings.google_calendar_access_token:
                return
            calendar = GoogleCalendarService(db)
            for event_id in event_ids:
                await calendar.delete_task_event(user_id, event_id)
        logger.info(f"🗑️ Removed {len(event_ids)} calendar events for user {user_id}")
    except Exception as e:
        logger.error(f"❌ Background calendar cleanup failed for user {user_id}: {e}")


async def sync_plants_in_background(
    user_id: str,
    plant_ids: List[str],
    reminder_minutes: Optional[int] = None,
    remove: bool = False,
) -> Dict[str, Any]:
    """Sync (or unsync) whole plants after the calendar settings changed."""
    try:
        async with database_session() as db:
            return await TaskSyncService(db).sync_tasks_for_plants(user_id, plant_ids, reminder_minutes, remove)
    except Exception as e:
        logger.error(f"❌ Background plant calendar sync failed for user {user_id}: {e}")
        return {"success_count": 0, "failure_count": 0}

# 📄 File: sproutsync/modules/notification_communication/domain/services/notification_service.py
# 🧭 Purpose (Layman Explanation):
# Manages each person's push notification preferences and sends the "new task" and
# "task due" nudges for their plants.
#
# 🧪 Purpose (Technical Summary):
# FCM token and preference upserts on UserSettingsModel, user-targeted sends with
# NotificationLog bookkeeping, immediate new-plant notifications and the due-task sweep
# that avoids repeating a notification for the same task.
#
# 🔗 Dependencies:
# - notification_communication FirebaseMessagingClient
# - plant_management PlantService (task template labels)
# - SQLAlchemy async session
#
# 🔄 Connected Modules / Calls From:
# - notification_communication.presentation.api.v1.notifications
# - plant_management plants router (background immediate notifications)
# - background_jobs.tasks.care_reminders

import json
import logging
from typing import Any, Dict, Optional

from fastapi import Depends
from firebase_admin import exceptions as firebase_exceptions
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from sproutsync.modules.care_management.infrastructure.database.models import PlantTaskModel
from sproutsync.modules.notification_communication.infrastructure.database.models import NotificationLogModel
from sproutsync.modules.notification_communication.infrastructure.external.firebase_messaging import (
    FirebaseMessagingClient,
    get_messaging_client,
    is_invalid_token_error,
)
from sproutsync.modules.plant_management.domain.services.plant_service import PlantService
from sproutsync.modules.plant_management.infrastructure.database.models import PlantModel
from sproutsync.modules.user_management.domain.services.user_settings_service import (
    get_or_create_user_settings,
    get_user_settings,
    upsert_user_settings,
)
from sproutsync.modules.user_management.infrastructure.database.models import UserSettingsModel
from sproutsync.shared.config.settings import get_settings
from sproutsync.shared.core.exceptions import SproutSyncException
from sproutsync.shared.infrastructure.database.connection import utc_now
from sproutsync.shared.infrastructure.database.session import database_session, get_db_session
from sproutsync.shared.utils.timezone import as_utc

logger = logging.getLogger(__name__)


def notification_plant_name(plant: PlantModel) -> str:
    return plant.pet_name or plant.common_name or plant.botanical_name or "Your plant"


class NotificationService:
    """Per-user push notification operations."""

    def __init__(self, session: AsyncSession, client: Optional[FirebaseMessagingClient] = None):
        self.session = session
        self.client = client or get_messaging_client()
        self.frontend_url = get_settings().FRONTEND_URL

    # =========================================================================
    # PREFERENCES
    # =========================================================================

    async def save_user_token(self, user_id: str, fcm_token: str) -> UserSettingsModel:
        """Store the device token; a new settings row starts enabled with the prompt shown."""
        await get_or_create_user_settings(
            self.session,
            user_id,
            notifications_enabled=True,
            notification_prompt_shown=True,
        )
        user_settings = await upsert_user_settings(self.session, user_id, fcm_token=fcm_token)
        logger.info(f"📲 FCM token saved for user {user_id}")
        return user_settings

    async def update_notification_settings(self, user_id: str, enabled: bool) -> UserSettingsModel:
        """Toggle notifications; ``notifications_enabled_at`` marks when they were switched on."""
        user_settings = await upsert_user_settings(
            self.session,
            user_id,
            notifications_enabled=enabled,
            notifications_enabled_at=utc_now() if enabled else None,
        )
        logger.info(f"🔔 Notification settings for user {user_id}: enabled={enabled}")
        return user_settings

    async def mark_prompt_shown(self, user_id: str) -> UserSettingsModel:
        await get_or_create_user_settings(self.session, user_id, notifications_enabled=False)
        return await upsert_user_settings(self.session, user_id, notification_prompt_shown=True)

    async def get_notification_settings(self, user_id: str) -> Dict[str, Any]:
        user_settings = await get_user_settings(self.session, user_id)
        if user_settings is None:
            return {
                "notifications_enabled": True,
                "notification_prompt_shown": False,
                "has_token": False,
                "notifications_enabled_at": None,
            }
        enabled_at = as_utc(user_settings.notifications_enabled_at)
        return {
            "notifications_enabled": bool(user_settings.notifications_enabled),
            "notification_prompt_shown": bool(user_settings.notification_prompt_shown),
            "has_token": bool(user_settings.fcm_token),
            "notifications_enabled_at": enabled_at.isoformat() if enabled_at else None,
        }

    # =========================================================================
    # SENDING
    # =========================================================================

    async def send_notification(self, user_id: str, payload: Dict[str, Any]) -> bool:
        """
        Push a plant notification to a user and log it.

        Args:
            payload: title, body, plant_id, plant_name and optional task_id/task_key

        Returns:
            bool: False when the user has no token, disabled notifications or delivery failed
        """
        user_settings = await get_user_settings(self.session, user_id)
        if user_settings is None or not user_settings.fcm_token:
            logger.info(f"📵 No FCM token found for user {user_id}")
            return False
        if not user_settings.notifications_enabled:
            logger.info(f"🔕 Notifications disabled for user {user_id}")
            return False

        plant_id = payload["plant_id"]
        task_id = payload.get("task_id") or ""
        data = {
            "plantId": plant_id,
            "plantName": payload.get("plant_name", ""),
            "taskId": task_id,
            "taskKey": payload.get("task_key") or "",
            "url": f"/plants/{plant_id}",
        }

        try:
            message_id = await self.client.send(
                user_settings.fcm_token,
                payload["title"],
                payload["body"],
                data=data,
                icon="/plant.png",
                link=f"{self.frontend_url}/plants/{plant_id}",
                tag=f"task-{task_id or plant_id}",
            )
        except (firebase_exceptions.FirebaseError, SproutSyncException, ValueError) as e:
            logger.error(f"❌ Error sending notification to user {user_id}: {e}")
            if is_invalid_token_error(e):
                logger.info(f"🧹 Invalid token for user {user_id}, removing it")
                user_settings.fcm_token = None
                await self.session.flush()
            return False

        self.session.add(NotificationLogModel(
            user_id=user_id,
            payload_json=json.dumps(payload),
            channel="WEB_PUSH",
        ))
        await self.session.flush()
        logger.info(f"✅ Notification {message_id} sent to user {user_id}")
        return True

    async def send_immediate_task_notifications(self, user_id: str, plant_id: str) -> int:
        """
        Announce every task of a freshly created plant.

        Only sent when notifications were switched on before the plant was created.

        Returns:
            int: Notifications delivered
        """
        result = await self.session.execute(
            select(PlantModel).where(PlantModel.id == plant_id).options(selectinload(PlantModel.tasks))
        )
        plant = result.scalar_one_or_none()
        if plant is None:
            logger.info(f"🔍 Plant {plant_id} not found for immediate notifications")
            return 0

        user_settings = await get_user_settings(self.session, user_id)
        if user_settings is None or not user_settings.notifications_enabled or not user_settings.fcm_token:
            logger.info(f"🔕 Notifications not enabled for user {user_id}, skipping immediate notifications")
            return 0

        enabled_at = as_utc(user_settings.notifications_enabled_at)
        if enabled_at and as_utc(plant.created_at) <= enabled_at:
            logger.info(f"⏭️ Plant {plant_id} predates notifications being enabled, skipping")
            return 0

        templates = await PlantService(self.session).get_template_map()
        plant_name = notification_plant_name(plant)
        sent = 0
        for task in sorted(plant.tasks, key=lambda item: item.task_key):
            template = templates.get(task.task_key)
            label = template.label if template else task.task_key
            delivered = await self.send_notification(user_id, {
                "title": f"🌱 New Task: {label}",
                "body": f"Time to {label.lower()} {plant_name}!",
                "plant_id": plant.id,
                "plant_name": plant_name,
                "task_id": task.id,
                "task_key": task.task_key,
            })
            sent += int(delivered)
        return sent

    async def check_and_send_due_task_notifications(self) -> int:
        """
        Notify owners once about each task that has come due.

        Skips owners without notifications or a token, tasks that were already due when
        notifications were switched on, and tasks already mentioned in a NotificationLog
        since the plant was created.

        Returns:
            int: Notifications delivered
        """
        result = await self.session.execute(
            select(PlantTaskModel)
            .where(PlantTaskModel.active.is_(True), PlantTaskModel.next_due_on <= utc_now())
            .options(selectinload(PlantTaskModel.plant))
        )
        due_tasks = list(result.scalars().all())
        logger.info(f"⏰ Found {len(due_tasks)} due tasks")
        if not due_tasks:
            return 0

        owner_ids = {task.plant.user_id for task in due_tasks}
        settings_result = await self.session.execute(
            select(UserSettingsModel).where(UserSettingsModel.user_id.in_(owner_ids))
        )
        settings_by_user = {row.user_id: row for row in settings_result.scalars().all()}
        templates = await PlantService(self.session).get_template_map()

        sent = 0
        for task in due_tasks:
            plant = task.plant
            user_settings = settings_by_user.get(plant.user_id)
            if user_settings is None or not user_settings.notifications_enabled or not user_settings.fcm_token:
                continue

            enabled_at = as_utc(user_settings.notifications_enabled_at)
            if enabled_at and as_utc(task.next_due_on) < enabled_at:
                logger.debug(f"⏭️ Task {task.id} was already due before notifications were enabled")
                continue

            already_sent = await self.session.scalar(
                select(NotificationLogModel.id)
                .where(
                    NotificationLogModel.user_id == plant.user_id,
                    NotificationLogModel.sent_at >= plant.created_at,
                    NotificationLogModel.payload_json.contains(task.id),
                )
                .limit(1)
            )
            if already_sent:
                logger.debug(f"⏭️ Task {task.id} already notified")
                continue

            template = templates.get(task.task_key)
            label = template.label if template else task.task_key
            plant_name = notification_plant_name(plant)
            delivered = await self.send_notification(plant.user_id, {
                "title": f"🌱 Task Due: {label}",
                "body": f"Time to {label.lower()} {plant_name}!",
                "plant_id": plant.id,
                "plant_name": plant_name,
                "task_id": task.id,
                "task_key": task.task_key,
            })
            sent += int(delivered)

        logger.info(f"🔔 Sent {sent} due task notifications")
        return sent


def get_notification_service(db: AsyncSession = Depends(get_db_session)) -> NotificationService:
    """FastAPI dependency for NotificationService."""
    return NotificationService(db)


async def send_immediate_task_notifications_in_background(user_id: str, plant_id: str) -> None:
    """Background hook run after a plant is created."""
    try:
        async with database_session() as db:
            await NotificationService(db).send_immediate_task_notifications(user_id, plant_id)
    except Exception as e:
        logger.error(f"❌ Error sending immediate task notifications for plant {plant_id}: {e}")

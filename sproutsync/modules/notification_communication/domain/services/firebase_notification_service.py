# 📄 File: sproutsync/modules/notification_communication/domain/services/firebase_notification_service.py
# 🧭 Purpose (Layman Explanation):
# Sends the "your plant needs you" reminders for late chores, picks the wording that fits
# the person, and keeps a record of what was sent.
#
# 🧪 Purpose (Technical Summary):
# Care-reminder delivery for OverdueTask records: persona/variation message selection,
# FCM send with invalid-token cleanup and NotificationLog persistence on success.
#
# 🔗 Dependencies:
# - notification_communication FirebaseMessagingClient and message templates
# - SQLAlchemy async session
#
# 🔄 Connected Modules / Calls From:
# - notification_communication.domain.services.notification_scheduler

import json
import logging
from typing import Any, Dict, Optional

from firebase_admin import exceptions as firebase_exceptions
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from sproutsync.modules.care_management.domain.services.overdue_task_service import OverdueTask
from sproutsync.modules.notification_communication.domain.messages import (
    get_alternative_notification_message,
    get_notification_message,
)
from sproutsync.modules.notification_communication.infrastructure.database.models import NotificationLogModel
from sproutsync.modules.notification_communication.infrastructure.external.firebase_messaging import (
    FirebaseMessagingClient,
    get_messaging_client,
    is_invalid_token_error,
)
from sproutsync.modules.user_management.infrastructure.database.models import UserSettingsModel
from sproutsync.shared.config.settings import get_settings
from sproutsync.shared.core.exceptions import SproutSyncException

logger = logging.getLogger(__name__)

# Errors a single delivery may raise; anything else propagates
SEND_ERRORS = (firebase_exceptions.FirebaseError, SproutSyncException, ValueError)


class FirebaseNotificationService:
    """Delivers care reminders for overdue tasks."""

    def __init__(self, session: AsyncSession, client: Optional[FirebaseMessagingClient] = None):
        self.session = session
        self.client = client or get_messaging_client()
        settings = get_settings()
        self.frontend_url = settings.FRONTEND_URL
        self.icon = settings.NOTIFICATION_ICON

    async def send_notification(
        self,
        fcm_token: str,
        title: str,
        body: str,
        data: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        Send one push message.

        Returns:
            dict: ``success`` plus ``message_id`` or ``error``
        """
        try:
            message_id = await self.client.send(
                fcm_token,
                title,
                body,
                data=data,
                icon=self.icon,
                link=self.frontend_url,
            )
            return {"success": True, "message_id": message_id}
        except SEND_ERRORS as e:
            logger.error(f"❌ Error sending notification: {e}")
            if is_invalid_token_error(e):
                await self.remove_invalid_token(fcm_token)
            return {"success": False, "error": str(e)}

    async def send_care_reminder_notification(self, task: OverdueTask, notification_index: int = 0) -> Dict[str, Any]:
        """
        Remind the owner about one overdue task.

        Args:
            task: Overdue task with owner token and persona
            notification_index: 0 uses the primary wording, otherwise an alternative
        """
        if notification_index == 0:
            message = get_notification_message(task.plant_name, task.task_key, task.user_persona)
        else:
            message = get_alternative_notification_message(
                task.plant_name, task.task_key, task.user_persona, notification_index
            )

        data = {
            "plantId": task.plant_id,
            "taskId": task.id,
            "taskKey": task.task_key,
            "type": "care_reminder",
            "userId": task.user_id,
        }
        result = await self.send_notification(task.fcm_token, message["title"], message["body"], data)

        if result["success"]:
            payload = {"title": message["title"], "body": message["body"], "data": data}
            if result.get("message_id"):
                payload["messageId"] = result["message_id"]
            await self.log_notification(task.user_id, payload)
        return result

    async def remove_invalid_token(self, fcm_token: str) -> None:
        await self.session.execute(
            update(UserSettingsModel)
            .where(UserSettingsModel.fcm_token == fcm_token)
            .values(fcm_token=None)
            .execution_options(synchronize_session=False)
        )
        await self.session.flush()
        logger.info(f"🧹 Removed invalid FCM token {fcm_token[:20]}...")

    async def log_notification(self, user_id: str, payload: Dict[str, Any]) -> None:
        self.session.add(NotificationLogModel(
            user_id=user_id,
            payload_json=json.dumps(payload),
            channel="WEB_PUSH",
        ))
        await self.session.flush()

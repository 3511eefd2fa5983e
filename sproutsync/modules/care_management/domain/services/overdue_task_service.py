# 📄 File: sproutsync/modules/care_management/domain/services/overdue_task_service.py
# 🧭 Purpose (Layman Explanation):
# Finds every plant chore that is due or late for people who can receive phone reminders,
# so the reminder robot knows who to nudge and about what.
#
# 🧪 Purpose (Technical Summary):
# Read model over active PlantTaskModel rows with next_due_on <= now whose owner has an FCM
# token, flattened into OverdueTask records; grouping, statistics and completion helpers.
#
# 🔗 Dependencies:
# - SQLAlchemy async session
# - user_management UserSettingsModel, plant_management PlantModel
#
# 🔄 Connected Modules / Calls From:
# - notification_communication.notification_scheduler
# - background_jobs.tasks.care_reminders

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sproutsync.modules.care_management.domain.services.task_service import calculate_next_due_date
from sproutsync.modules.care_management.infrastructure.database.models import PlantTaskModel
from sproutsync.modules.plant_management.infrastructure.database.models import PlantModel
from sproutsync.modules.user_management.infrastructure.database.models import UserSettingsModel
from sproutsync.shared.infrastructure.database.connection import utc_now

logger = logging.getLogger(__name__)


@dataclass
class OverdueTask:
    """A due task together with what is needed to push a reminder for it."""

    id: str
    plant_id: str
    plant_name: str
    task_key: str
    next_due_on: datetime
    user_id: str
    user_persona: str
    fcm_token: str


class OverdueTaskService:
    """Queries for due and overdue care tasks across all users."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_overdue_tasks(self, user_id: Optional[str] = None) -> List[OverdueTask]:
        """
        Active tasks due at or before now whose owner has an FCM token, oldest first.

        Args:
            user_id: Restrict to a single owner
        """
        stmt = (
            select(PlantTaskModel, PlantModel, UserSettingsModel)
            .join(PlantModel, PlantModel.id == PlantTaskModel.plant_id)
            .join(UserSettingsModel, UserSettingsModel.user_id == PlantModel.user_id)
            .where(
                PlantTaskModel.active.is_(True),
                PlantTaskModel.next_due_on <= utc_now(),
                UserSettingsModel.fcm_token.is_not(None),
                UserSettingsModel.fcm_token != "",
            )
            .order_by(PlantTaskModel.next_due_on.asc())
        )
        if user_id:
            stmt = stmt.where(PlantModel.user_id == user_id)

        result = await self.session.execute(stmt)
        overdue = [
            OverdueTask(
                id=task.id,
                plant_id=plant.id,
                plant_name=plant.pet_name or plant.common_name or plant.botanical_name,
                task_key=task.task_key,
                next_due_on=task.next_due_on,
                user_id=plant.user_id,
                user_persona=settings.persona or "PRIMARY",
                fcm_token=settings.fcm_token,
            )
            for task, plant, settings in result.all()
        ]

        logger.info(f"🔎 Found {len(overdue)} overdue tasks for notification")
        return overdue

    async def get_overdue_tasks_grouped_by_user(self) -> Dict[str, List[OverdueTask]]:
        """Overdue tasks per user; insertion order follows the oldest due task."""
        grouped: Dict[str, List[OverdueTask]] = {}
        for task in await self.find_overdue_tasks():
            grouped.setdefault(task.user_id, []).append(task)
        return grouped

    async def get_overdue_task_stats(self) -> Dict[str, object]:
        overdue = await self.find_overdue_tasks()
        return {
            "total_overdue_tasks": len(overdue),
            "users_with_overdue_tasks": len({task.user_id for task in overdue}),
            "tasks_by_type": dict(Counter(task.task_key for task in overdue)),
        }

    async def is_task_overdue(self, task_id: str) -> bool:
        """False for missing or inactive tasks."""
        task = await self.session.get(PlantTaskModel, task_id)
        if task is None or not task.active:
            return False
        return task.next_due_on <= utc_now()

    @staticmethod
    def calculate_next_due_date(frequency_days: int, base: Optional[datetime] = None) -> datetime:
        return calculate_next_due_date(frequency_days, base)

    async def mark_task_completed(self, task_id: str) -> bool:
        """
        Complete a task from a notification action.

        Returns:
            False when the task does not exist
        """
        task = await self.session.get(PlantTaskModel, task_id)
        if task is None:
            logger.warning(f"⚠️ Cannot complete missing task {task_id}")
            return False

        now = utc_now()
        task.last_completed_on = now
        task.next_due_on = calculate_next_due_date(task.frequency_days, now)
        await self.session.flush()
        logger.info(f"✅ Task {task_id} completed; next due {task.next_due_on.isoformat()}")
        return True

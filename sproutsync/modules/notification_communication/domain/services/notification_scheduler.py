# 📄 File: sproutsync/modules/notification_communication/domain/services/notification_scheduler.py
# 🧭 Purpose (Layman Explanation):
# Every minute, looks for late plant chores and sends each person one reminder. If someone
# has several late chores, each round reminds them about a different one.
#
# 🧪 Purpose (Technical Summary):
# Round-robin overdue notification cycle: guarded by a shared in-progress lock, groups
# OverdueTask records by user, sends tasks[index % len(tasks)] with wording variation
# ``index`` and advances the shared index.
#
# 🔗 Dependencies:
# - care_management OverdueTaskService
# - notification_communication FirebaseNotificationService, SchedulerStateStore
#
# 🔄 Connected Modules / Calls From:
# - background_jobs.tasks.care_reminders (Celery beat, every minute)

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from sproutsync.modules.care_management.domain.services.overdue_task_service import (
    OverdueTask,
    OverdueTaskService,
)
from sproutsync.modules.notification_communication.domain.services.firebase_notification_service import (
    FirebaseNotificationService,
)
from sproutsync.modules.notification_communication.infrastructure.scheduler_state import (
    DEFAULT_LOCK_TTL_SECONDS,
    SchedulerStateStore,
)

logger = logging.getLogger(__name__)


class NotificationScheduler:
    """
    One reminder per user per cycle, rotating through their overdue tasks.

    Example:
        Cycle 0 with tasks [A, B] sends A (primary wording); cycle 1 sends B (variation 1);
        cycle 2 sends A again (variation 2).
    """

    def __init__(
        self,
        session: AsyncSession,
        state: SchedulerStateStore,
        sender: Optional[FirebaseNotificationService] = None,
        send_delay_seconds: float = 0.1,
        lock_ttl_seconds: int = DEFAULT_LOCK_TTL_SECONDS,
    ):
        self.session = session
        self.state = state
        self.overdue_tasks = OverdueTaskService(session)
        self.sender = sender or FirebaseNotificationService(session)
        self.send_delay_seconds = send_delay_seconds
        self.lock_ttl_seconds = lock_ttl_seconds

    async def process_overdue_tasks(self) -> Dict[str, Any]:
        """
        Run one notification cycle.

        Returns:
            dict: skipped flag, users reached, successful and failed counts, plus ``error``
            when the cycle itself failed
        """
        if not await self.state.acquire_lock(self.lock_ttl_seconds):
            logger.info("⏭️ Previous notification process still running, skipping this cycle")
            return {"skipped": True, "users": 0, "successful": 0, "failed": 0}

        started = time.monotonic()
        summary = {"skipped": False, "users": 0, "successful": 0, "failed": 0}
        try:
            tasks_by_user = await self.overdue_tasks.get_overdue_tasks_grouped_by_user()
            if not tasks_by_user:
                logger.info("🌿 No overdue tasks found")
                return summary

            stats = await self.overdue_tasks.get_overdue_task_stats()
            logger.info(f"📊 Overdue task stats: {stats}")

            index = await self.state.get_index()
            results = await self._send_to_users(tasks_by_user, index)

            summary["users"] = len(tasks_by_user)
            summary["successful"] = sum(1 for result in results if result["success"])
            summary["failed"] = len(results) - summary["successful"]
            logger.info(
                f"🔔 Notification process completed: {summary['successful']} successful, {summary['failed']} failed"
            )

            await self.state.increment_index()
            return summary
        except Exception as e:
            logger.error(f"❌ Error in notification process: {e}")
            summary["error"] = str(e)
            return summary
        finally:
            await self.state.release_lock()
            logger.debug(f"⏱️ Notification process took {(time.monotonic() - started) * 1000:.0f}ms")

    async def _send_to_users(self, tasks_by_user: Dict[str, List[OverdueTask]], index: int) -> List[Dict[str, Any]]:
        results = []
        for user_id, user_tasks in tasks_by_user.items():
            task = user_tasks[index % len(user_tasks)]
            logger.info(f"📨 Reminding user {user_id} about {task.task_key} ({task.plant_name})")
            try:
                result = await self.sender.send_care_reminder_notification(task, index)
            except Exception as e:
                logger.error(f"❌ Error sending notification to user {user_id}: {e}")
                result = {"success": False, "error": str(e)}
            results.append(result)

            if self.send_delay_seconds:
                await asyncio.sleep(self.send_delay_seconds)
        return results

    async def trigger_notification_process(self) -> Dict[str, Any]:
        """Run a cycle on demand."""
        logger.info("👆 Manually triggering notification process")
        return await self.process_overdue_tasks()

    async def get_notification_index(self) -> int:
        return await self.state.get_index()

    async def reset_notification_index(self) -> None:
        await self.state.reset_index()
        logger.info("🔄 Notification index reset to 0")

    async def get_status(self) -> Dict[str, Any]:
        return {
            "is_processing": await self.state.is_locked(),
            "notification_index": await self.state.get_index(),
        }

# 📄 File: sproutsync/background_jobs/tasks/care_reminders.py
#
# 🧭 Purpose (Layman Explanation):
# The reminder jobs that run every minute in the background: one tells people when a plant
# chore has just come due, the other keeps nudging them about chores that are running late.
#
# 🧪 Purpose (Technical Summary):
# Celery tasks scheduled by celery beat. Each task opens a fresh event loop with
# asyncio.run, brings up the database engine for that loop, runs the async service inside
# database_session() and disposes of the engine afterwards.
#
# 🔗 Dependencies:
# - celery (shared_task)
# - notification_communication NotificationService, NotificationScheduler
# - notification_communication RedisSchedulerStateStore
#
# 🔄 Connected Modules / Calls From:
# - celery_config.py (beat schedule and task routes)

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, TypeVar

from celery import shared_task
from sqlalchemy.ext.asyncio import AsyncSession

from sproutsync.modules.notification_communication.domain.services.notification_scheduler import (
    NotificationScheduler,
)
from sproutsync.modules.notification_communication.domain.services.notification_service import (
    NotificationService,
)
from sproutsync.modules.notification_communication.infrastructure.scheduler_state import (
    RedisSchedulerStateStore,
)
from sproutsync.shared.config.settings import get_settings
from sproutsync.shared.infrastructure.database.connection import close_database, init_database
from sproutsync.shared.infrastructure.database.session import (
    database_session,
    initialize_sessions,
    session_manager,
)
from sproutsync.shared.utils.logging import log_context, setup_logging

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _run_in_database_session(work: Callable[[AsyncSession], Awaitable[T]]) -> T:
    """Run ``work`` in one transaction on an engine bound to the current event loop."""
    await init_database()
    await initialize_sessions()
    try:
        async with database_session() as db:
            return await work(db)
    finally:
        await close_database()
        session_manager.reset()


# =============================================================================
# DUE TASK NOTIFICATIONS
# =============================================================================

async def send_due_task_notifications_async() -> int:
    """Notify owners about tasks that have just come due."""
    return await _run_in_database_session(
        lambda db: NotificationService(db).check_and_send_due_task_notifications()
    )


@shared_task(name="sproutsync.background_jobs.tasks.care_reminders.send_due_task_notifications")
def send_due_task_notifications() -> int:
    setup_logging()
    with log_context():
        sent = asyncio.run(send_due_task_notifications_async())
        logger.info(f"⏰ Due task notification run finished: {sent} sent")
        return sent


# =============================================================================
# OVERDUE TASK NOTIFICATIONS (ROUND-ROBIN)
# =============================================================================

async def process_overdue_task_notifications_async() -> Dict[str, Any]:
    """Run one round-robin overdue cycle with the Redis-backed scheduler state."""
    settings = get_settings()
    state = RedisSchedulerStateStore.from_settings()
    try:
        return await _run_in_database_session(
            lambda db: NotificationScheduler(
                db,
                state,
                send_delay_seconds=settings.NOTIFICATION_SEND_DELAY_SECONDS,
                lock_ttl_seconds=settings.SCHEDULER_LOCK_TIMEOUT_SECONDS,
            ).process_overdue_tasks()
        )
    finally:
        await state.close()


@shared_task(name="sproutsync.background_jobs.tasks.care_reminders.process_overdue_task_notifications")
def process_overdue_task_notifications() -> Dict[str, Any]:
    setup_logging()
    with log_context():
        summary = asyncio.run(process_overdue_task_notifications_async())
        if summary["skipped"]:
            logger.info("⏭️ Overdue notification cycle skipped, another worker holds the lock")
        else:
            logger.info(
                f"🔔 Overdue notification cycle finished: {summary['users']} users, "
                f"{summary['successful']} successful, {summary['failed']} failed"
            )
        return summary

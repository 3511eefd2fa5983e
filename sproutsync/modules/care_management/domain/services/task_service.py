# 📄 File: sproutsync/modules/care_management/domain/services/task_service.py
# 🧭 Purpose (Layman Explanation):
# Keeps every plant's care calendar honest: when a task is added it shows up for today, and
# when it is ticked off the next reminder is pushed forward by the right number of days.
#
# 🧪 Purpose (Technical Summary):
# Domain service over PlantTaskModel implementing the due-date scheduling rules (local start of
# day for plant-scoped create/complete, absolute now + frequency for the global complete),
# filtered listings, upcoming and overdue windows.
#
# 🔗 Dependencies:
# - SQLAlchemy async session
# - sproutsync.shared.utils.timezone (user-local midnight arithmetic)
#
# 🔄 Connected Modules / Calls From:
# - care_management.presentation.api.v1.plant_tasks / tasks
# - calendar_sync.task_sync_service (task lookups)

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from sproutsync.modules.care_management.infrastructure.database.models import PlantTaskModel
from sproutsync.modules.plant_management.infrastructure.database.models import PlantModel
from sproutsync.shared.core.exceptions import NotFoundError
from sproutsync.shared.infrastructure.database.connection import utc_now
from sproutsync.shared.infrastructure.database.session import get_db_session
from sproutsync.shared.utils.timezone import (
    as_utc,
    start_of_day_in_timezone,
    start_of_day_plus_days_in_timezone,
)

logger = logging.getLogger(__name__)


def calculate_next_due_date(frequency_days: int, base: Optional[datetime] = None) -> datetime:
    """
    Absolute next due moment: ``base`` (default now) plus ``frequency_days`` days.

    Example:
        >>> calculate_next_due_date(3, datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc))
        datetime.datetime(2024, 5, 4, 9, 30, tzinfo=datetime.timezone.utc)
    """
    return as_utc(base or utc_now()) + timedelta(days=frequency_days)


class TaskService:
    """
    Care task scheduling.

    Scheduling rules:
    - A task created on a plant is due at the start of today in the user's timezone
    - Completing it from the plant page moves it to local midnight + frequency days
    - Completing it from the global task list moves it to now + frequency days
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    def _user_tasks(self, user_id: str):
        return (
            select(PlantTaskModel)
            .join(PlantModel, PlantModel.id == PlantTaskModel.plant_id)
            .where(PlantModel.user_id == user_id)
            .options(selectinload(PlantTaskModel.plant))
        )

    # =========================================================================
    # PLANT-SCOPED
    # =========================================================================

    async def list_plant_tasks(
        self,
        plant_id: str,
        offset: int,
        limit: int,
        task_key: Optional[str] = None,
    ) -> Tuple[List[PlantTaskModel], int]:
        """One page of a plant's tasks, soonest due first."""
        conditions = [PlantTaskModel.plant_id == plant_id]
        if task_key:
            conditions.append(PlantTaskModel.task_key == task_key)

        result = await self.session.execute(
            select(PlantTaskModel)
            .where(*conditions)
            .order_by(PlantTaskModel.next_due_on.asc())
            .offset(offset)
            .limit(limit)
        )
        total = await self.session.scalar(select(func.count(PlantTaskModel.id)).where(*conditions))
        return list(result.scalars().all()), total or 0

    async def get_plant_task(self, plant_id: str, task_id: str) -> PlantTaskModel:
        """
        Raises:
            NotFoundError: No such task on this plant
        """
        result = await self.session.execute(
            select(PlantTaskModel).where(
                PlantTaskModel.id == task_id,
                PlantTaskModel.plant_id == plant_id,
            )
        )
        task = result.scalar_one_or_none()
        if task is None:
            raise NotFoundError("Task not found", resource_type="task", resource_id=task_id)
        return task

    async def create_plant_task(
        self,
        plant_id: str,
        task_key: str,
        frequency_days: int,
        user_timezone: str,
    ) -> PlantTaskModel:
        """Create a task that is due at the start of today in ``user_timezone``."""
        task = PlantTaskModel(
            plant_id=plant_id,
            task_key=task_key,
            frequency_days=frequency_days,
            next_due_on=start_of_day_in_timezone(user_timezone, utc_now()),
            active=True,
        )
        self.session.add(task)
        await self.session.flush()
        logger.info(f"🗓️ Created {task_key} task {task.id} for plant {plant_id} due {task.next_due_on.isoformat()}")
        return task

    async def complete_plant_task(self, task: PlantTaskModel, user_timezone: str) -> PlantTaskModel:
        """Mark done now; next due at local midnight ``frequency_days`` days ahead."""
        now = utc_now()
        task.last_completed_on = now
        task.next_due_on = start_of_day_plus_days_in_timezone(user_timezone, task.frequency_days, now)
        await self.session.flush()
        logger.info(f"✅ Completed task {task.id}; next due {task.next_due_on.isoformat()} ({user_timezone})")
        return task

    async def reschedule_task(self, task: PlantTaskModel, next_due_on: datetime) -> PlantTaskModel:
        task.next_due_on = as_utc(next_due_on)
        await self.session.flush()
        logger.info(f"📆 Rescheduled task {task.id} to {task.next_due_on.isoformat()}")
        return task

    async def update_task(self, task: PlantTaskModel, changes: Dict[str, Any]) -> PlantTaskModel:
        """Apply a partial update; datetimes are normalized to UTC."""
        for field, value in changes.items():
            if isinstance(value, datetime):
                value = as_utc(value)
            setattr(task, field, value)
        await self.session.flush()
        return task

    async def delete_task(self, task: PlantTaskModel) -> None:
        await self.session.delete(task)
        await self.session.flush()
        logger.info(f"🗑️ Deleted task {task.id}")

    # =========================================================================
    # USER-WIDE
    # =========================================================================

    async def list_user_tasks(
        self,
        user_id: str,
        plant_id: Optional[str] = None,
        task_key: Optional[str] = None,
        completed: Optional[bool] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[PlantTaskModel]:
        """
        Every task on the user's plants, soonest due first.

        Args:
            completed: True for tasks done at least once, False for never done
            start_date / end_date: Inclusive bounds on next_due_on
        """
        stmt = self._user_tasks(user_id)
        if plant_id:
            stmt = stmt.where(PlantTaskModel.plant_id == plant_id)
        if task_key:
            stmt = stmt.where(PlantTaskModel.task_key == task_key)
        if completed is True:
            stmt = stmt.where(PlantTaskModel.last_completed_on.is_not(None))
        elif completed is False:
            stmt = stmt.where(PlantTaskModel.last_completed_on.is_(None))
        if start_date:
            stmt = stmt.where(PlantTaskModel.next_due_on >= as_utc(start_date))
        if end_date:
            stmt = stmt.where(PlantTaskModel.next_due_on <= as_utc(end_date))

        result = await self.session.execute(stmt.order_by(PlantTaskModel.next_due_on.asc()))
        return list(result.scalars().all())

    async def list_upcoming_tasks(self, user_id: str, days: int = 7) -> List[PlantTaskModel]:
        """Active tasks due between now and ``days`` days from now."""
        now = utc_now()
        result = await self.session.execute(
            self._user_tasks(user_id)
            .where(
                PlantTaskModel.active.is_(True),
                PlantTaskModel.next_due_on >= now,
                PlantTaskModel.next_due_on <= now + timedelta(days=days),
            )
            .order_by(PlantTaskModel.next_due_on.asc())
        )
        return list(result.scalars().all())

    async def list_overdue_tasks(self, user_id: str) -> List[PlantTaskModel]:
        """Active tasks whose due moment has passed."""
        result = await self.session.execute(
            self._user_tasks(user_id)
            .where(PlantTaskModel.active.is_(True), PlantTaskModel.next_due_on < utc_now())
            .order_by(PlantTaskModel.next_due_on.asc())
        )
        return list(result.scalars().all())

    async def get_user_task(self, user_id: str, task_id: str) -> PlantTaskModel:
        """
        Raises:
            NotFoundError: Missing or on someone else's plant
        """
        result = await self.session.execute(
            self._user_tasks(user_id)
            .where(PlantTaskModel.id == task_id)
            .execution_options(populate_existing=True)
        )
        task = result.scalar_one_or_none()
        if task is None:
            raise NotFoundError("Task not found", resource_type="task", resource_id=task_id)
        return task

    async def create_task(
        self,
        user_id: str,
        plant_id: str,
        task_key: str,
        frequency_days: int,
        next_due_on: datetime,
    ) -> PlantTaskModel:
        """
        Create a task with an explicit due date on an owned plant.

        Raises:
            NotFoundError: Plant missing or not owned
        """
        owner = await self.session.scalar(select(PlantModel.user_id).where(PlantModel.id == plant_id))
        if owner != user_id:
            raise NotFoundError("Plant not found", resource_type="plant", resource_id=plant_id)

        task = PlantTaskModel(
            plant_id=plant_id,
            task_key=task_key,
            frequency_days=frequency_days,
            next_due_on=as_utc(next_due_on),
            active=True,
        )
        self.session.add(task)
        await self.session.flush()
        logger.info(f"🗓️ Created {task_key} task {task.id} for plant {plant_id}")
        return await self.get_user_task(user_id, task.id)

    async def complete_task(self, task: PlantTaskModel) -> PlantTaskModel:
        """Mark done now; next due exactly ``frequency_days`` days from now."""
        now = utc_now()
        task.last_completed_on = now
        task.next_due_on = calculate_next_due_date(task.frequency_days, now)
        await self.session.flush()
        logger.info(f"✅ Completed task {task.id}; next due {task.next_due_on.isoformat()}")
        return task


def get_task_service(db: AsyncSession = Depends(get_db_session)) -> TaskService:
    """FastAPI dependency for TaskService."""
    return TaskService(db)

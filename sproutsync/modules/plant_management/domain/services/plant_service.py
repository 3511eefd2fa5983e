# 📄 File: sproutsync/modules/plant_management/domain/services/plant_service.py
# 🧭 Purpose (Layman Explanation):
# The plant "librarian": adds new plants with their care routine, finds them again by name
# or tag, edits their details and clears out everything belonging to a plant when it is removed.
#
# 🧪 Purpose (Technical Summary):
# Domain service over PlantModel and TaskTemplateModel: default template seeding, filtered
# listing with eager-loaded tags/tasks/photos and note/photo counts, creation with initial
# care tasks and per-owner slugs, partial update and multi-table delete within the request
# transaction.
#
# 🔗 Dependencies:
# - SQLAlchemy async session (select, delete, func)
# - sproutsync.shared.utils.slugify, sproutsync.shared.utils.timezone
# - sproutsync.shared.infrastructure.storage.cloudinary_storage (image cleanup)
#
# 🔄 Connected Modules / Calls From:
# - plant_management.presentation.api.v1.plants
# - plant_management.presentation.dependencies (ownership checks)

import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from sproutsync.modules.care_management.infrastructure.database.models import PlantTaskModel
from sproutsync.modules.plant_management.infrastructure.database.models import (
    NoteModel,
    PhotoModel,
    PlantModel,
    PlantTagModel,
    PlantTrackingModel,
    TagModel,
    TaskTemplateModel,
)
from sproutsync.shared.core.exceptions import ExternalServiceError, NotFoundError, ValidationError
from sproutsync.shared.infrastructure.database.connection import utc_now
from sproutsync.shared.infrastructure.storage.cloudinary_storage import CloudinaryStorage
from sproutsync.shared.utils.slugify import generate_plant_slug
from sproutsync.shared.utils.timezone import as_utc

logger = logging.getLogger(__name__)

DEFAULT_TASK_TEMPLATES = (
    {"key": "watering", "label": "Water", "color_hex": "#3B82F6", "default_frequency_days": 3},
    {"key": "fertilizing", "label": "Fertilizing", "color_hex": "#8B5CF6", "default_frequency_days": 14},
    {"key": "pruning", "label": "Pruning", "color_hex": "#10B981", "default_frequency_days": 30},
    {"key": "spraying", "label": "Spraying", "color_hex": "#F59E0B", "default_frequency_days": 7},
    {"key": "sunlightRotation", "label": "Sunlight Rotation", "color_hex": "#F97316", "default_frequency_days": 14},
)


def plant_summary_options() -> Tuple:
    """Eager-load options for list views: tags, tasks and photos."""
    return (
        selectinload(PlantModel.plant_tags).selectinload(PlantTagModel.tag),
        selectinload(PlantModel.tasks),
        selectinload(PlantModel.photos),
    )


def plant_detail_options() -> Tuple:
    """Eager-load options for the single plant view, adding notes."""
    return plant_summary_options() + (selectinload(PlantModel.notes),)


class PlantService:
    """
    Domain service for the plant collection of a single owner.

    Every query is scoped by ``user_id``; a plant that exists but belongs to
    someone else behaves exactly like a missing one.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # =========================================================================
    # TASK TEMPLATES
    # =========================================================================

    async def list_task_templates(self) -> List[TaskTemplateModel]:
        """All templates ordered by key, seeding the defaults when the table is empty."""
        result = await self.session.execute(select(TaskTemplateModel).order_by(TaskTemplateModel.key))
        templates = list(result.scalars().all())
        if templates:
            return templates

        logger.info("🌱 No task templates found, creating defaults...")
        for template in DEFAULT_TASK_TEMPLATES:
            self.session.add(TaskTemplateModel(**template))
        await self.session.flush()

        result = await self.session.execute(select(TaskTemplateModel).order_by(TaskTemplateModel.key))
        return list(result.scalars().all())

    async def get_template_map(self) -> Dict[str, TaskTemplateModel]:
        """Templates keyed by task key."""
        return {template.key: template for template in await self.list_task_templates()}

    # =========================================================================
    # QUERIES
    # =========================================================================

    async def find_owned_plant(self, plant_id: str, user_id: str) -> Optional[PlantModel]:
        """Plant row without relationships, or None if missing or not owned."""
        result = await self.session.execute(
            select(PlantModel).where(PlantModel.id == plant_id, PlantModel.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_plant(self, plant_id: str, user_id: str) -> PlantModel:
        """
        Plant with tags, tasks, notes and photos loaded.

        Raises:
            NotFoundError: Missing or owned by another user
        """
        result = await self.session.execute(
            select(PlantModel)
            .where(PlantModel.id == plant_id, PlantModel.user_id == user_id)
            .options(*plant_detail_options())
            .execution_options(populate_existing=True)
        )
        plant = result.scalar_one_or_none()
        if plant is None:
            raise NotFoundError("Plant not found", resource_type="plant", resource_id=plant_id)
        return plant

    async def list_plants(
        self,
        user_id: str,
        search: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> List[PlantModel]:
        """
        The owner's plants, newest first.

        Args:
            user_id: Owner
            search: Case-insensitive substring of pet, common or botanical name, or type
            tag: Tag name, matched case-insensitively
        """
        stmt = select(PlantModel).where(PlantModel.user_id == user_id)

        if search:
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(
                or_(
                    PlantModel.pet_name.ilike(pattern),
                    PlantModel.common_name.ilike(pattern),
                    PlantModel.botanical_name.ilike(pattern),
                    PlantModel.type.ilike(pattern),
                )
            )

        if tag:
            stmt = stmt.where(
                PlantModel.plant_tags.any(
                    PlantTagModel.tag.has(func.lower(TagModel.name) == tag.strip().lower())
                )
            )

        result = await self.session.execute(
            stmt.options(*plant_summary_options())
            .order_by(PlantModel.created_at.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def count_children(self, plant_ids: List[str]) -> Dict[str, Dict[str, int]]:
        """Note and photo counts per plant id."""
        counts = {plant_id: {"notes": 0, "photos": 0} for plant_id in plant_ids}
        if not plant_ids:
            return counts

        for model, key in ((NoteModel, "notes"), (PhotoModel, "photos")):
            result = await self.session.execute(
                select(model.plant_id, func.count(model.id))
                .where(model.plant_id.in_(plant_ids))
                .group_by(model.plant_id)
            )
            for plant_id, total in result.all():
                counts[plant_id][key] = total

        return counts

    # =========================================================================
    # COMMANDS
    # =========================================================================

    async def create_plant(
        self,
        user_id: str,
        values: Dict[str, Any],
        care_tasks: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> PlantModel:
        """
        Create a plant and its initial care tasks.

        Each care task is first due ``frequency`` days after its last completion,
        or after now when it was never done.

        Args:
            user_id: Owner
            values: Plant column values
            care_tasks: Map of task key to {frequency, last_completed_on}

        Raises:
            ValidationError: Unknown task key
        """
        templates = await self.get_template_map()
        now = utc_now()

        new_tasks: List[PlantTaskModel] = []
        for task_key, task in (care_tasks or {}).items():
            if not task:
                continue
            if task_key not in templates:
                raise ValidationError(
                    f"Invalid task key: {task_key}. Available keys: {', '.join(templates)}",
                    field="care_tasks",
                )
            last_completed_on = as_utc(task.get("last_completed_on"))
            frequency = task["frequency"]
            new_tasks.append(
                PlantTaskModel(
                    task_key=task_key,
                    frequency_days=frequency,
                    next_due_on=(last_completed_on or now) + timedelta(days=frequency),
                    last_completed_on=last_completed_on,
                )
            )

        slug_source = values.get("pet_name") or values.get("common_name") or ""
        plant = PlantModel(
            user_id=user_id,
            slug=await generate_plant_slug(self.session, slug_source, user_id),
            **values,
        )
        self.session.add(plant)
        await self.session.flush()

        for task in new_tasks:
            task.plant_id = plant.id
            self.session.add(task)
        await self.session.flush()

        logger.info(f"🪴 Created plant {plant.id} ({plant.slug}) with {len(new_tasks)} tasks for user {user_id}")
        return await self.get_plant(plant.id, user_id)

    async def update_plant(self, plant_id: str, user_id: str, changes: Dict[str, Any]) -> PlantModel:
        """Apply a partial update; the slug is kept so shared links stay valid."""
        plant = await self.find_owned_plant(plant_id, user_id)
        if plant is None:
            raise NotFoundError("Plant not found", resource_type="plant", resource_id=plant_id)

        for field, value in changes.items():
            setattr(plant, field, value)
        await self.session.flush()

        logger.info(f"✏️ Updated plant {plant_id}: {sorted(changes)}")
        return await self.get_plant(plant_id, user_id)

    async def delete_plant(self, plant: PlantModel, storage: Optional[CloudinaryStorage] = None) -> List[str]:
        """
        Delete a plant and everything hanging off it.

        Cloudinary images go first and failures are only logged. The row deletes
        share the caller's transaction.

        Returns:
            Calendar event ids of the removed tasks, for best-effort cleanup
        """
        if storage is not None and storage.is_configured:
            public_ids = [photo.cloudinary_public_id for photo in plant.photos]
            tracking_ids = await self.session.execute(
                select(PlantTrackingModel.cloudinary_public_id).where(
                    PlantTrackingModel.plant_id == plant.id,
                    PlantTrackingModel.cloudinary_public_id.is_not(None),
                )
            )
            public_ids.extend(tracking_ids.scalars().all())

            for public_id in public_ids:
                try:
                    await storage.delete_image(public_id)
                except ExternalServiceError as e:
                    logger.error(f"❌ Failed to delete image from Cloudinary: {public_id}: {e.message}")

        event_ids = [task.google_calendar_event_id for task in plant.tasks if task.google_calendar_event_id]

        for model in (PlantTaskModel, PlantTagModel, NoteModel, PhotoModel, PlantTrackingModel):
            await self.session.execute(
                delete(model)
                .where(model.plant_id == plant.id)
                .execution_options(synchronize_session=False)
            )
        await self.session.execute(
            delete(PlantModel)
            .where(PlantModel.id == plant.id)
            .execution_options(synchronize_session=False)
        )
        await self.session.flush()

        logger.info(f"🗑️ Deleted plant {plant.id} and its related records")
        return event_ids

# 📄 File: sproutsync/modules/plant_management/domain/services/tag_service.py
# 🧭 Purpose (Layman Explanation):
# Manages the labels a person sticks on their plants and which plant carries which label.
#
# 🧪 Purpose (Technical Summary):
# Domain service for TagModel CRUD (paginated with plant counts) and PlantTagModel
# assignment with ownership and duplicate checks.
#
# 🔗 Dependencies:
# - SQLAlchemy async session
#
# 🔄 Connected Modules / Calls From:
# - plant_management.presentation.api.v1.tags / plant_tags
# - plant_gifting.gift_service (tag reuse on accept)

import logging
from typing import Any, Dict, List, Optional, Tuple

from fastapi import Depends
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from sproutsync.modules.plant_management.infrastructure.database.models import PlantTagModel, TagModel
from sproutsync.shared.core.exceptions import BusinessRuleViolationError, NotFoundError
from sproutsync.shared.infrastructure.database.session import get_db_session

logger = logging.getLogger(__name__)


class TagService:
    """Tags belong to a user and are linked to plants through PlantTagModel."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_tags(self, user_id: str, offset: int, limit: int) -> Tuple[List[Tuple[TagModel, int]], int]:
        """
        One page of the user's tags ordered by name.

        Returns:
            ([(tag, plant_count), ...], total)
        """
        plant_count = (
            select(func.count(PlantTagModel.id))
            .where(PlantTagModel.tag_id == TagModel.id)
            .correlate(TagModel)
            .scalar_subquery()
        )
        result = await self.session.execute(
            select(TagModel, plant_count)
            .where(TagModel.user_id == user_id)
            .order_by(TagModel.name)
            .offset(offset)
            .limit(limit)
        )
        rows = [(tag, count) for tag, count in result.all()]

        total = await self.session.scalar(
            select(func.count(TagModel.id)).where(TagModel.user_id == user_id)
        )
        return rows, total or 0

    async def get_tag(self, tag_id: str, user_id: str, with_plants: bool = False) -> TagModel:
        """
        Owned tag, optionally with its plants loaded.

        Raises:
            NotFoundError: Missing or owned by another user
        """
        stmt = select(TagModel).where(TagModel.id == tag_id, TagModel.user_id == user_id)
        if with_plants:
            stmt = stmt.options(
                selectinload(TagModel.plant_tags).selectinload(PlantTagModel.plant)
            ).execution_options(populate_existing=True)

        tag = (await self.session.execute(stmt)).scalar_one_or_none()
        if tag is None:
            raise NotFoundError("Tag not found", resource_type="tag", resource_id=tag_id)
        return tag

    async def create_tag(self, user_id: str, name: str, color_hex: Optional[str] = None) -> TagModel:
        tag = TagModel(user_id=user_id, name=name, color_hex=color_hex)
        self.session.add(tag)
        await self.session.flush()
        logger.info(f"🏷️ Created tag '{name}' for user {user_id}")
        return tag

    async def update_tag(self, tag_id: str, user_id: str, changes: Dict[str, Any]) -> TagModel:
        tag = await self.get_tag(tag_id, user_id)
        for field, value in changes.items():
            setattr(tag, field, value)
        await self.session.flush()
        return tag

    async def delete_tag(self, tag_id: str, user_id: str) -> None:
        """Unlink the tag from every plant, then delete it."""
        tag = await self.get_tag(tag_id, user_id)
        await self.session.execute(
            delete(PlantTagModel)
            .where(PlantTagModel.tag_id == tag.id)
            .execution_options(synchronize_session=False)
        )
        await self.session.delete(tag)
        await self.session.flush()
        logger.info(f"🗑️ Deleted tag {tag_id}")

    # =========================================================================
    # PLANT ASSIGNMENT
    # =========================================================================

    async def list_plant_tags(self, plant_id: str) -> List[TagModel]:
        """Tags linked to a plant, ordered by name."""
        result = await self.session.execute(
            select(TagModel)
            .join(PlantTagModel, PlantTagModel.tag_id == TagModel.id)
            .where(PlantTagModel.plant_id == plant_id)
            .order_by(TagModel.name)
        )
        return list(result.scalars().all())

    async def assign_tag(self, plant_id: str, tag_id: str, user_id: str) -> TagModel:
        """
        Link an owned tag to a plant.

        Raises:
            NotFoundError: Tag missing or not owned
            BusinessRuleViolationError: Already linked
        """
        tag = await self.get_tag(tag_id, user_id)

        existing = await self.session.scalar(
            select(PlantTagModel.id).where(
                PlantTagModel.plant_id == plant_id,
                PlantTagModel.tag_id == tag_id,
            )
        )
        if existing is not None:
            raise BusinessRuleViolationError("Tag is already assigned to this plant", rule="unique_plant_tag")

        self.session.add(PlantTagModel(plant_id=plant_id, tag_id=tag_id))
        await self.session.flush()
        logger.info(f"🏷️ Assigned tag {tag_id} to plant {plant_id}")
        return tag

    async def unassign_tag(self, plant_id: str, tag_id: str) -> None:
        """
        Raises:
            NotFoundError: The tag is not linked to the plant
        """
        result = await self.session.execute(
            select(PlantTagModel).where(
                PlantTagModel.plant_id == plant_id,
                PlantTagModel.tag_id == tag_id,
            )
        )
        link = result.scalar_one_or_none()
        if link is None:
            raise NotFoundError("Tag is not assigned to this plant", resource_type="plant_tag", resource_id=tag_id)

        await self.session.delete(link)
        await self.session.flush()
        logger.info(f"🏷️ Unassigned tag {tag_id} from plant {plant_id}")


def get_tag_service(db: AsyncSession = Depends(get_db_session)) -> TagService:
    """FastAPI dependency for TagService."""
    return TagService(db)

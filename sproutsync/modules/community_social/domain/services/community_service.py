# 📄 File: sproutsync/modules/community_social/domain/services/community_service.py
# 🧭 Purpose (Layman Explanation):
# Builds the public pages people can share (one plant, or a whole garden) and records the
# likes and comments visitors leave on them.
#
# 🧪 Purpose (Technical Summary):
# Public plant and garden profiles resolved by username and plant slug, decorated with
# health score, care streak, badge tier and days thriving. Appreciations toggle on the
# (target, user) unique pair; comments are appended.
#
# 🔗 Dependencies:
# - SQLAlchemy async session
# - shared.utils.health_score
#
# 🔄 Connected Modules / Calls From:
# - community_social.presentation.api.v1.public
# - community_social.presentation.api.v1.gardens

import logging
from typing import Any, Dict, List, Type

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from sproutsync.modules.care_management.presentation.api.schemas.task_schemas import PlantTaskResponse
from sproutsync.modules.community_social.infrastructure.database.models import (
    GardenAppreciationModel,
    GardenCommentModel,
    PlantAppreciationModel,
    PlantCommentModel,
)
from sproutsync.modules.community_social.presentation.api.schemas.community_schemas import (
    AppreciationSummary,
    CommentResponse,
    GardenPlantSummary,
    PublicOwner,
    PublicPlantSummary,
    PublicUserSummary,
)
from sproutsync.modules.plant_management.infrastructure.database.models import PlantModel
from sproutsync.modules.plant_management.presentation.api.schemas.journal_schemas import PhotoResponse
from sproutsync.modules.user_management.infrastructure.database.models import UserModel
from sproutsync.shared.core.exceptions import NotFoundError
from sproutsync.shared.infrastructure.database.connection import utc_now
from sproutsync.shared.infrastructure.database.session import get_db_session
from sproutsync.shared.utils.health_score import (
    calculate_care_streak,
    calculate_health_score,
    get_badge_tier,
)
from sproutsync.shared.utils.timezone import as_utc

logger = logging.getLogger(__name__)


def _latest_photo(plant: PlantModel):
    photos = sorted(plant.photos, key=lambda photo: photo.taken_at, reverse=True)
    return PhotoResponse.model_validate(photos[0]) if photos else None


class CommunityService:
    """Public profiles, appreciations and comments."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    async def _get_user_by_username(self, username: str) -> UserModel:
        user = await self.session.scalar(select(UserModel).where(UserModel.username == username))
        if user is None:
            raise NotFoundError("User not found", resource_type="user")
        return user

    async def _require_user(self, user_id: str) -> UserModel:
        user = await self.session.get(UserModel, user_id)
        if user is None:
            raise NotFoundError("Garden owner not found", resource_type="user", resource_id=user_id)
        return user

    async def _require_plant(self, plant_id: str) -> PlantModel:
        plant = await self.session.get(PlantModel, plant_id)
        if plant is None:
            raise NotFoundError("Plant not found", resource_type="plant", resource_id=plant_id)
        return plant

    async def _appreciations(self, model: Type, column, target_id: str) -> AppreciationSummary:
        result = await self.session.execute(
            select(model)
            .where(column == target_id)
            .options(selectinload(model.user))
            .order_by(model.created_at.desc())
        )
        rows = list(result.scalars().all())
        return AppreciationSummary(
            count=len(rows),
            users=[PublicUserSummary.model_validate(row.user) for row in rows],
        )

    async def _comments(self, model: Type, column, target_id: str) -> List[CommentResponse]:
        result = await self.session.execute(
            select(model)
            .where(column == target_id)
            .options(selectinload(model.user))
            .order_by(model.created_at.desc())
        )
        return [CommentResponse.model_validate(row) for row in result.scalars().all()]

    # =========================================================================
    # PUBLIC PROFILES
    # =========================================================================

    async def get_public_plant(self, username: str, plant_slug: str) -> Dict[str, Any]:
        """
        Public profile of one plant.

        Raises:
            NotFoundError: Unknown username ("User not found") or slug ("Plant not found")
        """
        owner = await self._get_user_by_username(username)

        result = await self.session.execute(
            select(PlantModel)
            .where(PlantModel.user_id == owner.id, PlantModel.slug == plant_slug)
            .options(selectinload(PlantModel.tasks), selectinload(PlantModel.photos))
        )
        plant = result.scalar_one_or_none()
        if plant is None:
            raise NotFoundError("Plant not found", resource_type="plant")

        active_tasks = sorted((task for task in plant.tasks if task.active), key=lambda task: task.task_key)
        care_streak = calculate_care_streak(active_tasks, plant.created_at)
        days_thriving = (utc_now() - as_utc(plant.created_at)).days

        summary = PublicPlantSummary.model_validate(plant)
        summary.photo = _latest_photo(plant)

        return {
            "plant": summary.model_dump(mode="json"),
            "owner": PublicOwner.model_validate(owner).model_dump(),
            "tasks": [PlantTaskResponse.model_validate(task).model_dump(mode="json") for task in active_tasks],
            "health_score": calculate_health_score(active_tasks),
            "care_streak": care_streak,
            "days_thriving": days_thriving,
            "badge": get_badge_tier(care_streak).to_dict(),
            "appreciations": (
                await self._appreciations(PlantAppreciationModel, PlantAppreciationModel.plant_id, plant.id)
            ).model_dump(),
            "comments": [
                comment.model_dump(mode="json")
                for comment in await self._comments(PlantCommentModel, PlantCommentModel.plant_id, plant.id)
            ],
        }

    async def get_public_garden(self, username: str) -> Dict[str, Any]:
        """Every plant the user still keeps, newest first, with garden-level social data."""
        owner = await self._get_user_by_username(username)

        result = await self.session.execute(
            select(PlantModel)
            .where(PlantModel.user_id == owner.id, PlantModel.is_gifted.is_(False))
            .options(selectinload(PlantModel.tasks), selectinload(PlantModel.photos))
            .order_by(PlantModel.created_at.desc())
        )
        plants = []
        for plant in result.scalars().all():
            summary = GardenPlantSummary.model_validate({
                **PublicPlantSummary.model_validate(plant).model_dump(),
                "health_score": calculate_health_score(plant.tasks),
            })
            summary.photo = _latest_photo(plant)
            plants.append(summary.model_dump(mode="json"))

        return {
            "owner": PublicOwner.model_validate(owner).model_dump(),
            "plants": plants,
            "appreciations": (
                await self._appreciations(
                    GardenAppreciationModel, GardenAppreciationModel.garden_owner_id, owner.id
                )
            ).model_dump(),
            "comments": [
                comment.model_dump(mode="json")
                for comment in await self._comments(
                    GardenCommentModel, GardenCommentModel.garden_owner_id, owner.id
                )
            ],
        }

    # =========================================================================
    # APPRECIATIONS & COMMENTS
    # =========================================================================

    async def toggle_garden_appreciation(self, garden_owner_id: str, user_id: str) -> bool:
        """
        Add or remove the caller's appreciation of a garden.

        Returns:
            bool: True when the garden is now appreciated
        """
        await self._require_user(garden_owner_id)
        existing = await self.session.scalar(
            select(GardenAppreciationModel).where(
                GardenAppreciationModel.garden_owner_id == garden_owner_id,
                GardenAppreciationModel.user_id == user_id,
            )
        )
        if existing is not None:
            await self.session.delete(existing)
            await self.session.flush()
            logger.info(f"💔 User {user_id} removed appreciation of garden {garden_owner_id}")
            return False

        self.session.add(GardenAppreciationModel(garden_owner_id=garden_owner_id, user_id=user_id))
        await self.session.flush()
        logger.info(f"💚 User {user_id} appreciated garden {garden_owner_id}")
        return True

    async def add_garden_comment(self, garden_owner_id: str, user_id: str, comment: str) -> CommentResponse:
        await self._require_user(garden_owner_id)
        row = GardenCommentModel(garden_owner_id=garden_owner_id, user_id=user_id, comment=comment)
        self.session.add(row)
        await self.session.flush()
        await self.session.refresh(row, attribute_names=["user"])
        logger.info(f"💬 User {user_id} commented on garden {garden_owner_id}")
        return CommentResponse.model_validate(row)

    async def toggle_plant_appreciation(self, plant_id: str, user_id: str) -> bool:
        await self._require_plant(plant_id)
        existing = await self.session.scalar(
            select(PlantAppreciationModel).where(
                PlantAppreciationModel.plant_id == plant_id,
                PlantAppreciationModel.user_id == user_id,
            )
        )
        if existing is not None:
            await self.session.delete(existing)
            await self.session.flush()
            logger.info(f"💔 User {user_id} removed appreciation of plant {plant_id}")
            return False

        self.session.add(PlantAppreciationModel(plant_id=plant_id, user_id=user_id))
        await self.session.flush()
        logger.info(f"💚 User {user_id} appreciated plant {plant_id}")
        return True

    async def add_plant_comment(self, plant_id: str, user_id: str, comment: str) -> CommentResponse:
        await self._require_plant(plant_id)
        row = PlantCommentModel(plant_id=plant_id, user_id=user_id, comment=comment)
        self.session.add(row)
        await self.session.flush()
        await self.session.refresh(row, attribute_names=["user"])
        logger.info(f"💬 User {user_id} commented on plant {plant_id}")
        return CommentResponse.model_validate(row)


def get_community_service(db: AsyncSession = Depends(get_db_session)) -> CommunityService:
    """FastAPI dependency for CommunityService."""
    return CommunityService(db)

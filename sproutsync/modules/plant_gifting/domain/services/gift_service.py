# 📄 File: sproutsync/modules/plant_gifting/domain/services/gift_service.py
# 🧭 Purpose (Layman Explanation):
# Lets someone give a plant to a friend through a secret link. When the friend accepts,
# they get their own copy of the plant with its chores, photos and labels.
#
# 🧪 Purpose (Technical Summary):
# PlantGiftModel lifecycle (PENDING -> ACCEPTED / EXPIRED / CANCELLED). Acceptance copies
# the plant, its tasks (due at the start of the receiver's day), photos and tags (reusing
# same-named receiver tags) inside the request transaction.
#
# 🔗 Dependencies:
# - SQLAlchemy async session
# - shared utils: slugify, timezone
#
# 🔄 Connected Modules / Calls From:
# - plant_gifting.presentation.api.v1.plant_gifts

import logging
import secrets
from typing import List, Optional, Tuple

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from sproutsync.modules.care_management.infrastructure.database.models import PlantTaskModel
from sproutsync.modules.plant_gifting.infrastructure.database.models import PlantGiftModel
from sproutsync.modules.plant_management.domain.services.plant_service import PlantService
from sproutsync.modules.plant_management.infrastructure.database.models import (
    PhotoModel,
    PlantModel,
    PlantTagModel,
    TagModel,
)
from sproutsync.shared.core.exceptions import (
    BusinessRuleViolationError,
    GoneError,
    NotFoundError,
)
from sproutsync.shared.infrastructure.database.connection import utc_now
from sproutsync.shared.infrastructure.database.session import get_db_session
from sproutsync.shared.utils.slugify import generate_plant_slug
from sproutsync.shared.utils.timezone import as_utc, start_of_day_in_timezone

logger = logging.getLogger(__name__)

COPIED_PLANT_FIELDS = (
    "pet_name",
    "botanical_name",
    "common_name",
    "type",
    "acquisition_date",
    "city",
    "care_level",
    "sun_requirements",
    "toxicity_level",
    "pet_friendliness",
    "common_pests_and_diseases",
    "preventive_measures",
)


def _gift_options(*users: str) -> tuple:
    options = (
        selectinload(PlantGiftModel.plant).selectinload(PlantModel.plant_tags).selectinload(PlantTagModel.tag),
        selectinload(PlantGiftModel.plant).selectinload(PlantModel.tasks),
        selectinload(PlantGiftModel.plant).selectinload(PlantModel.photos),
    )
    return options + tuple(selectinload(getattr(PlantGiftModel, user)) for user in users)


class PlantGiftService:
    """Plant gifting between users."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _load_gift(self, *conditions, users: Tuple[str, ...] = ("sender",)):
        result = await self.session.execute(
            select(PlantGiftModel)
            .where(*conditions)
            .options(*_gift_options(*users))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _expire(self, gift: PlantGiftModel) -> None:
        """
        Persist the EXPIRED status, then raise 410.

        Committed here since the raised error rolls back the request transaction.
        """
        gift.status = "EXPIRED"
        await self.session.commit()
        logger.info(f"⌛ Gift {gift.id} expired")
        raise GoneError("This gift has expired", resource_type="plant_gift", resource_id=gift.id)

    @staticmethod
    def _is_expired(gift: PlantGiftModel) -> bool:
        return gift.expires_at is not None and utc_now() > as_utc(gift.expires_at)

    async def create_gift(self, sender_id: str, plant_id: str, message: Optional[str] = None) -> PlantGiftModel:
        """
        Offer an owned plant; the plant is locked as gifted until cancelled.

        Raises:
            NotFoundError: Plant missing or not owned
            BusinessRuleViolationError: Plant already gifted
        """
        plant = await PlantService(self.session).find_owned_plant(plant_id, sender_id)
        if plant is None:
            raise NotFoundError(
                "Plant not found or you do not own this plant",
                resource_type="plant",
                resource_id=plant_id,
            )
        if plant.is_gifted:
            raise BusinessRuleViolationError("This plant has already been gifted", rule="plant_gift_once")

        gift = PlantGiftModel(
            plant_id=plant_id,
            sender_id=sender_id,
            gift_token=secrets.token_urlsafe(24),
            message=message or None,
            status="PENDING",
        )
        self.session.add(gift)
        plant.is_gifted = True
        await self.session.flush()

        logger.info(f"🎁 User {sender_id} gifted plant {plant_id} (gift {gift.id})")
        return await self._load_gift(PlantGiftModel.id == gift.id)

    async def get_pending_gift(self, gift_token: str) -> PlantGiftModel:
        """
        Raises:
            NotFoundError: No pending gift with this token
            GoneError: The gift has expired (status is persisted first)
        """
        gift = await self._load_gift(PlantGiftModel.gift_token == gift_token, PlantGiftModel.status == "PENDING")
        if gift is None:
            raise NotFoundError("Gift not found or already processed", resource_type="plant_gift")
        if self._is_expired(gift):
            await self._expire(gift)
        return gift

    async def accept_gift(
        self,
        gift_token: str,
        receiver_id: str,
        receiver_timezone: str,
    ) -> Tuple[PlantGiftModel, PlantModel]:
        """
        Accept a pending gift and copy the plant into the receiver's collection.

        Raises:
            NotFoundError: No pending gift with this token
            BusinessRuleViolationError: The caller sent the gift
            GoneError: The gift has expired
        """
        gift = await self._load_gift(PlantGiftModel.gift_token == gift_token, PlantGiftModel.status == "PENDING")
        if gift is None:
            raise NotFoundError("Gift not found or already processed", resource_type="plant_gift")
        if gift.sender_id == receiver_id:
            raise BusinessRuleViolationError("You cannot accept your own gifts", rule="no_self_gift")
        if self._is_expired(gift):
            await self._expire(gift)

        now = utc_now()
        source = gift.plant

        gift.status = "ACCEPTED"
        gift.receiver_id = receiver_id
        gift.accepted_at = now

        new_plant = PlantModel(
            user_id=receiver_id,
            is_gifted=False,
            slug=await generate_plant_slug(self.session, source.pet_name or source.common_name, receiver_id),
            **{field: getattr(source, field) for field in COPIED_PLANT_FIELDS},
        )
        self.session.add(new_plant)
        await self.session.flush()

        todays_start = start_of_day_in_timezone(receiver_timezone, now)
        for task in source.tasks:
            self.session.add(PlantTaskModel(
                plant_id=new_plant.id,
                task_key=task.task_key,
                frequency_days=task.frequency_days,
                next_due_on=todays_start,
                last_completed_on=None,
                active=task.active,
            ))

        for photo in source.photos:
            self.session.add(PhotoModel(
                plant_id=new_plant.id,
                cloudinary_public_id=photo.cloudinary_public_id,
                secure_url=photo.secure_url,
                taken_at=photo.taken_at,
                points_awarded=photo.points_awarded,
            ))

        for link in source.plant_tags:
            receiver_tag = await self.session.scalar(
                select(TagModel).where(TagModel.user_id == receiver_id, TagModel.name == link.tag.name)
            )
            if receiver_tag is None:
                receiver_tag = TagModel(user_id=receiver_id, name=link.tag.name, color_hex=link.tag.color_hex)
                self.session.add(receiver_tag)
                await self.session.flush()
            self.session.add(PlantTagModel(plant_id=new_plant.id, tag_id=receiver_tag.id))

        await self.session.flush()
        logger.info(f"🎉 User {receiver_id} accepted gift {gift.id}; new plant {new_plant.id}")

        plant = await PlantService(self.session).get_plant(new_plant.id, receiver_id)
        return gift, plant

    async def list_sent_gifts(self, sender_id: str) -> List[PlantGiftModel]:
        result = await self.session.execute(
            select(PlantGiftModel)
            .where(PlantGiftModel.sender_id == sender_id)
            .options(*_gift_options("receiver"))
            .order_by(PlantGiftModel.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_received_gifts(self, receiver_id: str) -> List[PlantGiftModel]:
        result = await self.session.execute(
            select(PlantGiftModel)
            .where(PlantGiftModel.receiver_id == receiver_id, PlantGiftModel.status == "ACCEPTED")
            .options(*_gift_options("sender"))
            .order_by(PlantGiftModel.accepted_at.desc())
        )
        return list(result.scalars().all())

    async def cancel_gift(self, gift_id: str, sender_id: str) -> PlantGiftModel:
        """
        Withdraw a pending gift and unlock the plant.

        Raises:
            NotFoundError: No pending gift with this id sent by the caller
        """
        gift = await self._load_gift(
            PlantGiftModel.id == gift_id,
            PlantGiftModel.sender_id == sender_id,
            PlantGiftModel.status == "PENDING",
        )
        if gift is None:
            raise NotFoundError(
                "Gift not found or cannot be cancelled",
                resource_type="plant_gift",
                resource_id=gift_id,
            )

        gift.status = "CANCELLED"
        gift.plant.is_gifted = False
        await self.session.flush()
        logger.info(f"↩️ Gift {gift_id} cancelled by user {sender_id}")
        return gift


def get_gift_service(db: AsyncSession = Depends(get_db_session)) -> PlantGiftService:
    """FastAPI dependency for PlantGiftService."""
    return PlantGiftService(db)

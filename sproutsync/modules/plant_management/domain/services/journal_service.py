# 📄 File: sproutsync/modules/plant_management/domain/services/journal_service.py
# 🧭 Purpose (Layman Explanation):
# Keeps each plant's diary: notes the owner writes, photos they take and dated progress
# updates, listed newest first.
#
# 🧪 Purpose (Technical Summary):
# Domain service for NoteModel, PhotoModel and PlantTrackingModel: paginated listing with
# filters and creation; tracking deletes also remove the Cloudinary image best-effort.
#
# 🔗 Dependencies:
# - SQLAlchemy async session
# - sproutsync.shared.infrastructure.storage.cloudinary_storage
#
# 🔄 Connected Modules / Calls From:
# - plant_management.presentation.api.v1.plant_journal

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from sproutsync.modules.plant_management.infrastructure.database.models import (
    NoteModel,
    PhotoModel,
    PlantTrackingModel,
)
from sproutsync.shared.core.exceptions import ExternalServiceError, NotFoundError
from sproutsync.shared.infrastructure.database.session import get_db_session
from sproutsync.shared.infrastructure.storage.cloudinary_storage import CloudinaryStorage

logger = logging.getLogger(__name__)


class PlantJournalService:
    """Notes, photos and tracking updates of one plant."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _page(self, stmt, count_stmt, offset: int, limit: int) -> Tuple[List[Any], int]:
        result = await self.session.execute(stmt.offset(offset).limit(limit))
        total = await self.session.scalar(count_stmt)
        return list(result.scalars().all()), total or 0

    # =========================================================================
    # NOTES
    # =========================================================================

    async def list_notes(
        self,
        plant_id: str,
        offset: int,
        limit: int,
        task_key: Optional[str] = None,
        preset: Optional[str] = None,
    ) -> Tuple[List[NoteModel], int]:
        """Notes newest first, optionally filtered by task key and preset."""
        conditions = [NoteModel.plant_id == plant_id]
        if task_key:
            conditions.append(NoteModel.task_key == task_key)
        if preset:
            conditions.append(NoteModel.preset == preset)

        return await self._page(
            select(NoteModel).where(*conditions).order_by(NoteModel.created_at.desc()),
            select(func.count(NoteModel.id)).where(*conditions),
            offset,
            limit,
        )

    async def create_note(
        self,
        plant_id: str,
        body: str,
        task_key: Optional[str] = None,
        preset: Optional[str] = None,
    ) -> NoteModel:
        note = NoteModel(plant_id=plant_id, body=body, task_key=task_key, preset=preset)
        self.session.add(note)
        await self.session.flush()
        logger.info(f"📝 Added note {note.id} to plant {plant_id}")
        return note

    # =========================================================================
    # PHOTOS
    # =========================================================================

    async def list_photos(self, plant_id: str, offset: int, limit: int) -> Tuple[List[PhotoModel], int]:
        return await self._page(
            select(PhotoModel).where(PhotoModel.plant_id == plant_id).order_by(PhotoModel.taken_at.desc()),
            select(func.count(PhotoModel.id)).where(PhotoModel.plant_id == plant_id),
            offset,
            limit,
        )

    async def create_photo(
        self,
        plant_id: str,
        cloudinary_public_id: str,
        secure_url: str,
        taken_at: datetime,
    ) -> PhotoModel:
        photo = PhotoModel(
            plant_id=plant_id,
            cloudinary_public_id=cloudinary_public_id,
            secure_url=secure_url,
            taken_at=taken_at,
        )
        self.session.add(photo)
        await self.session.flush()
        logger.info(f"📸 Added photo {photo.id} to plant {plant_id}")
        return photo

    # =========================================================================
    # TRACKING
    # =========================================================================

    async def list_tracking(self, plant_id: str, offset: int, limit: int) -> Tuple[List[PlantTrackingModel], int]:
        return await self._page(
            select(PlantTrackingModel)
            .where(PlantTrackingModel.plant_id == plant_id)
            .order_by(PlantTrackingModel.created_at.desc()),
            select(func.count(PlantTrackingModel.id)).where(PlantTrackingModel.plant_id == plant_id),
            offset,
            limit,
        )

    async def create_tracking(self, plant_id: str, values: Dict[str, Any]) -> PlantTrackingModel:
        entry = PlantTrackingModel(plant_id=plant_id, **values)
        self.session.add(entry)
        await self.session.flush()
        logger.info(f"📈 Added tracking update {entry.id} to plant {plant_id}")
        return entry

    async def delete_tracking(
        self,
        plant_id: str,
        tracking_id: str,
        storage: Optional[CloudinaryStorage] = None,
    ) -> None:
        """
        Delete a tracking update and, best-effort, its Cloudinary image.

        Raises:
            NotFoundError: No such update on this plant
        """
        result = await self.session.execute(
            select(PlantTrackingModel).where(
                PlantTrackingModel.id == tracking_id,
                PlantTrackingModel.plant_id == plant_id,
            )
        )
        entry = result.scalar_one_or_none()
        if entry is None:
            raise NotFoundError("Tracking update not found", resource_type="tracking", resource_id=tracking_id)

        if entry.cloudinary_public_id and storage is not None and storage.is_configured:
            try:
                await storage.delete_image(entry.cloudinary_public_id)
            except ExternalServiceError as e:
                logger.error(f"❌ Failed to delete image from Cloudinary: {entry.cloudinary_public_id}: {e.message}")

        await self.session.delete(entry)
        await self.session.flush()
        logger.info(f"🗑️ Deleted tracking update {tracking_id}")


def get_journal_service(db: AsyncSession = Depends(get_db_session)) -> PlantJournalService:
    """FastAPI dependency for PlantJournalService."""
    return PlantJournalService(db)

# 📄 File: sproutsync/modules/plant_management/presentation/dependencies.py
# 🧭 Purpose (Layman Explanation):
# The doorman for every "/plants/{plant_id}/..." page: it lets you in only if the plant is yours.
#
# 🧪 Purpose (Technical Summary):
# FastAPI dependency resolving the path plant_id to an owned PlantModel, raising a 403
# AuthorizationError otherwise.
#
# 🔗 Dependencies:
# - FastAPI Depends, sproutsync.shared.core.dependencies.get_current_user
#
# 🔄 Connected Modules / Calls From:
# - plant_management nested routers (notes, photos, tags, tracking)
# - care_management plant_tasks router

import logging

from fastapi import Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from sproutsync.modules.plant_management.domain.services.plant_service import PlantService
from sproutsync.modules.plant_management.infrastructure.database.models import PlantModel
from sproutsync.shared.core.dependencies import CurrentUser, get_current_user
from sproutsync.shared.core.exceptions import AuthorizationError
from sproutsync.shared.infrastructure.database.session import get_db_session

logger = logging.getLogger(__name__)

PLANT_ACCESS_DENIED = "Access denied. Plant not found or you do not own this plant."


async def get_owned_plant(
    plant_id: str = Path(..., description="Plant ID"),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> PlantModel:
    """
    Resolve ``plant_id`` to a plant owned by the caller.

    Raises:
        AuthorizationError: Plant missing or owned by someone else
    """
    plant = await PlantService(db).find_owned_plant(plant_id, current_user.user_id)
    if plant is None:
        logger.warning(f"🚫 User {current_user.user_id} denied access to plant {plant_id}")
        raise AuthorizationError(PLANT_ACCESS_DENIED, resource_type="plant", resource_id=plant_id)
    return plant

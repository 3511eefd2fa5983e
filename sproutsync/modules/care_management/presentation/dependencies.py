# 📄 File: sproutsync/modules/care_management/presentation/dependencies.py
# 🧭 Purpose (Layman Explanation):
# Figures out which timezone "today" means for the person making the request.
#
# 🧪 Purpose (Technical Summary):
# FastAPI dependency resolving the effective IANA timezone from the X-User-Timezone header
# and stored user settings (persisting a newly reported zone).
#
# 🔗 Dependencies:
# - user_management user_settings_service.resolve_user_timezone
#
# 🔄 Connected Modules / Calls From:
# - care_management plant_tasks router

from typing import Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sproutsync.modules.user_management.domain.services.user_settings_service import resolve_user_timezone
from sproutsync.shared.core.dependencies import CurrentUser, get_current_user, get_user_timezone_header
from sproutsync.shared.infrastructure.database.session import get_db_session


async def get_user_timezone(
    current_user: CurrentUser = Depends(get_current_user),
    preferred: Optional[str] = Depends(get_user_timezone_header),
    db: AsyncSession = Depends(get_db_session),
) -> str:
    """Timezone used for the caller's due-date arithmetic."""
    return await resolve_user_timezone(db, current_user.user_id, preferred)

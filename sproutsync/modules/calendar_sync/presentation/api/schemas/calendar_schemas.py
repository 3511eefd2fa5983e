# 📄 File: sproutsync/modules/calendar_sync/presentation/api/schemas/calendar_schemas.py
# 🧭 Purpose (Layman Explanation):
# Describes what the app sends when someone changes their calendar sync choices or asks
# for specific chores to be put in their calendar.
#
# 🧪 Purpose (Technical Summary):
# Pydantic request models for the /api/google-calendar endpoints.
#
# 🔗 Dependencies:
# - pydantic v2
#
# 🔄 Connected Modules / Calls From:
# - calendar_sync.presentation.api.v1.google_calendar

from typing import List, Optional

from pydantic import BaseModel, Field


class CalendarSyncSettingsRequest(BaseModel):
    """Sync toggle, reminder lead time and the plants to mirror."""

    enabled: bool
    reminder_minutes: Optional[int] = Field(None, ge=5, le=1440, description="5 minutes to 24 hours")
    synced_plant_ids: Optional[List[str]] = None


class SyncTasksRequest(BaseModel):
    task_ids: List[str]
    reminder_minutes: int = Field(30, ge=5, le=1440)

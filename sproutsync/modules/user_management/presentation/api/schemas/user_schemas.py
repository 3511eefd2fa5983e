# 📄 File: sproutsync/modules/user_management/presentation/api/schemas/user_schemas.py
# 🧭 Purpose (Layman Explanation):
# Describes a user's profile and the small settings the app sends while someone is
# getting started (username, welcome tips, tutorial progress).
#
# 🧪 Purpose (Technical Summary):
# Pydantic v2 request/response models for /api/users, /api/user-settings and /api/tutorial.
#
# 🔗 Dependencies:
# - pydantic v2 (EmailStr via email-validator)
#
# 🔄 Connected Modules / Calls From:
# - user_management routers

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: EmailStr
    name: str
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None


class UsernameUpdateRequest(BaseModel):
    username: str = Field(
        ...,
        min_length=1,
        max_length=30,
        pattern=r"^[a-z0-9-]+$",
        description="Lowercase letters, numbers and hyphens only",
        examples=["fern-lover"],
    )


class NewUserFocusRequest(BaseModel):
    has_seen_new_user_focus: bool


class TutorialStateRequest(BaseModel):
    """Partial tutorial update; omitted fields stay unchanged."""

    tutorial_completed: Optional[bool] = None
    completed_steps: Optional[List[str]] = None
    skipped_steps: Optional[List[str]] = None

# 📄 File: sproutsync/modules/user_management/infrastructure/database/models.py
# 🧭 Purpose (Layman Explanation):
# Defines how people and their preferences are stored: who signed in with Google,
# their public username, and settings like notifications, calendar sync and tutorial progress.
#
# 🧪 Purpose (Technical Summary):
# SQLAlchemy ORM models for the users and user_settings tables with string UUID keys,
# UTC timestamps and JSON list columns.
#
# 🔗 Dependencies:
# - SQLAlchemy ORM
# - sproutsync.shared.infrastructure.database.connection (Base, UTCDateTime)
#
# 🔄 Connected Modules / Calls From:
# - user_management services and routers
# - notification_communication and calendar_sync services (UserSettingsModel)
# - shared.core.dependencies (last_active_at tracking)
# - Alembic migrations

"""
SQLAlchemy Models for User Management

Models:
- UserModel: Google-authenticated account
- UserSettingsModel: Per-user preferences (persona, push token, calendar sync, tutorial)
"""

from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from sproutsync.shared.infrastructure.database.connection import Base, UTCDateTime, utc_now


PERSONAS = ("PRIMARY", "SECONDARY", "TERTIARY")


def _uuid() -> str:
    return str(uuid4())


# =============================================================================
# USER MODEL
# =============================================================================

class UserModel(Base):
    """
    SQLAlchemy model for a SproutSync account.

    Accounts are created on first Google sign-in and looked up by google_id.
    """
    __tablename__ = "users"

    id = Column(
        String(36),
        primary_key=True,
        default=_uuid,
        comment="Unique identifier for each user"
    )
    google_id = Column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="Google account subject identifier"
    )
    email = Column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="Google account email"
    )
    name = Column(
        String(255),
        nullable=False,
        comment="Display name from Google profile"
    )
    username = Column(
        String(30),
        unique=True,
        nullable=True,
        index=True,
        comment="Public slug used in /u/<username> links"
    )
    avatar_url = Column(
        Text,
        nullable=True,
        comment="Google profile picture URL"
    )
    created_at = Column(
        UTCDateTime,
        nullable=False,
        default=utc_now,
        comment="Account creation date"
    )

    settings = relationship(
        "UserSettingsModel",
        back_populates="user",
        uselist=False,
    )

    def __repr__(self) -> str:
        return f"<UserModel(id={self.id}, email={self.email})>"


# =============================================================================
# USER SETTINGS MODEL
# =============================================================================

class UserSettingsModel(Base):
    """
    SQLAlchemy model for per-user preferences.

    One row per user, created lazily the first time any setting is touched.
    """
    __tablename__ = "user_settings"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        comment="Owner of these settings"
    )

    # Notifications
    persona = Column(
        String(20),
        nullable=False,
        default="PRIMARY",
        comment="Notification copy voice: PRIMARY/SECONDARY/TERTIARY"
    )
    timezone = Column(String(64), nullable=True, comment="IANA timezone name")
    fcm_token = Column(Text, nullable=True, comment="Firebase Cloud Messaging registration token")
    notifications_enabled = Column(Boolean, nullable=False, default=True)
    notifications_enabled_at = Column(
        UTCDateTime,
        nullable=True,
        comment="When push notifications were last switched on"
    )
    notification_prompt_shown = Column(Boolean, nullable=False, default=False)

    # Google Calendar
    google_calendar_sync_enabled = Column(Boolean, nullable=False, default=False)
    google_calendar_access_token = Column(Text, nullable=True)
    google_calendar_refresh_token = Column(Text, nullable=True)
    google_calendar_token_expiry = Column(UTCDateTime, nullable=True)
    google_calendar_reminder_minutes = Column(Integer, nullable=False, default=30)
    synced_plant_ids = Column(
        JSON,
        nullable=False,
        default=list,
        comment="Plants whose tasks are mirrored to Google Calendar"
    )

    # Onboarding
    tutorial_completed = Column(Boolean, nullable=False, default=False)
    tutorial_completed_steps = Column(JSON, nullable=False, default=list)
    tutorial_skipped_steps = Column(JSON, nullable=False, default=list)
    has_seen_new_user_focus = Column(Boolean, nullable=False, default=False)

    last_active_at = Column(UTCDateTime, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)
    updated_at = Column(UTCDateTime, nullable=False, default=utc_now, onupdate=utc_now)

    user = relationship("UserModel", back_populates="settings")

    def __repr__(self) -> str:
        return f"<UserSettingsModel(user_id={self.user_id}, persona={self.persona})>"


__all__ = [
    "PERSONAS",
    "UserModel",
    "UserSettingsModel",
]


def get_user_management_models():
    """
    Get all user management models for migration and schema generation.

    Returns:
        list: List of SQLAlchemy model classes
    """
    return [UserModel, UserSettingsModel]

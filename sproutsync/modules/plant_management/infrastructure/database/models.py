# 📄 File: sproutsync/modules/plant_management/infrastructure/database/models.py
# 🧭 Purpose (Layman Explanation):
# Defines how plants and everything attached to them are stored: tags, notes, photos,
# growth tracking entries and the catalog of care task types.
#
# 🧪 Purpose (Technical Summary):
# SQLAlchemy ORM models for plants, task_templates, tags, plant_tags, notes, photos and
# plant_tracking with per-user slug uniqueness and eager-loadable relationships.
#
# 🔗 Dependencies:
# - SQLAlchemy ORM
# - sproutsync.shared.infrastructure.database.connection (Base, UTCDateTime)
#
# 🔄 Connected Modules / Calls From:
# - plant_management services and routers
# - care_management (PlantTaskModel.plant), plant_gifting (gift transfer)
# - community_social (public plant pages)
# - Alembic migrations

"""
SQLAlchemy Models for Plant Management

Models:
- TaskTemplateModel: Global catalog of care task types
- PlantModel: A user's plant
- TagModel / PlantTagModel: User-defined labels and their links to plants
- NoteModel: Free-text notes, optionally tied to a task type or preset
- PhotoModel: Cloudinary-hosted photos
- PlantTrackingModel: Dated growth journal entries
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
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from sproutsync.shared.infrastructure.database.connection import Base, UTCDateTime, utc_now


CARE_LEVELS = ("Easy", "Moderate", "Difficult")
SUN_REQUIREMENTS = ("No sun", "Part to Full", "Full sun")
TOXICITY_LEVELS = ("Low", "Medium", "High")
NOTE_PRESETS = ("STRESSED", "NEEDS_PRUNING", "FERTILIZER_DUE", "PEST_ISSUE")


def _uuid() -> str:
    return str(uuid4())


# =============================================================================
# TASK TEMPLATE MODEL
# =============================================================================

class TaskTemplateModel(Base):
    """Catalog entry describing one kind of care task."""
    __tablename__ = "task_templates"

    id = Column(String(36), primary_key=True, default=_uuid)
    key = Column(String(50), unique=True, nullable=False, comment="Stable task key, e.g. watering")
    label = Column(String(100), nullable=False, comment="Human readable label")
    color_hex = Column(String(7), nullable=False, comment="Display color")
    default_frequency_days = Column(Integer, nullable=False, comment="Suggested repeat interval")

    def __repr__(self) -> str:
        return f"<TaskTemplateModel(key={self.key})>"


# =============================================================================
# PLANT MODEL
# =============================================================================

class PlantModel(Base):
    """
    SQLAlchemy model for a user-owned plant.

    Children (tasks, tags, notes, photos, tracking) are deleted explicitly
    by the plant service inside the request transaction.
    """
    __tablename__ = "plants"
    __table_args__ = (
        UniqueConstraint("user_id", "slug", name="uq_plants_user_slug"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Owner"
    )

    # Identity
    pet_name = Column(String(255), nullable=True, comment="Owner's nickname for the plant")
    botanical_name = Column(String(255), nullable=False)
    common_name = Column(String(255), nullable=False)
    type = Column(String(100), nullable=True)
    acquisition_date = Column(UTCDateTime, nullable=True)
    city = Column(String(255), nullable=True)

    # Care profile
    care_level = Column(String(20), nullable=True, comment="Easy/Moderate/Difficult")
    sun_requirements = Column(String(20), nullable=True, comment="No sun/Part to Full/Full sun")
    toxicity_level = Column(String(20), nullable=True, comment="Low/Medium/High")
    pet_friendliness = Column(JSON, nullable=True, comment="{is_friendly, reason}")
    common_pests_and_diseases = Column(Text, nullable=True)
    preventive_measures = Column(Text, nullable=True)

    slug = Column(String(255), nullable=True, comment="URL slug, unique per owner")
    is_gifted = Column(Boolean, nullable=False, default=False, comment="Locked by a pending or accepted gift")

    created_at = Column(UTCDateTime, nullable=False, default=utc_now)
    updated_at = Column(UTCDateTime, nullable=False, default=utc_now, onupdate=utc_now)

    # Relationships
    user = relationship("UserModel")
    tasks = relationship("PlantTaskModel", back_populates="plant")
    plant_tags = relationship("PlantTagModel", back_populates="plant")
    notes = relationship("NoteModel", back_populates="plant")
    photos = relationship("PhotoModel", back_populates="plant")
    tracking = relationship("PlantTrackingModel", back_populates="plant")

    def __repr__(self) -> str:
        return f"<PlantModel(id={self.id}, common_name={self.common_name})>"


# =============================================================================
# TAG MODELS
# =============================================================================

class TagModel(Base):
    """User-defined label that can be attached to many plants."""
    __tablename__ = "tags"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    name = Column(String(100), nullable=False)
    color_hex = Column(String(7), nullable=True)

    plant_tags = relationship("PlantTagModel", back_populates="tag")

    def __repr__(self) -> str:
        return f"<TagModel(name={self.name})>"


class PlantTagModel(Base):
    """Link between a plant and a tag."""
    __tablename__ = "plant_tags"
    __table_args__ = (
        UniqueConstraint("plant_id", "tag_id", name="uq_plant_tags_plant_tag"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    plant_id = Column(String(36), ForeignKey("plants.id", ondelete="CASCADE"), nullable=False, index=True)
    tag_id = Column(String(36), ForeignKey("tags.id", ondelete="CASCADE"), nullable=False, index=True)

    plant = relationship("PlantModel", back_populates="plant_tags")
    tag = relationship("TagModel", back_populates="plant_tags")


# =============================================================================
# NOTE / PHOTO / TRACKING MODELS
# =============================================================================

class NoteModel(Base):
    """Free-text note about a plant."""
    __tablename__ = "notes"

    id = Column(String(36), primary_key=True, default=_uuid)
    plant_id = Column(String(36), ForeignKey("plants.id", ondelete="CASCADE"), nullable=False, index=True)
    task_key = Column(String(50), nullable=True, comment="Care task this note relates to")
    body = Column(Text, nullable=False)
    preset = Column(String(30), nullable=True, comment="STRESSED/NEEDS_PRUNING/FERTILIZER_DUE/PEST_ISSUE")
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)

    plant = relationship("PlantModel", back_populates="notes")


class PhotoModel(Base):
    """Cloudinary-hosted plant photo."""
    __tablename__ = "photos"

    id = Column(String(36), primary_key=True, default=_uuid)
    plant_id = Column(String(36), ForeignKey("plants.id", ondelete="CASCADE"), nullable=False, index=True)
    cloudinary_public_id = Column(String(255), nullable=False)
    secure_url = Column(Text, nullable=False)
    taken_at = Column(UTCDateTime, nullable=False)
    points_awarded = Column(Integer, nullable=False, default=0)

    plant = relationship("PlantModel", back_populates="photos")


class PlantTrackingModel(Base):
    """Dated growth journal entry."""
    __tablename__ = "plant_tracking"

    id = Column(String(36), primary_key=True, default=_uuid)
    plant_id = Column(String(36), ForeignKey("plants.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(String(32), nullable=False, comment="Client supplied date string")
    note = Column(Text, nullable=False)
    photo_url = Column(Text, nullable=True)
    original_photo_url = Column(Text, nullable=True)
    cloudinary_public_id = Column(String(255), nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)

    plant = relationship("PlantModel", back_populates="tracking")


__all__ = [
    "CARE_LEVELS",
    "SUN_REQUIREMENTS",
    "TOXICITY_LEVELS",
    "NOTE_PRESETS",
    "TaskTemplateModel",
    "PlantModel",
    "TagModel",
    "PlantTagModel",
    "NoteModel",
    "PhotoModel",
    "PlantTrackingModel",
]


def get_plant_management_models():
    """Get all plant management models for migration and schema generation."""
    return [
        TaskTemplateModel,
        PlantModel,
        TagModel,
        PlantTagModel,
        NoteModel,
        PhotoModel,
        PlantTrackingModel,
    ]

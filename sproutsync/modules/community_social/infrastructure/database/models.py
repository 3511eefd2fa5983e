# 📄 File: sproutsync/modules/community_social/infrastructure/database/models.py
# 🧭 Purpose (Layman Explanation):
# Stores the friendly reactions visitors leave on public gardens and plants:
# appreciations (like a "like") and short comments.
#
# 🧪 Purpose (Technical Summary):
# SQLAlchemy ORM models for garden/plant appreciations (unique per visitor) and comments.
#
# 🔗 Dependencies:
# - SQLAlchemy ORM
# - sproutsync.shared.infrastructure.database.connection (Base, UTCDateTime)
#
# 🔄 Connected Modules / Calls From:
# - community_social social service, public and gardens routers

from uuid import uuid4

from sqlalchemy import Column, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship

from sproutsync.shared.infrastructure.database.connection import Base, UTCDateTime, utc_now


def _uuid() -> str:
    return str(uuid4())


# =============================================================================
# GARDEN LEVEL
# =============================================================================

class GardenAppreciationModel(Base):
    """A visitor appreciating someone's whole garden."""
    __tablename__ = "garden_appreciations"
    __table_args__ = (
        UniqueConstraint("garden_owner_id", "user_id", name="uq_garden_appreciations_owner_user"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    garden_owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)

    user = relationship("UserModel", foreign_keys=[user_id])


class GardenCommentModel(Base):
    """A visitor's comment on someone's garden."""
    __tablename__ = "garden_comments"

    id = Column(String(36), primary_key=True, default=_uuid)
    garden_owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    comment = Column(String(500), nullable=False)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)

    user = relationship("UserModel", foreign_keys=[user_id])


# =============================================================================
# PLANT LEVEL
# =============================================================================

class PlantAppreciationModel(Base):
    """A visitor appreciating a single public plant."""
    __tablename__ = "plant_appreciations"
    __table_args__ = (
        UniqueConstraint("plant_id", "user_id", name="uq_plant_appreciations_plant_user"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    plant_id = Column(String(36), ForeignKey("plants.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)

    user = relationship("UserModel")


class PlantCommentModel(Base):
    """A visitor's comment on a single public plant."""
    __tablename__ = "plant_comments"

    id = Column(String(36), primary_key=True, default=_uuid)
    plant_id = Column(String(36), ForeignKey("plants.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    comment = Column(String(500), nullable=False)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)

    user = relationship("UserModel")


__all__ = [
    "GardenAppreciationModel",
    "GardenCommentModel",
    "PlantAppreciationModel",
    "PlantCommentModel",
]


def get_community_social_models():
    """Get all community models for migration and schema generation."""
    return [
        GardenAppreciationModel,
        GardenCommentModel,
        PlantAppreciationModel,
        PlantCommentModel,
    ]

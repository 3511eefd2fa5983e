# 📄 File: sproutsync/modules/plant_gifting/infrastructure/database/models.py
# 🧭 Purpose (Layman Explanation):
# Defines how a plant gift is stored: who sent it, the secret link token,
# and whether it is still waiting, accepted, cancelled or expired.
#
# 🧪 Purpose (Technical Summary):
# SQLAlchemy ORM model for plant_gifts with a unique random token and a status lifecycle
# PENDING -> ACCEPTED | CANCELLED | EXPIRED.
#
# 🔗 Dependencies:
# - SQLAlchemy ORM
# - sproutsync.shared.infrastructure.database.connection (Base, UTCDateTime)
#
# 🔄 Connected Modules / Calls From:
# - plant_gifting gift service and router
# - Alembic migrations

from uuid import uuid4

from sqlalchemy import Column, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from sproutsync.shared.infrastructure.database.connection import Base, UTCDateTime, utc_now


GIFT_STATUSES = ("PENDING", "ACCEPTED", "EXPIRED", "CANCELLED")


def _uuid() -> str:
    return str(uuid4())


class PlantGiftModel(Base):
    """Transfer record moving a plant from a sender to a receiver."""
    __tablename__ = "plant_gifts"

    id = Column(String(36), primary_key=True, default=_uuid)
    plant_id = Column(String(36), ForeignKey("plants.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    receiver_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    gift_token = Column(String(64), unique=True, nullable=False, index=True, comment="Secret share token")
    message = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="PENDING", comment="PENDING/ACCEPTED/EXPIRED/CANCELLED")
    expires_at = Column(UTCDateTime, nullable=True)
    accepted_at = Column(UTCDateTime, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)

    plant = relationship("PlantModel")
    sender = relationship("UserModel", foreign_keys=[sender_id])
    receiver = relationship("UserModel", foreign_keys=[receiver_id])

    def __repr__(self) -> str:
        return f"<PlantGiftModel(id={self.id}, status={self.status})>"


__all__ = ["GIFT_STATUSES", "PlantGiftModel"]


def get_plant_gifting_models():
    """Get all plant gifting models for migration and schema generation."""
    return [PlantGiftModel]

# 📄 File: sproutsync/modules/care_management/infrastructure/database/models.py
# 🧭 Purpose (Layman Explanation):
# Defines how recurring care jobs are stored: what to do for which plant,
# how often, when it is next due and when it was last done.
#
# 🧪 Purpose (Technical Summary):
# SQLAlchemy ORM model for plant_tasks with UTC due/completion timestamps and the
# Google Calendar event id of the mirrored reminder.
#
# 🔗 Dependencies:
# - SQLAlchemy ORM
# - sproutsync.shared.infrastructure.database.connection (Base, UTCDateTime)
#
# 🔄 Connected Modules / Calls From:
# - care_management services and routers
# - notification_communication (overdue and due reminders)
# - calendar_sync (event mirroring), plant_gifting (task copy)

from uuid import uuid4

from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from sproutsync.shared.infrastructure.database.connection import Base, UTCDateTime


def _uuid() -> str:
    return str(uuid4())


class PlantTaskModel(Base):
    """
    SQLAlchemy model for a recurring care task on a plant.

    next_due_on always holds the next moment the task should be done;
    completing a task pushes it forward by frequency_days.
    """
    __tablename__ = "plant_tasks"
    __table_args__ = (
        CheckConstraint("frequency_days > 0", name="ck_plant_tasks_frequency_positive"),
        Index("ix_plant_tasks_active_next_due_on", "active", "next_due_on"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    plant_id = Column(
        String(36),
        ForeignKey("plants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Plant this task belongs to"
    )
    task_key = Column(String(50), nullable=False, comment="Task template key, e.g. watering")
    frequency_days = Column(Integer, nullable=False, comment="Repeat interval in days")
    next_due_on = Column(UTCDateTime, nullable=False, comment="Next due moment (UTC)")
    last_completed_on = Column(UTCDateTime, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    google_calendar_event_id = Column(String(255), nullable=True, comment="Mirrored calendar event")

    plant = relationship("PlantModel", back_populates="tasks")

    def __repr__(self) -> str:
        return f"<PlantTaskModel(id={self.id}, task_key={self.task_key}, next_due_on={self.next_due_on})>"


__all__ = ["PlantTaskModel"]


def get_care_management_models():
    """Get all care management models for migration and schema generation."""
    return [PlantTaskModel]

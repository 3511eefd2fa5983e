# 📄 File: sproutsync/modules/care_management/presentation/api/schemas/task_schemas.py
# 🧭 Purpose (Layman Explanation):
# Describes what a care task looks like when the app sends one in (create, edit,
# reschedule) and when the server sends one back.
#
# 🧪 Purpose (Technical Summary):
# Pydantic v2 request/response schemas for plant tasks. Responses are built from ORM rows
# with from_attributes; requests enforce frequency_days > 0 and reject null for NOT NULL columns.
#
# 🔗 Dependencies:
# - pydantic
#
# 🔄 Connected Modules / Calls From:
# - care_management.presentation.api.v1.plant_tasks / tasks
# - plant_management plant schemas (tasks embedded in plant responses)

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class PlantTaskCreateRequest(BaseModel):
    """Add a care task to a plant; it becomes due today in the user's timezone."""

    task_key: str = Field(..., min_length=1, description="Task template key", examples=["watering"])
    frequency_days: int = Field(..., gt=0, description="Repeat interval in days", examples=[3])


class PlantTaskUpdateRequest(BaseModel):
    frequency_days: Optional[int] = Field(default=None, gt=0)
    next_due_on: Optional[datetime] = None
    active: Optional[bool] = None

    @field_validator("frequency_days", "next_due_on", "active", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        # Omit a field to leave it unchanged; the columns are NOT NULL
        if value is None:
            raise ValueError("must not be null")
        return value


class RescheduleTaskRequest(BaseModel):
    next_due_on: Optional[datetime] = Field(default=None, description="New due moment")


class TaskCreateRequest(BaseModel):
    """Create a task for any owned plant with an explicit due date."""

    plant_id: str = Field(..., min_length=1)
    task_key: str = Field(..., min_length=1)
    frequency_days: int = Field(..., gt=0)
    next_due_on: datetime


class TaskUpdateRequest(BaseModel):
    task_key: Optional[str] = Field(default=None, min_length=1)
    frequency_days: Optional[int] = Field(default=None, gt=0)
    next_due_on: Optional[datetime] = None
    last_completed_on: Optional[datetime] = None
    active: Optional[bool] = None

    @field_validator("task_key", "frequency_days", "next_due_on", "active", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        # last_completed_on is the only nullable column here
        if value is None:
            raise ValueError("must not be null")
        return value


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class PlantTaskResponse(BaseModel):
    """Care task as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    plant_id: str
    task_key: str
    frequency_days: int
    next_due_on: datetime
    last_completed_on: Optional[datetime] = None
    active: bool
    google_calendar_event_id: Optional[str] = None


class TaskPlantSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    pet_name: Optional[str] = None
    common_name: str
    botanical_name: str
    type: Optional[str] = None


class TaskWithPlantResponse(PlantTaskResponse):
    """Task with a short description of its plant, used by /api/tasks."""

    plant: Optional[TaskPlantSummary] = None

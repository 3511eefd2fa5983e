# 📄 File: sproutsync/modules/plant_management/presentation/api/schemas/plant_schemas.py
# 🧭 Purpose (Layman Explanation):
# The shapes of plant information going in and out of the API: what the app sends when adding
# or editing a plant and what a plant card or plant page receives back.
#
# 🧪 Purpose (Technical Summary):
# Pydantic v2 schemas for plant create/update (with the initial care_tasks map) and for plant
# summary/detail responses assembled from eager-loaded ORM rows.
#
# 🔗 Dependencies:
# - pydantic
# - care_management task schemas, plant_management journal/tag schemas
#
# 🔄 Connected Modules / Calls From:
# - plant_management.presentation.api.v1.plants
# - plant_gifting and community_social presentation layers

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sproutsync.modules.care_management.presentation.api.schemas.task_schemas import PlantTaskResponse
from sproutsync.modules.plant_management.presentation.api.schemas.journal_schemas import (
    NoteResponse,
    PhotoResponse,
)
from sproutsync.modules.plant_management.presentation.api.schemas.tag_schemas import TagResponse

CareLevel = Literal["Easy", "Moderate", "Difficult"]
SunRequirement = Literal["No sun", "Part to Full", "Full sun"]
ToxicityLevel = Literal["Low", "Medium", "High"]


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class PetFriendliness(BaseModel):
    is_friendly: bool
    reason: str = ""


class CareTaskInput(BaseModel):
    """Initial schedule for one care task of a new plant."""

    frequency: int = Field(..., gt=0, description="Repeat interval in days")
    last_completed_on: Optional[datetime] = Field(
        default=None,
        description="When the task was last done; defaults to now",
    )


class PlantBase(BaseModel):
    pet_name: Optional[str] = Field(default=None, max_length=255, examples=["Monty"])
    type: Optional[str] = Field(default=None, max_length=100, examples=["Tropical"])
    acquisition_date: Optional[datetime] = None
    city: Optional[str] = Field(default=None, max_length=255)
    care_level: Optional[CareLevel] = None
    sun_requirements: Optional[SunRequirement] = None
    toxicity_level: Optional[ToxicityLevel] = None
    pet_friendliness: Optional[PetFriendliness] = None
    common_pests_and_diseases: Optional[str] = None
    preventive_measures: Optional[str] = None


class PlantCreateRequest(PlantBase):
    """
    New plant request.

    ``care_tasks`` is keyed by task template key (watering, fertilizing, pruning,
    spraying, sunlightRotation); unknown keys are rejected by the service.
    """

    botanical_name: str = Field(..., min_length=1, max_length=255, examples=["Monstera deliciosa"])
    common_name: str = Field(..., min_length=1, max_length=255, examples=["Swiss cheese plant"])
    care_tasks: Optional[Dict[str, Optional[CareTaskInput]]] = None

    def plant_values(self) -> Dict[str, Any]:
        """Column values for PlantModel."""
        return self.model_dump(exclude={"care_tasks"})

    def care_task_values(self) -> Dict[str, Dict[str, Any]]:
        return {
            key: task.model_dump()
            for key, task in (self.care_tasks or {}).items()
            if task is not None
        }


class PlantUpdateRequest(PlantBase):
    """Partial plant update; only fields present in the body are changed."""

    botanical_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    common_name: Optional[str] = Field(default=None, min_length=1, max_length=255)

    @field_validator("botanical_name", "common_name", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        # Names can be changed but never cleared
        if value is None:
            raise ValueError("must not be null")
        return value


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class TaskTemplateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    key: str
    label: str
    color_hex: str
    default_frequency_days: int


class PlantCounts(BaseModel):
    notes: int = 0
    photos: int = 0


class PlantResponse(BaseModel):
    """
    Plant card / plant page payload.

    Summary responses carry the latest photo only; detail responses add all
    notes and photos, newest first.
    """

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    user_id: str
    pet_name: Optional[str] = None
    botanical_name: str
    common_name: str
    type: Optional[str] = None
    acquisition_date: Optional[datetime] = None
    city: Optional[str] = None
    care_level: Optional[str] = None
    sun_requirements: Optional[str] = None
    toxicity_level: Optional[str] = None
    pet_friendliness: Optional[Dict[str, Any]] = None
    common_pests_and_diseases: Optional[str] = None
    preventive_measures: Optional[str] = None
    slug: Optional[str] = None
    is_gifted: bool = False
    created_at: datetime
    updated_at: datetime

    tags: List[TagResponse] = Field(default_factory=list)
    tasks: List[PlantTaskResponse] = Field(default_factory=list)
    photos: List[PhotoResponse] = Field(default_factory=list)
    notes: Optional[List[NoteResponse]] = None
    counts: Optional[PlantCounts] = Field(default=None, serialization_alias="_count")

    @classmethod
    def from_model(
        cls,
        plant,
        counts: Optional[Dict[str, int]] = None,
        detail: bool = False,
    ) -> "PlantResponse":
        """
        Build the response from a plant loaded with plant_service eager-load options.

        Args:
            plant: PlantModel with tags, tasks and photos (and notes when ``detail``)
            counts: {notes, photos}; derived from loaded collections when omitted
            detail: Include every photo and note instead of the latest photo only
        """
        photos = sorted(plant.photos, key=lambda photo: photo.taken_at, reverse=True)
        tasks = sorted(plant.tasks, key=lambda task: task.task_key)
        tags = sorted((link.tag for link in plant.plant_tags), key=lambda tag: tag.name.lower())

        notes = None
        if detail:
            notes = [
                NoteResponse.model_validate(note)
                for note in sorted(plant.notes, key=lambda note: note.created_at, reverse=True)
            ]
            if counts is None:
                counts = {"notes": len(plant.notes), "photos": len(plant.photos)}

        base = {
            column: getattr(plant, column)
            for column in cls.model_fields
            if column not in ("tags", "tasks", "photos", "notes", "counts")
        }
        return cls(
            **base,
            tags=[TagResponse.model_validate(tag) for tag in tags],
            tasks=[PlantTaskResponse.model_validate(task) for task in tasks],
            photos=[PhotoResponse.model_validate(photo) for photo in (photos if detail else photos[:1])],
            notes=notes,
            counts=PlantCounts(**counts) if counts is not None else None,
        )

    def to_wire(self) -> Dict[str, Any]:
        """JSON-ready dict with the ``_count`` alias and unset sections dropped."""
        unset = {field for field in ("notes", "counts") if getattr(self, field) is None}
        return self.model_dump(mode="json", by_alias=True, exclude=unset)

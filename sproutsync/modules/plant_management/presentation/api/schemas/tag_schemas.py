# 📄 File: sproutsync/modules/plant_management/presentation/api/schemas/tag_schemas.py
# 🧭 Purpose (Layman Explanation):
# Formats for the colored labels people use to group their plants ("Balcony", "Needs love").
#
# 🧪 Purpose (Technical Summary):
# Pydantic v2 schemas for tag CRUD and plant/tag assignment, with hex color validation.
#
# 🔗 Dependencies:
# - pydantic
#
# 🔄 Connected Modules / Calls From:
# - plant_management.presentation.api.v1.tags / plant_tags
# - plant_schemas (tags embedded in plant responses)

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class TagCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["Balcony"])
    color_hex: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN, examples=["#10B981"])


class TagUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    color_hex: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)

    @field_validator("name", mode="before")
    @classmethod
    def reject_null_name(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("must not be null")
        return value


class TagAssignRequest(BaseModel):
    tag_id: str = Field(..., min_length=1)


class TagResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    name: str
    color_hex: Optional[str] = None


class TagWithCountResponse(TagResponse):
    plant_count: int = 0


class TaggedPlantSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    pet_name: Optional[str] = None
    common_name: str
    type: Optional[str] = None


class TagDetailResponse(TagWithCountResponse):
    plants: List[TaggedPlantSummary] = Field(default_factory=list)

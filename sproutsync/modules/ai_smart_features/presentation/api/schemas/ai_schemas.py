# 📄 File: sproutsync/modules/ai_smart_features/presentation/api/schemas/ai_schemas.py
# 🧭 Purpose (Layman Explanation):
# The shape of what the AI tells the app about a plant: its name, how to care for it and
# whether it looks sick.
#
# 🧪 Purpose (Technical Summary):
# Pydantic v2 models for /api/ai requests and the sanitized identification and health
# analysis results.
#
# 🔗 Dependencies:
# - pydantic v2
#
# 🔄 Connected Modules / Calls From:
# - ai_smart_features domain services and router

from typing import List, Optional

from pydantic import BaseModel, Field, HttpUrl


class ImageUrlRequest(BaseModel):
    image_url: HttpUrl = Field(..., description="Link to a plant photo, search result or web page")


class CareLevelInfo(BaseModel):
    level: str
    description: str
    maintenance_tips: str


class SunRequirementInfo(BaseModel):
    level: str
    description: str
    placement_tips: str


class ToxicityInfo(BaseModel):
    level: str
    description: str
    safety_tips: str


class PetFriendlinessInfo(BaseModel):
    is_friendly: bool
    reason: str


class CareInstructions(BaseModel):
    watering: str
    fertilizing: str
    pruning: str
    spraying: str
    sunlight_rotation: str


class SuggestedTask(BaseModel):
    name: str
    frequency_days: int = Field(..., ge=1, le=365)


class PlantIdentification(BaseModel):
    botanical_name: str
    common_name: str
    plant_type: str
    confidence: float = Field(..., ge=0, le=1)
    care_level: CareLevelInfo
    sun_requirements: SunRequirementInfo
    toxicity_level: ToxicityInfo
    pet_friendliness: PetFriendlinessInfo
    common_pests_and_diseases: str
    preventive_measures: str
    care: CareInstructions
    suggested_tasks: List[SuggestedTask]


class DiseaseInfo(BaseModel):
    issue: Optional[str] = None
    description: Optional[str] = None
    affected: Optional[str] = None
    steps: Optional[str] = None
    issue_confidence: Optional[float] = Field(None, ge=0, le=1)


class PlantHealthAnalysis(BaseModel):
    botanical_name: str
    common_name: str
    confidence: float = Field(..., ge=0, le=1)
    disease: DiseaseInfo

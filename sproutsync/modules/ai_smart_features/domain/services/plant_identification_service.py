# 📄 File: sproutsync/modules/ai_smart_features/domain/services/plant_identification_service.py
# 🧭 Purpose (Layman Explanation):
# Looks at a plant photo with AI and fills in what the plant is, how hard it is to care for,
# whether it is safe for pets and how often each chore should happen.
#
# 🧪 Purpose (Technical Summary):
# Validates the image, asks Gemini for a schema-constrained identification profile and
# sanitizes the answer into PlantIdentification: defaults for missing fields, confidence
# clamped to [0, 1], suggested tasks filtered to known keys and clamped to 1-365 days.
#
# 🔗 Dependencies:
# - ai_smart_features GeminiClient, plant_image_validator, image_input
#
# 🔄 Connected Modules / Calls From:
# - ai_smart_features.presentation.api.v1.ai

import logging
from typing import Any, Dict, List, Union

from fastapi import Depends

from sproutsync.modules.ai_smart_features.domain.services.image_input import prepare_image_part
from sproutsync.modules.ai_smart_features.domain.services.plant_image_validator import (
    NOT_A_PLANT_MESSAGE,
    validate_plant_image,
)
from sproutsync.modules.ai_smart_features.infrastructure.external.gemini_client import (
    GeminiClient,
    get_gemini_client,
)
from sproutsync.modules.ai_smart_features.presentation.api.schemas.ai_schemas import PlantIdentification
from sproutsync.shared.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

TASK_KEYS = ("watering", "fertilizing", "pruning", "spraying", "sunlightRotation")

DEFAULT_TASK_FREQUENCIES = {
    "watering": 7,
    "fertilizing": 30,
    "pruning": 60,
    "spraying": 14,
    "sunlightRotation": 7,
}

DEFAULT_CARE_LEVEL = {
    "level": "Moderate",
    "description": "Standard houseplant care requirements",
    "maintenance_tips": "Regular watering and occasional fertilizing",
}
DEFAULT_SUN_REQUIREMENTS = {
    "level": "Part to Full",
    "description": "Moderate light conditions",
    "placement_tips": "Place near east or west facing windows",
}
DEFAULT_TOXICITY = {
    "level": "Low",
    "description": "Generally safe for households",
    "safety_tips": "Safe for most environments",
}
DEFAULT_PET_FRIENDLINESS = {
    "is_friendly": True,
    "reason": "Plant safety information not available",
}
DEFAULT_CARE = {
    "watering": "Water when soil is dry",
    "fertilizing": "Fertilize monthly during growing season",
    "pruning": "Prune as needed to maintain shape",
    "spraying": "Mist leaves occasionally for humidity",
    "sunlight_rotation": "Rotate plant for even growth",
}


def _described_level(level_enum: List[str], tip_field: str, description: str) -> Dict[str, Any]:
    return {
        "type": "OBJECT",
        "description": description,
        "properties": {
            "level": {"type": "STRING", "enum": level_enum},
            "description": {"type": "STRING"},
            tip_field: {"type": "STRING"},
        },
        "required": ["level", "description", tip_field],
    }


PLANT_IDENTIFICATION_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "botanicalName": {"type": "STRING", "description": "Botanical (scientific) name of the plant"},
        "commonName": {"type": "STRING", "description": "Common name of the plant"},
        "plantType": {"type": "STRING", "description": "General category of the plant"},
        "confidence": {"type": "NUMBER", "description": "Confidence score between 0.0 and 1.0"},
        "careLevel": _described_level(["Easy", "Moderate", "Difficult"], "maintenanceTips", "Care difficulty"),
        "sunRequirements": _described_level(["No sun", "Part to Full", "Full sun"], "placementTips", "Sunlight needs"),
        "toxicityLevel": _described_level(["Low", "Medium", "High"], "safetyTips", "Toxicity"),
        "petFriendliness": {
            "type": "OBJECT",
            "properties": {
                "isFriendly": {"type": "BOOLEAN"},
                "reason": {"type": "STRING"},
            },
            "required": ["isFriendly", "reason"],
        },
        "commonPestsAndDiseases": {"type": "STRING", "description": "Comma-separated list of common issues"},
        "preventiveMeasures": {"type": "STRING", "description": "Actionable advice to prevent common issues"},
        "care": {
            "type": "OBJECT",
            "properties": {key: {"type": "STRING"} for key in TASK_KEYS},
            "required": list(TASK_KEYS),
        },
        "suggestedTasks": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "name": {"type": "STRING", "enum": list(TASK_KEYS)},
                    "frequencyDays": {"type": "NUMBER"},
                },
                "required": ["name", "frequencyDays"],
            },
        },
    },
    "required": [
        "botanicalName",
        "commonName",
        "plantType",
        "confidence",
        "careLevel",
        "sunRequirements",
        "toxicityLevel",
        "petFriendliness",
        "commonPestsAndDiseases",
        "preventiveMeasures",
        "care",
        "suggestedTasks",
    ],
}

IDENTIFICATION_PROMPT = """You are a world-class botanist and an expert in plant identification and horticulture.
Analyze the image of a single, distinct plant and return a complete profile as strict JSON.
Base the identification on visible characteristics: leaf shape, stem structure, color
variation, texture, flowers, fruits and other distinctive features.

Steps:
1. Describe the main visual features in one sentence and confirm it is a single real plant.
2. Determine the botanical name. If you cannot reach at least 0.5 confidence use "Unknown Plant".
3. Fill every field with accurate, practical, evidence-based information (toxicity as listed by
   the ASPCA, care from standard horticultural practice).
4. Return ONLY the raw JSON object. No markdown fences and no text around it.

Field guidelines:
- botanicalName: genus and species, e.g. "Monstera deliciosa". Required.
- commonName: most common name, or "" when there is none.
- plantType: general category such as "Tropical Foliage" or "Succulent". Never empty.
- confidence: 0.0 to 1.0; lower it for blurry images or partial features.
- careLevel.level: Easy | Moderate | Difficult. sunRequirements.level: No sun | Part to Full | Full sun.
  toxicityLevel.level: Low | Medium | High. Each comes with a description and practical tips.
- petFriendliness.isFriendly: true only when non-toxic to cats and dogs; reason in at most 50 words.
- commonPestsAndDiseases: up to five items, comma-separated.
- preventiveMeasures: concise actionable advice in one string.
- care: watering, fertilizing, pruning, spraying and sunlightRotation instructions, each at most
  100 words with quantifiable advice ("water when the top 2 inches of soil are dry").
- suggestedTasks: exactly the five tasks watering, fertilizing, pruning, spraying and
  sunlightRotation, each with a realistic integer frequencyDays greater than zero.
"""


def clamp_confidence(value: Any, default: float = 0.5) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not value:
        value = default
    return float(min(max(value, 0), 1))


def _merge_described(raw: Any, default: Dict[str, Any], field_map: Dict[str, str]) -> Dict[str, Any]:
    """Copy camelCase AI fields onto snake_case defaults, keeping defaults for blanks."""
    if not isinstance(raw, dict):
        return dict(default)
    merged = dict(default)
    for ai_key, key in field_map.items():
        value = raw.get(ai_key)
        if value not in (None, ""):
            merged[key] = value
    return merged


def sanitize_identification(response: Dict[str, Any]) -> PlantIdentification:
    """
    Fill gaps and clamp ranges in a raw identification answer.

    Suggested tasks keep only known task keys with numeric frequencies; if none survive,
    every task gets its default frequency.
    """
    care = response.get("care") if isinstance(response.get("care"), dict) else {}

    suggested_tasks = []
    raw_tasks = response.get("suggestedTasks")
    if isinstance(raw_tasks, list):
        for task in raw_tasks:
            if not isinstance(task, dict):
                continue
            frequency = task.get("frequencyDays")
            if task.get("name") in TASK_KEYS and isinstance(frequency, (int, float)) and not isinstance(frequency, bool):
                suggested_tasks.append({
                    "name": task["name"],
                    "frequency_days": int(round(max(1, min(frequency, 365)))),
                })

    if not suggested_tasks:
        suggested_tasks = [
            {"name": name, "frequency_days": DEFAULT_TASK_FREQUENCIES[name]}
            for name in TASK_KEYS
        ]

    return PlantIdentification(
        botanical_name=response.get("botanicalName") or "Unknown Plant",
        common_name=response.get("commonName") or "",
        plant_type=response.get("plantType") or "Unknown Type",
        confidence=clamp_confidence(response.get("confidence")),
        care_level=_merge_described(
            response.get("careLevel"),
            DEFAULT_CARE_LEVEL,
            {"level": "level", "description": "description", "maintenanceTips": "maintenance_tips"},
        ),
        sun_requirements=_merge_described(
            response.get("sunRequirements"),
            DEFAULT_SUN_REQUIREMENTS,
            {"level": "level", "description": "description", "placementTips": "placement_tips"},
        ),
        toxicity_level=_merge_described(
            response.get("toxicityLevel"),
            DEFAULT_TOXICITY,
            {"level": "level", "description": "description", "safetyTips": "safety_tips"},
        ),
        pet_friendliness=_merge_described(
            response.get("petFriendliness"),
            DEFAULT_PET_FRIENDLINESS,
            {"isFriendly": "is_friendly", "reason": "reason"},
        ),
        common_pests_and_diseases=(
            response.get("commonPestsAndDiseases") or "Common plant issues information not available"
        ),
        preventive_measures=response.get("preventiveMeasures") or "General plant care recommendations not available",
        care={
            "watering": care.get("watering") or DEFAULT_CARE["watering"],
            "fertilizing": care.get("fertilizing") or DEFAULT_CARE["fertilizing"],
            "pruning": care.get("pruning") or DEFAULT_CARE["pruning"],
            "spraying": care.get("spraying") or DEFAULT_CARE["spraying"],
            "sunlight_rotation": care.get("sunlightRotation") or DEFAULT_CARE["sunlight_rotation"],
        },
        suggested_tasks=suggested_tasks,
    )


class PlantIdentificationService:
    """Gemini-backed plant identification."""

    def __init__(self, client: GeminiClient):
        self.client = client

    async def identify_plant(self, image: Union[bytes, str]) -> PlantIdentification:
        """
        Identify the plant in an uploaded image or at a URL.

        Raises:
            ExternalServiceError: Not a plant, fetch failure or AI failure (all 500)
        """
        image_part = await prepare_image_part(image)

        if not await validate_plant_image(self.client, image_part):
            logger.info("🚫 Plant validation failed, rejecting identification request")
            raise ExternalServiceError(NOT_A_PLANT_MESSAGE, service="gemini", status_code=500)

        logger.info("🤖 Plant validation passed, requesting identification...")
        response = await self.client.generate_json(IDENTIFICATION_PROMPT, image_part, PLANT_IDENTIFICATION_SCHEMA)
        identification = sanitize_identification(response)
        logger.info(
            f"✅ Identified plant: {identification.botanical_name} "
            f"(confidence {identification.confidence:.2f})"
        )
        return identification


def get_identification_service(client: GeminiClient = Depends(get_gemini_client)) -> PlantIdentificationService:
    """FastAPI dependency for PlantIdentificationService."""
    return PlantIdentificationService(client)

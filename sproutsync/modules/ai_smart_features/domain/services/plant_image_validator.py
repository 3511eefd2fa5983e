# 📄 File: sproutsync/modules/ai_smart_features/domain/services/plant_image_validator.py
# 🧭 Purpose (Layman Explanation):
# Before identifying a plant, asks the AI whether the photo actually shows a real plant,
# so pictures of people, pets or plastic flowers get turned away.
#
# 🧪 Purpose (Technical Summary):
# Structured Gemini call returning {isPlant, confidence, reason}. Passes only when isPlant
# is true and confidence >= 0.8; any error during validation counts as a failure.
#
# 🔗 Dependencies:
# - ai_smart_features GeminiClient
# - sproutsync.shared.config.settings (PLANT_VALIDATION_MIN_CONFIDENCE)
#
# 🔄 Connected Modules / Calls From:
# - plant_identification_service, plant_health_service

import logging
from typing import Any, Dict

from sproutsync.modules.ai_smart_features.infrastructure.external.gemini_client import GeminiClient
from sproutsync.shared.config.settings import get_settings
from sproutsync.shared.core.exceptions import SproutSyncException

logger = logging.getLogger(__name__)

MIN_PLANT_CONFIDENCE = get_settings().PLANT_VALIDATION_MIN_CONFIDENCE

NOT_A_PLANT_MESSAGE = (
    "The uploaded image does not appear to contain a plant. Please upload an image of a plant, "
    "tree, flower, or other botanical subject."
)

PLANT_VALIDATION_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "isPlant": {
            "type": "BOOLEAN",
            "description": "Whether the image's primary subject is a real, natural plant",
        },
        "confidence": {"type": "NUMBER", "description": "Confidence score between 0.0 and 1.0"},
        "reason": {"type": "STRING", "description": "Brief explanation for the decision"},
    },
    "required": ["isPlant", "confidence", "reason"],
}

VALIDATION_PROMPT = """You are a strict PLANT IMAGE VALIDATOR.
Decide whether the PRIMARY and CENTRAL subject of the image is a real, natural plant or a single
cohesive arrangement of real plants (for example a bouquet or a vase of cut flowers).
A hand holding or pointing at the plant is acceptable when the plant stays the clear focus.

1. Analyze the subject in one sentence: is it a person, animal, building, object, artificial
   construct or a plant? Check whether plant elements look real (irregular veins, small
   imperfections, color gradients) or artificial (uniform gloss, perfect symmetry, plastic or
   fabric textures).
2. Apply these rules:
   * FAIL if the main subject is a person, animal, object, building or any non-plant element.
   * FAIL for landscapes or scenes where plants are only background.
   * FAIL if the most prominent plant element is grass, lawn, turf, hedge or uniform ground cover.
   * FAIL for topiary or other sculpted plant formations.
   * FAIL if any plant appears artificial (plastic, silk, faux).
   * FAIL if several unrelated plants or objects compete for focus.
   * PASS for a close-up of a leaf, flower or plant, a single potted plant, an isolated plant in
     the ground, or a single bouquet that forms the central subject.
3. Lower the confidence (0.5-0.8) when real versus artificial is borderline or incidental
   elements add ambiguity.
4. Return ONLY a JSON object with isPlant, confidence and reason.
"""


async def validate_plant_image(client: GeminiClient, image_part: Dict[str, Any]) -> bool:
    """
    Check that an image shows a real plant.

    Returns:
        bool: True only for a confident positive verdict. Errors count as False.
    """
    logger.info("🔎 Validating if image contains a plant...")
    try:
        verdict = await client.generate_json(VALIDATION_PROMPT, image_part, PLANT_VALIDATION_SCHEMA)
    except SproutSyncException as e:
        logger.error(f"❌ Error during plant validation: {e.message}")
        return False

    is_plant = verdict.get("isPlant") is True
    confidence = verdict.get("confidence")
    if not isinstance(confidence, (int, float)) or isinstance(confidence, bool):
        confidence = 0.0

    logger.info(
        f"🌿 Validation result: isPlant={is_plant}, confidence={confidence}, "
        f"reason=\"{verdict.get('reason', '')}\""
    )
    return is_plant and confidence >= MIN_PLANT_CONFIDENCE

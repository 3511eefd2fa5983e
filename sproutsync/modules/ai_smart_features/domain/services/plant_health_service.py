# 📄 File: sproutsync/modules/ai_smart_features/domain/services/plant_health_service.py
# 🧭 Purpose (Layman Explanation):
# Looks at a photo of a struggling plant and tells the owner what might be wrong and how
# to help it recover.
#
# 🧪 Purpose (Technical Summary):
# Validates the image, asks Gemini for a schema-constrained diagnosis and sanitizes it
# into PlantHealthAnalysis. Healthy plants come back with every disease field null.
#
# 🔗 Dependencies:
# - ai_smart_features GeminiClient, plant_image_validator, image_input
#
# 🔄 Connected Modules / Calls From:
# - ai_smart_features.presentation.api.v1.ai

import logging
from typing import Any, Dict, Union

from fastapi import Depends

from sproutsync.modules.ai_smart_features.domain.services.image_input import prepare_image_part
from sproutsync.modules.ai_smart_features.domain.services.plant_identification_service import clamp_confidence
from sproutsync.modules.ai_smart_features.domain.services.plant_image_validator import (
    NOT_A_PLANT_MESSAGE,
    validate_plant_image,
)
from sproutsync.modules.ai_smart_features.infrastructure.external.gemini_client import (
    GeminiClient,
    get_gemini_client,
)
from sproutsync.modules.ai_smart_features.presentation.api.schemas.ai_schemas import PlantHealthAnalysis
from sproutsync.shared.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

PLANT_HEALTH_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "botanicalName": {"type": "STRING", "description": "Botanical (scientific) name of the plant"},
        "commonName": {"type": "STRING", "description": "Common name of the plant"},
        "confidence": {"type": "NUMBER", "description": "Confidence score between 0.0 and 1.0"},
        "disease": {
            "type": "OBJECT",
            "properties": {
                "issue": {"type": "STRING", "nullable": True},
                "description": {"type": "STRING", "nullable": True},
                "affected": {"type": "STRING", "nullable": True},
                "steps": {"type": "STRING", "nullable": True},
                "issueConfidence": {"type": "NUMBER", "nullable": True},
            },
            "required": ["issue", "description", "affected", "steps", "issueConfidence"],
        },
    },
    "required": ["botanicalName", "commonName", "confidence", "disease"],
}

HEALTH_PROMPT = """You are a plant health assistant and diagnostic expert. Assess the health of the
plant in the image and identify diseases, pests or deficiencies. Return strict JSON only.

1. Identify the plant's botanical name from visible characteristics; use "Unknown Plant" if unsure.
2. Look for discoloration (yellowing, browning, spots, lesions), physical damage (holes, wilting,
   curling), pests or their traces (webbing, egg clusters) and growth problems (stunting, legginess).
3. If a problem is visible: name the issue (e.g. "Powdery mildew"), summarize it in at most 100
   words, say which plants are typically affected, give actionable treatment steps in one
   bullet-style string and rate issueConfidence from 0.0 to 1.0 (0.8+ only with clear signs).
4. If the plant looks healthy set issue, description, affected, steps and issueConfidence to null.

Base the diagnosis on visual evidence only and never invent diseases.
"""


def sanitize_health_analysis(response: Dict[str, Any]) -> PlantHealthAnalysis:
    disease = response.get("disease") if isinstance(response.get("disease"), dict) else {}
    issue_confidence = disease.get("issueConfidence")

    return PlantHealthAnalysis(
        botanical_name=response.get("botanicalName") or "Unknown Plant",
        common_name=response.get("commonName") or "",
        confidence=clamp_confidence(response.get("confidence")),
        disease={
            "issue": disease.get("issue") or None,
            "description": disease.get("description") or None,
            "affected": disease.get("affected") or None,
            "steps": disease.get("steps") or None,
            "issue_confidence": clamp_confidence(issue_confidence) if issue_confidence else None,
        },
    )


class PlantHealthService:
    """Gemini-backed plant health diagnosis."""

    def __init__(self, client: GeminiClient):
        self.client = client

    async def analyze_plant_health(self, image: Union[bytes, str]) -> PlantHealthAnalysis:
        """
        Raises:
            ExternalServiceError: Not a plant, fetch failure or AI failure (all 500)
        """
        image_part = await prepare_image_part(image)

        if not await validate_plant_image(self.client, image_part):
            logger.info("🚫 Plant validation failed, rejecting health analysis request")
            raise ExternalServiceError(NOT_A_PLANT_MESSAGE, service="gemini", status_code=500)

        response = await self.client.generate_json(HEALTH_PROMPT, image_part, PLANT_HEALTH_SCHEMA)
        analysis = sanitize_health_analysis(response)
        logger.info(f"🩺 Health analysis for {analysis.botanical_name}: issue={analysis.disease.issue}")
        return analysis


def get_health_service(client: GeminiClient = Depends(get_gemini_client)) -> PlantHealthService:
    """FastAPI dependency for PlantHealthService."""
    return PlantHealthService(client)

# 📄 File: sproutsync/modules/ai_smart_features/infrastructure/external/gemini_client.py
# 🧭 Purpose (Layman Explanation):
# The messenger that shows a plant photo to Google's Gemini AI together with our
# instructions and brings back its answer.
#
# 🧪 Purpose (Technical Summary):
# Thin async wrapper over google-generativeai. Sends a text prompt plus one inline image
# part with JSON-mode generation (optionally constrained by a response schema) and decodes
# the reply. Transient Google API failures are retried with tenacity.
#
# 🔗 Dependencies:
# - google-generativeai (GenerativeModel.generate_content_async)
# - google-api-core exceptions
# - tenacity
#
# 🔄 Connected Modules / Calls From:
# - ai_smart_features.domain.services (validator, identification, health)
# - ai_smart_features.presentation.api.v1.ai (health check, dependency)

import json
import logging
from typing import Any, Dict, Optional

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from sproutsync.shared.config.settings import get_settings
from sproutsync.shared.core.exceptions import ConfigurationError, ExternalServiceError

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (
    google_exceptions.ServiceUnavailable,
    google_exceptions.DeadlineExceeded,
    google_exceptions.InternalServerError,
)


def build_image_part(data: bytes, mime_type: str) -> Dict[str, Any]:
    """Inline image blob in the shape google-generativeai accepts as a content part."""
    return {"mime_type": mime_type, "data": data}


class GeminiClient:
    """JSON-mode Gemini calls with an inline image."""

    def __init__(self, api_key: str, model_name: str):
        genai.configure(api_key=api_key)
        self.model_name = model_name
        self.model = genai.GenerativeModel(model_name)

    @retry(
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, max=4),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _generate(self, contents: list, generation_config: "genai.GenerationConfig"):
        return await self.model.generate_content_async(contents, generation_config=generation_config)

    async def generate_json(
        self,
        prompt: str,
        image_part: Dict[str, Any],
        schema: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Ask Gemini about an image and parse its JSON answer.

        Args:
            prompt: Instructions for the model
            image_part: Result of build_image_part
            schema: Optional response schema (OpenAPI subset, upper-case type names)

        Returns:
            dict: The decoded JSON object

        Raises:
            ExternalServiceError: Gemini failed, blocked the answer or returned invalid JSON
        """
        generation_config = genai.GenerationConfig(
            response_mime_type="application/json",
            response_schema=schema,
        )

        try:
            response = await self._generate([prompt, image_part], generation_config)
            text = response.text
        except google_exceptions.GoogleAPIError as e:
            logger.error(f"❌ Gemini request failed: {e}")
            raise ExternalServiceError(
                "AI service request failed",
                service="gemini",
                service_response=str(e),
                status_code=500,
            )
        except ValueError as e:
            # response.text raises when the candidate was blocked or empty
            logger.error(f"❌ Gemini returned no usable text: {e}")
            raise ExternalServiceError("AI service returned an empty response", service="gemini", status_code=500)

        logger.debug(f"🤖 Gemini raw response: {text[:200]}")
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            logger.error(f"❌ Failed to parse Gemini JSON: {text[:500]}")
            raise ExternalServiceError("Invalid JSON format in AI response", service="gemini", status_code=500)

        if not isinstance(parsed, dict):
            raise ExternalServiceError("Invalid JSON format in AI response", service="gemini", status_code=500)
        return parsed


_gemini_client: Optional[GeminiClient] = None


def get_gemini_client() -> GeminiClient:
    """
    Process-wide Gemini client.

    Raises:
        ConfigurationError: GEMINI_API_KEY is not set
    """
    global _gemini_client
    if _gemini_client is None:
        settings = get_settings()
        if not settings.GEMINI_API_KEY:
            logger.error("❌ GEMINI_API_KEY environment variable is not set")
            raise ConfigurationError("GEMINI_API_KEY environment variable is required", setting="GEMINI_API_KEY")
        _gemini_client = GeminiClient(settings.GEMINI_API_KEY, settings.GEMINI_MODEL)
        logger.info(f"🤖 Gemini client initialized with model {settings.GEMINI_MODEL}")
    return _gemini_client

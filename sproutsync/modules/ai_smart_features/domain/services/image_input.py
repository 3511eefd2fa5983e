# 📄 File: sproutsync/modules/ai_smart_features/domain/services/image_input.py
# 🧭 Purpose (Layman Explanation):
# Turns whatever picture the user gave us (an uploaded file or a link) into the form the
# AI can look at.
#
# 🧪 Purpose (Technical Summary):
# Normalizes raw bytes or an http(s) URL into a Gemini inline image part. URL downloads go
# through shared image_utils; fetch failures surface as a 500 with a user-facing message.
#
# 🔗 Dependencies:
# - shared.utils.image_utils (httpx fetcher, MIME sniffing)
#
# 🔄 Connected Modules / Calls From:
# - plant_identification_service, plant_health_service

import logging
from typing import Any, Dict, Union

from sproutsync.modules.ai_smart_features.infrastructure.external.gemini_client import build_image_part
from sproutsync.shared.core.exceptions import ExternalServiceError, ValidationError
from sproutsync.shared.utils.image_utils import fetch_image_from_url, get_mime_type_from_buffer

logger = logging.getLogger(__name__)

FETCH_FAILED_MESSAGE = (
    "Unable to access the image URL. Please make sure the link points to a publicly "
    "accessible image and try again."
)


async def prepare_image_part(image: Union[bytes, str]) -> Dict[str, Any]:
    """
    Build a Gemini image part from uploaded bytes or an image URL.

    Raises:
        ValidationError: A string that is not an http(s) URL
        ExternalServiceError: The URL could not be downloaded (500)
    """
    if isinstance(image, bytes):
        logger.info(f"🖼️ Processing uploaded image: {len(image)} bytes")
        return build_image_part(image, get_mime_type_from_buffer(image))

    if not image.startswith(("http://", "https://")):
        raise ValidationError("Invalid URL format", field="image_url", value=image)

    try:
        data = await fetch_image_from_url(image)
    except ExternalServiceError as e:
        logger.error(f"❌ {e.message}")
        raise ExternalServiceError(
            FETCH_FAILED_MESSAGE,
            service="image_fetch",
            service_response=e.message,
            status_code=500,
        )

    return build_image_part(data, get_mime_type_from_buffer(data))

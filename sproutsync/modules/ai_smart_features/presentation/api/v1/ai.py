# 📄 File: sproutsync/modules/ai_smart_features/presentation/api/v1/ai.py
# 🧭 Purpose (Layman Explanation):
# Endpoints where the app sends a plant photo (as a file or a link) and gets back what the
# plant is, or what might be wrong with it.
#
# 🧪 Purpose (Technical Summary):
# FastAPI router mounted at /api/ai. Identification and health analysis are rate limited
# with the shared slowapi limiter; uploads are restricted to image/* up to
# AI_UPLOAD_MAX_BYTES.
#
# 🔗 Dependencies:
# - FastAPI UploadFile (python-multipart)
# - slowapi shared limiter
# - ai_smart_features identification and health services
#
# 🔄 Connected Modules / Calls From:
# - sproutsync.api.v1.router

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile

from sproutsync.modules.ai_smart_features.domain.services.plant_health_service import (
    PlantHealthService,
    get_health_service,
)
from sproutsync.modules.ai_smart_features.domain.services.plant_identification_service import (
    PlantIdentificationService,
    get_identification_service,
)
from sproutsync.modules.ai_smart_features.presentation.api.schemas.ai_schemas import ImageUrlRequest
from sproutsync.shared.config.settings import get_settings
from sproutsync.shared.core.dependencies import CurrentUser, get_current_user
from sproutsync.shared.core.exceptions import (
    ConfigurationError,
    FileTooLargeError,
    InvalidFileTypeError,
    ValidationError,
)
from sproutsync.shared.core.rate_limiter import limiter
from sproutsync.shared.core.responses import api_response

logger = logging.getLogger(__name__)
settings = get_settings()

ai_router = APIRouter()

AI_ERROR_RESPONSES = {
    429: {"description": "Rate limit exceeded"},
    500: {"description": "AI identification failed or image is not a plant"},
}


@ai_router.get("/health", summary="AI service health check")
async def ai_health():
    if not settings.GEMINI_API_KEY:
        raise ConfigurationError("AI service is not configured: GEMINI_API_KEY is missing", setting="GEMINI_API_KEY")
    return {
        "success": True,
        "message": "AI service is configured",
        "api_key_configured": True,
    }


@ai_router.post(
    "/identify/file",
    summary="Identify a plant from an uploaded image",
    responses={
        400: {"description": "Missing image or non-image file"},
        413: {"description": "Image larger than 10MB"},
        **AI_ERROR_RESPONSES,
    },
)
@limiter.limit(settings.AI_RATE_LIMIT)
async def identify_from_file(
    request: Request,
    image: Optional[UploadFile] = File(None, description="Plant photo (image/*, up to 10MB)"),
    current_user: CurrentUser = Depends(get_current_user),
    service: PlantIdentificationService = Depends(get_identification_service),
):
    if image is None:
        raise ValidationError("No image file provided", field="image")

    if not (image.content_type or "").startswith("image/"):
        raise InvalidFileTypeError("Only image files are allowed", content_type=image.content_type)

    data = await image.read()
    if len(data) > settings.AI_UPLOAD_MAX_BYTES:
        raise FileTooLargeError(
            "File size too large. Maximum size is 10MB.",
            max_bytes=settings.AI_UPLOAD_MAX_BYTES,
            actual_bytes=len(data),
        )

    logger.info(f"🤖 User {current_user.user_id} requested identification of an uploaded image")
    identification = await service.identify_plant(data)
    return api_response(data=identification.model_dump(), message="Plant identified successfully")


@ai_router.post("/identify/url", summary="Identify a plant from an image URL", responses=AI_ERROR_RESPONSES)
@limiter.limit(settings.AI_RATE_LIMIT)
async def identify_from_url(
    request: Request,
    payload: ImageUrlRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: PlantIdentificationService = Depends(get_identification_service),
):
    logger.info(f"🤖 User {current_user.user_id} requested identification of {payload.image_url}")
    identification = await service.identify_plant(str(payload.image_url))
    return api_response(data=identification.model_dump(), message="Plant identified successfully")


@ai_router.post("/identify/issue/url", summary="Diagnose plant health from an image URL", responses=AI_ERROR_RESPONSES)
@limiter.limit(settings.AI_RATE_LIMIT)
async def identify_issue_from_url(
    request: Request,
    payload: ImageUrlRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: PlantHealthService = Depends(get_health_service),
):
    logger.info(f"🩺 User {current_user.user_id} requested health analysis of {payload.image_url}")
    analysis = await service.analyze_plant_health(str(payload.image_url))
    return api_response(data=analysis.model_dump(), message="Plant health analyzed successfully")

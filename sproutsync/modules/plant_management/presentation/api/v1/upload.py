# 📄 File: sproutsync/modules/plant_management/presentation/api/v1/upload.py
# 🧭 Purpose (Layman Explanation):
# Receives a photo from the phone, checks it is a real picture of a sensible size and stores
# it in the cloud, returning links the app can show.
#
# 🧪 Purpose (Technical Summary):
# FastAPI router mounted at /api/upload. Multipart "image" field, MIME allow-list and 5 MB
# limit, Cloudinary upload into the configured folder, rate limited with slowapi.
#
# 🔗 Dependencies:
# - FastAPI UploadFile (python-multipart)
# - slowapi shared limiter
# - sproutsync.shared.infrastructure.storage.cloudinary_storage
#
# 🔄 Connected Modules / Calls From:
# - sproutsync.api.v1.router
# - Frontend photo and tracking flows (followed by POST /plants/{id}/photos)

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile

from sproutsync.shared.config.settings import get_settings
from sproutsync.shared.core.dependencies import CurrentUser, get_current_user
from sproutsync.shared.core.exceptions import FileTooLargeError, InvalidFileTypeError, ValidationError
from sproutsync.shared.core.rate_limiter import limiter
from sproutsync.shared.core.responses import api_response
from sproutsync.shared.infrastructure.storage.cloudinary_storage import (
    CloudinaryStorage,
    build_optimized_url,
    get_cloudinary_storage,
)

logger = logging.getLogger(__name__)
settings = get_settings()

upload_router = APIRouter()

ALLOWED_IMAGE_TYPES = [
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
    "image/heic",
    "image/heif",
]


@upload_router.post(
    "/image",
    summary="Upload image",
    responses={
        400: {"description": "Missing image or invalid file type"},
        413: {"description": "File size too large"},
        429: {"description": "Rate limit exceeded"},
    },
)
@limiter.limit(settings.UPLOAD_RATE_LIMIT)
async def upload_image(
    request: Request,
    image: Optional[UploadFile] = File(None, description="JPG, PNG, WebP, HEIC or HEIF up to 5MB"),
    current_user: CurrentUser = Depends(get_current_user),
    storage: CloudinaryStorage = Depends(get_cloudinary_storage),
):
    """
    Upload a plant image to Cloudinary.

    Returns:
        public_id, secure_url, optimized_url, width, height, format and bytes
    """
    if image is None:
        raise ValidationError("No image file provided", field="image")

    if image.content_type not in ALLOWED_IMAGE_TYPES:
        raise InvalidFileTypeError(
            "Invalid file type. Only JPG, PNG, WebP, HEIC, and HEIF are allowed.",
            content_type=image.content_type,
            allowed_types=ALLOWED_IMAGE_TYPES,
        )

    data = await image.read()
    if len(data) > settings.UPLOAD_MAX_BYTES:
        raise FileTooLargeError(
            "File size too large. Maximum size is 5MB.",
            max_bytes=settings.UPLOAD_MAX_BYTES,
            actual_bytes=len(data),
        )

    result = await storage.upload_image(
        data,
        filename=image.filename or "upload",
        content_type=image.content_type,
        folder=settings.CLOUDINARY_FOLDER,
    )
    logger.info(f"📤 User {current_user.user_id} uploaded image {result['public_id']} ({len(data)} bytes)")

    return api_response(
        data={**result, "optimized_url": build_optimized_url(result["secure_url"])},
        message="Image uploaded successfully",
    )

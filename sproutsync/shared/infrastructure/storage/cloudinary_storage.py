# 📄 File: sproutsync/shared/infrastructure/storage/cloudinary_storage.py

# 🧭 Purpose (Layman Explanation):
# Sends plant photos to Cloudinary, our online photo storage, and removes them
# again when a plant or journal entry is deleted.

# 🧪 Purpose (Technical Summary):
# Wrapper over the Cloudinary Python SDK: image upload with size-limit and quality
# transformations, destroy by public id, and optimized URL derivation. The SDK is blocking,
# so its calls run in a worker thread.

# 🔗 Dependencies:
# - cloudinary: official SDK (config, uploader.upload, uploader.destroy)
# - sproutsync.shared.config.settings

# 🔄 Connected Modules / Calls From:
# plant_management upload router, plant service (delete), tracking router (delete)

import asyncio
import io
import logging
from functools import lru_cache
from typing import Any, Dict, Optional

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader

from sproutsync.shared.config.settings import get_settings
from sproutsync.shared.core.exceptions import ConfigurationError, ExternalServiceError

logger = logging.getLogger(__name__)

UPLOAD_TRANSFORMATION = [
    {"width": 800, "height": 800, "crop": "limit"},
    {"quality": "auto:good"},
]
OPTIMIZED_URL_TRANSFORMATION = "w_800,h_800,c_limit,q_auto:good,f_auto"


def build_optimized_url(secure_url: str) -> str:
    """
    Insert the delivery transformation right after /upload/.

    Example:
        >>> build_optimized_url("https://res.cloudinary.com/demo/image/upload/v1/plant.jpg")
        'https://res.cloudinary.com/demo/image/upload/w_800,h_800,c_limit,q_auto:good,f_auto/v1/plant.jpg'
    """
    return secure_url.replace("/upload/", f"/upload/{OPTIMIZED_URL_TRANSFORMATION}/", 1)


class CloudinaryStorage:
    """
    Image storage backed by the Cloudinary SDK.
    """

    def __init__(self):
        self.settings = get_settings()
        self.cloud_name = self.settings.CLOUDINARY_CLOUD_NAME
        self.api_key = self.settings.CLOUDINARY_API_KEY
        self.api_secret = self.settings.CLOUDINARY_API_SECRET
        self.default_folder = self.settings.CLOUDINARY_FOLDER

        if self.is_configured:
            cloudinary.config(
                cloud_name=self.cloud_name,
                api_key=self.api_key,
                api_secret=self.api_secret,
                secure=True,
            )

    @property
    def is_configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def _require_configuration(self) -> None:
        if not self.is_configured:
            raise ConfigurationError("Cloudinary is not configured", setting="CLOUDINARY_CLOUD_NAME")

    async def upload_image(
        self,
        data: bytes,
        filename: str = "upload",
        content_type: str = "image/jpeg",
        folder: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Upload an image, limited to 800x800 with automatic good quality.

        Returns:
            dict: public_id, secure_url, width, height, format, bytes
        """
        self._require_configuration()

        image = io.BytesIO(data)
        image.name = filename
        try:
            result = await asyncio.to_thread(
                cloudinary.uploader.upload,
                image,
                folder=folder or self.default_folder,
                resource_type="image",
                transformation=UPLOAD_TRANSFORMATION,
            )
        except cloudinary.exceptions.Error as e:
            logger.error(f"❌ Error uploading {content_type} image to Cloudinary: {e}")
            raise ExternalServiceError(
                "Failed to upload image to Cloudinary",
                service="cloudinary",
                service_response=str(e)[:500],
            ) from e

        logger.info(f"☁️ Uploaded image to Cloudinary: {result.get('public_id')}")
        return {
            "public_id": result.get("public_id"),
            "secure_url": result.get("secure_url"),
            "width": result.get("width"),
            "height": result.get("height"),
            "format": result.get("format"),
            "bytes": result.get("bytes", len(data)),
        }

    async def delete_image(self, public_id: str) -> None:
        """
        Delete an image by public id.

        Raises:
            ExternalServiceError: If Cloudinary rejects the request
        """
        self._require_configuration()

        try:
            result = await asyncio.to_thread(cloudinary.uploader.destroy, public_id, resource_type="image")
        except cloudinary.exceptions.Error as e:
            logger.error(f"❌ Error deleting {public_id} from Cloudinary: {e}")
            raise ExternalServiceError(
                "Failed to delete image from Cloudinary",
                service="cloudinary",
                service_response=str(e)[:500],
            ) from e

        # "not found" means it is already gone
        if result.get("result") not in ("ok", "not found"):
            raise ExternalServiceError(
                "Failed to delete image from Cloudinary",
                service="cloudinary",
                service_response=str(result)[:500],
            )
        logger.info(f"🗑️ Deleted Cloudinary image {public_id}")


@lru_cache()
def get_cloudinary_storage() -> CloudinaryStorage:
    """Cached Cloudinary client (FastAPI dependency)."""
    return CloudinaryStorage()

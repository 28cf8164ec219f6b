# src/app/infra/storage/cloudinary_provider.py
"""
Cloudinary media store implementation.
Uploads go through the cloudinary SDK; transformed URLs are built locally.
"""
from __future__ import annotations

import logging
import os
from typing import Optional

import cloudinary
import cloudinary.uploader
import cloudinary.utils
from cloudinary.exceptions import Error as CloudinaryError

from src.app.infra.storage.base import MediaStore, StoredMedia, Transformation
from src.services.errors import MediaStoreError

logger = logging.getLogger(__name__)


class CloudinaryMediaStore(MediaStore):
    """
    Cloudinary media store.

    Environment variables required (checked on first upload):
    - CLOUDINARY_CLOUD_NAME
    - CLOUDINARY_API_KEY
    - CLOUDINARY_API_SECRET
    """

    def __init__(
        self,
        cloud_name: Optional[str] = None,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
    ):
        self.cloud_name = cloud_name or os.getenv("CLOUDINARY_CLOUD_NAME")
        self.api_key = api_key or os.getenv("CLOUDINARY_API_KEY")
        self.api_secret = api_secret or os.getenv("CLOUDINARY_API_SECRET")
        self._configured = False

    def _ensure_configured(self) -> None:
        """Validate credentials and configure the SDK on first use."""
        if self._configured:
            return

        if not all([self.cloud_name, self.api_key, self.api_secret]):
            raise MediaStoreError(
                "Missing Cloudinary configuration. Required: CLOUDINARY_CLOUD_NAME, "
                "CLOUDINARY_API_KEY, CLOUDINARY_API_SECRET"
            )

        cloudinary.config(
            cloud_name=self.cloud_name,
            api_key=self.api_key,
            api_secret=self.api_secret,
            secure=True,
        )
        self._configured = True

        logger.info("CloudinaryMediaStore configured: cloud=%s", self.cloud_name)

    def upload(
        self,
        source: str,
        transformation: Optional[Transformation] = None,
    ) -> StoredMedia:
        self._ensure_configured()
        options = {"resource_type": "image"}
        if transformation:
            options["transformation"] = transformation

        try:
            result = cloudinary.uploader.upload(source, **options)
        except CloudinaryError as e:
            logger.error("Cloudinary upload failed: %s", e)
            raise MediaStoreError(f"Cloudinary upload failed: {e}") from e

        public_id = result.get("public_id")
        secure_url = result.get("secure_url")
        if not public_id:
            raise MediaStoreError("Cloudinary upload returned no public_id", details=result)
        if not secure_url:
            secure_url = self.delivery_url(public_id, [])

        logger.info("Uploaded media to Cloudinary: public_id=%s", public_id)
        return StoredMedia(public_id=public_id, secure_url=secure_url)

    def delivery_url(
        self,
        public_id: str,
        transformation: Transformation,
    ) -> str:
        self._ensure_configured()
        url, _options = cloudinary.utils.cloudinary_url(
            public_id,
            transformation=transformation,
            resource_type="image",
            secure=True,
        )
        return url

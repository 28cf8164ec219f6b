# src/app/infra/storage/base.py
"""
Abstract base class for media stores.
This interface allows swapping the hosted media backend (Cloudinary, or a fake for testing).
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

Transformation = list[dict[str, Any]]

BACKGROUND_REMOVAL: Transformation = [
    {
        "effect": "background_removal",
        "background_removal": "remove_the_background",
    }
]


def object_removal(object_name: str) -> Transformation:
    """Generative removal of every instance of `object_name` from an image."""
    return [{"effect": f"gen_remove:{object_name}"}]


@dataclass(frozen=True)
class StoredMedia:
    """An asset held by the media store."""
    public_id: str
    secure_url: str


class MediaStore(ABC):
    """
    Abstract interface for hosted media operations.

    Implementations:
    - CloudinaryMediaStore: Cloudinary upload and delivery API
    """

    @abstractmethod
    def upload(
        self,
        source: str,
        transformation: Optional[Transformation] = None,
    ) -> StoredMedia:
        """
        Upload an asset to the store.

        Args:
            source: A remote URL, a local file path or a base64 data URI
            transformation: Optional incoming transformation applied before storing

        Returns:
            The stored asset with its public URL
        """
        pass

    @abstractmethod
    def delivery_url(
        self,
        public_id: str,
        transformation: Transformation,
    ) -> str:
        """
        Build a delivery URL that applies a transformation on the fly.

        Args:
            public_id: Identifier of a previously uploaded asset
            transformation: Transformation to apply at delivery time

        Returns:
            The transformed asset URL
        """
        pass

    def upload_image_payload(self, image: str) -> StoredMedia:
        """
        Upload an image returned by a generation service.

        Hosted images are fetched by URL; anything else is taken as base64 PNG data.
        """
        if image.startswith("http"):
            return self.upload(image)
        return self.upload(f"data:image/png;base64,{image}")

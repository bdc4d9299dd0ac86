"""Image storage on Cloudinary.

There is no transaction spanning the blob store and the database, so the
content service calls ``discard`` to delete uploaded images whenever the
database write that should reference them fails.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from threading import Lock
from typing import Any

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError

from qa_forum.core.errors import DependencyFailureError, ValidationFailedError
from qa_forum.core.settings import settings

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_FORMATS = ("jpg", "jpeg", "png", "gif", "webp")
# Results Cloudinary reports for a destroy call that leaves no image behind.
DESTROYED_RESULTS = ("ok", "not found")


@dataclass(frozen=True)
class AssetConfig:
    """Immutable configuration for the blob store."""

    cloud_name: str | None
    api_key: str | None
    api_secret: str | None
    folder: str
    upload_prefix: str
    timeout_seconds: float
    max_bytes: int

    @property
    def enabled(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)


@dataclass(frozen=True)
class StoredAsset:
    """Reference to an uploaded image, as stored on questions and answers."""

    url: str
    public_id: str
    width: int | None = None
    height: int | None = None
    format: str | None = None
    bytes: int | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "public_id": self.public_id,
            "width": self.width,
            "height": self.height,
            "format": self.format,
        }


def load_asset_config() -> AssetConfig:
    """Build configuration object from global settings."""
    return AssetConfig(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret,
        folder=settings.cloudinary_folder,
        upload_prefix=settings.cloudinary_upload_prefix,
        timeout_seconds=float(settings.asset_timeout_seconds),
        max_bytes=settings.upload_max_bytes,
    )


class CloudinaryAssetStore:
    """Wrapper around the Cloudinary SDK's upload API."""

    def __init__(self, config: AssetConfig | None = None) -> None:
        self.config = config or load_asset_config()
        self._configured = False
        self._config_lock = Lock()

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    @property
    def read_limit(self) -> int:
        """Bytes to read from an upload; one past the limit marks it oversized."""
        return self.config.max_bytes + 1

    def _ensure_configured(self) -> None:
        if not self.enabled:
            raise DependencyFailureError("Image storage is not configured")

        with self._config_lock:
            if not self._configured:
                cloudinary.config(
                    cloud_name=self.config.cloud_name,
                    api_key=self.config.api_key,
                    api_secret=self.config.api_secret,
                    upload_prefix=self.config.upload_prefix,
                    secure=True,
                )
                self._configured = True

    def validate_upload(self, data: bytes, content_type: str | None) -> None:
        """Raise ValidationFailedError for non-images and oversized files."""
        if not content_type or not content_type.startswith("image/"):
            raise ValidationFailedError("File must be an image")
        if not data:
            raise ValidationFailedError("No image file provided")
        if len(data) > self.config.max_bytes:
            limit_mb = self.config.max_bytes / (1024 * 1024)
            raise ValidationFailedError(f"File size must be less than {limit_mb:g}MB")

    def upload(self, data: bytes, filename: str, content_type: str | None) -> StoredAsset:
        """Upload one image and return its reference.

        Raises:
            ValidationFailedError: If the file is not an acceptable image
            DependencyFailureError: If the blob store rejects or fails the upload
        """
        self.validate_upload(data, content_type)
        self._ensure_configured()
        try:
            payload = cloudinary.uploader.upload(
                (filename, data),
                folder=self.config.folder,
                allowed_formats=list(ALLOWED_IMAGE_FORMATS),
                resource_type="image",
                timeout=self.config.timeout_seconds,
            )
        except CloudinaryError as exc:
            logger.error("Image upload failed: %s", exc)
            raise DependencyFailureError("Failed to upload image to cloud storage") from exc

        return StoredAsset(
            url=payload["secure_url"],
            public_id=payload["public_id"],
            width=payload.get("width"),
            height=payload.get("height"),
            format=payload.get("format"),
            bytes=payload.get("bytes"),
        )

    def destroy(self, public_id: str) -> None:
        """Delete one image by its public id.

        Raises:
            DependencyFailureError: If the blob store call fails
        """
        self._ensure_configured()
        try:
            result = cloudinary.uploader.destroy(
                public_id, timeout=self.config.timeout_seconds
            )
        except CloudinaryError as exc:
            logger.error("Deleting image %s failed: %s", public_id, exc)
            raise DependencyFailureError(f"Failed to delete image {public_id}") from exc

        if result.get("result") not in DESTROYED_RESULTS:
            logger.error("Deleting image %s returned %s", public_id, result)
            raise DependencyFailureError(f"Failed to delete image {public_id}")

    def discard(self, images: Iterable[Mapping[str, Any]]) -> list[str]:
        """Delete every referenced image, continuing past individual failures.

        Returns:
            Public ids that could not be deleted.
        """
        leftovers: list[str] = []
        for image in images:
            public_id = image.get("public_id")
            if not public_id:
                continue
            try:
                self.destroy(public_id)
            except DependencyFailureError:
                leftovers.append(public_id)
        if leftovers:
            logger.warning("Orphaned images left in storage: %s", ", ".join(leftovers))
        return leftovers


class _AssetStoreSingleton:
    """Singleton wrapper for CloudinaryAssetStore."""

    _instance: CloudinaryAssetStore | None = None

    @classmethod
    def get_instance(cls) -> CloudinaryAssetStore:
        """Get or create the singleton asset store."""
        if cls._instance is None:
            cls._instance = CloudinaryAssetStore()
        return cls._instance


def get_asset_store() -> CloudinaryAssetStore:
    """Return the process-wide asset store."""
    return _AssetStoreSingleton.get_instance()

# src/remark_mongo/services/image_service.py
"""Request-level rules of the ``image.*`` methods."""

from __future__ import annotations

import base64
import logging
from datetime import timedelta

from remark_mongo.repositories.image_repo import ImageRepository
from remark_mongo.schemas.image import CleanupRequest, ImageIdRequest, SaveRequest, StoreInfo
from remark_mongo.utils.concurrency import run_concurrently

logger = logging.getLogger(__name__)

# Avatars are uploaded at login, before the user exists; keep them this long.
AVATAR_GRACE_PERIOD = timedelta(hours=4)


class ImageService:
    """Implements the Remark42 image ``Store`` interface."""

    def __init__(self, images: ImageRepository) -> None:
        self.images = images

    def save(self, request: SaveRequest) -> None:
        """Stage an uploaded image; ``data`` arrives already base64-decoded."""
        self.images.save_staging_image(request.id, request.data)

    def load(self, request: ImageIdRequest) -> str:
        """Return the image bytes base64-encoded for the JSON envelope."""
        return base64.b64encode(self.images.load_image(request.id)).decode("ascii")

    def commit(self, request: ImageIdRequest) -> None:
        self.images.commit_image(request.id)

    def reset_cleanup_timer(self, request: ImageIdRequest) -> None:
        self.images.reset_cleanup_timer(request.id)

    def info(self) -> StoreInfo:
        return self.images.staging_info()

    def cleanup(self, request: CleanupRequest) -> None:
        """Expire staged images older than the TTL and collect stale avatars.

        Both sweeps always run; a failure in either is raised afterwards.
        """
        # Go durations are nanoseconds; MongoDB dates keep milliseconds.
        ttl = timedelta(milliseconds=max(0, round(request.ttl / 1_000_000)))
        expired, avatars = run_concurrently(
            lambda: self.images.expire_images(ttl),
            lambda: self.images.cleanup_avatars(AVATAR_GRACE_PERIOD),
        )
        logger.info("Cleanup removed %d staged image(s) and %d avatar(s)", expired, avatars)

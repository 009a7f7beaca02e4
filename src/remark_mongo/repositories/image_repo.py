# src/remark_mongo/repositories/image_repo.py
"""GridFS-backed image storage with a staging/commit lifecycle."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta
from typing import Any
from urllib.parse import urlsplit

from pymongo.database import Database

from remark_mongo.core.errors import NotFoundError
from remark_mongo.db.client import (
    IMAGE_CHUNK_SIZE_BYTES,
    IMAGES_BUCKET,
    files_collection,
    gridfs_bucket,
    users_collection,
)
from remark_mongo.db.time import ZERO_TIME, from_storage, to_storage, utcnow
from remark_mongo.schemas.image import StoreInfo

logger = logging.getLogger(__name__)

__all__ = ["ImageRepository", "extract_picture_name"]


def extract_picture_name(picture: str | None) -> str | None:
    """Return the file name an avatar URL points to.

    Args:
        picture: Avatar reference stored on a user; an absolute URL or a
            bare file name.

    Returns:
        The last path segment (the one before a single trailing slash), the
        value itself when it is already a bare file name, or ``None`` when no
        name can be derived.
    """
    if picture is None or not picture.strip():
        return None
    value = picture.strip()

    parts = urlsplit(value)
    if not parts.scheme and "/" not in value:
        return value
    if not parts.scheme or not parts.netloc:
        return None

    # Only a single trailing slash is skipped.
    segments = parts.path.split("/")
    name = segments.pop() or (segments.pop() if segments else "")
    return name or None


class ImageRepository:
    """Staged uploads, commits and garbage collection of images and avatars."""

    def __init__(
        self,
        db: Database[dict[str, Any]],
        avatars_bucket: str | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Bind the repository to a database.

        Args:
            db: Database holding the image and user collections.
            avatars_bucket: GridFS bucket with user avatars, if avatars are
                stored in MongoDB at all.
            clock: Source of the current time.
        """
        self.db = db
        self.avatars_bucket = avatars_bucket
        self.clock = clock
        self._images = gridfs_bucket(db, IMAGES_BUCKET)
        self._image_files = files_collection(db, IMAGES_BUCKET)

    def save_staging_image(self, image_id: str, data: bytes) -> None:
        """Store ``data`` under ``image_id`` in the staging state."""
        self._images.upload_from_stream(
            image_id,
            data,
            chunk_size_bytes=IMAGE_CHUNK_SIZE_BYTES,
            metadata={
                "staging": True,
                "cleanup_timer": to_storage(self.clock()),
                "user_id": image_id.split("/")[0],
            },
        )

    def load_image(self, image_id: str) -> bytes:
        """Return the committed copy of an image, falling back to staging.

        Raises:
            NotFoundError: If no file exists under ``image_id``.
        """
        files = list(self._image_files.find({"filename": image_id}, {"metadata": 1}))
        committed = [f for f in files if not (f.get("metadata") or {}).get("staging", False)]
        candidates = committed or files
        if not candidates:
            raise NotFoundError(f"Image '{image_id}' not found")
        with self._images.open_download_stream(candidates[0]["_id"]) as stream:
            return stream.read()

    def commit_image(self, image_id: str) -> None:
        """Move a staged image to the committed state.

        Raises:
            NotFoundError: If no staged file exists under ``image_id``.
        """
        result = self._image_files.update_one(
            {"filename": image_id, "metadata.staging": True},
            {"$set": {"metadata.staging": False}},
        )
        if result.matched_count != 1:
            raise NotFoundError(f"failed to commit {image_id}, not found in staging")

    def reset_cleanup_timer(self, image_id: str) -> None:
        """Restart the expiry countdown of a staged image.

        Raises:
            NotFoundError: If no staged file exists under ``image_id``.
        """
        result = self._image_files.update_one(
            {"filename": image_id, "metadata.staging": True},
            {"$set": {"metadata.cleanup_timer": to_storage(self.clock())}},
        )
        if result.matched_count != 1:
            raise NotFoundError(f"failed to reset cleanup timer {image_id}, not found in staging")

    def expire_images(self, ttl: timedelta) -> int:
        """Delete staged images whose cleanup timer is older than ``ttl``.

        Returns:
            The number of deleted files.
        """
        cutoff = to_storage(self.clock() - ttl)
        expired = self._image_files.find(
            {"metadata.staging": True, "metadata.cleanup_timer": {"$lt": cutoff}},
            {"_id": 1},
        )
        return self._delete_files(IMAGES_BUCKET, (f["_id"] for f in expired))

    def cleanup_avatars(self, grace: timedelta) -> int:
        """Delete avatars older than ``grace`` that no user references.

        Avatars are uploaded at login but users are only stored with their
        first comment, hence the grace period.

        Returns:
            The number of deleted files; 0 when no avatars bucket is set.
        """
        if self.avatars_bucket is None:
            return 0

        referenced = {
            name
            for name in (
                extract_picture_name(user.get("picture"))
                for user in users_collection(self.db).find({}, {"picture": 1})
            )
            if name is not None
        }
        cutoff = to_storage(self.clock() - grace)
        unused = files_collection(self.db, self.avatars_bucket).find(
            {"uploadDate": {"$lt": cutoff}, "filename": {"$nin": sorted(referenced)}},
            {"_id": 1},
        )
        return self._delete_files(self.avatars_bucket, (f["_id"] for f in unused))

    def staging_info(self) -> StoreInfo:
        """Return the earliest cleanup timer among staged images."""
        first = self._image_files.find_one(
            {"metadata.staging": True},
            {"metadata.cleanup_timer": 1},
            sort=[("metadata.cleanup_timer", 1)],
        )
        if first is None:
            return StoreInfo(first_staging_image_ts=ZERO_TIME)
        return StoreInfo(first_staging_image_ts=from_storage(first["metadata"]["cleanup_timer"]))

    def delete_user_images(self, user_ids: Iterable[str]) -> int:
        """Delete every image, staged or committed, owned by ``user_ids``."""
        owned = self._image_files.find({"metadata.user_id": {"$in": list(user_ids)}}, {"_id": 1})
        return self._delete_files(IMAGES_BUCKET, (f["_id"] for f in owned))

    def _delete_files(self, bucket_name: str, file_ids: Iterable[Any]) -> int:
        bucket = self._images if bucket_name == IMAGES_BUCKET else gridfs_bucket(self.db, bucket_name)
        deleted = 0
        for file_id in list(file_ids):
            bucket.delete(file_id)
            deleted += 1
        if deleted:
            logger.info("Deleted %d file(s) from %s", deleted, bucket_name)
        return deleted

# src/remark_mongo/db/client.py
"""MongoDB client, collection and bucket accessors."""

from __future__ import annotations

import logging
from typing import Any

from gridfs import GridFSBucket
from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from remark_mongo.core.settings import Settings

logger = logging.getLogger(__name__)

SITES_COLLECTION = "remark_sites"
USERS_COLLECTION = "remark_users"
COMMENTS_COLLECTION = "remark_comments"
IMAGES_BUCKET = "remark_images"

# GridFS chunk size used for uploaded images.
IMAGE_CHUNK_SIZE_BYTES = 1024 * 1024


def create_client(settings: Settings) -> MongoClient[dict[str, Any]]:
    """Create the process-wide MongoDB client for the configured URL."""
    return MongoClient(settings.database_url, appname=settings.app_name)


def get_database(client: MongoClient[dict[str, Any]]) -> Database[dict[str, Any]]:
    """Return the database named in the connection string."""
    return client.get_default_database()


def sites_collection(db: Database[dict[str, Any]]) -> Collection[dict[str, Any]]:
    """Return the collection holding one document per site."""
    return db[SITES_COLLECTION]


def users_collection(db: Database[dict[str, Any]]) -> Collection[dict[str, Any]]:
    """Return the collection holding one document per (site, user)."""
    return db[USERS_COLLECTION]


def comments_collection(db: Database[dict[str, Any]]) -> Collection[dict[str, Any]]:
    """Return the collection holding one document per comment."""
    return db[COMMENTS_COLLECTION]


def files_collection(db: Database[dict[str, Any]], bucket_name: str) -> Collection[dict[str, Any]]:
    """Return the ``<bucket>.files`` collection of a GridFS bucket."""
    return db[f"{bucket_name}.files"]


def gridfs_bucket(db: Database[dict[str, Any]], bucket_name: str) -> GridFSBucket:
    """Return a GridFS bucket bound to ``db``."""
    return GridFSBucket(db, bucket_name=bucket_name)


def create_indexes(db: Database[dict[str, Any]]) -> None:
    """Create the unique indexes the engine relies on.

    MongoDB leaves an existing index untouched, so this is safe on every start.

    Raises:
        PyMongoError: If the server rejects the index creation.
    """
    comments_collection(db).create_index(
        [("locator.site", ASCENDING), ("locator.url", ASCENDING), ("cid", ASCENDING)],
        unique=True,
    )
    users_collection(db).create_index(
        [("site", ASCENDING), ("uid", ASCENDING)],
        unique=True,
    )


def is_connected(db: Database[dict[str, Any]]) -> bool:
    """Return True if the server answers a ``ping`` command."""
    try:
        reply = db.command("ping")
    except PyMongoError as exc:
        logger.warning("Database ping failed: %s", exc)
        return False
    return bool(reply.get("ok"))

# tests/conftest.py
from __future__ import annotations

import contextlib
from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta
from typing import Any

import mongomock
import mongomock.gridfs
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from remark_mongo.core.settings import Settings
from remark_mongo.db.client import create_indexes, gridfs_bucket, sites_collection
from remark_mongo.main import create_app
from remark_mongo.repositories import ImageRepository, SiteRepository, StoreRepository
from remark_mongo.schemas.store import Comment
from remark_mongo.services import AdminService, ImageService, StoreService

mongomock.gridfs.enable_gridfs_integration()

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)
SITE = "remark"
URL = "https://example.com/post-1"
AVATARS_BUCKET = "avatars"


class FakeClock:
    """Callable clock that tests move by hand."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now += timedelta(**delta)


@pytest.fixture(scope="session", autouse=True)
def gridfs_warm_up() -> None:
    """Absorb the failure mongomock's GridFS shim raises on a process's first upload."""
    client = mongomock.MongoClient()
    with contextlib.suppress(TypeError):
        gridfs_bucket(client["warm-up"], "warm-up").upload_from_stream("warm-up", b"")
    client.close()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture()
def db() -> Iterator[Any]:
    client = mongomock.MongoClient()
    database = client["remark42-test"]
    create_indexes(database)
    try:
        yield database
    finally:
        client.close()


@pytest.fixture()
def image_repo(db: Any, clock: FakeClock) -> ImageRepository:
    return ImageRepository(db, avatars_bucket=AVATARS_BUCKET, clock=clock)


@pytest.fixture()
def store_repo(db: Any, image_repo: ImageRepository, clock: FakeClock) -> StoreRepository:
    return StoreRepository(db, image_repo, clock=clock)


@pytest.fixture()
def site_repo(db: Any) -> SiteRepository:
    return SiteRepository(db)


@pytest.fixture()
def store_service(store_repo: StoreRepository, clock: FakeClock) -> StoreService:
    return StoreService(store_repo, dynamic_posts=True, clock=clock)


@pytest.fixture()
def admin_service(store_repo: StoreRepository) -> AdminService:
    return AdminService(store_repo)


@pytest.fixture()
def image_service(image_repo: ImageRepository) -> ImageService:
    return ImageService(image_repo)


@pytest.fixture()
def site(site_repo: SiteRepository) -> str:
    """Create the default site and return its id."""
    site_repo.create_site(SITE, "secret", "admin@example.com")
    return SITE


@pytest.fixture()
def make_comment() -> Callable[..., Comment]:
    """Return a factory for valid comments on the default post."""

    def _make(
        cid: str = "c1",
        user_id: str = "user1",
        *,
        url: str = URL,
        time: datetime = NOW,
        **extra: Any,
    ) -> Comment:
        payload: dict[str, Any] = {
            "id": cid,
            "text": f"text of {cid}",
            "orig": f"orig of {cid}",
            "user": {"id": user_id, "name": f"name of {user_id}", "picture": f"https://example.com/api/v1/avatar/{user_id}.image"},
            "locator": {"site": SITE, "url": url},
            "time": time,
        }
        payload.update(extra)
        return Comment.model_validate(payload)

    return _make


@pytest.fixture()
def test_settings() -> Settings:
    return Settings(
        DATABASE_URL="mongodb://localhost:27017/remark42-test",
        AVATARS_BUCKET=AVATARS_BUCKET,
        BODY_LIMIT_BYTES=64 * 1024,
    )


@pytest.fixture()
def app(test_settings: Settings, db: Any) -> FastAPI:
    return create_app(test_settings, database=db)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


def set_post_read_only(db: Any, url: str, value: bool) -> None:
    """Flip a post's manual read-only flag directly in the database."""
    sites_collection(db).update_one(
        {"_id": SITE, "posts.url": url},
        {"$set": {"posts.$.read_only": value}},
    )

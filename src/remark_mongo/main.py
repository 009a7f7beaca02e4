# src/remark_mongo/main.py
"""Main entry point for the Remark42 MongoDB backend."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from pymongo.database import Database
from pymongo.errors import PyMongoError

from remark_mongo import __version__
from remark_mongo.api.endpoints import rpc_router
from remark_mongo.api.rpc import RpcRouter, admin_routes, image_routes, store_routes
from remark_mongo.core.logging import configure_logging
from remark_mongo.core.settings import Settings, get_settings
from remark_mongo.db.client import create_client, create_indexes, get_database
from remark_mongo.repositories import ImageRepository, StoreRepository
from remark_mongo.services import AdminService, ImageService, StoreService

logger = logging.getLogger(__name__)


def build_rpc_router(db: Database[dict[str, Any]], settings: Settings) -> RpcRouter:
    """Wire repositories and services into a dispatcher for ``db``."""
    images = ImageRepository(db, avatars_bucket=settings.avatars_bucket)
    store = StoreRepository(db, images)
    return RpcRouter(
        admin_routes(AdminService(store)),
        store_routes(StoreService(store, dynamic_posts=settings.dynamic_posts)),
        image_routes(ImageService(images)),
    )


def create_app(
    settings: Settings | None = None,
    database: Database[dict[str, Any]] | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Configuration; loaded from the environment when omitted.
        database: Database to serve; a client for ``settings.database_url``
            is opened at startup when omitted.

    Returns:
        The application. Startup fails if the indexes cannot be created.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        client = None
        db = database
        if db is None:
            client = create_client(settings)
            db = get_database(client)

        try:
            create_indexes(db)
        except PyMongoError:
            logger.exception("Failed to initialize the database")
            if client is not None:
                client.close()
            raise

        app.state.settings = settings
        app.state.database = db
        app.state.rpc_router = build_rpc_router(db, settings)
        logger.info("Serving database %s", db.name)
        try:
            yield
        finally:
            if client is not None:
                client.close()
            logger.info("Server closed")

    app = FastAPI(
        title="Remark42 MongoDB",
        description="MongoDB storage backend for the Remark42 comments engine",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.include_router(rpc_router)
    return app


def run() -> None:
    """Serve the application with uvicorn using the environment settings."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Starting server on %s:%d", settings.host, settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()

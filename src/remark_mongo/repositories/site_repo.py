# src/remark_mongo/repositories/site_repo.py
"""Site administration used by the command line tools."""

from __future__ import annotations

import logging
from typing import Any

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from remark_mongo.core.errors import ConflictError
from remark_mongo.db.client import sites_collection
from remark_mongo.models.site import PostDocument, SiteDocument

logger = logging.getLogger(__name__)

__all__ = ["SiteRepository"]


class SiteRepository:
    """Create and list sites and their posts."""

    def __init__(self, db: Database[dict[str, Any]]) -> None:
        self.sites = sites_collection(db)

    def list_sites(self) -> list[dict[str, Any]]:
        """Return every site without its key and post list."""
        return list(self.sites.find({}, {"key": 0, "posts": 0}).sort("_id", 1))

    def create_site(self, name: str, key: str, admin_email: str = "") -> None:
        """Create an enabled site with no posts.

        Raises:
            ConflictError: If a site with the same name exists.
        """
        site: SiteDocument = {
            "_id": name,
            "key": key,
            "enabled": True,
            "admin_email": admin_email,
            "posts": [],
        }
        try:
            self.sites.insert_one(site)  # type: ignore[arg-type]
        except DuplicateKeyError as err:
            raise ConflictError(f"Site {name} already exists!") from err
        logger.info("Created site %s", name)

    def list_posts(self, site: str) -> list[PostDocument]:
        """Return the posts of a site; an unknown site has none."""
        document = self.sites.find_one({"_id": site}, {"posts": 1})
        if document is None:
            return []
        return list(document.get("posts", []))

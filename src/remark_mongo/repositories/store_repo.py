# src/remark_mongo/repositories/store_repo.py
"""Data access for sites, posts, users and comments."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta
from typing import Any

from pymongo import ASCENDING, DESCENDING
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from remark_mongo.adapters.comment import (
    comment_deletion_update,
    comment_to_document,
    comment_to_model,
    comment_update_document,
)
from remark_mongo.adapters.user import is_blocked, user_to_document, user_to_model
from remark_mongo.core.errors import ConflictError, InvalidRequestError, NotFoundError
from remark_mongo.db.client import comments_collection, sites_collection, users_collection
from remark_mongo.db.time import ZERO_TIME, from_storage, is_zero, to_storage, utcnow
from remark_mongo.models.site import PostDocument, SiteDocument
from remark_mongo.models.user import USER_DETAIL_FIELDS
from remark_mongo.repositories.image_repo import ImageRepository
from remark_mongo.schemas.store import (
    SITE_LAST_COMMENTS_LIMIT,
    USER_COMMENTS_LIMIT,
    BlockedUser,
    Comment,
    DeleteMode,
    Locator,
    PostInfo,
    User,
    UserDetail,
    UserDetailEntry,
)
from remark_mongo.utils.concurrency import run_concurrently

logger = logging.getLogger(__name__)

__all__ = ["StoreRepository", "build_sort"]

SortSpec = list[tuple[str, int]]

# Sort field aliases accepted from the Remark42 UI.
_SORT_FIELDS = {
    "time": "time",
    "active": "time",
    "score": "score",
    "controversy": "controversy",
}


def build_sort(token: str | None) -> SortSpec:
    """Translate a Remark42 sort token into a pymongo sort specification.

    Args:
        token: ``[+|-]field`` where ``field`` is one of ``time``, ``active``,
            ``score`` or ``controversy``. A minus sign sorts descending.

    Returns:
        Sort keys; score and controversy are tie-broken by ascending time.
        Unknown or missing tokens sort by ascending time.
    """
    if not token:
        return [("time", ASCENDING)]

    direction = ASCENDING
    name = token
    if token[0] in "+-":
        direction = DESCENDING if token[0] == "-" else ASCENDING
        name = token[1:]

    field = _SORT_FIELDS.get(name)
    if field is None:
        return [("time", ASCENDING)]
    if field == "time":
        return [("time", direction)]
    return [(field, direction), ("time", ASCENDING)]


def _clamp(value: int | None, cap: int) -> int:
    if not value or value <= 0 or value > cap:
        return cap
    return value


class StoreRepository:
    """Reads and writes on the sites, users and comments collections.

    "Not found" is reported as an empty or default value wherever the
    Remark42 contract defines one; only single-object lookups raise.
    """

    def __init__(
        self,
        db: Database[dict[str, Any]],
        images: ImageRepository,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Bind the repository to a database.

        Args:
            db: Database holding the Remark42 collections.
            images: Image repository used to cascade site deletion.
            clock: Source of the current time.
        """
        self.db = db
        self.images = images
        self.clock = clock
        self.sites = sites_collection(db)
        self.users = users_collection(db)
        self.comments = comments_collection(db)

    # Sites and posts

    def site_exists(self, site: str) -> bool:
        """Return True if ``site`` has been created."""
        return self.sites.count_documents({"_id": site}, limit=1) > 0

    def post_exists(self, locator: Locator) -> bool:
        """Return True if the site carries a post for ``locator.url``."""
        return self.sites.count_documents({"_id": locator.site, "posts.url": locator.url}, limit=1) > 0

    def get_site_key(self, site: str) -> str:
        return self._site_field(site, "key", "")

    def get_site_admin_email(self, site: str) -> str:
        return self._site_field(site, "admin_email", "")

    def is_site_enabled(self, site: str) -> bool:
        return bool(self._site_field(site, "enabled", False))

    def get_site_admins(self, site: str) -> list[str]:
        """Return the ids of the site's admin users."""
        return [u["uid"] for u in self.users.find({"site": site, "admin": True}, {"uid": 1})]

    def get_post(self, locator: Locator) -> SiteDocument | None:
        """Return the site with its post list narrowed to ``locator.url``.

        Returns:
            The site document whose ``posts`` holds the matching post (or
            nothing), or ``None`` when the site does not exist.
        """
        site = self.sites.find_one(
            {"_id": locator.site},
            {"posts": {"$elemMatch": {"url": locator.url}}, "enabled": 1},
        )
        if site is None:
            return None
        site["posts"] = [p for p in site.get("posts", []) if p.get("url") == locator.url]
        return site  # type: ignore[return-value]

    def create_post(self, locator: Locator, read_only: bool = False) -> None:
        """Append a post to its site.

        The caller has checked that the site exists and the post does not.
        """
        post: PostDocument = {"url": locator.url, "read_only": read_only}
        self.sites.update_one({"_id": locator.site}, {"$push": {"posts": post}})
        logger.info("Created post %s on site %s", locator.url, locator.site)

    def is_post_read_only(self, locator: Locator) -> bool:
        """Return the manual read-only flag; unknown posts are writable."""
        site = self.get_post(locator)
        if site is None or not site["posts"]:
            return False
        return bool(site["posts"][0].get("read_only", False))

    def set_post_read_only(self, locator: Locator, value: bool) -> None:
        self.sites.update_one(
            {"_id": locator.site, "posts.url": locator.url},
            {"$set": {"posts.$.read_only": value}},
        )

    # Counting

    def count_post_comments(self, locator: Locator) -> int:
        """Count the non-deleted comments of a post."""
        return self.comments.count_documents(
            {"locator.site": locator.site, "locator.url": locator.url, "delete": False}
        )

    def count_user_comments(self, site: str, user_id: str) -> int:
        """Count the non-deleted comments of a user across a site."""
        return self.comments.count_documents({"locator.site": site, "user": user_id, "delete": False})

    # Users

    def create_user(self, user: User, site: str) -> None:
        """Insert a user unless one already exists for (site, id)."""
        try:
            self.users.insert_one(user_to_document(user, site))
        except DuplicateKeyError:
            logger.debug("User %s already exists on site %s", user.id, site)

    def is_user_blocked(self, site: str, user_id: str) -> bool:
        """Return True while the user's block has not expired."""
        user = self.users.find_one({"site": site, "uid": user_id}, {"blocked": 1})
        if user is None:
            return False
        return is_blocked(from_storage(user.get("blocked")), self.clock())

    def set_user_blocked(self, site: str, user_id: str, until: datetime | None) -> None:
        """Block a user until ``until``; ``None`` lifts the block."""
        self._set_user_field(site, user_id, "blocked", to_storage(until))

    def is_user_verified(self, site: str, user_id: str) -> bool:
        return bool(self._user_field(site, user_id, "verified", False))

    def set_user_verified(self, site: str, user_id: str, value: bool) -> None:
        self._set_user_field(site, user_id, "verified", value)

    def get_verified_users(self, site: str) -> list[str]:
        return [u["uid"] for u in self.users.find({"site": site, "verified": True}, {"uid": 1})]

    def get_blocked_users(self, site: str) -> list[BlockedUser]:
        """Return the users of a site whose block is still active."""
        now = to_storage(self.clock())
        blocked = self.users.find(
            {"site": site, "blocked": {"$ne": None, "$gte": now}},
            {"uid": 1, "name": 1, "blocked": 1},
        )
        return [
            BlockedUser(id=u["uid"], name=u.get("name", ""), time=from_storage(u["blocked"]))
            for u in blocked
        ]

    # User details

    def get_user_detail(self, site: str, user_id: str, detail: UserDetail) -> list[UserDetailEntry]:
        """Return the single detail as a one-entry list, or ``[]`` when unset."""
        if detail not in (UserDetail.EMAIL, UserDetail.TELEGRAM):
            return []
        value = self._user_field(site, user_id, detail.value, "")
        if not value or not value.strip():
            return []
        return [UserDetailEntry(user_id=user_id, **{detail.value: value})]

    def set_user_detail(self, site: str, user_id: str, detail: UserDetail, value: str) -> list[UserDetailEntry]:
        """Store a single detail and echo it back."""
        if detail not in (UserDetail.EMAIL, UserDetail.TELEGRAM):
            return []
        self._set_user_field(site, user_id, detail.value, value or "")
        return [UserDetailEntry(user_id=user_id, **{detail.value: value or ""})]

    def delete_user_detail(self, site: str, user_id: str, detail: UserDetail) -> None:
        """Clear one detail, or every detail at once for ``UserDetail.ALL``."""
        if detail == UserDetail.ALL:
            self.users.update_one(
                {"site": site, "uid": user_id},
                {"$set": {field: "" for field in USER_DETAIL_FIELDS}},
            )
            return
        self.set_user_detail(site, user_id, detail, "")

    def list_site_users_details(self, site: str) -> list[UserDetailEntry]:
        """Return one entry per user per non-empty detail."""
        entries: list[UserDetailEntry] = []
        for user in self.users.find({"site": site}, {"uid": 1, **{f: 1 for f in USER_DETAIL_FIELDS}}):
            for field in USER_DETAIL_FIELDS:
                value = user.get(field) or ""
                if value.strip():
                    entries.append(UserDetailEntry(user_id=user["uid"], **{field: value}))
        return entries

    # Comments

    def create_comment(self, comment: Comment) -> str:
        """Insert a comment and return its id.

        Raises:
            InvalidRequestError: If the comment has no id.
            ConflictError: If the id is already taken on the post.
        """
        if not comment.id or not comment.id.strip():
            raise InvalidRequestError("Comment is missing id!")
        try:
            self.comments.insert_one(comment_to_document(comment))
        except DuplicateKeyError as err:
            raise ConflictError(f"key {comment.id} already in store") from err
        return comment.id

    def get_comment(self, locator: Locator, comment_id: str) -> Comment:
        """Return a comment merged with its author.

        Raises:
            NotFoundError: If the comment does not exist.
        """
        document = self.comments.find_one(
            {"cid": comment_id, "locator.site": locator.site, "locator.url": locator.url}
        )
        if document is None:
            raise NotFoundError(f"comment {comment_id} not found")
        return self._merge_users(locator.site, [document])[0]

    def update_comment(self, comment_id: str, locator: Locator, comment: Comment) -> None:
        """Write the mutable fields present in ``comment``."""
        update = comment_update_document(comment)
        if not update:
            return
        self.comments.update_one(
            {"cid": comment_id, "locator.site": locator.site, "locator.url": locator.url},
            {"$set": update},
        )

    def delete_comment(self, locator: Locator, comment_id: str, mode: DeleteMode) -> None:
        """Erase a comment's content; the document and its author stay."""
        self.comments.update_one(
            {"cid": comment_id, "locator.site": locator.site, "locator.url": locator.url},
            {"$set": comment_deletion_update(mode)},
        )

    def get_post_comments(
        self,
        locator: Locator,
        since: datetime | None = None,
        sort: str | None = None,
    ) -> list[Comment]:
        """Return every comment of a post, deleted ones included."""
        query: dict[str, Any] = {"locator.site": locator.site, "locator.url": locator.url}
        if not is_zero(since):
            query["time"] = {"$gt": to_storage(since)}
        documents = list(self.comments.find(query, sort=build_sort(sort)))
        return self._merge_users(locator.site, documents)

    def get_site_last_comments(self, site: str, max_count: int, since: datetime | None = None) -> list[Comment]:
        """Return the newest comments of a site, at most 1000.

        With ``since``, only non-deleted comments newer than it are returned.
        """
        query: dict[str, Any] = {"locator.site": site}
        if not is_zero(since):
            query["time"] = {"$gt": to_storage(since)}
            query["delete"] = False
        documents = list(
            self.comments.find(query)
            .sort("time", DESCENDING)
            .limit(_clamp(max_count, SITE_LAST_COMMENTS_LIMIT))
        )
        return self._merge_users(site, documents)

    def get_site_user_comments(self, site: str, user_id: str, limit: int, skip: int = 0) -> list[Comment]:
        """Return a user's non-deleted comments, newest first, at most 500."""
        documents = list(
            self.comments.find({"locator.site": site, "user": user_id, "delete": False})
            .sort("time", DESCENDING)
            .skip(max(skip or 0, 0))
            .limit(_clamp(limit, USER_COMMENTS_LIMIT))
        )
        return self._merge_users(site, documents)

    # Info

    def get_post_info(self, locator: Locator, ro_age: int | None = None) -> list[PostInfo]:
        """Summarise a post's comments.

        A post without comments yields a zeroed record. The post is reported
        read-only once ``ro_age`` days have passed since its first comment,
        or when its manual flag is set.
        """
        groups = list(
            self.comments.aggregate(
                [
                    {"$match": {"locator.site": locator.site, "locator.url": locator.url}},
                    {
                        "$group": {
                            "_id": None,
                            "count": {"$sum": 1},
                            "first_time": {"$min": "$time"},
                            "last_time": {"$max": "$time"},
                        }
                    },
                ]
            )
        )
        if groups and groups[0]["count"]:
            info = PostInfo(
                url=locator.url,
                count=groups[0]["count"],
                first_time=from_storage(groups[0]["first_time"]),
                last_time=from_storage(groups[0]["last_time"]),
            )
        else:
            info = PostInfo(url=locator.url, count=0, first_time=ZERO_TIME, last_time=ZERO_TIME)

        info.read_only = (
            ro_age is not None
            and ro_age > 0
            and not is_zero(info.first_time)
            and self.clock() >= info.first_time + timedelta(days=ro_age)  # type: ignore[operator]
        )
        if not info.read_only:
            info.read_only = self.is_post_read_only(locator)
        return [info]

    def get_site_info(self, site: str, limit: int | None = None, skip: int | None = None) -> list[PostInfo]:
        """Return one summary per commented URL of a site, sorted by URL."""
        pipeline: list[dict[str, Any]] = [
            {"$match": {"locator.site": site}},
            {
                "$group": {
                    "_id": "$locator.url",
                    "count": {"$sum": 1},
                    "last_time": {"$max": "$time"},
                }
            },
            {"$sort": {"_id": ASCENDING}},
        ]
        if skip and skip > 0:
            pipeline.append({"$skip": skip})
        if limit and limit > 0:
            pipeline.append({"$limit": limit})
        return [
            PostInfo(url=g["_id"], count=g["count"], last_time=from_storage(g["last_time"]))
            for g in self.comments.aggregate(pipeline)
        ]

    # Cascading deletes

    def delete_user(self, site: str, user_id: str, mode: DeleteMode) -> None:
        """Erase all of a user's comments, then remove or scrub the user.

        Hard mode removes the user document; soft mode keeps it and clears
        its contact details.
        """
        self.comments.update_many(
            {"locator.site": site, "user": user_id},
            {"$set": comment_deletion_update(mode)},
        )
        if mode == DeleteMode.HARD:
            self.users.delete_one({"site": site, "uid": user_id})
        else:
            self.delete_user_detail(site, user_id, UserDetail.ALL)
        logger.info("Deleted user %s on site %s (mode=%s)", user_id, site, mode.name)

    def delete_site(self, site: str) -> None:
        """Remove a site with its comments, users and their images.

        The four removals run concurrently and are not atomic; a failure in
        any of them is raised once all have finished.
        """
        user_ids = [u["uid"] for u in self.users.find({"site": site}, {"uid": 1})]
        run_concurrently(
            lambda: self.sites.delete_one({"_id": site}),
            lambda: self.comments.delete_many({"locator.site": site}),
            lambda: self.users.delete_many({"site": site}),
            lambda: self.images.delete_user_images(user_ids),
        )
        logger.info("Deleted site %s with %d user(s)", site, len(user_ids))

    # Helpers

    def _merge_users(self, site: str, documents: Iterable[dict[str, Any]]) -> list[Comment]:
        documents = list(documents)
        user_ids = sorted({d["user"] for d in documents})
        users: dict[str, dict[str, Any]] = {}
        if user_ids:
            users = {u["uid"]: u for u in self.users.find({"site": site, "uid": {"$in": user_ids}})}
        now = self.clock()
        return [
            comment_to_model(d, user_to_model(users.get(d["user"]), d["user"], now))
            for d in documents
        ]

    def _site_field(self, site: str, field: str, default: Any) -> Any:
        document = self.sites.find_one({"_id": site}, {field: 1})
        if document is None:
            return default
        return document.get(field, default)

    def _user_field(self, site: str, user_id: str, field: str, default: Any) -> Any:
        document = self.users.find_one({"site": site, "uid": user_id}, {field: 1})
        if document is None:
            return default
        return document.get(field, default)

    def _set_user_field(self, site: str, user_id: str, field: str, value: Any) -> None:
        self.users.update_one({"site": site, "uid": user_id}, {"$set": {field: value}})

# src/remark_mongo/services/store_service.py
"""Request-level rules of the ``store.*`` methods."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from remark_mongo.core.errors import InvalidRequestError, NotFoundError, PreconditionFailedError
from remark_mongo.db.time import add_years, nanoseconds, utcnow
from remark_mongo.repositories.store_repo import StoreRepository
from remark_mongo.schemas.store import (
    BlockedUser,
    Comment,
    DeleteRequest,
    FindRequest,
    Flag,
    FlagRequest,
    FlagStatus,
    GetRequest,
    InfoRequest,
    PostInfo,
    UserDetail,
    UserDetailEntry,
    UserDetailRequest,
)

logger = logging.getLogger(__name__)

# Block duration used when no TTL is given.
PERMANENT_BLOCK_YEARS = 100


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


class StoreService:
    """Implements the Remark42 ``Store`` interface on top of the repository."""

    def __init__(
        self,
        store: StoreRepository,
        *,
        dynamic_posts: bool = True,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Create the service.

        Args:
            store: Repository for sites, users and comments.
            dynamic_posts: Create unknown posts on their first comment
                instead of rejecting the comment.
            clock: Source of the current time.
        """
        self.store = store
        self.dynamic_posts = dynamic_posts
        self.clock = clock

    def create(self, comment: Comment) -> str:
        """Store a new comment, creating its post and author on demand.

        Returns:
            The id of the stored comment.

        Raises:
            NotFoundError: If the site does not exist.
            PreconditionFailedError: If the post is read-only, or unknown
                while dynamic posts are disabled.
            ConflictError: If the comment id is already used on the post.
        """
        locator = comment.locator
        site = self.store.get_post(locator)
        if site is None:
            raise NotFoundError(f"site {locator.site} not found")

        if not site["posts"]:
            if not self.dynamic_posts:
                raise PreconditionFailedError(f"post {locator.url} not found")
            self.store.create_post(locator)
        elif site["posts"][0].get("read_only", False):
            raise PreconditionFailedError(f"post {locator.url} is read-only")

        self.store.create_user(comment.user, locator.site)
        return self.store.create_comment(comment)

    def find(self, request: FindRequest) -> list[Comment]:
        """Return post comments, last site comments or a user's comments."""
        locator = request.locator
        if not self.store.site_exists(locator.site):
            raise NotFoundError("Site not found")

        if not _blank(locator.url):
            return self.store.get_post_comments(locator, request.since, request.sort)
        if request.user_id is None:
            return self.store.get_site_last_comments(locator.site, request.limit, request.since)
        if not _blank(locator.site):
            return self.store.get_site_user_comments(locator.site, request.user_id, request.limit, request.skip)
        raise InvalidRequestError("invalid find request")

    def get(self, request: GetRequest) -> Comment:
        return self.store.get_comment(request.locator, request.comment_id)

    def update(self, comment: Comment) -> None:
        self.store.update_comment(comment.id, comment.locator, comment)

    def count(self, request: FindRequest) -> int:
        """Count post or user comments; an unknown site has none."""
        locator = request.locator
        if not self.store.site_exists(locator.site):
            return 0
        if not _blank(locator.url):
            return self.store.count_post_comments(locator)
        if request.user_id is not None:
            return self.store.count_user_comments(locator.site, request.user_id)
        raise InvalidRequestError("invalid count request")

    def info(self, request: InfoRequest) -> list[PostInfo]:
        locator = request.locator
        if not _blank(locator.url):
            return self.store.get_post_info(locator, request.ro_age)
        if not _blank(locator.site):
            return self.store.get_site_info(locator.site, request.limit, request.skip)
        raise InvalidRequestError("Invalid info request")

    def flag(self, request: FlagRequest) -> bool:
        """Read a flag, or set it and return the new value.

        Blocking uses ``ttl`` (nanoseconds) when positive, otherwise a
        permanent block of 100 years.
        """
        locator = request.locator
        if request.update is None or request.update == FlagStatus.NON_SET:
            match request.flag:
                case Flag.READ_ONLY:
                    return self.store.is_post_read_only(locator)
                case Flag.BLOCKED:
                    return self.store.is_user_blocked(locator.site, request.user_id or "")
                case Flag.VERIFIED:
                    return self.store.is_user_verified(locator.site, request.user_id or "")

        status = request.update == FlagStatus.TRUE
        match request.flag:
            case Flag.READ_ONLY:
                self.store.set_post_read_only(locator, status)
            case Flag.BLOCKED:
                until = self._block_until(request.ttl) if status else None
                self.store.set_user_blocked(locator.site, request.user_id or "", until)
            case Flag.VERIFIED:
                self.store.set_user_verified(locator.site, request.user_id or "", status)
            case _:
                raise InvalidRequestError(f"Invalid flag {request.flag}")
        return status

    def list_flags(self, request: FlagRequest) -> list[str] | list[BlockedUser]:
        if request.flag == Flag.VERIFIED:
            return self.store.get_verified_users(request.locator.site)
        if request.flag == Flag.BLOCKED:
            return self.store.get_blocked_users(request.locator.site)
        raise InvalidRequestError(f"Flag {request.flag} not listable")

    def user_detail(self, request: UserDetailRequest) -> list[UserDetailEntry]:
        """Get or set a single detail, or list every detail of a site."""
        site = request.locator.site
        if request.detail in (UserDetail.EMAIL, UserDetail.TELEGRAM):
            if request.user_id is None:
                raise InvalidRequestError("userid cannot be empty in request for single detail")
            if request.update is None:
                return self.store.get_user_detail(site, request.user_id, request.detail)
            return self.store.set_user_detail(site, request.user_id, request.detail, request.update)

        if request.update is None and request.user_id is None:
            return self.store.list_site_users_details(site)
        raise InvalidRequestError("unsupported request with userdetail all")

    def delete(self, request: DeleteRequest) -> None:
        """Delete a user detail, a comment, a user or a whole site.

        The branch is chosen by which fields are set, in that order.
        """
        locator = request.locator
        if request.user_detail is not None:
            self.store.delete_user_detail(locator.site, request.user_id or "", request.user_detail)
        elif not _blank(locator.url) and request.comment_id is not None:
            self.store.delete_comment(locator, request.comment_id, request.del_mode)
        elif not _blank(locator.site) and request.user_id is not None and request.comment_id is None:
            self.store.delete_user(locator.site, request.user_id, request.del_mode)
        elif (
            not _blank(locator.site)
            and _blank(locator.url)
            and request.comment_id is None
            and request.user_id is None
        ):
            self.store.delete_site(locator.site)
        else:
            raise InvalidRequestError("invalid delete request")

    def close(self) -> None:
        """Nothing to release; the client lives as long as the process."""

    def _block_until(self, ttl: int | None) -> datetime:
        now = self.clock()
        if ttl is not None and ttl > 0:
            return now + nanoseconds(ttl)
        return add_years(now, PERMANENT_BLOCK_YEARS)

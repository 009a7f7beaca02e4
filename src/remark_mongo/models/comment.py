"""Stored shape of a comment document."""

from __future__ import annotations

from datetime import datetime
from typing import Any, NotRequired, TypedDict

from bson import ObjectId


class LocatorDocument(TypedDict):
    site: str
    url: str


class EditDocument(TypedDict):
    summary: str
    time: datetime


class CommentDocument(TypedDict):
    """A comment, unique per (``locator.site``, ``locator.url``, ``cid``)."""

    _id: NotRequired[ObjectId]
    cid: str
    pid: str | None
    locator: LocatorDocument
    text: str
    orig: str | None
    # Computed by the Remark42 server on each vote.
    score: int
    controversy: float
    # Stored as sent; voters and IP hashes cannot be correlated.
    votes: dict[str, bool]
    voted_ips: dict[str, dict[str, Any]]
    user: str
    time: datetime
    edit: EditDocument | None
    pin: bool
    delete: bool
    imported: bool
    title: str | None


# Fields fixed at creation; updates never write them.
IMMUTABLE_COMMENT_FIELDS: frozenset[str] = frozenset({"_id", "cid", "pid", "locator", "user", "time"})

# User reference written on hard delete.
DELETED_USER_ID = "deleted"

"""Stored shape of a user document."""

from __future__ import annotations

from datetime import datetime
from typing import NotRequired, TypedDict

from bson import ObjectId


class UserDocument(TypedDict):
    """A commenter, unique per (``site``, ``uid``)."""

    _id: NotRequired[ObjectId]
    uid: str
    site: str
    name: str
    picture: str
    ip: str | None
    admin: bool
    # Block expiry; ``None`` when the user is not blocked.
    blocked: datetime | None
    verified: bool
    email_subscription: bool
    paid_sub: bool

    # User details
    email: str
    telegram: str


# Detail fields cleared together by "delete all details".
USER_DETAIL_FIELDS: tuple[str, ...] = ("email", "telegram")

# src/remark_mongo/adapters/user.py
"""Mapping between the wire ``User`` and the stored user document."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from remark_mongo.db.time import as_utc, from_storage
from remark_mongo.models.user import UserDocument
from remark_mongo.schemas.store import User


def user_to_document(user: User, site: str) -> UserDocument:
    """Build the document inserted on a user's first comment.

    Args:
        user: User embedded in the incoming comment.
        site: Site used when the user carries no ``site_id`` of its own.

    Returns:
        A new, unblocked user document with empty contact details.
    """
    return {
        "uid": user.id,
        "site": user.site_id or site,
        "name": user.name,
        "picture": user.picture,
        "ip": user.ip,
        "admin": user.admin,
        "blocked": None,
        "verified": user.verified,
        "email_subscription": user.email_subscription,
        "paid_sub": user.paid_sub,
        "email": "",
        "telegram": "",
    }


def is_blocked(blocked_until: datetime | None, now: datetime) -> bool:
    """Return True while a block expiry lies in the future (inclusive)."""
    if blocked_until is None:
        return False
    return as_utc(blocked_until) >= now


def user_to_model(document: dict[str, Any] | None, user_id: str, now: datetime) -> User:
    """Project a stored user onto the wire model.

    A missing document yields a default user carrying only ``user_id``, so a
    comment whose author vanished still renders.
    """
    if document is None:
        return User(id=user_id)
    return User(
        id=document["uid"],
        name=document.get("name", ""),
        picture=document.get("picture", ""),
        ip=document.get("ip"),
        admin=document.get("admin", False),
        block=is_blocked(from_storage(document.get("blocked")), now),
        verified=document.get("verified", False),
        email_subscription=document.get("email_subscription", False),
        site_id=document.get("site"),
        paid_sub=document.get("paid_sub", False),
    )

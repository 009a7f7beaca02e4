# src/remark_mongo/adapters/comment.py
"""Mapping between the wire ``Comment`` and the stored comment document.

The functions here are pure: they never touch the database and never read
the clock.
"""

from __future__ import annotations

from typing import Any

from remark_mongo.db.time import ZERO_TIME, from_storage, to_storage
from remark_mongo.models.comment import (
    DELETED_USER_ID,
    IMMUTABLE_COMMENT_FIELDS,
    CommentDocument,
    EditDocument,
)
from remark_mongo.schemas.store import Comment, DeleteMode, Edit, User, VotedIPInfo

# Wire fields that have no stored counterpart.
_TRANSIENT_FIELDS = frozenset({"vote"})

# Wire field name -> document field name, where they differ.
_RENAMED_FIELDS = {"id": "cid"}


def _edit_to_document(edit: Edit | None) -> EditDocument | None:
    if edit is None:
        return None
    return {"summary": edit.summary, "time": to_storage(edit.time)}


def _voted_ips_to_document(voted_ips: dict[str, VotedIPInfo]) -> dict[str, dict[str, Any]]:
    return {
        ip_hash: {"Timestamp": to_storage(info.timestamp), "Value": info.value}
        for ip_hash, info in voted_ips.items()
    }


def comment_to_document(comment: Comment) -> CommentDocument:
    """Return the document inserted for a new comment."""
    return {
        "cid": comment.id,
        "pid": comment.pid,
        "locator": {"site": comment.locator.site, "url": comment.locator.url},
        "text": comment.text,
        "orig": comment.orig,
        "score": comment.score,
        "controversy": comment.controversy,
        "votes": dict(comment.votes),
        "voted_ips": _voted_ips_to_document(comment.voted_ips),
        "user": comment.user.id,
        "time": to_storage(comment.time),
        "edit": _edit_to_document(comment.edit),
        "pin": comment.pin,
        "delete": comment.delete,
        "imported": comment.imported,
        "title": comment.title,
    }


def comment_update_document(comment: Comment) -> dict[str, Any]:
    """Return the ``$set`` payload for an update of ``comment``.

    Only fields explicitly present in the incoming payload are written.
    Immutable fields are dropped silently.
    """
    full = comment_to_document(comment)
    update: dict[str, Any] = {}
    for field in comment.model_fields_set:
        if field in _TRANSIENT_FIELDS:
            continue
        name = _RENAMED_FIELDS.get(field, field)
        if name in IMMUTABLE_COMMENT_FIELDS:
            continue
        update[name] = full[name]  # type: ignore[literal-required]
    return update


def comment_deletion_update(mode: DeleteMode) -> dict[str, Any]:
    """Return the ``$set`` payload that erases a comment's content."""
    update: dict[str, Any] = {
        "text": "",
        "orig": "",
        "score": 0,
        "votes": {},
        "voted_ips": {},
        "edit": None,
        "delete": True,
        "pin": False,
    }
    if mode == DeleteMode.HARD:
        update["user"] = DELETED_USER_ID
    return update


def comment_to_model(document: dict[str, Any], user: User) -> Comment:
    """Project a stored comment and its resolved author onto the wire model."""
    edit = document.get("edit")
    voted_ips = document.get("voted_ips") or {}
    return Comment(
        id=document["cid"],
        pid=document.get("pid"),
        text=document.get("text", ""),
        orig=document.get("orig"),
        user=user,
        locator=document["locator"],
        score=document.get("score", 0),
        votes=document.get("votes") or {},
        voted_ips={
            ip_hash: VotedIPInfo(
                timestamp=from_storage(info.get("Timestamp")) or ZERO_TIME,
                value=info.get("Value", False),
            )
            for ip_hash, info in voted_ips.items()
        },
        controversy=document.get("controversy", 0.0),
        time=from_storage(document["time"]),
        edit=Edit(summary=edit.get("summary", ""), time=from_storage(edit["time"])) if edit else None,
        pin=document.get("pin", False),
        delete=document.get("delete", False),
        imported=document.get("imported", False),
        title=document.get("title"),
    )

"""Tests for the comment and user document mappings."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from remark_mongo.adapters import (
    comment_deletion_update,
    comment_to_document,
    comment_to_model,
    comment_update_document,
    user_to_document,
    user_to_model,
)
from remark_mongo.schemas.store import Comment, DeleteMode, User

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)


def _comment(**extra) -> Comment:
    payload = {
        "id": "c1",
        "pid": "c0",
        "text": "hello",
        "user": {"id": "user1", "name": "User One"},
        "locator": {"site": "remark", "url": "https://example.com/p"},
        "time": "2024-05-01T12:00:00Z",
        "votes": {"user2": True},
        "voted_ips": {"hash": {"Timestamp": "2024-05-01T12:30:00Z", "Value": False}},
        "edit": {"summary": "typo", "time": "2024-05-01T13:00:00Z"},
    }
    payload.update(extra)
    return Comment.model_validate(payload)


def test_comment_to_document() -> None:
    document = comment_to_document(_comment())

    assert document["cid"] == "c1"
    assert document["pid"] == "c0"
    assert document["user"] == "user1"
    assert document["locator"] == {"site": "remark", "url": "https://example.com/p"}
    # Stored as naive UTC.
    assert document["time"] == datetime(2024, 5, 1, 12, 0, 0)
    assert document["edit"] == {"summary": "typo", "time": datetime(2024, 5, 1, 13, 0, 0)}
    assert document["voted_ips"] == {"hash": {"Timestamp": datetime(2024, 5, 1, 12, 30, 0), "Value": False}}
    assert "vote" not in document


def test_comment_round_trip_through_document() -> None:
    comment = _comment()
    document = comment_to_document(comment)

    restored = comment_to_model(document, comment.user)

    assert restored == comment


def test_null_vote_maps_become_empty() -> None:
    comment = _comment(votes=None, voted_ips=None)

    assert comment.votes == {}
    assert comment.voted_ips == {}


def test_update_document_only_has_mutable_present_fields() -> None:
    comment = Comment.model_validate(
        {
            "id": "c1",
            "pid": "c9",
            "locator": {"site": "remark", "url": "u"},
            "user": {"id": "someone"},
            "time": NOW.isoformat(),
            "text": "edited",
            "score": 4,
            "vote": 1,
        }
    )

    assert comment_update_document(comment) == {"text": "edited", "score": 4}


def test_deletion_update() -> None:
    soft = comment_deletion_update(DeleteMode.SOFT)
    hard = comment_deletion_update(DeleteMode.HARD)

    assert soft == {
        "text": "",
        "orig": "",
        "score": 0,
        "votes": {},
        "voted_ips": {},
        "edit": None,
        "delete": True,
        "pin": False,
    }
    assert hard == {**soft, "user": "deleted"}


def test_user_to_document_defaults_site() -> None:
    document = user_to_document(User(id="user1", name="One", admin=True), "remark")

    assert document["uid"] == "user1"
    assert document["site"] == "remark"
    assert document["admin"] is True
    assert document["blocked"] is None
    assert document["email"] == ""
    assert document["telegram"] == ""


def test_user_to_document_keeps_explicit_site() -> None:
    assert user_to_document(User(id="user1", site_id="other"), "remark")["site"] == "other"


def test_user_to_model_block_state() -> None:
    document = {"uid": "user1", "site": "remark", "name": "One", "blocked": datetime(2024, 5, 2)}

    assert user_to_model(document, "user1", NOW).block is True
    assert user_to_model(document, "user1", NOW + timedelta(days=2)).block is False
    assert user_to_model({**document, "blocked": None}, "user1", NOW).block is False


def test_user_to_model_missing_user() -> None:
    assert user_to_model(None, "ghost", NOW) == User(id="ghost")

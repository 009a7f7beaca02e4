"""Tests for the store service request rules."""

from __future__ import annotations

from datetime import timedelta

import pytest
from conftest import NOW, SITE, URL, set_post_read_only
from pymongo.errors import PyMongoError

from remark_mongo.core.errors import (
    ConflictError,
    InvalidRequestError,
    NotFoundError,
    PreconditionFailedError,
)
from remark_mongo.db.client import (
    IMAGES_BUCKET,
    comments_collection,
    files_collection,
    sites_collection,
    users_collection,
)
from remark_mongo.db.time import to_storage
from remark_mongo.schemas.store import (
    DeleteRequest,
    FindRequest,
    FlagRequest,
    GetRequest,
    InfoRequest,
    Locator,
    UserDetailRequest,
)
from remark_mongo.services.store_service import StoreService

WEEK_NS = 7 * 24 * 3600 * 10**9


def _flag(flag: str, update: int | None = None, **extra) -> FlagRequest:
    payload = {"flag": flag, "locator": {"site": SITE, "url": URL}, "user_id": "user1", **extra}
    if update is not None:
        payload["update"] = update
    return FlagRequest.model_validate(payload)


# create


def test_create_on_missing_site(store_service, make_comment) -> None:
    with pytest.raises(NotFoundError, match=f"site {SITE} not found"):
        store_service.create(make_comment())


def test_create_creates_post_and_user(store_service, store_repo, db, site, make_comment) -> None:
    assert store_service.create(make_comment("c1")) == "c1"

    assert store_repo.post_exists(Locator(site=SITE, url=URL))
    assert users_collection(db).count_documents({"site": SITE, "uid": "user1"}) == 1
    assert comments_collection(db).count_documents({"cid": "c1"}) == 1


def test_create_without_dynamic_posts(store_repo, clock, site, make_comment) -> None:
    service = StoreService(store_repo, dynamic_posts=False, clock=clock)

    with pytest.raises(PreconditionFailedError, match=f"post {URL} not found"):
        service.create(make_comment())

    store_repo.create_post(Locator(site=SITE, url=URL))
    assert service.create(make_comment()) == "c1"


def test_create_on_read_only_post(store_service, db, site, make_comment) -> None:
    store_service.create(make_comment("c1"))
    set_post_read_only(db, URL, True)

    with pytest.raises(PreconditionFailedError, match=f"post {URL} is read-only"):
        store_service.create(make_comment("c2"))


def test_create_duplicate(store_service, db, site, make_comment) -> None:
    store_service.create(make_comment("c1"))

    with pytest.raises(ConflictError):
        store_service.create(make_comment("c1"))

    assert comments_collection(db).count_documents({"cid": "c1"}) == 1


# find / count / get / update


def test_find_on_missing_site(store_service) -> None:
    with pytest.raises(NotFoundError, match="Site not found"):
        store_service.find(FindRequest(locator=Locator(site="nope", url=URL)))


def test_find_branches(store_service, site, make_comment) -> None:
    store_service.create(make_comment("c1", time=NOW))
    store_service.create(make_comment("c2", time=NOW + timedelta(minutes=1), user_id="user2"))
    store_service.create(make_comment("c3", url="https://example.com/other", time=NOW + timedelta(minutes=2)))

    post = store_service.find(FindRequest.model_validate({"locator": {"site": SITE, "url": URL}, "sort": "-time"}))
    assert [c.id for c in post] == ["c2", "c1"]

    last = store_service.find(FindRequest.model_validate({"locator": {"site": SITE}, "limit": 2}))
    assert [c.id for c in last] == ["c3", "c2"]

    user = store_service.find(FindRequest.model_validate({"locator": {"site": SITE}, "user_id": "user1"}))
    assert [c.id for c in user] == ["c3", "c1"]


def test_find_treats_zero_since_as_missing(store_service, site, make_comment) -> None:
    store_service.create(make_comment("c1"))

    request = FindRequest.model_validate(
        {"locator": {"site": SITE, "url": URL}, "since": "0001-01-01T00:00:00Z", "user_id": ""}
    )

    assert request.since is None
    assert request.user_id is None
    assert [c.id for c in store_service.find(request)] == ["c1"]


def test_count(store_service, site, make_comment) -> None:
    store_service.create(make_comment("c1"))
    store_service.create(make_comment("c2"))
    store_service.create(make_comment("c3", url="https://example.com/other"))

    assert store_service.count(FindRequest.model_validate({"locator": {"site": "nope", "url": URL}})) == 0
    assert store_service.count(FindRequest.model_validate({"locator": {"site": SITE, "url": URL}})) == 2
    assert store_service.count(FindRequest.model_validate({"locator": {"site": SITE}, "user_id": "user1"})) == 3
    with pytest.raises(InvalidRequestError):
        store_service.count(FindRequest.model_validate({"locator": {"site": SITE}}))


def test_get_and_update(store_service, site, make_comment) -> None:
    store_service.create(make_comment("c1"))

    store_service.update(make_comment("c1", text="new text", score=2))

    comment = store_service.get(GetRequest.model_validate({"locator": {"site": SITE, "url": URL}, "comment_id": "c1"}))
    assert comment.text == "new text"
    assert comment.score == 2


# info


def test_info_branches(store_service, site, make_comment) -> None:
    store_service.create(make_comment("c1"))

    post = store_service.info(InfoRequest.model_validate({"locator": {"site": SITE, "url": URL}}))
    site_info = store_service.info(InfoRequest.model_validate({"locator": {"site": SITE}}))

    assert [(i.url, i.count) for i in post] == [(URL, 1)]
    assert [(i.url, i.count) for i in site_info] == [(URL, 1)]
    with pytest.raises(InvalidRequestError, match="Invalid info request"):
        store_service.info(InfoRequest.model_validate({"locator": {}}))


# flags


def test_read_only_flag(store_service, site, make_comment) -> None:
    store_service.create(make_comment("c1"))

    assert store_service.flag(_flag("readonly")) is False
    assert store_service.flag(_flag("readonly", 1)) is True
    assert store_service.flag(_flag("readonly", 0)) is True
    assert store_service.flag(_flag("readonly", -1)) is False
    assert store_service.flag(_flag("readonly")) is False


def test_verified_flag(store_service, site, make_comment) -> None:
    store_service.create(make_comment("c1"))

    assert store_service.flag(_flag("verified", 1)) is True
    assert store_service.flag(_flag("verified")) is True
    assert store_service.list_flags(_flag("verified")) == ["user1"]


def test_block_with_ttl_then_permanent(store_service, db, site, clock, make_comment) -> None:
    store_service.create(make_comment("c1"))

    assert store_service.flag(_flag("blocked", 1, ttl=WEEK_NS)) is True
    stored = users_collection(db).find_one({"uid": "user1"})["blocked"]
    assert stored == to_storage(NOW + timedelta(weeks=1))

    assert store_service.flag(_flag("blocked", 1)) is True
    stored = users_collection(db).find_one({"uid": "user1"})["blocked"]
    assert stored == to_storage(NOW.replace(year=NOW.year + 100))

    blocked = store_service.list_flags(_flag("blocked"))
    assert [b.id for b in blocked] == ["user1"]

    assert store_service.flag(_flag("blocked", -1)) is False
    assert users_collection(db).find_one({"uid": "user1"})["blocked"] is None
    assert store_service.flag(_flag("blocked")) is False


def test_ttl_accepts_numeric_string() -> None:
    assert _flag("blocked", 1, ttl=str(WEEK_NS)).ttl == WEEK_NS


def test_read_only_is_not_listable(store_service, site) -> None:
    with pytest.raises(InvalidRequestError, match="Flag readonly not listable"):
        store_service.list_flags(_flag("readonly"))


# user details


def _detail(detail: str, **extra) -> UserDetailRequest:
    return UserDetailRequest.model_validate({"detail": detail, "locator": {"site": SITE}, **extra})


def test_user_detail_requires_user(store_service, site) -> None:
    with pytest.raises(InvalidRequestError, match="userid cannot be empty in request for single detail"):
        store_service.user_detail(_detail("email"))


def test_user_detail_get_set_and_list(store_service, site, make_comment) -> None:
    store_service.create(make_comment("c1"))

    assert store_service.user_detail(_detail("email", user_id="user1")) == []
    result = store_service.user_detail(_detail("email", user_id="user1", update="u1@example.com"))
    assert [(e.user_id, e.email) for e in result] == [("user1", "u1@example.com")]
    assert store_service.user_detail(_detail("email", user_id="user1"))[0].email == "u1@example.com"

    listing = store_service.user_detail(_detail("all"))
    assert [(e.user_id, e.email) for e in listing] == [("user1", "u1@example.com")]

    with pytest.raises(InvalidRequestError, match="unsupported request with userdetail all"):
        store_service.user_detail(_detail("all", user_id="user1"))


# delete


def test_delete_user_detail(store_service, site, make_comment) -> None:
    store_service.create(make_comment("c1"))
    store_service.user_detail(_detail("telegram", user_id="user1", update="@u1"))

    store_service.delete(
        DeleteRequest.model_validate({"locator": {"site": SITE}, "user_id": "user1", "user_detail": "telegram"})
    )

    assert store_service.user_detail(_detail("telegram", user_id="user1")) == []


def test_delete_comment_keeps_users(store_service, db, site, make_comment) -> None:
    store_service.create(make_comment("c1"))

    store_service.delete(
        DeleteRequest.model_validate({"locator": {"site": SITE, "url": URL}, "comment_id": "c1", "del_mode": 1})
    )

    assert comments_collection(db).find_one({"cid": "c1"})["user"] == "deleted"
    assert users_collection(db).count_documents({"site": SITE}) == 1


def test_delete_user(store_service, db, site, make_comment) -> None:
    store_service.create(make_comment("c1"))

    store_service.delete(
        DeleteRequest.model_validate({"locator": {"site": SITE}, "user_id": "user1", "comment_id": "", "del_mode": 1})
    )

    assert users_collection(db).count_documents({"site": SITE}) == 0
    assert comments_collection(db).find_one({"cid": "c1"})["delete"] is True


def test_delete_site_removes_everything(store_service, image_repo, db, site, make_comment) -> None:
    store_service.create(make_comment("c1"))
    store_service.create(make_comment("c2", user_id="user2"))
    image_repo.save_staging_image("user1/a.png", b"a")
    image_repo.save_staging_image("user2/b.png", b"b")
    image_repo.commit_image("user2/b.png")
    image_repo.save_staging_image("stranger/c.png", b"c")

    store_service.delete(DeleteRequest.model_validate({"locator": {"site": SITE}}))

    assert sites_collection(db).count_documents({"_id": SITE}) == 0
    assert comments_collection(db).count_documents({"locator.site": SITE}) == 0
    assert users_collection(db).count_documents({"site": SITE}) == 0
    assert files_collection(db, IMAGES_BUCKET).count_documents({"metadata.user_id": {"$in": ["user1", "user2"]}}) == 0
    assert files_collection(db, IMAGES_BUCKET).count_documents({}) == 1


def test_delete_site_surfaces_failed_step(store_service, image_repo, db, site, make_comment, mocker) -> None:
    store_service.create(make_comment("c1"))
    mocker.patch.object(image_repo, "delete_user_images", side_effect=PyMongoError("images unavailable"))

    with pytest.raises(PyMongoError, match="images unavailable"):
        store_service.delete(DeleteRequest.model_validate({"locator": {"site": SITE}}))

    # The other removals still ran.
    assert sites_collection(db).count_documents({"_id": SITE}) == 0
    assert comments_collection(db).count_documents({"locator.site": SITE}) == 0
    assert users_collection(db).count_documents({"site": SITE}) == 0


def test_invalid_delete_request(store_service) -> None:
    with pytest.raises(InvalidRequestError, match="invalid delete request"):
        store_service.delete(DeleteRequest.model_validate({"locator": {"site": SITE, "url": URL}}))


def test_close_is_a_no_op(store_service) -> None:
    assert store_service.close() is None

# src/remark_mongo/schemas/store.py
"""Store API schemas (``store.*`` methods).

Field names follow the JSON produced by the Remark42 Go server, so they are
deliberately snake_case or Go-cased where the wire format requires it.
"""

from __future__ import annotations

from datetime import datetime
from enum import IntEnum, StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from remark_mongo.db.time import ZERO_TIME, is_zero

from .common import blank_to_none

# Result caps for listing queries; 0 means "as many as allowed".
SITE_LAST_COMMENTS_LIMIT = 1000
USER_COMMENTS_LIMIT = 500


class Flag(StrEnum):
    """Binary attributes of posts and users."""

    READ_ONLY = "readonly"
    VERIFIED = "verified"
    BLOCKED = "blocked"


class FlagStatus(IntEnum):
    """Value of a flag update; ``NON_SET`` turns the request into a read."""

    NON_SET = 0
    TRUE = 1
    FALSE = -1


class DeleteMode(IntEnum):
    """How much of a comment is erased."""

    SOFT = 0
    HARD = 1


class UserDetail(StrEnum):
    """Side-channel contact details stored per user."""

    EMAIL = "email"
    TELEGRAM = "telegram"
    ALL = "all"


class Locator(BaseModel):
    """Site and post URL; a blank URL denotes a site-level operation."""

    site: str = ""
    url: str = ""


class User(BaseModel):
    """User as embedded in comments."""

    id: str = ""
    name: str = ""
    picture: str = ""
    ip: str | None = None
    admin: bool = False
    block: bool = False
    verified: bool = False
    email_subscription: bool = False
    site_id: str | None = None
    paid_sub: bool = False

    model_config = ConfigDict(extra="ignore")


class BlockedUser(BaseModel):
    """Blocked user with the block expiry."""

    id: str
    name: str
    time: datetime


class VotedIPInfo(BaseModel):
    """Vote timestamp and direction keyed by voter IP hash."""

    timestamp: datetime = Field(default=ZERO_TIME, alias="Timestamp")
    value: bool = Field(default=False, alias="Value")

    model_config = ConfigDict(populate_by_name=True)


class Edit(BaseModel):
    """Edit indication."""

    time: datetime
    summary: str = ""


class Comment(BaseModel):
    """A single comment with an optional reference to its parent."""

    id: str = ""
    pid: str | None = None
    text: str = ""
    orig: str | None = None
    user: User = Field(default_factory=User)
    locator: Locator = Field(default_factory=Locator)
    score: int = 0
    votes: dict[str, bool] = Field(default_factory=dict)
    voted_ips: dict[str, VotedIPInfo] = Field(default_factory=dict)
    # Vote of the current user (-1, 0, 1); computed by the caller, never stored.
    vote: int = 0
    controversy: float = 0.0
    time: datetime = ZERO_TIME
    edit: Edit | None = None
    pin: bool = False
    delete: bool = False
    imported: bool = False
    title: str | None = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("votes", "voted_ips", mode="before")
    @classmethod
    def _null_map_is_empty(cls, value: Any) -> Any:
        return {} if value is None else value


class UserDetailEntry(BaseModel):
    """Single user detail entry; only the populated detail is set."""

    user_id: str
    email: str | None = None
    telegram: str | None = None


class PostInfo(BaseModel):
    """Summary for a post URL."""

    url: str
    count: int
    read_only: bool | None = None
    first_time: datetime | None = None
    last_time: datetime | None = None


class FindRequest(BaseModel):
    """Input of ``store.find`` and ``store.count``.

    Lack of URL means a site operation; presence of ``user_id`` means a
    user-related lookup.
    """

    locator: Locator = Field(default_factory=Locator)
    user_id: str | None = None
    sort: str | None = None
    since: datetime | None = None
    limit: int = 0
    skip: int = 0

    @field_validator("user_id", "sort", mode="before")
    @classmethod
    def _blank_is_none(cls, value: Any) -> Any:
        return blank_to_none(value)

    @field_validator("since")
    @classmethod
    def _zero_since_is_none(cls, value: datetime | None) -> datetime | None:
        return None if is_zero(value) else value


class GetRequest(BaseModel):
    """Input of ``store.get``."""

    locator: Locator
    comment_id: str


class InfoRequest(BaseModel):
    """Input of ``store.info``."""

    locator: Locator
    limit: int | None = None
    skip: int | None = None
    # Age in days after which a post becomes read-only.
    ro_age: int | None = None


class FlagRequest(BaseModel):
    """Input of ``store.flag`` and ``store.list_flags``."""

    flag: Flag
    locator: Locator = Field(default_factory=Locator)
    user_id: str | None = None
    update: FlagStatus | None = None
    # Block duration in nanoseconds (Go ``time.Duration``).
    ttl: int | None = None

    @field_validator("user_id", mode="before")
    @classmethod
    def _blank_is_none(cls, value: Any) -> Any:
        return blank_to_none(value)


class UserDetailRequest(BaseModel):
    """Input of ``store.user_detail``."""

    detail: UserDetail
    locator: Locator = Field(default_factory=Locator)
    user_id: str | None = None
    update: str | None = None

    @field_validator("user_id", "update", mode="before")
    @classmethod
    def _blank_is_none(cls, value: Any) -> Any:
        return blank_to_none(value)


class DeleteRequest(BaseModel):
    """Input of ``store.delete`` (comments, users, user details or sites)."""

    locator: Locator = Field(default_factory=Locator)
    comment_id: str | None = None
    user_id: str | None = None
    user_detail: UserDetail | None = None
    del_mode: DeleteMode = DeleteMode.SOFT

    @field_validator("comment_id", "user_id", "user_detail", mode="before")
    @classmethod
    def _blank_is_none(cls, value: Any) -> Any:
        return blank_to_none(value)

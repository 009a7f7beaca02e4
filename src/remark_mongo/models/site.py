"""Stored shape of a site document."""

from __future__ import annotations

from typing import TypedDict


class PostDocument(TypedDict):
    """Post sub-record embedded in a site; one entry per URL."""

    url: str
    read_only: bool


class SiteDocument(TypedDict):
    """A site, keyed by its name."""

    _id: str
    key: str
    enabled: bool
    admin_email: str
    posts: list[PostDocument]

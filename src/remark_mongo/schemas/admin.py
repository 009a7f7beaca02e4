"""Admin API schemas (``admin.*`` methods)."""

from __future__ import annotations

from enum import IntEnum

from .common import PositionalParams


class EventType(IntEnum):
    """Comment lifecycle events the Remark42 server reports."""

    CREATE = 0
    DELETE = 1
    UPDATE = 2
    VOTE = 3


class SiteRequest(PositionalParams):
    """Site id sent as the bare parameter of ``admin.key`` and friends."""

    site_id: str


class EventRequest(PositionalParams):
    """``[site_id, event]`` pair sent with ``admin.event``."""

    site_id: str
    event: int

"""Pydantic contracts of the JSON-RPC API, one module per capability group."""

from .admin import EventRequest, EventType, SiteRequest
from .image import CleanupRequest, ImageIdRequest, SaveRequest, StoreInfo
from .rpc import RpcRequest, RpcResponse
from .store import (
    BlockedUser,
    Comment,
    DeleteMode,
    DeleteRequest,
    Edit,
    FindRequest,
    Flag,
    FlagRequest,
    FlagStatus,
    GetRequest,
    InfoRequest,
    Locator,
    PostInfo,
    User,
    UserDetail,
    UserDetailEntry,
    UserDetailRequest,
    VotedIPInfo,
)

__all__ = [
    "BlockedUser",
    "CleanupRequest",
    "Comment",
    "DeleteMode",
    "DeleteRequest",
    "Edit",
    "EventRequest",
    "EventType",
    "FindRequest",
    "Flag",
    "FlagRequest",
    "FlagStatus",
    "GetRequest",
    "ImageIdRequest",
    "InfoRequest",
    "Locator",
    "PostInfo",
    "RpcRequest",
    "RpcResponse",
    "SaveRequest",
    "SiteRequest",
    "StoreInfo",
    "User",
    "UserDetail",
    "UserDetailEntry",
    "UserDetailRequest",
    "VotedIPInfo",
]

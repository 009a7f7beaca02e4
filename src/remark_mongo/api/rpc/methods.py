# src/remark_mongo/api/rpc/methods.py
"""Closed set of JSON-RPC methods and their handlers."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import BaseModel

from remark_mongo.schemas.admin import EventRequest, SiteRequest
from remark_mongo.schemas.image import CleanupRequest, ImageIdRequest, SaveRequest
from remark_mongo.schemas.store import (
    Comment,
    DeleteRequest,
    FindRequest,
    FlagRequest,
    GetRequest,
    InfoRequest,
    UserDetailRequest,
)
from remark_mongo.services.admin_service import AdminService
from remark_mongo.services.image_service import ImageService
from remark_mongo.services.store_service import StoreService


class RpcMethod(StrEnum):
    """Every method the Remark42 server may call."""

    STORE_CREATE = "store.create"
    STORE_FIND = "store.find"
    STORE_GET = "store.get"
    STORE_UPDATE = "store.update"
    STORE_DELETE = "store.delete"
    STORE_COUNT = "store.count"
    STORE_INFO = "store.info"
    STORE_FLAG = "store.flag"
    STORE_LIST_FLAGS = "store.list_flags"
    STORE_USER_DETAIL = "store.user_detail"
    STORE_CLOSE = "store.close"

    IMAGE_SAVE = "image.save_with_id"
    IMAGE_LOAD = "image.load"
    IMAGE_COMMIT = "image.commit"
    IMAGE_CLEANUP = "image.cleanup"
    IMAGE_RESET_CLEANUP_TIMER = "image.reset_cleanup_timer"
    IMAGE_INFO = "image.info"

    ADMIN_KEY = "admin.key"
    ADMIN_ADMINS = "admin.admins"
    ADMIN_EMAIL = "admin.email"
    ADMIN_ENABLED = "admin.enabled"
    ADMIN_EVENT = "admin.event"


@dataclass(frozen=True)
class RpcRoute:
    """Handler of one method and the model its parameters validate into.

    ``params`` is ``None`` for methods that take no parameters.
    """

    handler: Callable[..., Any]
    params: type[BaseModel] | None = None


RouteTable = dict[RpcMethod, RpcRoute]


def store_routes(service: StoreService) -> RouteTable:
    return {
        RpcMethod.STORE_CREATE: RpcRoute(service.create, Comment),
        RpcMethod.STORE_FIND: RpcRoute(service.find, FindRequest),
        RpcMethod.STORE_GET: RpcRoute(service.get, GetRequest),
        RpcMethod.STORE_UPDATE: RpcRoute(service.update, Comment),
        RpcMethod.STORE_DELETE: RpcRoute(service.delete, DeleteRequest),
        RpcMethod.STORE_COUNT: RpcRoute(service.count, FindRequest),
        RpcMethod.STORE_INFO: RpcRoute(service.info, InfoRequest),
        RpcMethod.STORE_FLAG: RpcRoute(service.flag, FlagRequest),
        RpcMethod.STORE_LIST_FLAGS: RpcRoute(service.list_flags, FlagRequest),
        RpcMethod.STORE_USER_DETAIL: RpcRoute(service.user_detail, UserDetailRequest),
        RpcMethod.STORE_CLOSE: RpcRoute(service.close),
    }


def image_routes(service: ImageService) -> RouteTable:
    return {
        RpcMethod.IMAGE_SAVE: RpcRoute(service.save, SaveRequest),
        RpcMethod.IMAGE_LOAD: RpcRoute(service.load, ImageIdRequest),
        RpcMethod.IMAGE_COMMIT: RpcRoute(service.commit, ImageIdRequest),
        RpcMethod.IMAGE_CLEANUP: RpcRoute(service.cleanup, CleanupRequest),
        RpcMethod.IMAGE_RESET_CLEANUP_TIMER: RpcRoute(service.reset_cleanup_timer, ImageIdRequest),
        RpcMethod.IMAGE_INFO: RpcRoute(service.info),
    }


def admin_routes(service: AdminService) -> RouteTable:
    return {
        RpcMethod.ADMIN_KEY: RpcRoute(service.key, SiteRequest),
        RpcMethod.ADMIN_ADMINS: RpcRoute(service.admins, SiteRequest),
        RpcMethod.ADMIN_EMAIL: RpcRoute(service.email, SiteRequest),
        RpcMethod.ADMIN_ENABLED: RpcRoute(service.enabled, SiteRequest),
        RpcMethod.ADMIN_EVENT: RpcRoute(service.on_event, EventRequest),
    }

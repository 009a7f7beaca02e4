# src/remark_mongo/api/rpc/router.py
"""Dispatch of JSON-RPC requests onto the capability services."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from fastapi.encoders import jsonable_encoder
from pydantic import ValidationError

from remark_mongo.core.errors import StoreError
from remark_mongo.core.logging import get_access_logger
from remark_mongo.schemas.rpc import RpcRequest

from .methods import RpcMethod, RpcRoute

logger = logging.getLogger(__name__)

REDACTED = "<base64>"


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


def _redacted(request: RpcRequest, response: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    """Return log copies of the exchange with image bytes replaced."""
    logged_request = request.model_dump()
    logged_response = dict(response)

    if request.method == RpcMethod.IMAGE_SAVE:
        params = logged_request.get("params")
        if isinstance(params, list) and len(params) > 1:
            logged_request["params"] = [params[0], REDACTED, *params[2:]]
        elif isinstance(params, dict) and "data" in params:
            logged_request["params"] = {**params, "data": REDACTED}

    if request.method == RpcMethod.IMAGE_LOAD and "result" in logged_response:
        logged_response["result"] = REDACTED

    return logged_request, logged_response


class RpcRouter:
    """Maps each :class:`RpcMethod` to its route and builds the envelope.

    Every request yields exactly one envelope carrying the caller's id and
    either ``result`` or ``error``; nothing raised by a handler escapes.
    """

    def __init__(self, *tables: Mapping[RpcMethod, RpcRoute]) -> None:
        """Merge per-capability route tables.

        Raises:
            ValueError: If a method is routed twice or not at all.
        """
        routes: dict[RpcMethod, RpcRoute] = {}
        for table in tables:
            for method, route in table.items():
                if method in routes:
                    raise ValueError(f"method '{method}' routed twice")
                routes[method] = route

        missing = sorted(m.value for m in RpcMethod if m not in routes)
        if missing:
            raise ValueError(f"unrouted methods: {', '.join(missing)}")
        self.routes = routes

    def dispatch(self, request: RpcRequest) -> dict[str, Any]:
        """Invoke the requested method and return the response envelope."""
        try:
            method = RpcMethod(request.method)
        except ValueError:
            response: dict[str, Any] = {"error": f"method '{request.method}' not found", "id": request.id}
            self._audit(request, response)
            return response

        try:
            result = self._invoke(self.routes[method], request.params)
        except (StoreError, ValidationError) as exc:
            logger.warning("%s failed: %s", method, _describe(exc))
            response = {"error": _describe(exc), "id": request.id}
        except Exception as exc:
            logger.exception("%s failed", method)
            response = {"error": _describe(exc), "id": request.id}
        else:
            response = {"id": request.id}
            if result is not None:
                response["result"] = jsonable_encoder(result, exclude_none=True)

        self._audit(request, response)
        return response

    @staticmethod
    def _invoke(route: RpcRoute, params: Any) -> Any:
        if route.params is None:
            return route.handler()
        return route.handler(route.params.model_validate(params))

    @staticmethod
    def _audit(request: RpcRequest, response: dict[str, Any]) -> None:
        access = get_access_logger()
        if not access.isEnabledFor(logging.INFO):
            return
        logged_request, logged_response = _redacted(request, response)
        access.info(
            "%s ===> %s",
            json.dumps(logged_request, default=str),
            json.dumps(logged_response, default=str),
        )

# src/remark_mongo/api/endpoints/rpc.py
"""JSON-RPC and health endpoints."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError
from pymongo.database import Database

from remark_mongo.api.rpc.router import RpcRouter
from remark_mongo.core.settings import Settings
from remark_mongo.db.client import is_connected
from remark_mongo.schemas.rpc import RpcRequest

router = APIRouter(tags=["rpc"])


def get_rpc_router(request: Request) -> RpcRouter:
    """Return the dispatcher built at startup."""
    return request.app.state.rpc_router


def get_database_dep(request: Request) -> Database[dict[str, Any]]:
    """Return the database opened at startup."""
    return request.app.state.database


def get_settings_dep(request: Request) -> Settings:
    """Return the settings the application was created with."""
    return request.app.state.settings


RpcRouterDep = Annotated[RpcRouter, Depends(get_rpc_router)]
DatabaseDep = Annotated[Database[dict[str, Any]], Depends(get_database_dep)]
SettingsDep = Annotated[Settings, Depends(get_settings_dep)]


@router.post("/")
async def rpc(request: Request, rpc_router: RpcRouterDep, settings: SettingsDep) -> dict[str, Any]:
    """Handle one JSON-RPC call from the Remark42 server.

    Processing errors are reported inside the envelope with HTTP 200. Only
    transport problems (oversized or malformed bodies) use other codes.

    Raises:
        HTTPException: 413 for bodies above the configured limit, 400 for
            bodies that are not a JSON-RPC request.
    """
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > settings.body_limit_bytes:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="request entity too large")

    body = await request.body()
    if len(body) > settings.body_limit_bytes:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="request entity too large")

    try:
        call = RpcRequest.model_validate_json(body)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="invalid JSON-RPC request") from exc

    # Handlers block on pymongo; keep them off the event loop.
    return await run_in_threadpool(rpc_router.dispatch, call)


@router.get("/health")
def health_check(database: DatabaseDep) -> Response:
    """Return 200 when the database answers a ping, 503 otherwise."""
    if is_connected(database):
        return Response(status_code=status.HTTP_200_OK)
    return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

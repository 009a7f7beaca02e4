"""JSON-RPC envelope exchanged with the Remark42 server."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class RpcRequest(BaseModel):
    """Inbound call; ``params`` stays opaque until the method is resolved."""

    method: str
    params: Any = None
    id: int = 0


class RpcResponse(BaseModel):
    """Outbound envelope carrying either ``result`` or ``error``."""

    result: Any = None
    error: str | None = None
    id: int = 0

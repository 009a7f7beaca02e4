"""JSON-RPC method table and dispatcher."""

from .methods import RpcMethod, RpcRoute, admin_routes, image_routes, store_routes
from .router import RpcRouter

__all__ = [
    "RpcMethod",
    "RpcRoute",
    "RpcRouter",
    "admin_routes",
    "image_routes",
    "store_routes",
]

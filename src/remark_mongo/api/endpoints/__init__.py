"""FastAPI routers."""

from .rpc import router as rpc_router

__all__ = ["rpc_router"]

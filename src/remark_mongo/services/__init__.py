# src/remark_mongo/services/__init__.py
"""Capability services behind the JSON-RPC methods."""

from .admin_service import AdminService
from .image_service import ImageService
from .store_service import StoreService

__all__ = [
    "AdminService",
    "ImageService",
    "StoreService",
]

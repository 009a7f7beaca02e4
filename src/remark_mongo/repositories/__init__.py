"""Repositories wrapping MongoDB collections and GridFS buckets."""

from .image_repo import ImageRepository, extract_picture_name
from .site_repo import SiteRepository
from .store_repo import StoreRepository, build_sort

__all__ = [
    "ImageRepository",
    "SiteRepository",
    "StoreRepository",
    "build_sort",
    "extract_picture_name",
]

"""Database configuration and utilities."""

from .client import create_client, create_indexes, get_database, is_connected

__all__ = ["create_client", "create_indexes", "get_database", "is_connected"]

# src/remark_mongo/services/admin_service.py
"""Request-level rules of the ``admin.*`` methods."""

from __future__ import annotations

import logging

from remark_mongo.repositories.store_repo import StoreRepository
from remark_mongo.schemas.admin import EventRequest, EventType, SiteRequest

logger = logging.getLogger(__name__)


class AdminService:
    """Site-level settings the Remark42 server asks for."""

    def __init__(self, store: StoreRepository) -> None:
        self.store = store

    def key(self, request: SiteRequest) -> str:
        return self.store.get_site_key(request.site_id)

    def admins(self, request: SiteRequest) -> list[str]:
        return self.store.get_site_admins(request.site_id)

    def email(self, request: SiteRequest) -> str:
        return self.store.get_site_admin_email(request.site_id)

    def enabled(self, request: SiteRequest) -> bool:
        return self.store.is_site_enabled(request.site_id)

    def on_event(self, request: EventRequest) -> None:
        """Accept a comment event; nothing is stored."""
        try:
            name = EventType(request.event).name
        except ValueError:
            name = str(request.event)
        logger.debug("Event %s on site %s", name, request.site_id)

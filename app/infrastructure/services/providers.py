"""
Factory functions for dependency injection.

Provides application-scoped singleton providers for core infrastructure services.
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from infrastructure.configuration import Settings

if TYPE_CHECKING:
    from modules.notifications.service import NotificationDispatchService


@lru_cache
def get_settings() -> Settings:
    """
    Get application-scoped settings singleton.

    This is the single source of truth for settings across the entire application.
    The @lru_cache decorator ensures only ONE instance is created per process,
    even if called from multiple packages.

    Usage:
        from infrastructure.services.providers import get_settings
        settings = get_settings()

    Returns:
        Settings: Cached settings instance loaded from environment.
    """
    return Settings()


@lru_cache
def get_dispatch_service() -> "NotificationDispatchService":
    """Get the application-scoped notification dispatch service.

    Stores are built from ``settings.storage.backend`` by the notifications
    factory, so a process shares one set of table, event, blob and queue
    clients across callers.

    Returns:
        NotificationDispatchService: Cached dispatch service instance.
    """
    from modules.notifications.factory import create_dispatch_service

    return create_dispatch_service(get_settings())
